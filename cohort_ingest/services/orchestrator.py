from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from pathlib import Path

from ..excel.cells import contains_ci
from ..excel.extract import extract_records
from ..excel.header import SheetSkipped, locate_header
from ..excel.reader import WORKBOOK_SUFFIXES, RawRow, read_workbook
from ..logging.issue_log import IssueLogBuffer
from ..models.config_models import IngestConfig
from ..models.issue_record import (
    EMPTY_SHEET,
    HEADER_NOT_FOUND,
    NO_VALID_DATA,
    SHEET_EXCLUDED,
    IssueRecord,
)
from ..models.processing_result import IngestionResult, SheetOutcome, SheetStatus
from ..models.records import IngestionBundle, StudentRecord, YearlyStat
from .aggregate import compute_yearly_stat
from .consolidate import Consolidator
from .progress import SheetProgressTracker

"""Workbook orchestration.

Walks the sheets of one workbook strictly in workbook order:
exclusion check -> header locator -> row extractor -> sheet aggregator ->
consolidator. Per-sheet problems are absorbed (the sheet is skipped and an
issue is recorded); only a workbook where no sheet yields any record fails.

Each run owns a fresh IngestionRun; the bundle is published only after the
last sheet, so a failing run exposes nothing.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "IngestError",
    "NoValidDataError",
    "IngestionRun",
    "ingest_sheets",
    "ingest_workbook",
    "ingest_file",
    "scan_workbook_directory",
]

WORKBOOK_LEVEL = "<WORKBOOK>"


class IngestError(Exception):
    """Base exception for ingestion errors."""


class NoValidDataError(IngestError):
    """No sheet of the workbook produced a single record.

    sheet_outcomes tells the caller why each sheet was dropped.
    """

    def __init__(self, message: str, sheet_outcomes: list[SheetOutcome] | None = None) -> None:
        super().__init__(message)
        self.sheet_outcomes = sheet_outcomes or []


class IngestionRun:
    """Mutable accumulator for one workbook ingestion.

    Holds the consolidator, the per-year records and the yearly stats while
    sheets are processed. Never reused across workbooks.
    """

    def __init__(
        self,
        config: IngestConfig | None = None,
        *,
        workbook: str = "<memory>",
        issue_log: IssueLogBuffer | None = None,
    ) -> None:
        self.config = config or IngestConfig()
        self.workbook = workbook
        self.issue_log = issue_log if issue_log is not None else IssueLogBuffer(self.config.issue_log_directory)
        self.consolidator = Consolidator()
        self.per_year_records: dict[str, list[StudentRecord]] = {}
        self.yearly_stats: list[YearlyStat] = []
        self.sheet_outcomes: list[SheetOutcome] = []

    def report(self, sheet: str, row: int, issue_type: str, message: str) -> None:
        self.issue_log.append(IssueRecord.create(self.workbook, sheet, row, issue_type, message))

    def is_excluded(self, sheet_name: str) -> bool:
        return any(contains_ci(sheet_name, kw) for kw in self.config.excluded_sheet_keywords)

    def process_sheet(self, sheet_name: str, rows: Sequence[RawRow]) -> SheetOutcome:
        """Run one sheet through the pipeline and record its outcome."""
        outcome = self._process_sheet(sheet_name, rows)
        self.sheet_outcomes.append(outcome)
        return outcome

    def _process_sheet(self, sheet_name: str, rows: Sequence[RawRow]) -> SheetOutcome:
        if self.is_excluded(sheet_name):
            logger.debug("sheet=%s excluded by name", sheet_name)
            self.report(sheet_name, -1, SHEET_EXCLUDED, "sheet name matches an exclusion keyword")
            return SheetOutcome(sheet_name, SheetStatus.EXCLUDED)

        try:
            column_map = locate_header(rows)
        except SheetSkipped as e:
            logger.warning("sheet=%s skipped: %s", sheet_name, e)
            self.report(sheet_name, -1, HEADER_NOT_FOUND, str(e))
            return SheetOutcome(sheet_name, SheetStatus.HEADER_NOT_FOUND)

        logger.debug("sheet=%s column_map=%s", sheet_name, column_map.describe())
        extracted = extract_records(
            rows,
            column_map,
            sheet_name,
            name_placeholder=self.config.name_placeholder,
            status_placeholder=self.config.status_placeholder,
            on_issue=lambda row, kind, msg: self.report(sheet_name, row, kind, msg),
        )
        if not extracted.records:
            logger.warning("sheet=%s has a header but no data rows", sheet_name)
            self.report(sheet_name, -1, EMPTY_SHEET, "no row below the header has an identifier")
            return SheetOutcome(sheet_name, SheetStatus.EMPTY, defaulted_cells=extracted.defaulted_cells)

        self.per_year_records[sheet_name] = extracted.records
        self.yearly_stats.append(
            compute_yearly_stat(sheet_name, extracted.records, self.config.status_placeholder)
        )
        self.consolidator.add_all(extracted.records)
        return SheetOutcome(
            sheet_name,
            SheetStatus.INCLUDED,
            record_count=len(extracted.records),
            defaulted_cells=extracted.defaulted_cells,
        )

    def finish(self) -> IngestionBundle:
        """Assemble the bundle.

        Raises:
            NoValidDataError: no sheet produced records
        """
        if not self.per_year_records:
            self.report(WORKBOOK_LEVEL, -1, NO_VALID_DATA, "no sheet produced any student record")
            raise NoValidDataError(
                f"no valid student data found in {self.workbook}", list(self.sheet_outcomes)
            )
        if self.consolidator.overwritten_scores:
            logger.debug(
                "workbook=%s semester scores overwritten across sheets=%d",
                self.workbook,
                self.consolidator.overwritten_scores,
            )
        return IngestionBundle(
            per_year_records=dict(self.per_year_records),
            consolidated_students=self.consolidator.students(),
            # 文字列比較 (大文字小文字区別) で年順に並べる
            yearly_stats=sorted(self.yearly_stats, key=lambda s: s.year),
        )


def ingest_sheets(
    sheets: Mapping[str, Sequence[RawRow]],
    config: IngestConfig | None = None,
    *,
    workbook: str = "<memory>",
    issue_log: IssueLogBuffer | None = None,
) -> IngestionResult:
    """Ingest already-decoded sheets (name -> rows, in workbook order).

    Raises:
        NoValidDataError: no sheet yielded a record
    """
    start_time = datetime.now(UTC)
    run = IngestionRun(config, workbook=workbook, issue_log=issue_log)

    with SheetProgressTracker(len(sheets), enabled=run.config.show_progress) as progress:
        for sheet_name, rows in sheets.items():
            progress.start_sheet(sheet_name)
            outcome = run.process_sheet(sheet_name, rows)
            progress.finish_sheet(records=outcome.record_count)

    bundle = run.finish()
    end_time = datetime.now(UTC)
    return IngestionResult(
        workbook=workbook,
        bundle=bundle,
        sheet_outcomes=list(run.sheet_outcomes),
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        issue_counts=dict(run.issue_log.counts),
    )


def ingest_workbook(
    sheets: Mapping[str, Sequence[RawRow]], config: IngestConfig | None = None
) -> IngestionBundle:
    """Core entry point: decoded sheets -> IngestionBundle."""
    return ingest_sheets(sheets, config).bundle


def ingest_file(path: Path, config: IngestConfig | None = None) -> IngestionResult:
    """Read a workbook from disk and ingest it.

    Reader errors (missing file, undecodable content) propagate unchanged.
    The issue log is flushed whether or not the run succeeds.

    Raises:
        NoValidDataError: no sheet yielded a record
    """
    config = config or IngestConfig()
    sheets = read_workbook(path)
    logger.debug("workbook=%s sheets=%s", path.name, list(sheets))

    issue_log = IssueLogBuffer(config.issue_log_directory)
    try:
        return ingest_sheets(sheets, config, workbook=path.name, issue_log=issue_log)
    finally:
        try:
            written = issue_log.flush()
        except OSError as e:
            # 集計結果は有効なので失敗扱いにしない
            logger.warning("could not write issue log to %s: %s", issue_log.directory, e)
        else:
            if written is not None:
                logger.info("issue log written: %s", written)


def scan_workbook_directory(directory: Path) -> list[Path]:
    """List workbooks directly under ``directory`` (non-recursive), by name.

    Excel lock files (``~$name.xlsx``) are ignored.

    Raises:
        IngestError: directory missing, not a directory or unreadable
    """
    if not directory.exists():
        raise IngestError(f"Directory not found: {directory}")

    if not directory.is_dir():
        raise IngestError(f"Path is not a directory: {directory}")

    try:
        return sorted(
            p
            for p in directory.iterdir()
            if p.is_file() and p.suffix.lower() in WORKBOOK_SUFFIXES and not p.name.startswith("~$")
        )
    except OSError as e:
        raise IngestError(f"Error reading directory {directory}: {e}") from e
