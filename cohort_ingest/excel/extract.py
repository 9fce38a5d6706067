from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from ..models.column_map import ColumnMap
from ..models.issue_record import BLANK_IDENTIFIER, MALFORMED_CELL, PLACEHOLDER_USED
from ..models.records import StudentRecord
from .cells import cell_text, rework_or_default, score_or_default

"""Row extractor: header-relative rows -> StudentRecord list.

Rows strictly below the header row are turned into records. A row without an
identifier is not a data row (blank spacer, footer, signature line) and is
dropped. Everything else is defaulted, never rejected.

A blank name or status cell is reported per row; a missing name or status
column is reported once for the sheet (row -1) instead of once per row.
"""

__all__ = [
    "IssueCallback",
    "ExtractedSheet",
    "extract_records",
    "average_of_positive",
]

logger = logging.getLogger(__name__)

# (row_number, issue_type, message); row_number is the 1-based sheet row
IssueCallback = Callable[[int, str, str], None]


@dataclass(frozen=True)
class ExtractedSheet:
    records: list[StudentRecord]
    defaulted_cells: int = 0
    discarded_rows: int = 0
    placeholder_cells: int = 0  # blank or missing name / status filled with a placeholder


def _cell(row: Sequence[Any], index: int | None) -> Any:
    if index is None or index >= len(row):
        return None
    return row[index]


def average_of_positive(scores: dict[str, int]) -> float:
    """Mean of strictly positive scores; 0 counts as "not graded yet"."""
    graded = [s for s in scores.values() if s > 0]
    if not graded:
        return 0.0
    return sum(graded) / len(graded)


def extract_records(
    rows: Sequence[Sequence[Any]],
    column_map: ColumnMap,
    year: str,
    *,
    name_placeholder: str = "N/A",
    status_placeholder: str = "Unknown",
    on_issue: IssueCallback | None = None,
) -> ExtractedSheet:
    """Extract one StudentRecord per data row below the header.

    Args:
        rows: every raw row of the sheet (header included)
        column_map: result of the header locator for these rows
        year: sheet name, stored on each record
        name_placeholder: used when the name cell is missing or blank
        status_placeholder: used when the status cell is missing or blank
        on_issue: receives every defaulting event (malformed cell, blank id,
            placeholder name / status)

    Returns:
        ExtractedSheet with records in row order
    """
    records: list[StudentRecord] = []
    defaulted = 0
    discarded = 0
    placeholders = 0
    first_data = column_map.header_row_index + 1

    for offset, row in enumerate(rows[first_data:]):
        row_number = first_data + offset + 1
        identifier = cell_text(_cell(row, column_map.identifier))
        if not identifier:
            discarded += 1
            if on_issue is not None and any(cell_text(c) for c in row):
                # 空行は数えるだけ。内容があるのに ID が無い行のみ報告
                on_issue(row_number, BLANK_IDENTIFIER, "row has content but no identifier")
            continue

        semester_scores: dict[str, int] = {}
        for key, col in column_map.semesters.items():
            raw = _cell(row, col)
            score, was_defaulted = score_or_default(raw)
            if was_defaulted:
                defaulted += 1
                if on_issue is not None:
                    on_issue(row_number, MALFORMED_CELL, f"{key} score {raw!r} -> 0")
            semester_scores[key] = score

        raw_rework = _cell(row, column_map.rework_count)
        rework, was_defaulted = rework_or_default(raw_rework)
        if was_defaulted:
            defaulted += 1
            if on_issue is not None:
                on_issue(row_number, MALFORMED_CELL, f"rework count {raw_rework!r} -> {rework}")

        # status は集計キーになるため原文のまま保持
        name = cell_text(_cell(row, column_map.name), strip=False)
        status = cell_text(_cell(row, column_map.status), strip=False)
        for role, value, placeholder, col in (
            ("name", name, name_placeholder, column_map.name),
            ("status", status, status_placeholder, column_map.status),
        ):
            if value:
                continue
            placeholders += 1
            if on_issue is not None and col is not None:
                on_issue(row_number, PLACEHOLDER_USED, f"blank {role} -> {placeholder!r}")

        records.append(
            StudentRecord(
                identifier=identifier,
                name=name or name_placeholder,
                status=status or status_placeholder,
                year=year,
                average_score=average_of_positive(semester_scores),
                semester_scores=semester_scores,
                rework_count=rework,
            )
        )

    if records and on_issue is not None:
        # 列ごと無い場合は行ごとではなくシート単位で 1 件
        if column_map.name is None:
            on_issue(-1, PLACEHOLDER_USED, f"no name column; every name -> {name_placeholder!r}")
        if column_map.status is None:
            on_issue(-1, PLACEHOLDER_USED, f"no status column; every status -> {status_placeholder!r}")

    logger.debug(
        "sheet=%s records=%d defaulted_cells=%d discarded_rows=%d placeholders=%d",
        year,
        len(records),
        defaulted,
        discarded,
        placeholders,
    )
    return ExtractedSheet(
        records=records,
        defaulted_cells=defaulted,
        discarded_rows=discarded,
        placeholder_cells=placeholders,
    )
