from __future__ import annotations

import re
from datetime import datetime, timezone

from cohort_ingest.models.processing_result import IngestionResult, SheetOutcome, SheetStatus
from cohort_ingest.models.records import ConsolidatedStudent, IngestionBundle
from cohort_ingest.services.summary import render_summary_line

SUMMARY_PATTERN = re.compile(
    r"^SUMMARY sheets=([0-9]+) included=([0-9]+) skipped_sheets=([0-9]+) records=([0-9]+) "
    r"students=([0-9]+) defaulted_cells=([0-9]+) elapsed_sec=([0-9]+\.?[0-9]*)$"
)


def _result(elapsed: float) -> IngestionResult:
    start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
    bundle = IngestionBundle(
        per_year_records={},
        consolidated_students=[ConsolidatedStudent("E1", "A"), ConsolidatedStudent("E2", "B")],
        yearly_stats=[],
    )
    return IngestionResult(
        workbook="r.xlsx",
        bundle=bundle,
        sheet_outcomes=[
            SheetOutcome("2021", SheetStatus.INCLUDED, record_count=3, defaulted_cells=1),
            SheetOutcome("2022", SheetStatus.INCLUDED, record_count=2),
            SheetOutcome("Stipulated", SheetStatus.EXCLUDED),
            SheetOutcome("Notes", SheetStatus.HEADER_NOT_FOUND),
        ],
        start_time=start,
        end_time=start,
        elapsed_seconds=elapsed,
    )


def test_render_summary_line_fields():
    line = render_summary_line(_result(2.0))
    m = SUMMARY_PATTERN.match(line)
    assert m, line
    assert m.groups() == ("4", "2", "1", "5", "2", "1", "2")


def test_elapsed_formatting():
    assert render_summary_line(_result(0)).endswith("elapsed_sec=0")
    assert render_summary_line(_result(1.23456)).endswith("elapsed_sec=1.235")
    assert render_summary_line(_result(0.000123)).endswith("elapsed_sec=0.000123")
    assert "e-" not in render_summary_line(_result(0.0000001))
