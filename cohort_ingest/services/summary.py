from __future__ import annotations

from ..models.processing_result import IngestionResult

"""SUMMARY line rendering.

Format:
SUMMARY sheets={total} included={n} skipped_sheets={n} records={n}
students={n} defaulted_cells={n} elapsed_sec={x}
"""


def _format_seconds(seconds: float) -> str:
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        # Format very small numbers to avoid scientific notation
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: IngestionResult) -> str:
    """Render the SUMMARY line for one ingestion run.

    Examples:
        >>> from datetime import datetime, timezone
        >>> from cohort_ingest.models.records import IngestionBundle
        >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
        >>> result = IngestionResult(
        ...     workbook="r.xlsx", bundle=IngestionBundle({}, [], []),
        ...     sheet_outcomes=[], start_time=t, end_time=t, elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(result)
        'SUMMARY sheets=0 included=0 skipped_sheets=0 records=0 students=0 defaulted_cells=0 elapsed_sec=2'
    """
    return (
        f"SUMMARY sheets={len(result.sheet_outcomes)} "
        f"included={result.included_sheets} "
        f"skipped_sheets={result.skipped_sheets} "
        f"records={result.total_records} "
        f"students={result.total_students} "
        f"defaulted_cells={result.defaulted_cells} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
