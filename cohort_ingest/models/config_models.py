from __future__ import annotations

from dataclasses import dataclass, field

"""Configuration dataclass for the cohort ingestion pipeline.

Header patterns and pass/fail markers are intentionally absent: headers are
discovered from the sheet, not configured.
"""

__all__ = [
    "IngestConfig",
    "DEFAULT_EXCLUDED_SHEET_KEYWORDS",
]

DEFAULT_EXCLUDED_SHEET_KEYWORDS: tuple[str, ...] = ("stipulated",)


@dataclass(frozen=True)
class IngestConfig:
    """Root configuration object.

    Every field has a default so an absent config file means "built-in
    behaviour".
    """
    # Sheets whose name contains any of these (case-insensitive) are not data
    excluded_sheet_keywords: tuple[str, ...] = field(default=DEFAULT_EXCLUDED_SHEET_KEYWORDS)
    name_placeholder: str = "N/A"  # blank / missing name column
    status_placeholder: str = "Unknown"  # blank / missing status column
    top_rank_count: int = 3  # ranking view: how many rows are flagged as top
    issue_log_directory: str = "logs"  # JSON Lines issue log destination
    show_progress: bool = True  # tqdm (only effective on a TTY)
