from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .records import IngestionBundle

"""Run result models for one workbook ingestion.

IngestionResult wraps the IngestionBundle with what happened to each sheet,
how many defaulting events were observed and how long the run took. It is
what the CLI and the SUMMARY line consume.
"""

__all__ = [
    "SheetStatus",
    "SheetOutcome",
    "IngestionResult",
]


class SheetStatus(Enum):
    """What happened to a sheet during ingestion.

    - INCLUDED: produced at least one record and a YearlyStat
    - EXCLUDED: name matched an exclusion keyword, never read
    - HEADER_NOT_FOUND: no row mentions "enrollment"
    - EMPTY: header found but no row had an identifier
    """
    INCLUDED = "included"
    EXCLUDED = "excluded"
    HEADER_NOT_FOUND = "header_not_found"
    EMPTY = "empty"


@dataclass(frozen=True)
class SheetOutcome:
    sheet_name: str
    status: SheetStatus
    record_count: int = 0
    defaulted_cells: int = 0  # non-blank score/rework cells degraded to 0

    @property
    def skipped(self) -> bool:
        """True for sheets that were read but yielded nothing."""
        return self.status in (SheetStatus.HEADER_NOT_FOUND, SheetStatus.EMPTY)


@dataclass(frozen=True)
class IngestionResult:
    """Outcome of ingesting one workbook.

    Only successful runs produce one; a failed run raises instead.
    """
    workbook: str
    bundle: IngestionBundle
    sheet_outcomes: list[SheetOutcome]
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    issue_counts: dict[str, int] = field(default_factory=dict)  # issue_type -> count

    @property
    def included_sheets(self) -> int:
        return sum(1 for o in self.sheet_outcomes if o.status is SheetStatus.INCLUDED)

    @property
    def skipped_sheets(self) -> int:
        return sum(1 for o in self.sheet_outcomes if o.skipped)

    @property
    def total_records(self) -> int:
        return sum(o.record_count for o in self.sheet_outcomes)

    @property
    def defaulted_cells(self) -> int:
        return sum(o.defaulted_cells for o in self.sheet_outcomes)

    @property
    def total_students(self) -> int:
        return len(self.bundle.consolidated_students)
