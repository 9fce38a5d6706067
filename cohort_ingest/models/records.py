from __future__ import annotations

from dataclasses import dataclass, field

"""Student record domain models.

StudentRecord is produced once per data row of a sheet and never modified.
ConsolidatedStudent is the cross-year identity, mutated by the Consolidator
while one workbook is walked. YearlyStat and IngestionBundle are the
read-only output handed to presentation code.
"""

__all__ = [
    "StudentRecord",
    "ConsolidatedStudent",
    "YearlyStat",
    "IngestionBundle",
]


@dataclass(frozen=True)
class StudentRecord:
    """One student's row within a single sheet (= one cohort year)."""
    identifier: str  # enrollment number as text
    name: str
    status: str
    year: str  # sheet name
    average_score: float  # mean of positive semester scores, 0 when none
    semester_scores: dict[str, int]  # "sem1" -> score, in column order
    rework_count: int  # "Total KT"


@dataclass
class ConsolidatedStudent:
    """Cross-year history for one identifier.

    semester_scores is the union over every included sheet, later sheets
    overwriting equal keys. status is whatever the last sheet said.
    """
    identifier: str
    name: str
    status: str = ""
    semester_scores: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class YearlyStat:
    """Per-sheet summary statistics."""
    year: str
    total_students: int
    pass_rate: float  # 0-100
    avg_rework_count: float
    status_distribution: dict[str, int]


@dataclass(frozen=True)
class IngestionBundle:
    """Pipeline output. Consumers read it, never mutate it."""
    per_year_records: dict[str, list[StudentRecord]]  # workbook sheet order
    consolidated_students: list[ConsolidatedStudent]
    yearly_stats: list[YearlyStat]  # sorted by year

    @property
    def years(self) -> list[str]:
        return list(self.per_year_records.keys())

    def consolidated_by_id(self, identifier: str) -> ConsolidatedStudent | None:
        for student in self.consolidated_students:
            if student.identifier == identifier:
                return student
        return None
