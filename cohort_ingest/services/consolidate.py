from __future__ import annotations

import logging
from collections.abc import Iterable

from ..models.records import ConsolidatedStudent, StudentRecord

"""Consolidator: merge every sheet's records into one history per student.

Records must be fed in workbook sheet order; the merge is last-write-wins
for both status and semester scores.

Semester keys are not year-qualified, so "sem1" of a later sheet replaces
"sem1" of an earlier one. This can lose cross-year data and is kept as-is
until the intended semantics are settled.
"""

__all__ = [
    "Consolidator",
]

logger = logging.getLogger(__name__)


class Consolidator:
    """Accumulates ConsolidatedStudent entries for a single ingestion run.

    Create one per workbook; instances are never shared between runs.
    """

    def __init__(self) -> None:
        self._students: dict[str, ConsolidatedStudent] = {}
        self.overwritten_scores = 0  # semester keys replaced by a later sheet

    def add(self, record: StudentRecord) -> ConsolidatedStudent:
        entry = self._students.get(record.identifier)
        if entry is None:
            # 初出時の氏名を保持 (以降のシートでは更新しない)
            entry = ConsolidatedStudent(identifier=record.identifier, name=record.name)
            self._students[record.identifier] = entry
        else:
            collisions = entry.semester_scores.keys() & record.semester_scores.keys()
            if collisions:
                self.overwritten_scores += len(collisions)
                logger.debug(
                    "id=%s year=%s overwrites semester keys %s",
                    record.identifier,
                    record.year,
                    sorted(collisions),
                )
        entry.semester_scores.update(record.semester_scores)
        entry.status = record.status
        return entry

    def add_all(self, records: Iterable[StudentRecord]) -> None:
        for record in records:
            self.add(record)

    def __len__(self) -> int:
        return len(self._students)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._students

    def students(self) -> list[ConsolidatedStudent]:
        """Finalised entries (first-sighting order; consumers sort as needed)."""
        return list(self._students.values())
