from __future__ import annotations

from collections.abc import Sequence

from ..excel.cells import contains_ci
from ..models.records import StudentRecord, YearlyStat

"""Sheet aggregator: per-year summary statistics.

Pass / fail is decided by substring on the free-text status, which is the
only signal the sheets carry: anything mentioning "fail" or "kt" (pending
rework units) is not a pass.
"""

__all__ = [
    "FAILING_STATUS_MARKERS",
    "is_passed",
    "compute_yearly_stat",
]

FAILING_STATUS_MARKERS: tuple[str, ...] = ("fail", "kt")


def is_passed(status: str) -> bool:
    return not any(contains_ci(status, marker) for marker in FAILING_STATUS_MARKERS)


def compute_yearly_stat(
    year: str, records: Sequence[StudentRecord], status_placeholder: str = "Unknown"
) -> YearlyStat:
    """Summarise one sheet's records.

    Args:
        year: sheet name
        records: the sheet's records (non-empty when called by the orchestrator)
        status_placeholder: bucket key for an empty status

    Returns:
        YearlyStat; an empty input yields zeros rather than dividing by zero
    """
    total = len(records)
    passed = sum(1 for r in records if is_passed(r.status))
    distribution: dict[str, int] = {}
    for r in records:
        key = r.status or status_placeholder
        distribution[key] = distribution.get(key, 0) + 1
    return YearlyStat(
        year=year,
        total_students=total,
        pass_rate=(passed / total * 100) if total else 0.0,
        avg_rework_count=(sum(r.rework_count for r in records) / total) if total else 0.0,
        status_distribution=distribution,
    )
