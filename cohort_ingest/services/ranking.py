from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from ..excel.extract import average_of_positive
from ..models.records import IngestionBundle, StudentRecord
from .aggregate import is_passed

"""Read-only views over an IngestionBundle.

These are what the tables and charts consume: per-year rankings, a year
overview (pass/fail split, class categories, top rankers, per-semester
averages), student profiles merged across years, search and the yearly
comparison table. Nothing here mutates the bundle.
"""

__all__ = [
    "RankedRecord",
    "YearOverview",
    "StudentProfile",
    "rank_records",
    "semester_sort_key",
    "ordered_semester_keys",
    "year_overview",
    "student_profile",
    "search_records",
    "yearly_comparison_rows",
]

TOP_RANKERS_SHOWN = 5

_NUMBER_RE = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class RankedRecord:
    rank: int  # 1-based
    record: StudentRecord
    is_top: bool


@dataclass(frozen=True)
class YearOverview:
    year: str
    total_students: int
    passed: int
    failed: int
    class_categories: list[tuple[str, int]]  # (status, count), most common first
    top_rankers: list[tuple[str, float]]  # (name, average_score), best first
    top_performers: list[str]  # identifiers
    semester_performance: list[tuple[str, int]]  # (semester key, rounded mean)


@dataclass(frozen=True)
class StudentProfile:
    identifier: str
    name: str
    status: str
    year: str
    overall_average: float
    semester_scores: dict[str, int]
    rework_count: int


def rank_records(records: Sequence[StudentRecord], top_count: int = 3) -> list[RankedRecord]:
    """Rank by average_score descending. Ties keep row order."""
    ordered = sorted(records, key=lambda r: r.average_score, reverse=True)
    return [
        RankedRecord(rank=i + 1, record=r, is_top=i < top_count)
        for i, r in enumerate(ordered)
    ]


def semester_sort_key(key: str) -> tuple[int, str]:
    """Order semester keys by embedded numeral: sem2 < sem10."""
    m = _NUMBER_RE.search(key)
    if m is None:
        return (-1, key)
    return (int(m.group(0)), key)


def ordered_semester_keys(scores: dict[str, int]) -> list[str]:
    return sorted(scores, key=semester_sort_key)


def year_overview(
    year: str, records: Sequence[StudentRecord], top_count: int = 3
) -> YearOverview:
    """Build the dashboard numbers for one year.

    Semester performance uses the semester keys of the first record and
    divides by the full head count, so ungraded (0) entries pull the mean
    down; this matches what the per-semester chart has always shown.
    """
    total = len(records)
    passed = sum(1 for r in records if is_passed(r.status))

    categories: dict[str, int] = {}
    for r in records:
        categories[r.status] = categories.get(r.status, 0) + 1

    ranked = rank_records(records, top_count)
    semester_performance: list[tuple[str, int]] = []
    if records:
        for key in ordered_semester_keys(records[0].semester_scores):
            total_score = sum(r.semester_scores.get(key, 0) for r in records)
            semester_performance.append((key, round(total_score / total)))

    return YearOverview(
        year=year,
        total_students=total,
        passed=passed,
        failed=total - passed,
        class_categories=sorted(categories.items(), key=lambda kv: kv[1], reverse=True),
        top_rankers=[(rr.record.name, rr.record.average_score) for rr in ranked[:TOP_RANKERS_SHOWN]],
        top_performers=[rr.record.identifier for rr in ranked if rr.is_top],
        semester_performance=semester_performance,
    )


def student_profile(
    bundle: IngestionBundle, identifier: str, year: str | None = None
) -> StudentProfile | None:
    """Cross-year profile for one student.

    The consolidated history supplies name, status and all semester scores;
    the year record (given year, else the last year listing the student)
    supplies the year and rework count. None when the identifier is unknown.
    """
    years = [year] if year is not None else list(reversed(bundle.years))
    record: StudentRecord | None = None
    for y in years:
        record = next((r for r in bundle.per_year_records.get(y, []) if r.identifier == identifier), None)
        if record is not None:
            break

    consolidated = bundle.consolidated_by_id(identifier)
    if consolidated is None:
        return None

    return StudentProfile(
        identifier=consolidated.identifier,
        name=consolidated.name,
        status=consolidated.status,
        year=record.year if record is not None else "",
        overall_average=average_of_positive(consolidated.semester_scores),
        semester_scores=dict(consolidated.semester_scores),
        rework_count=record.rework_count if record is not None else 0,
    )


def search_records(records: Sequence[StudentRecord], term: str) -> list[StudentRecord]:
    """Name (case-insensitive) or identifier (substring) search."""
    if not term:
        return list(records)
    needle = term.casefold()
    return [r for r in records if needle in r.name.casefold() or term in r.identifier]


def yearly_comparison_rows(bundle: IngestionBundle) -> list[dict[str, object]]:
    """One flat row per year for the comparison table / chart."""
    return [
        {
            "year": s.year,
            "total_students": s.total_students,
            "pass_rate": round(s.pass_rate, 2),
            "avg_rework_count": round(s.avg_rework_count, 2),
        }
        for s in bundle.yearly_stats
    ]
