from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.records import IngestionBundle
from .ranking import ordered_semester_keys

"""Bundle export to JSON or to an Excel workbook."""

logger = logging.getLogger(__name__)

__all__ = [
    "bundle_to_dict",
    "bundle_frames",
    "write_bundle",
]

CONSOLIDATED_SHEET = "Consolidated"
YEARLY_STATS_SHEET = "Yearly Stats"
_MAX_SHEET_NAME = 31  # Excel limit


def bundle_to_dict(bundle: IngestionBundle) -> dict[str, Any]:
    return {
        "per_year_records": {
            year: [asdict(r) for r in records] for year, records in bundle.per_year_records.items()
        },
        "consolidated_students": [asdict(s) for s in bundle.consolidated_students],
        "yearly_stats": [asdict(s) for s in bundle.yearly_stats],
    }


def _record_rows(records: list[Any]) -> list[dict[str, Any]]:
    rows = []
    for r in records:
        row = {
            "identifier": r.identifier,
            "name": r.name,
            "status": r.status,
        }
        if hasattr(r, "average_score"):
            row["average_score"] = r.average_score
            row["rework_count"] = r.rework_count
        for key in ordered_semester_keys(r.semester_scores):
            row[key] = r.semester_scores[key]
        rows.append(row)
    return rows


def _unique_sheet_name(name: str, taken: set[str]) -> str:
    """Truncate to the Excel limit and suffix "-2", "-3", ... until unused.

    Excel compares sheet names case-insensitively, so ``taken`` holds
    casefolded names. The chosen name is added to it.
    """
    candidate = name[:_MAX_SHEET_NAME]
    n = 2
    while candidate.casefold() in taken:
        suffix = f"-{n}"
        candidate = name[: _MAX_SHEET_NAME - len(suffix)] + suffix
        n += 1
    taken.add(candidate.casefold())
    return candidate


def bundle_frames(bundle: IngestionBundle) -> dict[str, pd.DataFrame]:
    """One DataFrame per output sheet, keyed by sheet name.

    Year sheets come first. A year whose name clashes with the fixed
    summary sheets, or with another year after truncation, gets a numeric
    suffix so no sheet is overwritten.
    """
    frames: dict[str, pd.DataFrame] = {}
    taken = {CONSOLIDATED_SHEET.casefold(), YEARLY_STATS_SHEET.casefold()}
    for year, records in bundle.per_year_records.items():
        sheet_name = _unique_sheet_name(year, taken)
        if sheet_name != year:
            logger.warning("export: year %r written as sheet %r", year, sheet_name)
        frames[sheet_name] = pd.DataFrame(_record_rows(records))
    frames[CONSOLIDATED_SHEET] = pd.DataFrame(_record_rows(bundle.consolidated_students))
    stats_rows = []
    for s in bundle.yearly_stats:
        row: dict[str, Any] = {
            "year": s.year,
            "total_students": s.total_students,
            "pass_rate": s.pass_rate,
            "avg_rework_count": s.avg_rework_count,
        }
        for status, count in s.status_distribution.items():
            row[f"status:{status}"] = count
        stats_rows.append(row)
    frames[YEARLY_STATS_SHEET] = pd.DataFrame(stats_rows)
    return frames


def write_bundle(bundle: IngestionBundle, path: Path) -> Path:
    """Write the bundle as .json or .xlsx depending on the suffix.

    Raises:
        ValueError: unsupported suffix
    """
    suffix = path.suffix.lower()
    if suffix == ".json":
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(bundle_to_dict(bundle), ensure_ascii=False, indent=2), encoding="utf-8"
        )
        return path
    if suffix == ".xlsx":
        path.parent.mkdir(parents=True, exist_ok=True)
        with pd.ExcelWriter(path) as writer:
            for sheet_name, df in bundle_frames(bundle).items():
                df.to_excel(writer, sheet_name=sheet_name, index=False)
        return path
    raise ValueError(f"unsupported output format: {path.suffix or '(none)'} (use .json or .xlsx)")
