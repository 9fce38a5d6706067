from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from ..models.column_map import ColumnMap
from .cells import cell_text, contains_ci

"""Header locator: find the header row of a human-authored sheet.

Sheets carry a free-form title block above the table, so the header row is
discovered instead of assumed: it is the first row with a cell mentioning
"enrollment". Column roles are then resolved with HEADER_RULES, an ordered
matching table that can be unit-tested on its own.
"""

__all__ = [
    "HeaderRule",
    "HEADER_RULES",
    "SEMESTER_KEYWORD",
    "SheetSkipped",
    "HeaderNotFoundError",
    "find_header_row",
    "build_column_map",
    "locate_header",
]

SEMESTER_KEYWORD = "sem"
_DIGIT_RE = re.compile(r"[0-9]")


class SheetSkipped(Exception):
    """Base for per-sheet, recoverable conditions (sheet yields nothing)."""


class HeaderNotFoundError(SheetSkipped):
    """Raised when no row contains an "enrollment" header cell."""


@dataclass(frozen=True)
class HeaderRule:
    """One (role, pattern, priority) entry of the matching table.

    For a role, patterns are tried by ascending priority and the first
    pattern that matches any header cell decides; within a pattern the
    leftmost cell wins.
    """
    role: str
    pattern: str
    priority: int = 0


HEADER_RULES: tuple[HeaderRule, ...] = (
    HeaderRule("identifier", "enrollment"),
    HeaderRule("name", "name"),
    HeaderRule("status", "status", priority=0),
    HeaderRule("status", "class", priority=1),
    HeaderRule("rework_count", "total kt"),  # KT = backlog / rework units
)

_IDENTIFIER_PATTERN = next(r.pattern for r in HEADER_RULES if r.role == "identifier")


def find_header_row(rows: Sequence[Sequence[Any]]) -> int:
    """Return the index of the first row mentioning "enrollment".

    Raises:
        HeaderNotFoundError: no such row exists
    """
    for idx, row in enumerate(rows):
        if any(contains_ci(cell_text(cell), _IDENTIFIER_PATTERN) for cell in row):
            return idx
    raise HeaderNotFoundError(f"no header cell containing '{_IDENTIFIER_PATTERN}'")


def _resolve_role(headers: list[str], role: str, rules: Sequence[HeaderRule]) -> int | None:
    candidates = sorted((r for r in rules if r.role == role), key=lambda r: r.priority)
    for rule in candidates:
        for idx, text in enumerate(headers):
            if contains_ci(text, rule.pattern):
                return idx
    return None


def _resolve_semesters(headers: list[str]) -> dict[str, int]:
    semesters: dict[str, int] = {}
    for idx, text in enumerate(headers):
        if not contains_ci(text, SEMESTER_KEYWORD):
            continue
        m = _DIGIT_RE.search(text)
        if m is None:
            continue  # "Semester" without a number
        # 同じ semN が複数列ある場合は左端を採用。右側の重複列で上書きしない
        semesters.setdefault(f"sem{m.group(0)}", idx)
    return semesters


def build_column_map(
    header_row: Sequence[Any],
    header_row_index: int = 0,
    rules: Sequence[HeaderRule] = HEADER_RULES,
) -> ColumnMap:
    """Map semantic roles to column indices for one header row.

    Raises:
        HeaderNotFoundError: the identifier role cannot be resolved
    """
    headers = [cell_text(cell) for cell in header_row]
    identifier = _resolve_role(headers, "identifier", rules)
    if identifier is None:
        raise HeaderNotFoundError("identifier column could not be resolved")
    return ColumnMap(
        header_row_index=header_row_index,
        identifier=identifier,
        name=_resolve_role(headers, "name", rules),
        status=_resolve_role(headers, "status", rules),
        rework_count=_resolve_role(headers, "rework_count", rules),
        semesters=_resolve_semesters(headers),
    )


def locate_header(rows: Sequence[Sequence[Any]]) -> ColumnMap:
    """find_header_row + build_column_map in one step."""
    idx = find_header_row(rows)
    return build_column_map(rows[idx], header_row_index=idx)
