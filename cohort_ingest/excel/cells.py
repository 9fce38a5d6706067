from __future__ import annotations

import math
import re
from typing import Any

"""Cell normalizer: raw spreadsheet cells -> typed values.

Sheets are typed by hand, so scores show up as ``72``, ``"72"``, ``"72 (RA)"``,
``"=72"`` or ``72.0`` and rework counts as ``"2+1"`` or ``"-"``. Every function
here is total: malformed input degrades to 0 instead of raising.

The ``*_or_default`` variants additionally report whether a non-blank cell
was degraded, so callers can log it without changing the value.
"""

__all__ = [
    "is_blank",
    "cell_text",
    "contains_ci",
    "normalize_score",
    "normalize_rework_count",
    "score_or_default",
    "rework_or_default",
]

# parseInt 相当: 先頭の空白のあとに続く ASCII 数字のみ
_LEADING_INT_RE = re.compile(r"^\s*([0-9]+)")


def is_blank(raw: Any) -> bool:
    """None, NaN and whitespace-only strings are blank."""
    if raw is None:
        return True
    if isinstance(raw, float) and math.isnan(raw):
        return True
    if isinstance(raw, str) and raw.strip() == "":
        return True
    return False


def cell_text(raw: Any, strip: bool = True) -> str:
    """Render a cell as text ("" for blanks), stripped unless strip=False.

    pandas widens integer columns that contain blanks to float, so an
    enrollment number 1001 may come back as 1001.0; integral floats are
    rendered without the fraction.
    """
    if is_blank(raw):
        return ""
    if isinstance(raw, float) and raw.is_integer():
        return str(int(raw))
    text = str(raw)
    return text.strip() if strip else text


def contains_ci(text: Any, needle: str) -> bool:
    """Case-insensitive (casefold) substring test used by every matching site."""
    if text is None:
        return False
    return needle.casefold() in str(text).casefold()


def _leading_int(text: str) -> int | None:
    m = _LEADING_INT_RE.match(text)
    if m is None:
        return None
    return int(m.group(1))


def score_or_default(raw: Any) -> tuple[int, bool]:
    """Return (score, defaulted).

    defaulted is True when the cell had content that could not be parsed.
    Blank / falsy cells are "not graded yet" and are not counted as defaulted.
    """
    if is_blank(raw) or not raw:
        return 0, False
    text = cell_text(raw) if isinstance(raw, float) else str(raw)
    if "=" in text:
        text = text.split("=", 1)[1]
    value = _leading_int(text.strip())
    if value is None:
        return 0, True
    return value, False


def rework_or_default(raw: Any) -> tuple[int, bool]:
    """Return (rework count, defaulted). ``"3+2"`` sums to 5, ``"-"`` is 0."""
    if is_blank(raw) or str(raw).strip() == "-":
        return 0, False
    text = cell_text(raw) if isinstance(raw, float) else str(raw)
    if "+" in text:
        total = 0
        defaulted = False
        for part in text.split("+"):
            value = _leading_int(part.strip())
            if value is None:
                defaulted = True
                continue
            total += value
        return total, defaulted
    value = _leading_int(text.strip())
    if value is None:
        return 0, True
    return value, False


def normalize_score(raw: Any) -> int:
    """Convert a score cell to a non-negative int (0 on blank or garbage)."""
    return score_or_default(raw)[0]


def normalize_rework_count(raw: Any) -> int:
    """Convert a "Total KT" cell to a non-negative int."""
    return rework_or_default(raw)[0]
