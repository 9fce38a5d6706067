from __future__ import annotations

from pathlib import Path
from typing import Any

import pandas as pd

"""Workbook reader: Excel file -> ordered raw rows per sheet.

pandas decodes the file with header=None so nothing is inferred; the header
row is located later by content. Errors opening or decoding the file are
not caught here and reach the caller unchanged.
"""

__all__ = [
    "RawRow",
    "WORKBOOK_SUFFIXES",
    "read_workbook",
    "frame_to_rows",
]

RawRow = list[Any]

WORKBOOK_SUFFIXES = (".xlsx", ".xls")


def frame_to_rows(df: pd.DataFrame) -> list[RawRow]:
    """Convert a header-less DataFrame into rows of plain Python values.

    NaN cells become None. astype(object) keeps ints as ints where the
    column had no blanks.
    """
    if df.empty:
        return []
    clean = df.astype(object).where(pd.notna(df), None)
    return [list(row) for row in clean.itertuples(index=False, name=None)]


def read_workbook(path: Path) -> dict[str, list[RawRow]]:
    """Read every sheet of a workbook, keyed by sheet name in workbook order.

    Parameters
    ----------
    path: workbook path (.xlsx via openpyxl, .xls via pandas' default engine)
    """
    sheets: dict[str, list[RawRow]] = {}
    with pd.ExcelFile(path) as xls:
        for name in xls.sheet_names:
            # ヘッダ推定なしで生読み (ヘッダ行は内容から後で特定)
            df = xls.parse(name, header=None)
            sheets[str(name)] = frame_to_rows(df)
    return sheets
