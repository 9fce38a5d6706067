# Shared pytest fixtures
from __future__ import annotations
import tempfile
from collections.abc import Callable
from pathlib import Path

import pandas as pd
import pytest

from cohort_ingest.logging.init import reset_logging


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("COHORT_INGEST_CONFIG", raising=False)
        yield p


@pytest.fixture(autouse=True)
def _fresh_logger():
    # 各テストで capsys の stdout に handler を張り直す
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def sample_config_yaml() -> str:
    return """excluded_sheet_keywords: [stipulated, notes]
name_placeholder: N/A
status_placeholder: Unknown
top_rank_count: 3
issue_log_directory: ./logs
show_progress: false
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "ingest.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def _make_workbook(directory: Path, name: str, sheets: dict[str, list[list[object]]]) -> Path:
    p = directory / name
    with pd.ExcelWriter(p, engine="openpyxl") as writer:
        for sheet, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet, header=False, index=False)
    return p


@pytest.fixture()
def make_workbook() -> Callable[[Path, str, dict[str, list[list[object]]]], Path]:
    """Factory writing a real .xlsx, one sheet per entry, rows as-is (no header)."""
    return _make_workbook


@pytest.fixture()
def year1_rows() -> list[list[object]]:
    return [
        ["XYZ Institute of Technology", None, None, None, None, None],
        ["Result Analysis 2021-22", None, None, None, None, None],
        ["Enrollment No", "Name of Student", "Sem 1", "Sem 2", "Total KT", "Status"],
        ["E001", "Asha Rao", 72, 80, "-", "PASS"],
        ["E002", "Bilal Khan", "65 ", 0, "1+1", "ATKT"],
        ["E003", "Chen Li", 90, 88, 0, "Distinction"],
        [None, None, None, None, None, None],
        [None, "Prepared by exam cell", None, None, None, None],
    ]


@pytest.fixture()
def year2_rows() -> list[list[object]]:
    return [
        ["Result Analysis 2022-23", None, None, None, None],
        ["Enrollment No", "Name", "Sem 3", "Total KT", "Class"],
        ["E001", "Asha Rao", 78, 0, "First Class"],
        ["E002", "Bilal Khan", 58, 1, "FAIL"],
    ]


@pytest.fixture()
def sample_sheets(year1_rows, year2_rows) -> dict[str, list[list[object]]]:
    return {
        "2021-22": year1_rows,
        "Stipulated Time": [["Enrollment No", "Name"], ["X1", "Not a student"]],
        "2022-23": year2_rows,
    }


@pytest.fixture()
def sample_workbook(temp_workdir: Path, make_workbook, sample_sheets) -> Path:
    return make_workbook(temp_workdir / "data", "results.xlsx", sample_sheets)
