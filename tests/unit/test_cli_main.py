from __future__ import annotations

import json
import os
from pathlib import Path
from unittest.mock import patch

from cohort_ingest.cli import main as cli_main


def test_cli_ingests_workbook(temp_workdir: Path, sample_workbook: Path, capsys):
    code = cli_main([str(sample_workbook)])
    out = capsys.readouterr().out
    assert code == 0
    assert "INFO year=2021-22 students=3 pass_rate=66.7 avg_rework=0.67" in out
    assert "INFO year=2022-23 students=2 pass_rate=50.0" in out
    assert "SUMMARY sheets=3 included=2 skipped_sheets=0 records=5 students=3" in out


def test_cli_rank_option(temp_workdir: Path, sample_workbook: Path, capsys):
    code = cli_main([str(sample_workbook), "--rank", "2021-22"])
    out = capsys.readouterr().out
    assert code == 0
    lines = [line for line in out.splitlines() if line.startswith("INFO rank=")]
    assert lines[0].startswith("INFO rank=1 id=E003")
    assert lines[0].endswith(" *")
    assert len(lines) == 3


def test_cli_rank_unknown_year(temp_workdir: Path, sample_workbook: Path, capsys):
    code = cli_main([str(sample_workbook), "--rank", "1999"])
    assert code == 0
    assert "WARN rank: year '1999' not found" in capsys.readouterr().out


def test_cli_output_json(temp_workdir: Path, sample_workbook: Path, capsys):
    out_path = temp_workdir / "out" / "bundle.json"
    code = cli_main([str(sample_workbook), "--output", str(out_path)])
    assert code == 0
    data = json.loads(out_path.read_text(encoding="utf-8"))
    assert list(data["per_year_records"]) == ["2021-22", "2022-23"]


def test_cli_output_bad_suffix(temp_workdir: Path, sample_workbook: Path, capsys):
    code = cli_main([str(sample_workbook), "--output", "bundle.txt"])
    assert code == 1
    assert "ERROR output:" in capsys.readouterr().out


def test_cli_debug_mode(temp_workdir: Path, sample_workbook: Path, capsys):
    code = cli_main([str(sample_workbook), "--debug"])
    out = capsys.readouterr().out
    assert code == 0
    assert "DEBUG debug mode enabled" in out
    assert "DEBUG sheet=Stipulated Time status=excluded" in out


def test_cli_inspect_data(temp_workdir: Path, sample_workbook: Path, capsys):
    with patch("cohort_ingest.cli.__main__.ingest_file") as mock_ingest:
        code = cli_main([str(sample_workbook), "--inspect-data"])
    out = capsys.readouterr().out
    assert code == 0
    mock_ingest.assert_not_called()
    assert "FILE: results.xlsx" in out
    assert "SHEET: Stipulated Time excluded" in out
    assert "SHEET: 2021-22 header=" in out
    assert "'identifier': 0" in out
    assert "sample_rows=" in out


def test_cli_explicit_config_missing(temp_workdir: Path, sample_workbook: Path, capsys):
    code = cli_main([str(sample_workbook), "--config", "config/absent.yml"])
    assert code == 1
    assert "ERROR config: config file not found" in capsys.readouterr().out


def test_cli_config_from_env(temp_workdir: Path, sample_workbook: Path, monkeypatch, capsys):
    cfg = temp_workdir / "custom.yml"
    cfg.write_text("excluded_sheet_keywords: ['2022']\nshow_progress: false\n", encoding="utf-8")
    monkeypatch.setenv("COHORT_INGEST_CONFIG", str(cfg))
    code = cli_main([str(sample_workbook)])
    out = capsys.readouterr().out
    # Stipulated シートはキーワード外なので読まれ、X1 も学生として数えられる
    assert code == 0
    assert "included=2" in out
    assert "year=Stipulated Time" in out


def test_cli_config_from_dotenv(temp_workdir: Path, sample_workbook: Path, capsys):
    cfg = temp_workdir / "custom.yml"
    cfg.write_text("unknown_key: 1\n", encoding="utf-8")
    (temp_workdir / ".env").write_text(f"COHORT_INGEST_CONFIG={cfg}\n", encoding="utf-8")
    try:
        code = cli_main([str(sample_workbook)])
    finally:
        # load_dotenv は os.environ に直接書き込む
        os.environ.pop("COHORT_INGEST_CONFIG", None)
    assert code == 1
    assert "ERROR config: config validation failed" in capsys.readouterr().out
