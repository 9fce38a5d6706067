from __future__ import annotations

from pathlib import Path

from cohort_ingest.cli import main as cli_main

"""Exit code contract: 0 all sheets usable, 2 some sheets skipped, 1 fatal."""


def test_exit_code_all_success(temp_workdir: Path, sample_workbook: Path, capsys):
    assert cli_main([str(sample_workbook)]) == 0
    assert "SUMMARY sheets=3" in capsys.readouterr().out


def test_exit_code_partial(temp_workdir: Path, make_workbook, year1_rows, capsys):
    wb = make_workbook(
        temp_workdir / "data", "partial.xlsx",
        {"2021": year1_rows, "Cover": [["Results booklet"], ["page 1"]]},
    )
    code = cli_main([str(wb)])
    out = capsys.readouterr().out
    assert code == 2
    assert "WARN sheet=Cover skipped" in out
    assert "skipped_sheets=1" in out


def test_exit_code_no_valid_data(temp_workdir: Path, make_workbook, capsys):
    wb = make_workbook(
        temp_workdir / "data", "empty.xlsx",
        {"A": [["Roll", "Name"], [1, "x"]], "B": [["Title only"]]},
    )
    code = cli_main([str(wb)])
    out = capsys.readouterr().out
    assert code == 1
    assert "ERROR ingest: no valid student data found in empty.xlsx" in out
    assert "INFO sheet=A status=header_not_found" in out
    assert "SUMMARY" not in out


def test_exit_code_source_unavailable(temp_workdir: Path, capsys):
    code = cli_main([str(temp_workdir / "data" / "missing.xlsx")])
    assert code == 1
    assert "ERROR source:" in capsys.readouterr().out


def test_exit_code_corrupt_file(temp_workdir: Path, capsys):
    bad = temp_workdir / "data" / "broken.xlsx"
    bad.write_bytes(b"not a zip archive")
    assert cli_main([str(bad)]) == 1
    assert "ERROR source:" in capsys.readouterr().out


def test_exit_code_empty_directory(temp_workdir: Path, capsys):
    assert cli_main([str(temp_workdir / "data")]) == 0
    assert "no workbooks found" in capsys.readouterr().out


def test_exit_code_directory_mixed(temp_workdir: Path, make_workbook, year1_rows, capsys):
    data = temp_workdir / "data"
    make_workbook(data, "a_good.xlsx", {"2021": year1_rows})
    make_workbook(data, "b_bad.xlsx", {"x": [["nothing here"]]})
    assert cli_main([str(data)]) == 2
