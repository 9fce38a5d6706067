from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from cohort_ingest.config.loader import ConfigError, load_config
from cohort_ingest.excel.cells import contains_ci
from cohort_ingest.excel.header import SheetSkipped, locate_header
from cohort_ingest.excel.reader import read_workbook
from cohort_ingest.logging.init import enable_debug, log_summary, setup_logging
from cohort_ingest.models.config_models import IngestConfig
from cohort_ingest.models.processing_result import IngestionResult
from cohort_ingest.services.export import write_bundle
from cohort_ingest.services.orchestrator import (
    IngestError,
    NoValidDataError,
    ingest_file,
    scan_workbook_directory,
)
from cohort_ingest.services.ranking import rank_records
from cohort_ingest.services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- Load .env, then the optional YAML config
- Ingest one workbook (or every workbook of a directory, one after another)
- Log per-year statistics, optionally a ranking, write the bundle on request
- Finish with one SUMMARY line per workbook

Exit codes: 0 all sheets usable, 2 some sheets skipped, 1 fatal.
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

CONFIG_ENV_VAR = "COHORT_INGEST_CONFIG"


def _load_env_file(path: Path, override: bool = False) -> None:
    """Load .env via python-dotenv (process environment wins by default)."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="cohort-ingest",
        description="Ingest multi-sheet student record workbooks into per-year statistics",
    )
    p.add_argument("source", help="Workbook (.xlsx/.xls) or a directory of workbooks")
    p.add_argument("--config", help=f"YAML config (default: ${CONFIG_ENV_VAR} or config/ingest.yml)")
    p.add_argument("--output", help="Write the bundle to this .json or .xlsx file")
    p.add_argument("--rank", metavar="YEAR", help="Log the ranking of one year (sheet name)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument(
        "--inspect-data", action="store_true", help="Print detected headers & first rows then exit"
    )
    return p.parse_args(argv)


def _inspect_data(paths: list[Path], cfg: IngestConfig) -> int:
    for f in paths:
        print(f"FILE: {f.name}")
        try:
            sheets = read_workbook(f)
        except Exception as e:  # pragma: no cover
            print(f"  read_error: {e}")
            continue
        for sname, rows in sheets.items():
            if any(contains_ci(sname, kw) for kw in cfg.excluded_sheet_keywords):
                print(f"  SHEET: {sname} excluded")
                continue
            try:
                cmap = locate_header(rows)
            except SheetSkipped as e:
                print(f"  SHEET: {sname} skipped={e}")
                continue
            print(f"  SHEET: {sname} header={rows[cmap.header_row_index]}")
            print(f"    column_map={cmap.describe()}")
            start = cmap.header_row_index + 1
            print("    sample_rows=", rows[start:start + 3])
    return EXIT_SUCCESS_ALL


def _output_path_for(output: Path, workbook: Path, multiple: bool) -> Path:
    if not multiple:
        return output
    return output.with_name(f"{output.stem}-{workbook.stem}{output.suffix}")


def _log_result(result: IngestionResult, rank_year: str | None, top_count: int) -> None:
    logger = setup_logging()
    for outcome in result.sheet_outcomes:
        logger.debug(
            f"sheet={outcome.sheet_name} status={outcome.status.value} records={outcome.record_count}"
        )
    for stat in result.bundle.yearly_stats:
        logger.info(
            f"year={stat.year} students={stat.total_students} "
            f"pass_rate={stat.pass_rate:.1f} avg_rework={stat.avg_rework_count:.2f}"
        )
    if rank_year is None:
        return
    records = result.bundle.per_year_records.get(rank_year)
    if records is None:
        logger.warning(f"rank: year '{rank_year}' not found in {result.workbook}")
        return
    for ranked in rank_records(records, top_count):
        marker = " *" if ranked.is_top else ""
        r = ranked.record
        logger.info(f"rank={ranked.rank} id={r.identifier} name={r.name} avg={r.average_score:.2f}{marker}")


def _ingest_one(path: Path, cfg: IngestConfig, args: argparse.Namespace, multiple: bool) -> int:
    logger = setup_logging()
    logger.info(f"Ingesting workbook: {path}")
    try:
        result = ingest_file(path, cfg)
    except NoValidDataError as e:
        logger.error(f"ingest: {e}")
        for outcome in e.sheet_outcomes:
            logger.info(f"sheet={outcome.sheet_name} status={outcome.status.value}")
        return EXIT_FATAL
    except Exception as e:
        # 読み込み失敗 (ファイル無し / 形式不正) はそのまま報告
        logger.error(f"source: {path}: {e}")
        return EXIT_FATAL

    _log_result(result, args.rank, cfg.top_rank_count)

    if args.output:
        target = _output_path_for(Path(args.output), path, multiple)
        try:
            write_bundle(result.bundle, target)
        except (ValueError, OSError) as e:
            logger.error(f"output: {e}")
            return EXIT_FATAL
        logger.info(f"bundle written: {target}")

    # "SUMMARY " prefix is added by log_summary
    log_summary(render_summary_line(result)[len("SUMMARY "):])
    return EXIT_PARTIAL_FAILURE if result.skipped_sheets else EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # 空リスト [] はそのまま使う (None のときのみ sys.argv を読む)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"))

    config_arg = args.config or os.getenv(CONFIG_ENV_VAR)
    try:
        cfg = load_config(Path(config_arg) if config_arg else None, required=config_arg is not None)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.debug:
        enable_debug()
        logger.debug("debug mode enabled")

    source = Path(args.source)
    if source.is_dir():
        try:
            paths = scan_workbook_directory(source)
        except IngestError as e:
            logger.error(f"source: {e}")
            return EXIT_FATAL
        if not paths:
            logger.info(f"no workbooks found in {source}")
            return EXIT_SUCCESS_ALL
    else:
        paths = [source]

    if args.inspect_data:
        return _inspect_data(paths, cfg)

    codes = [_ingest_one(p, cfg, args, multiple=len(paths) > 1) for p in paths]
    if all(c == EXIT_SUCCESS_ALL for c in codes):
        return EXIT_SUCCESS_ALL
    if all(c == EXIT_FATAL for c in codes):
        return EXIT_FATAL
    return EXIT_PARTIAL_FAILURE


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
