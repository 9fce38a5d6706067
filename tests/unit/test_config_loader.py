from __future__ import annotations

from pathlib import Path

import pytest

from cohort_ingest.config.loader import SCHEMA_PATH, ConfigError, load_config
from cohort_ingest.models.config_models import IngestConfig


def test_load_config_success(write_config: Path):
    cfg = load_config(write_config)
    assert cfg.excluded_sheet_keywords == ("stipulated", "notes")
    assert cfg.top_rank_count == 3
    assert cfg.issue_log_directory == "./logs"
    assert cfg.show_progress is False


def test_missing_default_file_means_defaults(temp_workdir: Path):
    cfg = load_config()
    assert cfg == IngestConfig()
    assert cfg.excluded_sheet_keywords == ("stipulated",)
    assert cfg.name_placeholder == "N/A"
    assert cfg.status_placeholder == "Unknown"


def test_missing_required_file(temp_workdir: Path):
    with pytest.raises(ConfigError, match="config file not found"):
        load_config(temp_workdir / "config" / "not_exists.yml", required=True)


def test_partial_config_keeps_other_defaults(temp_workdir: Path):
    p = temp_workdir / "config" / "ingest.yml"
    p.write_text("top_rank_count: 5\n", encoding="utf-8")
    cfg = load_config(p)
    assert cfg.top_rank_count == 5
    assert cfg.excluded_sheet_keywords == ("stipulated",)


def test_empty_file_is_defaults(temp_workdir: Path):
    p = temp_workdir / "config" / "ingest.yml"
    p.write_text("", encoding="utf-8")
    assert load_config(p) == IngestConfig()


def test_invalid_yaml(temp_workdir: Path):
    p = temp_workdir / "config" / "ingest.yml"
    p.write_text("top_rank_count: [1,\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_config(p)


@pytest.mark.parametrize(
    "text",
    [
        "extra_field: not_allowed\n",
        "top_rank_count: -1\n",
        "top_rank_count: three\n",
        "excluded_sheet_keywords: stipulated\n",
        "show_progress: maybe\n",
        "status_placeholder: ''\n",
    ],
)
def test_schema_violations(temp_workdir: Path, text: str):
    p = temp_workdir / "config" / "ingest.yml"
    p.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError, match="config validation failed"):
        load_config(p)


def test_schema_is_packaged():
    assert SCHEMA_PATH.exists()
    assert SCHEMA_PATH.parent.name == "config"
