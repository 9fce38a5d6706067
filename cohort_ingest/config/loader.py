from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import IngestConfig

"""Config loader.

Responsibilities:
- Load the optional YAML config (default config/ingest.yml)
- Validate it against the packaged config_schema.json
- Fill in defaults for absent keys
"""

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "load_config",
]

DEFAULT_CONFIG_PATH = Path("config/ingest.yml")
SCHEMA_PATH = Path(__file__).with_name("config_schema.json")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: Any) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing / not JSON, or the data violates it
            (unknown keys, wrong types, negative top_rank_count, ...)
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path | None = None, *, required: bool = False) -> IngestConfig:
    """Load configuration from ``path`` (default: config/ingest.yml).

    Args:
        path: YAML file location
        required: when True a missing file is an error; otherwise built-in
            defaults are returned

    Raises:
        ConfigError: missing required file, invalid YAML or schema violation
    """
    path = path or DEFAULT_CONFIG_PATH
    if not path.exists():
        if required:
            raise ConfigError(f"config file not found: {path}")
        return IngestConfig()
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e

    _validate_config_schema(data)

    defaults = IngestConfig()
    return IngestConfig(
        excluded_sheet_keywords=tuple(
            data.get("excluded_sheet_keywords", defaults.excluded_sheet_keywords)
        ),
        name_placeholder=data.get("name_placeholder", defaults.name_placeholder),
        status_placeholder=data.get("status_placeholder", defaults.status_placeholder),
        top_rank_count=data.get("top_rank_count", defaults.top_rank_count),
        issue_log_directory=data.get("issue_log_directory", defaults.issue_log_directory),
        show_progress=data.get("show_progress", defaults.show_progress),
    )
