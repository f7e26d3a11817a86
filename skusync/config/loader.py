from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import AppConfig, ImportOptions
from ..models.settings import AppSettings

"""Config loader.

Responsibilities:
- Load YAML config (default config/skusync.yml)
- Validate against the bundled JSON schema (config_schema.json)
- Apply defaults for every missing key
- Apply SKUSYNC_DELIMITER / SKUSYNC_PREFIX / SKUSYNC_SUFFIX overrides
"""

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "ENV_OVERRIDES",
    "SCHEMA_PATH",
    "apply_env_overrides",
    "default_config",
    "load_config",
]

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"
DEFAULT_CONFIG_PATH = Path("config/skusync.yml")

# 環境変数 -> AppSettings フィールド
ENV_OVERRIDES = {
    "SKUSYNC_DELIMITER": "delimiter",
    "SKUSYNC_PREFIX": "prefix",
    "SKUSYNC_SUFFIX": "suffix",
}


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against JSON schema.

    Raises:
        ConfigError: If the schema file is missing or invalid, or the config
            data fails schema validation (wrong types, unknown keys, ...).
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


def apply_env_overrides(settings: AppSettings) -> AppSettings:
    """Environment variables take precedence over file values."""
    overrides = {field: os.environ[var] for var, field in ENV_OVERRIDES.items() if var in os.environ}
    if not overrides:
        return settings
    return settings.merged(**overrides)


def default_config() -> AppConfig:
    """Built-in defaults (plus environment overrides) when no config file exists."""
    return AppConfig(settings=apply_env_overrides(AppSettings()))


def load_config(path: Path) -> AppConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    raw_settings = data.get("settings") or {}
    defaults = AppSettings()
    settings = AppSettings(
        delimiter=raw_settings.get("delimiter", defaults.delimiter),
        prefix=raw_settings.get("prefix", defaults.prefix),
        suffix=raw_settings.get("suffix", defaults.suffix),
    )
    raw_import = data.get("import") or {}
    import_defaults = ImportOptions()
    import_options = ImportOptions(
        config_sheet_name=raw_import.get("config_sheet_name", import_defaults.config_sheet_name),
        sku_header=raw_import.get("sku_header", import_defaults.sku_header),
        keep_na_strings=tuple(raw_import.get("keep_na_strings", import_defaults.keep_na_strings)),
    )
    return AppConfig(
        settings=apply_env_overrides(settings),
        import_options=import_options,
        logs_directory=data.get("logs_directory", AppConfig().logs_directory),
    )
