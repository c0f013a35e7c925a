from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import DEFAULT_FIXED_UNIT_PRICES, AppConfig

"""Config loader.

Responsibilities:
- Load the YAML config file
- Validate it against the JSON schema shipped next to this module
- Apply defaults for every missing key
"""

__all__ = [
    "SCHEMA_PATH",
    "DEFAULT_CONFIG_PATH",
    "ConfigError",
    "default_config",
    "load_config",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/retail_recon.yml")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: Any) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or not valid JSON, or the data fails
            validation (unknown keys, wrong types).
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


def default_config() -> AppConfig:
    return AppConfig()


def load_config(path: Path) -> AppConfig:
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e

    _validate_config_schema(data)

    defaults = AppConfig()
    prices = data.get("fixed_unit_prices")
    return AppConfig(
        reconciliation_tolerance=float(data.get("reconciliation_tolerance", defaults.reconciliation_tolerance)),
        sock_marker=data.get("sock_marker", defaults.sock_marker),
        variant_delimiter=data.get("variant_delimiter", defaults.variant_delimiter),
        fixed_unit_prices=dict(DEFAULT_FIXED_UNIT_PRICES if prices is None else prices),
        reference_csv=data.get("reference_csv", defaults.reference_csv),
        output_directory=data.get("output_directory", defaults.output_directory),
    )
