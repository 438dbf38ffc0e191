from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.classification import ClassificationPolicy
from ..models.config_models import MapperConfig
from ..services.fields import FIELD_SPECS

"""Config loader.

Responsibilities:
- Load YAML config (config/mapper.yml by default)
- Apply the COLLECTION_CLASSIFICATION_POLICY environment override
- Validate against config_schema.json (shipped next to this module)
- Apply defaults and build a MapperConfig
"""

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/mapper.yml")
POLICY_ENV_VAR = "COLLECTION_CLASSIFICATION_POLICY"


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or not valid JSON, or if the
            config data fails validation (missing required keys, wrong types,
            unknown keys).
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


def _check_alias_fields(aliases: dict[str, list[str]]) -> None:
    unknown = sorted(set(aliases) - set(FIELD_SPECS))
    if unknown:
        raise ConfigError(f"column_aliases: unknown fields {unknown}")


def load_config(path: Path = DEFAULT_CONFIG_PATH, policy_override: str | None = None) -> MapperConfig:
    """Load, validate and type the config.

    Policy precedence: policy_override (CLI) > COLLECTION_CLASSIFICATION_POLICY > file.
    """
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    override = policy_override or os.getenv(POLICY_ENV_VAR)
    if override:
        data["classification_policy"] = override.strip().lower()

    _validate_config_schema(data)

    aliases = data.get("column_aliases") or {}
    _check_alias_fields(aliases)

    sentinels = data.get("null_sentinels")
    return MapperConfig(
        source_directory=data["source_directory"],
        classification_policy=ClassificationPolicy(data["classification_policy"]),
        output_directory=data.get("output_directory", "./output"),
        sheets=data.get("sheets"),
        header_row=data.get("header_row", 1),
        column_aliases=aliases,
        null_sentinels={s.strip().upper() for s in sentinels} if sentinels else None,
    )
