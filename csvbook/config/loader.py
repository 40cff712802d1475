from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import replace
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import ConvertConfig, ExclusionRules, NumericPolicy, SinkKind

"""Config loader.

Responsibilities:
- Load the YAML config (default config/convert.yml)
- Validate it against config_schema.json (unknown keys rejected)
- Apply defaults for every missing key
- Apply environment overrides (CSVBOOK_*), which win over the file
"""

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"
DEFAULT_CONFIG_PATH = Path("config/convert.yml")

ENV_OUTPUT_DIR = "CSVBOOK_OUTPUT_DIR"
ENV_SINK = "CSVBOOK_SINK"
ENV_NUMERIC_POLICY = "CSVBOOK_NUMERIC_POLICY"


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the packaged JSON schema.

    Raises:
        ConfigError: If the schema file is missing or invalid, or the data
            fails validation (wrong types, unknown keys, bad enum values).
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


def _fold_terms(terms: Any) -> frozenset[str]:
    return frozenset(str(t).strip().casefold() for t in terms)


def config_from_dict(data: dict[str, Any]) -> ConvertConfig:
    _validate_config_schema(data)
    defaults = ConvertConfig()
    excl_raw = data.get("exclusions") or {}
    exclusions = ExclusionRules(
        exact=_fold_terms(excl_raw["exact"]) if "exact" in excl_raw else defaults.exclusions.exact,
        substring=(
            _fold_terms(excl_raw["substring"]) if "substring" in excl_raw else defaults.exclusions.substring
        ),
    )
    return ConvertConfig(
        source_directory=data.get("source_directory"),
        numeric_policy=NumericPolicy(data.get("numeric_policy", defaults.numeric_policy.value)),
        exclusions=exclusions,
        sink=SinkKind(data.get("sink", defaults.sink.value)),
        session_workbook=data.get("session_workbook", defaults.session_workbook),
        export_sheets=data.get("export_sheets", defaults.export_sheets),
        output_directory=data.get("output_directory"),
        encoding=data.get("encoding", defaults.encoding),
        fail_fast=data.get("fail_fast", defaults.fail_fast),
    )


def apply_env_overrides(cfg: ConvertConfig, env: Mapping[str, str] | None = None) -> ConvertConfig:
    """Environment variables take precedence over the config file."""
    env = os.environ if env is None else env
    changes: dict[str, Any] = {}
    if env.get(ENV_OUTPUT_DIR):
        changes["output_directory"] = env[ENV_OUTPUT_DIR]
    try:
        if env.get(ENV_SINK):
            changes["sink"] = SinkKind(env[ENV_SINK].strip().lower())
        if env.get(ENV_NUMERIC_POLICY):
            changes["numeric_policy"] = NumericPolicy(env[ENV_NUMERIC_POLICY].strip().lower())
    except ValueError as e:
        raise ConfigError(f"invalid environment override: {e}") from e
    return replace(cfg, **changes) if changes else cfg


def load_config(path: Path | None = None, env: Mapping[str, str] | None = None) -> ConvertConfig:
    """Load configuration.

    Args:
        path: Explicit config path (must exist). None -> DEFAULT_CONFIG_PATH,
            which may be absent (defaults apply).
        env: Environment mapping, defaults to os.environ

    Raises:
        ConfigError: On a missing explicit file, invalid YAML or schema violation
    """
    if path is not None and not path.exists():
        raise ConfigError(f"config file not found: {path}")
    source = path if path is not None else DEFAULT_CONFIG_PATH
    data: Any = {}
    if source.exists():
        try:
            data = yaml.safe_load(source.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"invalid yaml: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")
    return apply_env_overrides(config_from_dict(data), env)
