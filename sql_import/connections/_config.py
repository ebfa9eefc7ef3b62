"""Configuration loader utilities shared by the connection and job models."""

import json
import os
from pathlib import Path
from typing import Any

import yaml

from ._logging import get_logger, redact_config

LOGGER = get_logger("config")


def _read_prefixed_env(prefix: str) -> dict[str, Any]:
    """Read environment keys matching <PREFIX>_* and normalize key names."""
    prefix_token = f"{prefix.upper()}_"
    values: dict[str, Any] = {}

    for key, value in os.environ.items():
        if key.startswith(prefix_token):
            normalized_key = key.removeprefix(prefix_token).lower()
            values[normalized_key] = value

    LOGGER.info("Loaded %s config keys from environment prefix %s", len(values), prefix_token)
    return values


def _validate_mapping_root(data: Any) -> dict[str, Any]:
    """Ensure configuration files deserialize to a dictionary root."""
    if isinstance(data, dict):
        return data
    raise ValueError("Config file must contain a key-value object at the root")


def read_config_file(file_path: str | Path | None) -> dict[str, Any]:
    """Read a JSON or YAML config file when provided, otherwise return an empty mapping."""
    if not file_path:
        LOGGER.info("No config file path provided")
        return {}

    path = Path(file_path)
    if not path.exists():
        LOGGER.error("Config file not found: %s", file_path)
        raise FileNotFoundError(f"Config file not found: {file_path}")

    suffix = path.suffix.lower()
    content = path.read_text(encoding="utf-8")

    if suffix == ".json":
        raw_data = json.loads(content)
    elif suffix in {".yaml", ".yml"}:
        raw_data = yaml.safe_load(content)
    else:
        raise ValueError("Unsupported config format. Use JSON (.json) or YAML (.yaml/.yml).")

    LOGGER.info("Loaded %s config from %s", suffix.lstrip("."), file_path)
    return _validate_mapping_root(raw_data)


def _file_section(file_path: str | Path | None, section: str | None) -> dict[str, Any]:
    data = read_config_file(file_path)
    if section is None:
        return data
    return _validate_mapping_root(data.get(section) or {})


def _not_none_values(values: dict[str, Any] | None) -> dict[str, Any]:
    """Drop keys with None values to avoid overriding previous layers."""
    if not values:
        return {}
    return {key: value for key, value in values.items() if value is not None}


def _merge_config_layers(layers: list[dict[str, Any]]) -> dict[str, Any]:
    """Merge config dictionaries in order where last layer wins."""
    merged: dict[str, Any] = {}
    for layer in layers:
        merged.update(layer)
    LOGGER.debug("Merged %s config layers", len(layers))
    return merged


def load_connection_config(
    config: dict[str, Any] | None = None,
    *,
    file_path: str | Path | None = None,
    section: str | None = None,
    env_prefix: str | None = None,
    overrides: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Resolve final config from file, env, config, and non-null overrides (last layer wins)."""
    LOGGER.info(
        "Loading connection config with env_prefix=%s, file_path=%s, section=%s",
        env_prefix,
        file_path,
        section,
    )
    env_config = _read_prefixed_env(env_prefix) if env_prefix else {}
    merged = _merge_config_layers(
        [
            _file_section(file_path, section),
            env_config,
            config or {},
            _not_none_values(overrides),
        ]
    )

    LOGGER.info("Connection config resolved: %s", redact_config(merged))
    return merged
