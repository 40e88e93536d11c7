"""
Configuration loading utilities.

Supports environment variable interpolation and config inheritance.
A config file may be empty: every setting has a default, and without
entries the built-in deployment tables are loaded.
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml

from bronzeload.config.registry import load_registry_table
from bronzeload.config.settings import (
    DEFAULT_BASE_PATH,
    DEFAULT_MAX_ERRORS,
    DEFAULT_TABLE_LOCK,
    BronzeConfig,
    DestinationConfig,
    LoadEntry,
    LoadPolicy,
)


def _interpolate_env_vars(value: str) -> str:
    """
    Interpolate environment variables in string values.

    Supports ${VAR} and ${VAR:default} syntax.
    """
    pattern = r"\$\{([^}:]+)(?::([^}]*))?\}"

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default = match.group(2)
        return os.environ.get(var_name, default if default is not None else "")

    return re.sub(pattern, replacer, value)


def _process_config_values(obj: Any) -> Any:
    """Recursively process config values for env var interpolation."""
    if isinstance(obj, str):
        return _interpolate_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _process_config_values(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_process_config_values(item) for item in obj]
    return obj


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _parse_bool(value: Any, name: str) -> bool:
    """Parse a boolean that may arrive as text after env interpolation."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in {"1", "true", "yes", "on"}:
            return True
        if text in {"0", "false", "no", "off"}:
            return False
    msg = f"Cannot parse boolean '{name}' from {value!r}"
    raise ValueError(msg)


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file and process environment variables."""
    with path.open(encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return _process_config_values(data) if data else {}


def _build_entries(
    merged: dict[str, Any], config_dir: Path
) -> tuple[LoadEntry, ...] | None:
    """Build registry entries from inline definitions or a registry table."""
    inline = merged.get("entries")
    entries_file = merged.get("entries_file")

    if inline and entries_file:
        msg = "Config must specify either 'entries' or 'entries_file', not both"
        raise ValueError(msg)

    if entries_file:
        table_path = Path(entries_file)
        if not table_path.is_absolute():
            table_path = config_dir / table_path
        return tuple(load_registry_table(table_path))

    if inline:
        return tuple(
            LoadEntry(
                load_order=item["load_order"],
                destination_schema=item.get("destination_schema", "bronze"),
                destination_table=item["destination_table"],
                source_group=item["source_group"],
                file_name=item["file_name"],
                has_header=_parse_bool(item.get("has_header", True), "has_header"),
                field_delimiter=item.get("field_delimiter", ","),
                is_active=_parse_bool(item.get("is_active", True), "is_active"),
            )
            for item in inline
        )

    return None


def load_config(
    config_path: Path,
    base_config: Path | None = None,
) -> BronzeConfig:
    """
    Load bronze load configuration from YAML file(s).

    Recognised keys (all optional):
        - base_path: root directory of the source files
        - logging_enabled, validation_enabled, parallel_load: run toggles
        - destination.database, destination.read_only
        - policy.max_errors, policy.table_lock
        - entries: list of load entry mappings, or
        - entries_file: CSV registry table (relative to the config file)

    Args:
        config_path: Path to the main configuration file.
        base_config: Optional path to base configuration for inheritance.

    Returns:
        Fully validated BronzeConfig instance.
    """
    # Load base config if provided
    if base_config is not None:
        base_data = load_yaml(base_config)
    else:
        # Try to find base.yaml in same directory
        potential_base = config_path.parent / "base.yaml"
        base_data = (
            load_yaml(potential_base)
            if potential_base.exists() and potential_base != config_path
            else {}
        )

    # Load main config
    main_data = load_yaml(config_path)

    # Merge configs (main overrides base)
    merged = _deep_merge(base_data, main_data)

    destination_data = merged.get("destination", {})
    destination = DestinationConfig(
        database=str(destination_data.get("database", ":memory:")),
        read_only=_parse_bool(destination_data.get("read_only", False), "read_only"),
    )

    policy_data = merged.get("policy", {})
    policy = LoadPolicy(
        max_errors=int(policy_data.get("max_errors", DEFAULT_MAX_ERRORS)),
        table_lock=_parse_bool(
            policy_data.get("table_lock", DEFAULT_TABLE_LOCK), "table_lock"
        ),
    )

    return BronzeConfig(
        base_path=Path(merged.get("base_path") or DEFAULT_BASE_PATH),
        logging_enabled=_parse_bool(
            merged.get("logging_enabled", True), "logging_enabled"
        ),
        parallel_load=_parse_bool(merged.get("parallel_load", False), "parallel_load"),
        validation_enabled=_parse_bool(
            merged.get("validation_enabled", False), "validation_enabled"
        ),
        destination=destination,
        policy=policy,
        entries=_build_entries(merged, config_path.parent),
    )
