"""
Configuration management with typed Pydantic models.

Provides the load entry model, the registry of entries for a run and
YAML configuration loading.
"""

from bronzeload.config.loader import load_config
from bronzeload.config.registry import (
    DEFAULT_ENTRIES,
    EntryCursor,
    LoadConfigRegistry,
    load_registry_table,
)
from bronzeload.config.settings import (
    DEFAULT_BASE_PATH,
    BronzeConfig,
    DestinationConfig,
    LoadEntry,
    LoadPolicy,
)

__all__ = [
    "DEFAULT_BASE_PATH",
    "DEFAULT_ENTRIES",
    "BronzeConfig",
    "DestinationConfig",
    "EntryCursor",
    "LoadConfigRegistry",
    "LoadEntry",
    "LoadPolicy",
    "load_config",
    "load_registry_table",
]
