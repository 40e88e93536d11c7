"""
Typed configuration models using Pydantic.

All configuration is defined here with explicit typing and validation.
Load entries, policy constants and run toggles never live in processing code.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_BASE_PATH = Path("/data/pj/datawarehouse/data/datasets")

# Bulk ingest policy defaults
DEFAULT_MAX_ERRORS = 10
DEFAULT_TABLE_LOCK = True


class LoadEntry(BaseModel):
    """One row of ingestion configuration: a source file and its staging table."""

    model_config = ConfigDict(frozen=True)

    load_order: int = Field(description="Processing sequence (ascending)")
    destination_schema: str = Field(min_length=1, description="Target schema")
    destination_table: str = Field(min_length=1, description="Target table")
    source_group: str = Field(
        min_length=1, description="Source system name, used as subdirectory"
    )
    file_name: str = Field(min_length=1, description="File within the source directory")
    has_header: bool = Field(default=True, description="Skip the first record")
    field_delimiter: str = Field(default=",", description="Single-character separator")
    is_active: bool = Field(default=True, description="Inactive entries are skipped")

    @field_validator("field_delimiter")
    @classmethod
    def validate_delimiter(cls, v: str) -> str:
        """Ensure the delimiter is exactly one character."""
        if len(v) != 1:
            msg = f"field_delimiter must be exactly one character, got: {v!r}"
            raise ValueError(msg)
        return v

    @property
    def qualified_name(self) -> str:
        """Fully-qualified destination (schema.table)."""
        return f"{self.destination_schema}.{self.destination_table}"

    @property
    def first_row(self) -> int:
        """1-based record where ingestion starts."""
        return 2 if self.has_header else 1


class LoadPolicy(BaseModel):
    """Bulk ingest policy constants shared by all entries."""

    model_config = ConfigDict(frozen=True)

    max_errors: int = Field(
        default=DEFAULT_MAX_ERRORS,
        ge=0,
        description="Rejected records tolerated before a load aborts",
    )
    table_lock: bool = Field(
        default=DEFAULT_TABLE_LOCK,
        description="Hold the destination in one exclusive transaction while loading",
    )


class DestinationConfig(BaseModel):
    """Staging database connection configuration."""

    model_config = ConfigDict(frozen=True)

    database: str = Field(
        default=":memory:",
        description="DuckDB database file, or ':memory:'",
    )
    read_only: bool = Field(default=False)


class BronzeConfig(BaseModel):
    """Complete bronze load configuration.

    Toggles mirror the keyword arguments of load_bronze(); the CLI lets
    command line flags override them.
    """

    model_config = ConfigDict(frozen=True)

    base_path: Path = Field(
        default=DEFAULT_BASE_PATH,
        description="Root directory under which source files are resolved",
    )
    logging_enabled: bool = Field(default=True)
    # Reserved: accepted and recorded, loads always run sequentially
    parallel_load: bool = Field(default=False)
    validation_enabled: bool = Field(default=False)

    destination: DestinationConfig = Field(default_factory=DestinationConfig)
    policy: LoadPolicy = Field(default_factory=LoadPolicy)
    entries: tuple[LoadEntry, ...] | None = Field(
        default=None,
        description="Registry definition; None uses the built-in deployment tables",
    )
