"""
Ingestion layer: locating source files and bulk-loading them.

All writes to staging tables happen through this module.
"""

from bronzeload.ingestion.destination import (
    ColumnSpec,
    Destination,
    DuckDBDestination,
    connect_destination,
)
from bronzeload.ingestion.loader import BulkLoadOptions, LoadOutcome, TableLoader
from bronzeload.ingestion.locator import locate, resolve_source_path

__all__ = [
    "BulkLoadOptions",
    "ColumnSpec",
    "Destination",
    "DuckDBDestination",
    "LoadOutcome",
    "TableLoader",
    "connect_destination",
    "locate",
    "resolve_source_path",
]
