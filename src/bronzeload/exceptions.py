"""
Error taxonomy for bronze layer loads.

Fatal errors (DestinationUnavailable, LoadFailure) abort the batch and are
re-raised unchanged to the caller. ValidationFailure is non-fatal: the
orchestrator logs it and moves on to the next entry.
"""

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bronzeload.config.settings import LoadEntry


class BronzeLoadError(Exception):
    """Base class for all load errors raised by this package."""

    fatal = True

    def __init__(self, message: str, *, entry: "LoadEntry | None" = None) -> None:
        super().__init__(message)
        self.message = message
        self.entry = entry


class DestinationUnavailable(BronzeLoadError):
    """Destination table is missing, unreadable or cannot be modified."""

    def __init__(
        self,
        destination: str,
        message: str,
        *,
        entry: "LoadEntry | None" = None,
    ) -> None:
        super().__init__(
            f"Destination {destination} unavailable: {message}", entry=entry
        )
        self.destination = destination


class LoadFailure(BronzeLoadError):
    """Bulk ingest of a source file into its destination failed."""

    def __init__(
        self,
        file_path: Path,
        destination: str,
        message: str,
        *,
        entry: "LoadEntry | None" = None,
    ) -> None:
        super().__init__(
            f"Loading {file_path} into {destination} failed: {message}", entry=entry
        )
        self.file_path = file_path
        self.destination = destination


class ValidationFailure(BronzeLoadError):
    """Post-load row count could not be taken."""

    fatal = False

    def __init__(
        self,
        destination: str,
        message: str,
        *,
        entry: "LoadEntry | None" = None,
    ) -> None:
        super().__init__(
            f"Row count for {destination} failed: {message}", entry=entry
        )
        self.destination = destination
