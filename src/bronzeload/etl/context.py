"""
Run-scoped state and results of a bronze load.

A RunContext lives for exactly one orchestrator run and is threaded
through it explicitly; it is what failure reports are built from.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

from bronzeload.config.settings import LoadEntry


class BatchState(str, Enum):
    """Orchestrator lifecycle states."""

    IDLE = "idle"
    INITIALIZING = "initializing"
    PROCESSING = "processing"
    VALIDATING = "validating"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class RunContext:
    """Ephemeral state of one orchestrator run."""

    base_path: Path
    logging_enabled: bool = True
    validation_enabled: bool = False
    parallel_load: bool = False  # reserved, has no effect
    batch_start: datetime = field(default_factory=datetime.now)
    batch_end: datetime | None = None
    current_entry: LoadEntry | None = None

    def elapsed_seconds(self, until: datetime | None = None) -> float:
        """Seconds since batch start (until batch end, if set)."""
        end = until or self.batch_end or datetime.now()
        return (end - self.batch_start).total_seconds()


@dataclass
class EntryResult:
    """
    Outcome of processing one load entry.

    Attributes:
        entry: The processed entry.
        source_path: Resolved source file.
        duration_seconds: Reset + load (+ validation) time.
        rows_loaded: Records inserted by the loader.
        rows_rejected: Records skipped within the error tolerance.
        row_count: Destination row count (validation enabled only).
        validation_error: Warning text if the row count failed.
    """

    entry: LoadEntry
    source_path: Path
    duration_seconds: float
    rows_loaded: int
    rows_rejected: int = 0
    row_count: int | None = None
    validation_error: str | None = None


@dataclass
class BatchResult:
    """Result of a completed bronze load."""

    entries: list[EntryResult]
    batch_start: datetime
    batch_end: datetime

    @property
    def duration_seconds(self) -> float:
        """Total batch duration."""
        return (self.batch_end - self.batch_start).total_seconds()

    @property
    def tables(self) -> list[str]:
        """Qualified destinations, in processing order."""
        return [r.entry.qualified_name for r in self.entries]

    @property
    def validation_warnings(self) -> list[EntryResult]:
        """Entries whose row count could not be taken."""
        return [r for r in self.entries if r.validation_error is not None]
