"""
Run status logging for bronze loads.

Emits events in a fixed order: header, one block per entry, then a footer
or an error block. When disabled nothing is emitted; the orchestrator's
control flow never depends on it.
"""

import traceback
from datetime import datetime
from pathlib import Path

from bronzeload.config.settings import LoadEntry
from bronzeload.etl.context import EntryResult, RunContext
from bronzeload.utils.logging import get_logger

log = get_logger(__name__)


def error_location(error: BaseException) -> str | None:
    """
    Locate where an error was raised.

    Follows the cause chain to the originating exception and returns its
    innermost traceback frame as ``file:line (function)``.
    """
    origin = error
    while origin.__cause__ is not None:
        origin = origin.__cause__
    frames = traceback.extract_tb(origin.__traceback__)
    if not frames:
        return None
    frame = frames[-1]
    return f"{frame.filename}:{frame.lineno} ({frame.name})"


def _timestamp(value: datetime | None) -> str | None:
    return value.isoformat(sep=" ", timespec="seconds") if value else None


class RunLogger:
    """Toggle-controlled status output for one orchestrator run."""

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled

    def batch_started(self, context: RunContext) -> None:
        if not self.enabled:
            return
        log.info(
            "Loading bronze layer",
            start_time=_timestamp(context.batch_start),
            base_path=str(context.base_path),
        )

    def truncating(self, entry: LoadEntry) -> None:
        if self.enabled:
            log.info("Truncating table", table=entry.qualified_name)

    def loading(self, entry: LoadEntry, source_path: Path) -> None:
        if self.enabled:
            log.info(
                "Loading data", table=entry.qualified_name, path=str(source_path)
            )

    def validation_failed(self, entry: LoadEntry, error: BaseException) -> None:
        if self.enabled:
            log.warning(
                "Row count validation failed",
                table=entry.qualified_name,
                error=str(error),
            )

    def entry_finished(self, result: EntryResult) -> None:
        """Emit the duration and, when validated, the row count of an entry."""
        if not self.enabled:
            return
        table = result.entry.qualified_name
        log.info(
            "Load duration",
            table=table,
            seconds=round(result.duration_seconds, 3),
            rejected=result.rows_rejected,
        )
        if result.row_count is not None:
            log.info("Rows loaded", table=table, rows=result.row_count)

    def batch_completed(self, context: RunContext) -> None:
        if not self.enabled:
            return
        log.info(
            "Bronze layer loading completed",
            end_time=_timestamp(context.batch_end),
            total_seconds=round(context.elapsed_seconds(), 3),
        )

    def batch_failed(self, context: RunContext, error: BaseException) -> None:
        """
        Emit the error block of a failed run.

        Args:
            context: Run context; current_entry names the failing table.
            error: The fatal error about to be re-raised.
        """
        if not self.enabled:
            return
        entry = context.current_entry
        log.error(
            "Bronze layer loading failed",
            error_type=type(error).__name__,
            message=str(error),
            location=error_location(error),
            failed_table=entry.qualified_name if entry is not None else None,
            batch_seconds=round(context.elapsed_seconds(), 3),
        )
