"""
Bronze load orchestration.

Drives the registry's active entries, in load order, through
locate → reset → ingest → (validate) → log, one entry at a time.
A fatal error stops the batch: it is logged with its context and
re-raised unchanged. Failed row counts are logged and skipped.
"""

import time
from datetime import datetime
from pathlib import Path

from bronzeload.config.registry import LoadConfigRegistry
from bronzeload.config.settings import DEFAULT_BASE_PATH, LoadEntry, LoadPolicy
from bronzeload.etl.context import BatchResult, BatchState, EntryResult, RunContext
from bronzeload.etl.run_log import RunLogger
from bronzeload.exceptions import ValidationFailure
from bronzeload.ingestion.destination import Destination
from bronzeload.ingestion.loader import TableLoader
from bronzeload.ingestion.locator import locate
from bronzeload.utils.logging import get_logger, log_context
from bronzeload.validation.core import Validator

log = get_logger(__name__)


class BatchOrchestrator:
    """
    Sequential bronze layer loader.

    Entries never overlap: an entry's reset, load and validation finish
    before the next entry starts. Running two orchestrators against the
    same destination tables is unsafe; callers serialize runs.
    """

    def __init__(
        self,
        destination: Destination,
        registry: LoadConfigRegistry | None = None,
        policy: LoadPolicy | None = None,
    ) -> None:
        """
        Initialize orchestrator.

        Args:
            destination: Staging table store.
            registry: Entries to load; None builds the deployment registry
                fresh for every run.
            policy: Bulk ingest policy.
        """
        self.destination = destination
        self.registry = registry
        self.policy = policy or LoadPolicy()
        self.loader = TableLoader(destination, self.policy)
        self.validator = Validator(destination)
        self.state = BatchState.IDLE

    def run(
        self,
        base_path: Path | str = DEFAULT_BASE_PATH,
        *,
        logging_enabled: bool = True,
        parallel_load: bool = False,
        validation_enabled: bool = False,
    ) -> BatchResult:
        """
        Load every active entry.

        Args:
            base_path: Root directory of the source files.
            logging_enabled: Emit run status events.
            parallel_load: Reserved; accepted but entries always load sequentially.
            validation_enabled: Count destination rows after each load.

        Returns:
            Per-entry results and batch timing.

        Raises:
            DestinationUnavailable: A destination is missing or inaccessible.
            LoadFailure: A source file could not be loaded.
        """
        self.state = BatchState.INITIALIZING
        context = RunContext(
            base_path=Path(base_path),
            logging_enabled=logging_enabled,
            validation_enabled=validation_enabled,
            parallel_load=parallel_load,
        )
        run_log = RunLogger(logging_enabled)
        registry = self.registry if self.registry is not None else LoadConfigRegistry()
        results: list[EntryResult] = []

        if parallel_load:
            log.debug("Parallel loading is reserved; loading sequentially")

        try:
            run_log.batch_started(context)
            with registry.open_cursor() as cursor:
                for entry in cursor:
                    context.current_entry = entry
                    results.append(self._process(entry, context, run_log))
        except Exception as e:
            self.state = BatchState.FAILED
            run_log.batch_failed(context, e)
            raise

        context.batch_end = datetime.now()
        context.current_entry = None
        self.state = BatchState.COMPLETED
        run_log.batch_completed(context)

        return BatchResult(
            entries=results,
            batch_start=context.batch_start,
            batch_end=context.batch_end,
        )

    def _process(
        self, entry: LoadEntry, context: RunContext, run_log: RunLogger
    ) -> EntryResult:
        """Reset, load and optionally validate one entry."""
        self.state = BatchState.PROCESSING
        started = time.perf_counter()

        with log_context(table=entry.qualified_name):
            source_path = locate(entry, context.base_path)

            run_log.truncating(entry)
            self.loader.reset(entry)

            run_log.loading(entry, source_path)
            outcome = self.loader.ingest(entry, source_path)

            row_count: int | None = None
            validation_error: str | None = None
            if context.validation_enabled:
                self.state = BatchState.VALIDATING
                try:
                    row_count = self.validator.count(entry)
                except ValidationFailure as e:
                    validation_error = str(e)
                    run_log.validation_failed(entry, e)

        result = EntryResult(
            entry=entry,
            source_path=source_path,
            duration_seconds=time.perf_counter() - started,
            rows_loaded=outcome.rows_loaded,
            rows_rejected=outcome.rows_rejected,
            row_count=row_count,
            validation_error=validation_error,
        )
        run_log.entry_finished(result)
        return result


def load_bronze(
    destination: Destination,
    base_path: Path | str = DEFAULT_BASE_PATH,
    logging_enabled: bool = True,
    parallel_load: bool = False,
    validation_enabled: bool = False,
    *,
    registry: LoadConfigRegistry | None = None,
    policy: LoadPolicy | None = None,
) -> BatchResult:
    """
    Load the bronze layer.

    Convenience function for the common use case.

    Args:
        destination: Staging table store.
        base_path: Root directory of the source files.
        logging_enabled: Emit run status events.
        parallel_load: Reserved, no effect.
        validation_enabled: Count destination rows after each load.
        registry: Entries to load (deployment tables by default).
        policy: Bulk ingest policy.

    Returns:
        BatchResult of the completed run. Fatal errors propagate unchanged.
    """
    orchestrator = BatchOrchestrator(destination, registry=registry, policy=policy)
    return orchestrator.run(
        base_path,
        logging_enabled=logging_enabled,
        parallel_load=parallel_load,
        validation_enabled=validation_enabled,
    )
