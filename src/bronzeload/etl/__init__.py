"""
Bronze load orchestration.

Runs the configured table loads in order, with timing, logging and
error capture.
"""

from bronzeload.etl.context import BatchResult, BatchState, EntryResult, RunContext
from bronzeload.etl.pipeline import BatchOrchestrator, load_bronze
from bronzeload.etl.reporter import ConsoleReporter
from bronzeload.etl.run_log import RunLogger

__all__ = [
    "BatchOrchestrator",
    "BatchResult",
    "BatchState",
    "ConsoleReporter",
    "EntryResult",
    "RunContext",
    "RunLogger",
    "load_bronze",
]
