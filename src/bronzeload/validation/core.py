"""
Post-load row count validation.

Validation is diagnostic: a count that cannot be taken is reported as a
ValidationFailure, which the orchestrator logs and moves past. Only a
destination that is gone or unreadable is fatal.
"""

from bronzeload.config.settings import LoadEntry
from bronzeload.exceptions import DestinationUnavailable, ValidationFailure
from bronzeload.ingestion.destination import Destination
from bronzeload.utils.logging import get_logger

log = get_logger(__name__)


class Validator:
    """Counts destination rows after a load."""

    def __init__(self, destination: Destination) -> None:
        self.destination = destination

    def count(self, entry: LoadEntry) -> int:
        """
        Count the rows currently in the entry's destination.

        Args:
            entry: Load entry whose destination is counted.

        Returns:
            Row count.

        Raises:
            DestinationUnavailable: If the destination is missing or unreadable.
            ValidationFailure: If the count query fails for any other reason.
        """
        try:
            rows = self.destination.count_rows(
                entry.destination_schema, entry.destination_table
            )
        except DestinationUnavailable as e:
            e.entry = entry
            raise
        except Exception as e:
            raise ValidationFailure(
                entry.qualified_name, f"{type(e).__name__}: {e!s}", entry=entry
            ) from e

        log.debug("Counted rows", table=entry.qualified_name, rows=rows)
        return rows
