"""
Table loader: reset one staging table and bulk-load one source file into it.

Records are read as raw text with pandas and positioned against the
destination's columns; type conversion happens in the destination.
Malformed records (wrong number of fields) and records that fail type
conversion both count against the policy's error tolerance.
"""

from dataclasses import dataclass
from pathlib import Path

import pandas as pd

from bronzeload.config.settings import LoadEntry, LoadPolicy
from bronzeload.exceptions import DestinationUnavailable, LoadFailure
from bronzeload.ingestion.destination import Destination
from bronzeload.utils.logging import get_logger

log = get_logger(__name__)

# Extra column that catches the fields of overlong records
_OVERFLOW = "overflow"


@dataclass(frozen=True)
class BulkLoadOptions:
    """Per-entry bulk ingest settings."""

    first_row: int
    field_delimiter: str
    table_lock: bool
    max_errors: int

    @classmethod
    def for_entry(cls, entry: LoadEntry, policy: LoadPolicy) -> "BulkLoadOptions":
        """Derive ingest settings from an entry and the load policy."""
        return cls(
            first_row=entry.first_row,
            field_delimiter=entry.field_delimiter,
            table_lock=policy.table_lock,
            max_errors=policy.max_errors,
        )


@dataclass
class LoadOutcome:
    """Result of ingesting one source file."""

    rows_loaded: int
    rows_rejected: int


class TableLoader:
    """
    Loads source files into staging tables.

    Not safe to run concurrently against the same destination table:
    truncate and load of two callers would interleave.
    """

    def __init__(self, destination: Destination, policy: LoadPolicy | None = None) -> None:
        """
        Initialize table loader.

        Args:
            destination: Staging table store.
            policy: Error tolerance and lock settings.
        """
        self.destination = destination
        self.policy = policy or LoadPolicy()

    def load(self, entry: LoadEntry, file_path: Path) -> LoadOutcome:
        """Reset the entry's destination, then ingest the file into it."""
        self.reset(entry)
        return self.ingest(entry, file_path)

    def reset(self, entry: LoadEntry) -> None:
        """
        Remove all rows from the entry's destination table.

        Raises:
            DestinationUnavailable: If the table is missing or cannot be truncated.
        """
        try:
            self.destination.truncate(entry.destination_schema, entry.destination_table)
        except DestinationUnavailable as e:
            e.entry = entry
            raise
        log.debug("Truncated table", table=entry.qualified_name)

    def ingest(self, entry: LoadEntry, file_path: Path) -> LoadOutcome:
        """
        Bulk-load a source file into the entry's (empty) destination.

        Args:
            entry: Load entry being processed.
            file_path: Resolved source file.

        Returns:
            Counts of loaded and rejected records.

        Raises:
            DestinationUnavailable: If the destination disappears mid-load.
            LoadFailure: If the file is missing or unreadable, too many records
                are rejected, or the insert fails.
        """
        options = BulkLoadOptions.for_entry(entry, self.policy)
        schema, table = entry.destination_schema, entry.destination_table

        try:
            columns = self.destination.columns(schema, table)
        except DestinationUnavailable as e:
            e.entry = entry
            raise

        try:
            records, malformed = self._read_source(file_path, options, len(columns))
            if malformed > options.max_errors:
                msg = (
                    f"{malformed} malformed records "
                    f"(tolerated: {options.max_errors})"
                )
                raise ValueError(msg)

            unconvertible = self.destination.insert_records(
                schema,
                table,
                records,
                max_rejects=options.max_errors - malformed,
                table_lock=options.table_lock,
            )
        except DestinationUnavailable as e:
            e.entry = entry
            raise
        except Exception as e:
            raise LoadFailure(
                file_path, entry.qualified_name, f"{type(e).__name__}: {e!s}", entry=entry
            ) from e

        outcome = LoadOutcome(
            rows_loaded=len(records) - unconvertible,
            rows_rejected=malformed + unconvertible,
        )
        log.debug(
            "Loaded source file",
            table=entry.qualified_name,
            path=str(file_path),
            rows=outcome.rows_loaded,
            rejected=outcome.rows_rejected,
        )
        return outcome

    @staticmethod
    def _read_source(
        file_path: Path, options: BulkLoadOptions, width: int
    ) -> tuple[pd.DataFrame, int]:
        """
        Read a delimited file as text records of a fixed width.

        Returns:
            Well-formed records (empty fields as NA) and the number of
            malformed records that were dropped.
        """
        if not file_path.is_file():
            msg = f"Source file not found: {file_path}"
            raise FileNotFoundError(msg)

        names = [f"c{i}" for i in range(width)]
        try:
            df = pd.read_csv(
                file_path,
                sep=options.field_delimiter,
                header=None,
                names=[*names, _OVERFLOW],
                index_col=False,
                skiprows=options.first_row - 1,
                dtype=object,
                keep_default_na=False,
                engine="python",
                encoding="utf-8",
            )
        except pd.errors.EmptyDataError:
            df = pd.DataFrame(columns=[*names, _OVERFLOW], dtype=object)

        # Short records are padded with missing values; empty fields stay "".
        # Fields past the last column are cut off, so any text in the
        # overflow column marks a record that was too long.
        malformed = df[names].isna().any(axis=1) | df[_OVERFLOW].notna()
        records = df.loc[~malformed, names]
        records = records.where(records.ne(""), None).astype("string")

        return records.reset_index(drop=True), int(malformed.sum())
