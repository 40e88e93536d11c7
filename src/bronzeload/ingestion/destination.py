"""
Staging database access.

The loader talks to its destination through the Destination interface;
DuckDBDestination is the implementation used in deployment and tests.
Identifiers are always quoted and catalog lookups use bound parameters,
so entry values never become executable SQL.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

import duckdb
import pandas as pd

from bronzeload.config.settings import DestinationConfig
from bronzeload.exceptions import DestinationUnavailable
from bronzeload.utils.logging import get_logger

log = get_logger(__name__)

_INCOMING_VIEW = "bronze_incoming_records"


@dataclass(frozen=True)
class ColumnSpec:
    """A destination column, in table order."""

    name: str
    data_type: str


class RejectLimitExceeded(Exception):
    """More records failed type conversion than the load tolerates."""

    def __init__(self, rejected: int, limit: int) -> None:
        super().__init__(
            f"{rejected} records could not be converted to the destination "
            f"column types (tolerated: {limit})"
        )
        self.rejected = rejected
        self.limit = limit


class Destination(ABC):
    """
    Abstract staging table store.

    Methods that need an existing table raise DestinationUnavailable when
    the table is missing or cannot be accessed.
    """

    @abstractmethod
    def columns(self, schema: str, table: str) -> list[ColumnSpec]:
        """Return the table's columns in ordinal order."""
        ...

    @abstractmethod
    def truncate(self, schema: str, table: str) -> None:
        """Remove all rows from the table."""
        ...

    @abstractmethod
    def insert_records(
        self,
        schema: str,
        table: str,
        records: pd.DataFrame,
        *,
        max_rejects: int,
        table_lock: bool,
    ) -> int:
        """
        Insert text records positionally, converting to the column types.

        Records that fail conversion are skipped. If more than max_rejects
        fail, nothing is inserted and RejectLimitExceeded is raised.

        Returns:
            Number of records skipped.
        """
        ...

    @abstractmethod
    def count_rows(self, schema: str, table: str) -> int:
        """Return the current row count of the table."""
        ...


def quote_identifier(identifier: str) -> str:
    """Quote a SQL identifier, escaping embedded quotes."""
    return '"' + identifier.replace('"', '""') + '"'


class DuckDBDestination(Destination):
    """Destination backed by a DuckDB connection."""

    def __init__(self, connection: duckdb.DuckDBPyConnection) -> None:
        """
        Initialize destination.

        Args:
            connection: Open DuckDB connection; the caller owns its lifetime
                unless close() is called.
        """
        self.connection = connection

    @staticmethod
    def _qualified(schema: str, table: str) -> str:
        return f"{quote_identifier(schema)}.{quote_identifier(table)}"

    def columns(self, schema: str, table: str) -> list[ColumnSpec]:
        try:
            rows = self.connection.execute(
                """
                SELECT column_name, data_type
                FROM information_schema.columns
                WHERE table_catalog = current_database()
                  AND table_schema = ?
                  AND table_name = ?
                ORDER BY ordinal_position
                """,
                [schema, table],
            ).fetchall()
        except duckdb.Error as e:
            raise DestinationUnavailable(f"{schema}.{table}", str(e)) from e

        if not rows:
            raise DestinationUnavailable(f"{schema}.{table}", "table does not exist")
        return [ColumnSpec(name=name, data_type=data_type) for name, data_type in rows]

    def truncate(self, schema: str, table: str) -> None:
        self.columns(schema, table)
        try:
            self.connection.execute(f"TRUNCATE {self._qualified(schema, table)}")
        except duckdb.Error as e:
            raise DestinationUnavailable(f"{schema}.{table}", str(e)) from e

    def insert_records(
        self,
        schema: str,
        table: str,
        records: pd.DataFrame,
        *,
        max_rejects: int,
        table_lock: bool,
    ) -> int:
        columns = self.columns(schema, table)
        if len(records.columns) != len(columns):
            msg = (
                f"{len(records.columns)} fields per record, "
                f"destination has {len(columns)} columns"
            )
            raise ValueError(msg)
        if records.empty:
            return 0

        sources = [quote_identifier(str(c)) for c in records.columns]
        casts = [
            f"TRY_CAST({src} AS {col.data_type})" for src, col in zip(sources, columns)
        ]
        rejected_when = " OR ".join(
            f"({src} IS NOT NULL AND {cast} IS NULL)"
            for src, cast in zip(sources, casts)
        )

        self.connection.register(_INCOMING_VIEW, records)
        try:
            if table_lock:
                self.connection.begin()
            try:
                rejected = self.connection.execute(
                    f"SELECT count(*) FROM {_INCOMING_VIEW} WHERE {rejected_when}"
                ).fetchone()[0]
                if rejected > max_rejects:
                    raise RejectLimitExceeded(rejected, max_rejects)

                self.connection.execute(
                    f"INSERT INTO {self._qualified(schema, table)} "
                    f"SELECT {', '.join(casts)} FROM {_INCOMING_VIEW} "
                    f"WHERE NOT ({rejected_when})"
                )
                if table_lock:
                    self.connection.commit()
            except Exception:
                if table_lock:
                    self.connection.rollback()
                raise
        finally:
            self.connection.unregister(_INCOMING_VIEW)

        log.debug(
            "Inserted records",
            table=f"{schema}.{table}",
            records=len(records) - rejected,
            rejected=rejected,
        )
        return int(rejected)

    def count_rows(self, schema: str, table: str) -> int:
        self.columns(schema, table)
        row = self.connection.execute(
            f"SELECT count(*) FROM {self._qualified(schema, table)}"
        ).fetchone()
        return int(row[0])

    def close(self) -> None:
        """Close the underlying connection."""
        self.connection.close()


def connect_destination(config: DestinationConfig) -> DuckDBDestination:
    """
    Open the staging database.

    Args:
        config: Destination configuration.

    Returns:
        Destination wrapping a new DuckDB connection.
    """
    log.debug("Connecting to staging database", database=config.database)
    connection = duckdb.connect(config.database, read_only=config.read_only)
    return DuckDBDestination(connection)
