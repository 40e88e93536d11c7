"""Pytest configuration and shared fixtures."""

from collections.abc import Callable, Iterator
from pathlib import Path

import duckdb
import pytest

from bronzeload.config.registry import EntryCursor, LoadConfigRegistry
from bronzeload.config.settings import LoadEntry
from bronzeload.ingestion.destination import DuckDBDestination


class TrackingCursor(EntryCursor):
    """Cursor that records every release in a shared list."""

    def __init__(
        self, entries: tuple[LoadEntry, ...], released: list[EntryCursor]
    ) -> None:
        super().__init__(entries)
        self._released = released

    def _release(self) -> None:
        self._released.append(self)


class TrackingRegistry(LoadConfigRegistry):
    """Registry that records the cursors it opens."""

    def __init__(
        self,
        entries: list[LoadEntry],
        opened: list[EntryCursor],
        released: list[EntryCursor],
    ) -> None:
        super().__init__(entries)
        self._opened = opened
        self._released = released

    def open_cursor(self) -> EntryCursor:
        cursor = TrackingCursor(self.active_entries(), self._released)
        self._opened.append(cursor)
        return cursor


def row_count(connection: duckdb.DuckDBPyConnection, table: str) -> int:
    """Count rows of a bronze table."""
    return connection.execute(f"SELECT count(*) FROM bronze.{table}").fetchone()[0]


@pytest.fixture
def connection() -> Iterator[duckdb.DuckDBPyConnection]:
    """In-memory staging database with the test bronze tables."""
    con = duckdb.connect()
    con.execute("CREATE SCHEMA bronze")
    con.execute("CREATE TABLE bronze.t1 (id INTEGER, name VARCHAR, amount DECIMAL(10,2))")
    con.execute("CREATE TABLE bronze.t2 (code VARCHAR, label VARCHAR)")
    con.execute("CREATE TABLE bronze.t3 (code VARCHAR, label VARCHAR)")
    yield con
    con.close()


@pytest.fixture
def destination(connection: duckdb.DuckDBPyConnection) -> DuckDBDestination:
    """Destination over the in-memory staging database."""
    return DuckDBDestination(connection)


@pytest.fixture
def source_root(tmp_path: Path) -> Path:
    """
    Source tree with grpA/a.csv (header + 3 records, comma delimited)
    and grpA/b.csv (4 records, pipe delimited, no header).
    """
    root = tmp_path / "datasets"
    group = root / "grpA"
    group.mkdir(parents=True)
    (group / "a.csv").write_text(
        "id,name,amount\n1,Alice,10.50\n2,Bob,\n3,Carol,7\n", encoding="utf-8"
    )
    (group / "b.csv").write_text(
        "A1|first\nA2|second\nA3|third\nA4|fourth\n", encoding="utf-8"
    )
    return root


@pytest.fixture
def t1_entry() -> LoadEntry:
    """Entry loading grpA/a.csv into bronze.t1."""
    return LoadEntry(
        load_order=1,
        destination_schema="bronze",
        destination_table="t1",
        source_group="grpA",
        file_name="a.csv",
        has_header=True,
        field_delimiter=",",
    )


@pytest.fixture
def t2_entry() -> LoadEntry:
    """Entry loading grpA/b.csv into bronze.t2."""
    return LoadEntry(
        load_order=2,
        destination_schema="bronze",
        destination_table="t2",
        source_group="grpA",
        file_name="b.csv",
        has_header=False,
        field_delimiter="|",
    )


@pytest.fixture
def opened_cursors() -> list[EntryCursor]:
    """Cursors opened by registries from make_registry, in order."""
    return []


@pytest.fixture
def released_cursors() -> list[EntryCursor]:
    """One item per cursor release, in order."""
    return []


@pytest.fixture
def make_registry(
    opened_cursors: list[EntryCursor], released_cursors: list[EntryCursor]
) -> Callable[[list[LoadEntry]], LoadConfigRegistry]:
    """Factory for registries that record their cursors."""

    def factory(entries: list[LoadEntry]) -> LoadConfigRegistry:
        return TrackingRegistry(entries, opened_cursors, released_cursors)

    return factory


@pytest.fixture
def scenario_registry(
    make_registry: Callable[[list[LoadEntry]], LoadConfigRegistry],
    t1_entry: LoadEntry,
    t2_entry: LoadEntry,
) -> LoadConfigRegistry:
    """Two-table registry: t1 then t2."""
    return make_registry([t1_entry, t2_entry])


@pytest.fixture
def count_rows(connection: duckdb.DuckDBPyConnection) -> Callable[[str], int]:
    """Row counter for bronze tables of the test database."""
    return lambda table: row_count(connection, table)
