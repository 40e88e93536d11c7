"""Tests for post-load row count validation."""

import duckdb
import pytest

from bronzeload.config.settings import LoadEntry
from bronzeload.exceptions import DestinationUnavailable, ValidationFailure
from bronzeload.ingestion.destination import DuckDBDestination
from bronzeload.validation.core import Validator


class FailingCountDestination(DuckDBDestination):
    """Destination whose row count query always fails."""

    def count_rows(self, schema: str, table: str) -> int:
        raise RuntimeError("count query timed out")


class TestValidator:
    """Tests for Validator."""

    def test_count(
        self,
        destination: DuckDBDestination,
        connection: duckdb.DuckDBPyConnection,
        t2_entry: LoadEntry,
    ) -> None:
        """Test counting a populated table."""
        connection.execute("INSERT INTO bronze.t2 VALUES ('a', 'b'), ('c', 'd')")
        assert Validator(destination).count(t2_entry) == 2

    def test_count_empty_table(
        self, destination: DuckDBDestination, t2_entry: LoadEntry
    ) -> None:
        """Test counting an empty table."""
        assert Validator(destination).count(t2_entry) == 0

    def test_query_error_is_non_fatal(
        self, connection: duckdb.DuckDBPyConnection, t2_entry: LoadEntry
    ) -> None:
        """Test that a failing count becomes a ValidationFailure."""
        validator = Validator(FailingCountDestination(connection))

        with pytest.raises(ValidationFailure, match="count query timed out") as exc_info:
            validator.count(t2_entry)

        error = exc_info.value
        assert error.fatal is False
        assert error.entry == t2_entry
        assert error.destination == "bronze.t2"

    def test_missing_table_is_fatal(
        self, destination: DuckDBDestination, t2_entry: LoadEntry
    ) -> None:
        """Test that a missing destination is not downgraded."""
        entry = t2_entry.model_copy(update={"destination_table": "gone"})

        with pytest.raises(DestinationUnavailable) as exc_info:
            Validator(destination).count(entry)

        assert exc_info.value.fatal is True
        assert exc_info.value.entry == entry
