"""Tests for the command-line interface."""

from io import StringIO
from pathlib import Path

import duckdb
import pytest
from rich.console import Console
from typer.testing import CliRunner

import bronzeload.cli
import bronzeload.utils.logging
from bronzeload.cli import app

runner = CliRunner()

CONFIG_TEMPLATE = """
base_path: {base_path}
validation_enabled: true
destination:
  database: {database}
entries:
  - load_order: 1
    destination_table: t1
    source_group: grpA
    file_name: a.csv
  - load_order: 2
    destination_table: t2
    source_group: grpA
    file_name: b.csv
    has_header: false
    field_delimiter: "|"
"""

REGISTRY_HEADER = (
    "load_order,destination_schema,destination_table,source_group,"
    "file_name,has_header,field_delimiter,is_active\n"
)


@pytest.fixture
def output(monkeypatch: pytest.MonkeyPatch) -> StringIO:
    """Capture console output and keep global logging untouched."""
    buffer = StringIO()
    monkeypatch.setattr(bronzeload.cli, "console", Console(file=buffer, width=200))
    monkeypatch.setattr(
        bronzeload.utils.logging, "configure_logging", lambda **kwargs: None
    )
    return buffer


@pytest.fixture
def database(tmp_path: Path) -> Path:
    """Staging database file with the test bronze tables."""
    path = tmp_path / "staging.duckdb"
    con = duckdb.connect(str(path))
    con.execute("CREATE SCHEMA bronze")
    con.execute("CREATE TABLE bronze.t1 (id INTEGER, name VARCHAR, amount DECIMAL(10,2))")
    con.execute("CREATE TABLE bronze.t2 (code VARCHAR, label VARCHAR)")
    con.close()
    return path


@pytest.fixture
def config_file(tmp_path: Path, source_root: Path, database: Path) -> Path:
    """Run configuration for the test tables."""
    path = tmp_path / "bronze.yaml"
    path.write_text(
        CONFIG_TEMPLATE.format(base_path=source_root, database=database),
        encoding="utf-8",
    )
    return path


class TestRun:
    """Tests for the run command."""

    def test_run_success(
        self, output: StringIO, config_file: Path, database: Path
    ) -> None:
        """Test a complete run against a file database."""
        result = runner.invoke(app, ["run", "--config", str(config_file)])

        assert result.exit_code == 0, result.output
        text = output.getvalue()
        assert "Bronze Load Results" in text
        assert "bronze.t1" in text
        assert "Tables loaded: 2" in text

        con = duckdb.connect(str(database), read_only=True)
        try:
            assert con.execute("SELECT count(*) FROM bronze.t1").fetchone()[0] == 3
            assert con.execute("SELECT count(*) FROM bronze.t2").fetchone()[0] == 4
        finally:
            con.close()

    def test_run_missing_source(
        self, output: StringIO, config_file: Path, source_root: Path
    ) -> None:
        """Test that a fatal load error exits with status 1."""
        (source_root / "grpA" / "b.csv").unlink()

        result = runner.invoke(app, ["run", "--config", str(config_file), "--no-logging"])

        assert result.exit_code == 1
        assert "Bronze load failed" in output.getvalue()

    def test_data_path_override(
        self, output: StringIO, config_file: Path, tmp_path: Path
    ) -> None:
        """Test that --data-path replaces the configured base path."""
        empty = tmp_path / "empty"
        empty.mkdir()

        result = runner.invoke(
            app, ["run", "--config", str(config_file), "--data-path", str(empty)]
        )

        assert result.exit_code == 1
        assert "Bronze load failed" in output.getvalue()

    def test_invalid_config(self, output: StringIO, tmp_path: Path) -> None:
        """Test that an invalid configuration exits with status 1."""
        path = tmp_path / "bad.yaml"
        path.write_text("policy:\n  max_errors: -1\n", encoding="utf-8")

        result = runner.invoke(app, ["run", "--config", str(path)])

        assert result.exit_code == 1
        assert "Invalid configuration" in output.getvalue()


class TestConfigErrors:
    """Tests that configuration errors exit with a message instead of a traceback."""

    def test_duplicate_load_order(self, output: StringIO, tmp_path: Path) -> None:
        """Test that a registry uniqueness error is reported."""
        path = tmp_path / "dup.yaml"
        path.write_text(
            "entries:\n"
            "  - {load_order: 1, destination_table: t1, source_group: g, file_name: a.csv}\n"
            "  - {load_order: 1, destination_table: t2, source_group: g, file_name: b.csv}\n",
            encoding="utf-8",
        )

        result = runner.invoke(app, ["run", "--config", str(path)])

        assert result.exit_code == 1
        assert not isinstance(result.exception, ValueError)
        text = output.getvalue()
        assert "Invalid configuration" in text
        assert "Duplicate load_order" in text

    def test_missing_entries_file(self, output: StringIO, tmp_path: Path) -> None:
        """Test that a missing registry table is reported."""
        path = tmp_path / "bronze.yaml"
        path.write_text("entries_file: missing.csv\n", encoding="utf-8")

        result = runner.invoke(app, ["run", "--config", str(path)])

        assert result.exit_code == 1
        assert "Registry table not found" in output.getvalue()

    def test_invalid_registry_table(self, output: StringIO, tmp_path: Path) -> None:
        """Test that a registry table failing its schema is reported."""
        (tmp_path / "registry.csv").write_text(
            REGISTRY_HEADER + "first,bronze,t1,grpA,a.csv,true,|,true\n",
            encoding="utf-8",
        )
        path = tmp_path / "bronze.yaml"
        path.write_text("entries_file: registry.csv\n", encoding="utf-8")

        result = runner.invoke(app, ["run", "--config", str(path)])

        assert result.exit_code == 1
        assert "Invalid registry table" in output.getvalue()

    def test_entries_command_reports_errors(
        self, output: StringIO, tmp_path: Path
    ) -> None:
        """Test that the entries command handles invalid configuration too."""
        path = tmp_path / "bronze.yaml"
        path.write_text("entries_file: missing.csv\n", encoding="utf-8")

        result = runner.invoke(app, ["entries", "--config", str(path)])

        assert result.exit_code == 1
        assert "Invalid configuration" in output.getvalue()


class TestEmptyRegistryTable:
    """Tests that an empty registry table loads nothing."""

    @pytest.fixture
    def empty_config(self, tmp_path: Path, database: Path) -> Path:
        """Configuration whose registry table has a header and no rows."""
        (tmp_path / "registry.csv").write_text(REGISTRY_HEADER, encoding="utf-8")
        path = tmp_path / "empty.yaml"
        path.write_text(
            f"entries_file: registry.csv\ndestination:\n  database: {database}\n",
            encoding="utf-8",
        )
        return path

    def test_entries_shows_no_deployment_tables(
        self, output: StringIO, empty_config: Path
    ) -> None:
        """Test that an empty table does not fall back to the deployment plan."""
        result = runner.invoke(app, ["entries", "--config", str(empty_config)])

        assert result.exit_code == 0
        assert "crm_cust_info" not in output.getvalue()

    def test_run_loads_nothing(self, output: StringIO, empty_config: Path) -> None:
        """Test that a run over an empty table completes without loading."""
        result = runner.invoke(app, ["run", "--config", str(empty_config)])

        assert result.exit_code == 0, result.output
        text = output.getvalue()
        assert "Tables loaded: 0" in text
        assert "crm_cust_info" not in text


class TestEntries:
    """Tests for the entries command."""

    def test_default_entries(self, output: StringIO) -> None:
        """Test that the deployment plan is printed."""
        result = runner.invoke(app, ["entries"])

        assert result.exit_code == 0
        text = output.getvalue()
        assert "Bronze Load Plan" in text
        assert "bronze.crm_cust_info" in text
        assert "source_erp/px_cat_g1v2.csv" in text

    def test_configured_entries(self, output: StringIO, config_file: Path) -> None:
        """Test that configured entries replace the deployment plan."""
        result = runner.invoke(app, ["entries", "--config", str(config_file)])

        assert result.exit_code == 0
        text = output.getvalue()
        assert "bronze.t2" in text
        assert "crm_cust_info" not in text


def test_version(output: StringIO) -> None:
    """Test the version command."""
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert "bronzeload version" in output.getvalue()
