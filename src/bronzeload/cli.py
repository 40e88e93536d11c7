"""Command-line interface for bronze layer loads."""

from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console
from rich.markup import escape

if TYPE_CHECKING:
    from bronzeload.config.registry import LoadConfigRegistry
    from bronzeload.config.settings import BronzeConfig

app = typer.Typer(
    name="bronzeload",
    help="Load raw delimited source files into bronze staging tables.",
    no_args_is_help=True,
)

console = Console()

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Path to configuration YAML file. Built-in defaults if omitted.",
        exists=True,
        dir_okay=False,
    ),
]


def _load_settings(config: Path | None) -> "BronzeConfig":
    from bronzeload.config.loader import load_config
    from bronzeload.config.settings import BronzeConfig

    if config is None:
        return BronzeConfig()
    console.print(f"[blue]Loading configuration from {config}[/blue]")
    return load_config(config)


def _load_plan(config: Path | None) -> tuple["BronzeConfig", "LoadConfigRegistry"]:
    """Load settings and build the registry, exiting on invalid configuration."""
    from bronzeload.config.registry import DEFAULT_ENTRIES, LoadConfigRegistry

    try:
        settings = _load_settings(config)
        entries = DEFAULT_ENTRIES if settings.entries is None else settings.entries
        registry = LoadConfigRegistry(entries)
    except (ValueError, FileNotFoundError) as e:
        console.print(f"[red]Invalid configuration: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e
    return settings, registry


@app.command()
def run(
    config: ConfigOption = None,
    data_path: Annotated[
        Path | None,
        typer.Option(
            "--data-path",
            "-d",
            help="Base directory of the source files (overrides config).",
            file_okay=False,
        ),
    ] = None,
    database: Annotated[
        str | None,
        typer.Option(
            "--database",
            help="DuckDB staging database file (overrides config).",
        ),
    ] = None,
    logging_enabled: Annotated[
        bool | None,
        typer.Option(
            "--logging/--no-logging",
            help="Emit run status logs (overrides config).",
        ),
    ] = None,
    validate: Annotated[
        bool | None,
        typer.Option(
            "--validate/--no-validate",
            help="Count destination rows after each load (overrides config).",
        ),
    ] = None,
    parallel_load: Annotated[
        bool,
        typer.Option(
            "--parallel-load",
            help="Reserved. Accepted for compatibility; tables still load in order.",
        ),
    ] = False,
    json_logs: Annotated[
        bool,
        typer.Option(
            "--json-logs",
            help="Write logs as JSON lines.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
) -> None:
    """Truncate and reload every active bronze table."""
    from bronzeload.etl import ConsoleReporter, load_bronze
    from bronzeload.exceptions import BronzeLoadError
    from bronzeload.ingestion.destination import connect_destination
    from bronzeload.utils.logging import configure_logging

    configure_logging(level="DEBUG" if verbose else "INFO", json_output=json_logs)

    settings, registry = _load_plan(config)

    destination_config = settings.destination
    if database is not None:
        destination_config = destination_config.model_copy(update={"database": database})

    base_path = data_path or settings.base_path

    console.print(f"[dim]Database: {destination_config.database}[/dim]")
    destination = connect_destination(destination_config)
    try:
        result = load_bronze(
            destination,
            base_path=base_path,
            logging_enabled=(
                settings.logging_enabled if logging_enabled is None else logging_enabled
            ),
            parallel_load=parallel_load or settings.parallel_load,
            validation_enabled=(
                settings.validation_enabled if validate is None else validate
            ),
            registry=registry,
            policy=settings.policy,
        )
    except BronzeLoadError as e:
        console.print(f"[red]Bronze load failed: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e
    finally:
        destination.close()

    console.print()
    ConsoleReporter(console).print_results(result)


@app.command()
def entries(config: ConfigOption = None) -> None:
    """Show the configured load entries in load order."""
    from bronzeload.etl import ConsoleReporter

    _, registry = _load_plan(config)

    ConsoleReporter(console).print_plan(
        sorted(registry.entries, key=lambda e: (not e.is_active, e.load_order))
    )


@app.command()
def version() -> None:
    """Show version information."""
    from bronzeload import __version__

    console.print(f"bronzeload version {__version__}")


if __name__ == "__main__":
    app()
