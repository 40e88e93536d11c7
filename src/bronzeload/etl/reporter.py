"""
Console reporter for bronze load results.

Formats batch results using Rich for clear, colored output.
"""

from rich.console import Console
from rich.table import Table

from bronzeload.config.settings import LoadEntry
from bronzeload.etl.context import BatchResult, EntryResult


class ConsoleReporter:
    """Formats and displays load results and load plans to the console."""

    def __init__(self, console: Console) -> None:
        """
        Initialize console reporter.

        Args:
            console: Rich Console instance for output.
        """
        self.console = console

    def print_results(self, result: BatchResult) -> None:
        """
        Print per-table load results as a formatted table.

        Args:
            result: Completed batch result.
        """
        table = Table(title="Bronze Load Results", show_header=True)
        table.add_column("Order", justify="right")
        table.add_column("Table", style="cyan", no_wrap=True)
        table.add_column("Source", style="dim")
        table.add_column("Loaded", justify="right")
        table.add_column("Rejected", justify="right")
        table.add_column("Row count", justify="right")
        table.add_column("Seconds", justify="right")

        for entry_result in result.entries:
            table.add_row(
                str(entry_result.entry.load_order),
                entry_result.entry.qualified_name,
                str(entry_result.source_path),
                str(entry_result.rows_loaded),
                self._format_rejected(entry_result),
                self._format_row_count(entry_result),
                f"{entry_result.duration_seconds:.2f}",
            )

        self.console.print(table)
        self._print_summary(result)

    def print_plan(self, entries: list[LoadEntry] | tuple[LoadEntry, ...]) -> None:
        """
        Print registry entries as a table.

        Args:
            entries: Entries in the order they will be loaded.
        """
        table = Table(title="Bronze Load Plan", show_header=True)
        table.add_column("Order", justify="right")
        table.add_column("Table", style="cyan", no_wrap=True)
        table.add_column("Source file")
        table.add_column("Header", justify="center")
        table.add_column("Delimiter", justify="center")
        table.add_column("Active", justify="center")

        for entry in entries:
            table.add_row(
                str(entry.load_order),
                entry.qualified_name,
                f"{entry.source_group}/{entry.file_name}",
                "yes" if entry.has_header else "no",
                repr(entry.field_delimiter),
                "[green]yes[/green]" if entry.is_active else "[yellow]no[/yellow]",
            )

        self.console.print(table)

    def _format_rejected(self, entry_result: EntryResult) -> str:
        if entry_result.rows_rejected:
            return f"[yellow]{entry_result.rows_rejected}[/yellow]"
        return "0"

    def _format_row_count(self, entry_result: EntryResult) -> str:
        if entry_result.validation_error is not None:
            return "[red]failed[/red]"
        if entry_result.row_count is None:
            return "-"
        return str(entry_result.row_count)

    def _print_summary(self, result: BatchResult) -> None:
        """
        Print summary statistics and validation warnings.

        Args:
            result: Completed batch result.
        """
        self.console.print()
        self.console.print("[bold]Summary:[/bold]")
        self.console.print(f"  Tables loaded: {len(result.entries)}")
        self.console.print(f"  Total duration: {result.duration_seconds:.2f}s")

        warnings = result.validation_warnings
        if not warnings:
            return

        self.console.print()
        self.console.print("[bold yellow]Validation Warnings:[/bold yellow]")
        for entry_result in warnings:
            self.console.print(
                f"  [bold]{entry_result.entry.qualified_name}[/bold]: "
                f"{entry_result.validation_error}"
            )
