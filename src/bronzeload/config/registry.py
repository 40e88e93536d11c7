"""
Load configuration registry.

Holds the ordered, immutable list of load entries for one run and hands
out a scoped cursor over the active ones.
"""

from collections import Counter
from collections.abc import Iterable, Iterator
from pathlib import Path
from types import TracebackType

import pandas as pd
from pandera.errors import SchemaError, SchemaErrors

from bronzeload.config.settings import LoadEntry
from bronzeload.schemas.load_config import LoadConfigSchema
from bronzeload.utils.logging import get_logger

log = get_logger(__name__)

_BOOLEAN_TEXT = {
    "1": True,
    "true": True,
    "yes": True,
    "0": False,
    "false": False,
    "no": False,
}


def _entry(
    load_order: int, table: str, source_group: str, file_name: str
) -> LoadEntry:
    return LoadEntry(
        load_order=load_order,
        destination_schema="bronze",
        destination_table=table,
        source_group=source_group,
        file_name=file_name,
        has_header=True,
        field_delimiter=",",
        is_active=True,
    )


# Deployment tables, in load order
DEFAULT_ENTRIES: tuple[LoadEntry, ...] = (
    _entry(1, "crm_cust_info", "source_crm", "cust_info.csv"),
    _entry(2, "crm_prd_info", "source_crm", "prd_info.csv"),
    _entry(3, "crm_sales_details", "source_crm", "sales_details.csv"),
    _entry(4, "erp_loc_a101", "source_erp", "loc_a101.csv"),
    _entry(5, "erp_cust_az12", "source_erp", "cust_az12.csv"),
    _entry(6, "erp_px_cat_g1v2", "source_erp", "px_cat_g1v2.csv"),
)


class EntryCursor:
    """
    Forward-only iterator over a fixed sequence of entries.

    Must be released exactly once; use it as a context manager so that
    release happens on both normal and exceptional exit.
    """

    def __init__(self, entries: tuple[LoadEntry, ...]) -> None:
        self._entries = entries
        self._position = 0
        self.closed = False

    def __iter__(self) -> Iterator[LoadEntry]:
        return self

    def __next__(self) -> LoadEntry:
        if self.closed:
            msg = "Cursor is closed"
            raise RuntimeError(msg)
        if self._position >= len(self._entries):
            raise StopIteration
        entry = self._entries[self._position]
        self._position += 1
        return entry

    def close(self) -> None:
        """Release the cursor. Further calls are no-ops."""
        if self.closed:
            return
        self.closed = True
        self._release()

    def _release(self) -> None:
        log.debug("Released entry cursor", fetched=self._position)

    def __enter__(self) -> "EntryCursor":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class LoadConfigRegistry:
    """
    Ordered registry of load entries.

    Constructed fresh for each run. Extending the load means adding entries
    to the definition, not mutating a registry at runtime.
    """

    def __init__(self, entries: Iterable[LoadEntry] = DEFAULT_ENTRIES) -> None:
        """
        Initialize registry.

        Args:
            entries: Load entry definitions, in any order.

        Raises:
            ValueError: If active entries share a load order or destination.
        """
        self._entries = tuple(entries)
        self._check_unique()

    def _check_unique(self) -> None:
        active = [e for e in self._entries if e.is_active]

        orders = Counter(e.load_order for e in active)
        duplicated_orders = sorted(o for o, n in orders.items() if n > 1)
        if duplicated_orders:
            msg = f"Duplicate load_order among active entries: {duplicated_orders}"
            raise ValueError(msg)

        destinations = Counter(e.qualified_name for e in active)
        duplicated = sorted(d for d, n in destinations.items() if n > 1)
        if duplicated:
            msg = f"Duplicate destination among active entries: {', '.join(duplicated)}"
            raise ValueError(msg)

    @property
    def entries(self) -> tuple[LoadEntry, ...]:
        """All entries as defined, including inactive ones."""
        return self._entries

    def active_entries(self) -> tuple[LoadEntry, ...]:
        """Active entries sorted by load_order ascending."""
        return tuple(
            sorted(
                (e for e in self._entries if e.is_active),
                key=lambda e: e.load_order,
            )
        )

    def open_cursor(self) -> EntryCursor:
        """Open a cursor over the active entries."""
        return EntryCursor(self.active_entries())

    def __len__(self) -> int:
        return len(self._entries)


def load_registry_table(path: Path) -> list[LoadEntry]:
    """
    Load registry entries from a CSV table.

    The table needs one column per LoadEntry field. Rows are validated
    against LoadConfigSchema before entries are built.

    Args:
        path: Path to the registry CSV.

    Returns:
        Entries in file order.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the table violates the schema.
    """
    if not path.exists():
        msg = f"Registry table not found: {path}"
        raise FileNotFoundError(msg)

    # Delimiters are data here; keep every cell as text until coerced
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    for column in ("has_header", "is_active"):
        if column in df.columns:
            # Unrecognised values become NaN and fail the bool dtype check
            parsed = df[column].str.strip().str.lower().map(_BOOLEAN_TEXT)
            df[column] = parsed.astype(bool) if parsed.notna().all() else parsed

    try:
        df = LoadConfigSchema.validate(df, lazy=True)
    except (SchemaError, SchemaErrors) as e:
        msg = f"Invalid registry table {path}: {e}"
        raise ValueError(msg) from e

    log.info("Loaded registry table", path=str(path), entries=len(df))

    return [
        LoadEntry(
            load_order=int(row.load_order),
            destination_schema=row.destination_schema,
            destination_table=row.destination_table,
            source_group=row.source_group,
            file_name=row.file_name,
            has_header=bool(row.has_header),
            field_delimiter=row.field_delimiter,
            is_active=bool(row.is_active),
        )
        for row in df.itertuples(index=False)
    ]
