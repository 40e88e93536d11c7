"""Source file location."""

from pathlib import Path

from bronzeload.config.settings import LoadEntry


def resolve_source_path(base_path: Path | str, source_group: str, file_name: str) -> Path:
    """
    Compose the path of a source file.

    No existence check is made here; a missing file surfaces as a
    LoadFailure when the loader reads it.

    Args:
        base_path: Root directory of all source files.
        source_group: Source system subdirectory.
        file_name: File within the source directory.

    Returns:
        base_path / source_group / file_name
    """
    return Path(base_path) / source_group / file_name


def locate(entry: LoadEntry, base_path: Path | str) -> Path:
    """Resolve the source file of a load entry."""
    return resolve_source_path(base_path, entry.source_group, entry.file_name)
