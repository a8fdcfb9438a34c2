import tempfile
from pathlib import Path
from typing import Optional

SIDE_FILE_SUFFIXES = ("-journal", "-wal", "-shm")


def database_files(path: Path) -> list[Path]:
    """The database file followed by the journal files SQLite may leave next to it."""
    return [path] + [path.with_name(path.name + suffix) for suffix in SIDE_FILE_SUFFIXES]


def delete_database_file(path: Path) -> None:
    """
    Delete a database file and its journal files if present.

    Raises:
        OSError: If an existing file cannot be removed
    """
    for candidate in database_files(path):
        candidate.unlink(missing_ok=True)


def directory_size(path: Path) -> int:
    """Sum of the sizes of the regular files directly inside ``path``."""
    return sum(item.stat().st_size for item in path.iterdir() if item.is_file())


def resolve_base_dir(base_dir: Optional[str]) -> Path:
    """Base directory for scenario files; the system temp directory when unset."""
    if base_dir:
        path = Path(base_dir).expanduser()
    else:
        path = Path(tempfile.gettempdir())
    path.mkdir(parents=True, exist_ok=True)
    return path.resolve()