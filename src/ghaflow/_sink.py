from __future__ import annotations

from pathlib import Path, PurePath
from typing import Protocol

from ._validation import PersistenceError


class FileSink(Protocol):
    """Somewhere rendered workflow files can be stored"""

    def ensure_directory(self, path: PurePath) -> None:
        """Creates the directory and its parents if they don't exist"""

    def write_file(self, path: PurePath, contents: str) -> None:
        """Writes the file, replacing any existing one"""


class LocalFileSink:
    """Stores files relative to a root directory on the local filesystem

    Args:
        root: the directory relative paths are resolved against,
            the current working directory when not given
    """

    def __init__(self, root: Path | str | None = None):
        self.root = Path.cwd() if root is None else Path(root)

    def ensure_directory(self, path: PurePath) -> None:
        directory = self.root / path
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as err:
            raise PersistenceError(
                f"Couldn't create directory {directory}: {err}"
            ) from err

    def write_file(self, path: PurePath, contents: str) -> None:
        file = self.root / path
        try:
            # newline="" keeps "\n" line endings on every platform
            with file.open("w", encoding="utf-8", newline="") as f:
                f.write(contents)
        except OSError as err:
            raise PersistenceError(f"Couldn't write {file}: {err}") from err
