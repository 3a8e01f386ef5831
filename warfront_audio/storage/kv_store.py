"""
Key-value stores used to persist engine snapshots.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

log = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    """A string store with last-write-wins semantics."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """An in-process store, for tests and for embedding without a disk."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileStore:
    """
    Stores each key as `<key>.json` under a directory.

    Writes go to a temporary file in the same directory which is then renamed
    over the target, so a crash mid-write never leaves a truncated snapshot.
    """

    def __init__(self, directory: Path):
        self.directory = directory

    def _get_path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._get_path(key)
        if not path.is_file():
            return None
        with open(path, encoding="utf-8") as f:
            return f.read()

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._get_path(key)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.directory, prefix=f".{key}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_name, path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        log.debug(f"Wrote {len(value)} bytes to '{path}'.")

    def delete(self, key: str) -> bool:
        """Removes a key. Returns False if it did not exist."""
        try:
            self._get_path(key).unlink()
            return True
        except FileNotFoundError:
            return False
