"""Locked reads, writes and deletes of individual cache entry files.

:class:`EntryStore` is the only component that touches entry files. Each
entry is one pretty-printed JSON document::

    {
        "timestamp": 1718000000,
        "parameters": {"page": 2},
        "endPoint": "users.php",
        "data": {...}
    }

Writes open the file without truncating it, take an exclusive lock, and
only then truncate and write, so a reader holding the shared lock never
observes an emptied or partially written file. This is whole-file
locking, not write-then-rename: a process that ignores the advisory lock
can still see a partial entry.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from simplecache.exceptions import (
    CacheDecodeError,
    CacheIOError,
    CachePathError,
    InvalidUsageError,
)
from simplecache.keys import ensure_directory
from simplecache.locking import exclusive_lock, shared_lock
from simplecache.models import CacheEntry

FILE_MODE = 0o644


class EntryStore:
    """Reads and writes :class:`~simplecache.models.CacheEntry` records under one root.

    Args:
        root: The cache root. Paths outside it are refused with
            :class:`~simplecache.exceptions.CachePathError`.

    Example::

        store = EntryStore(Path("/var/cache/api"))
        store.write(Path("/var/cache/api/v1"), "ab12....json", entry)
        entry = store.read(Path("/var/cache/api/v1"), "ab12....json")
    """

    def __init__(self, root: Path) -> None:
        self._root = root.resolve()

    @property
    def root(self) -> Path:
        return self._root

    def write(self, directory: Path, key: str, entry: CacheEntry) -> Path:
        """Persist *entry* at ``directory/key`` under an exclusive lock.

        The directory is created first if it does not exist.

        Returns:
            The path written.

        Raises:
            CacheDirectoryError: If *directory* cannot be created.
            CacheIOError: If the file cannot be written.
            InvalidUsageError: If the payload is not JSON-serialisable.
        """
        path = self._contained(directory / key)
        try:
            text = entry.to_json() + "\n"
        except ValueError as exc:
            raise InvalidUsageError(f"Cache payload is not JSON-serialisable: {exc}") from exc

        ensure_directory(path.parent)
        try:
            fd = os.open(path, os.O_WRONLY | os.O_CREAT, FILE_MODE)
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                with exclusive_lock(handle):
                    handle.seek(0)
                    handle.truncate()
                    handle.write(text)
                    handle.flush()
        except OSError as exc:
            raise CacheIOError(f"Cannot write cache entry {path}: {exc}", path) from exc
        return path

    def read(self, directory: Path, key: str) -> Optional[CacheEntry]:
        """Load the entry at ``directory/key`` under a shared lock.

        Returns:
            The entry, or ``None`` if the file does not exist.

        Raises:
            CacheDecodeError: If the file is not a JSON object with a valid
                ``timestamp``.
            CacheIOError: If the file exists but cannot be read.
        """
        path = self._contained(directory / key)
        try:
            with open(path, "r", encoding="utf-8") as handle:
                with shared_lock(handle):
                    text = handle.read()
        except (FileNotFoundError, NotADirectoryError):
            return None
        except UnicodeDecodeError as exc:
            raise CacheDecodeError(f"Cache entry {path} is not UTF-8 text: {exc}", path) from exc
        except OSError as exc:
            raise CacheIOError(f"Cannot read cache entry {path}: {exc}", path) from exc

        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise CacheDecodeError(f"Cache entry {path} is not valid JSON: {exc}", path) from exc
        if not isinstance(data, dict):
            raise CacheDecodeError(f"Cache entry {path} is not a JSON object", path)
        try:
            return CacheEntry.model_validate(data)
        except ValidationError as exc:
            raise CacheDecodeError(f"Cache entry {path} is malformed: {exc}", path) from exc

    def delete(self, path: Path) -> bool:
        """Remove a single entry file.

        Returns:
            ``True`` if a file was removed, ``False`` if it did not exist.

        Raises:
            CacheIOError: If the file exists but cannot be removed.
        """
        path = self._contained(path)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise CacheIOError(f"Cannot delete cache entry {path}: {exc}", path) from exc
        return True

    def _contained(self, path: Path) -> Path:
        resolved = path.resolve()
        if not resolved.is_relative_to(self._root):
            raise CachePathError(f"{path} is outside the cache root {self._root}")
        return resolved
