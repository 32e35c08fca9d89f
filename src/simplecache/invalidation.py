"""Scoped and full-tree invalidation of cache entries.

Only files ending in ``.json`` are removed; directories and any other
files are left in place. A sweep is not atomic across files, but it is
idempotent, so re-running an interrupted clear finishes the job.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from simplecache.exceptions import CacheIOError
from simplecache.keys import ENTRY_SUFFIX, KeyDeriver
from simplecache.output import get_output
from simplecache.store import EntryStore


def _is_entry(entry: os.DirEntry) -> bool:
    return entry.name.endswith(ENTRY_SUFFIX) and entry.is_file(follow_symlinks=False)


class InvalidationEngine:
    """Removes entry files below a cache root.

    Args:
        deriver: Key deriver bound to the cache root, used to map override
            addresses to directories.
        store: The entry store that performs the actual deletions.
    """

    def __init__(self, deriver: KeyDeriver, store: EntryStore) -> None:
        self._deriver = deriver
        self._store = store

    def clear_scope(self, directory: Path, recursive: bool = False) -> int:
        """Delete entry files directly under *directory*.

        Args:
            directory: Directory to sweep. A missing directory is a no-op.
            recursive: Also sweep every subdirectory.

        Returns:
            The number of files deleted.

        Raises:
            CacheIOError: If the directory cannot be listed or a file cannot
                be deleted.
        """
        if not directory.is_dir():
            return 0

        deleted = 0
        try:
            with os.scandir(directory) as it:
                entries = list(it)
        except OSError as exc:
            raise CacheIOError(f"Cannot list cache directory {directory}: {exc}", directory) from exc

        for entry in entries:
            if recursive and entry.is_dir(follow_symlinks=False):
                deleted += self.clear_scope(Path(entry.path), recursive=True)
            elif _is_entry(entry):
                if self._store.delete(Path(entry.path)):
                    deleted += 1

        get_output().debug(f"Cleared {deleted} cache entries in {directory}")
        return deleted

    def clear_all(self) -> int:
        """Delete every entry file below the cache root."""
        return self.clear_scope(self._deriver.root, recursive=True)

    def clear_by_uri(self, own_directory: Path, uri: Optional[str] = None) -> int:
        """Clear one address scope, non-recursively.

        Args:
            own_directory: The directory the calling cache is bound to.
            uri: An address relative to the cache root, e.g.
                ``/queries/data/``. When given, its directory is cleared
                instead of *own_directory*.
        """
        directory = own_directory if uri is None else self._deriver.scope_directory(uri)
        return self.clear_scope(directory, recursive=False)

    def count(self, directory: Optional[Path] = None, recursive: bool = True) -> int:
        """Count entry files below *directory* (default: the cache root)."""
        directory = self._deriver.root if directory is None else directory
        if not directory.is_dir():
            return 0
        total = 0
        for dirpath, _dirnames, filenames in os.walk(directory):
            total += sum(1 for name in filenames if name.endswith(ENTRY_SUFFIX))
            if not recursive:
                break
        return total
