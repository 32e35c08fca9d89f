"""Advisory whole-file locks for cache entries.

Writers hold an exclusive lock and readers a shared lock for the whole
duration of the operation, so a reader never sees a half-written entry
from a cooperating writer. Lock acquisition blocks without a timeout.

Locks are POSIX ``flock`` locks. On platforms without :mod:`fcntl` the
helpers do nothing and concurrent access is unguarded.
"""

from __future__ import annotations

import sys
from contextlib import contextmanager
from typing import IO, Any, Iterator

if sys.platform != "win32":
    import fcntl
else:
    fcntl = None


@contextmanager
def _flock(handle: IO[Any], operation: int) -> Iterator[IO[Any]]:
    if fcntl is None:
        yield handle
        return
    fcntl.flock(handle.fileno(), operation)
    try:
        yield handle
    finally:
        fcntl.flock(handle.fileno(), fcntl.LOCK_UN)


def shared_lock(handle: IO[Any]) -> Any:
    """Hold a shared (read) lock on *handle* for the ``with`` block."""
    return _flock(handle, fcntl.LOCK_SH if fcntl is not None else 0)


def exclusive_lock(handle: IO[Any]) -> Any:
    """Hold an exclusive (write) lock on *handle* for the ``with`` block."""
    return _flock(handle, fcntl.LOCK_EX if fcntl is not None else 0)
