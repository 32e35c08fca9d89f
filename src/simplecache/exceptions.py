"""Exception hierarchy for simplecache.

All exceptions inherit from :class:`SimpleCacheError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`simplecache.exit_codes`. The library itself never exits the process:
:class:`~simplecache.cache.SimpleCache` raises these exceptions and the host
application decides what to do. The ``simplecache`` command catches
``SimpleCacheError`` in :func:`simplecache.app.main` and exits with the
appropriate code.

Subclass hierarchy::

    SimpleCacheError (exit 1)
    +-- ConfigError            (exit 1)
    +-- InvalidUsageError      (exit 2)
    |   +-- InvalidFreshnessError (exit 2)
    |   +-- CachePathError        (exit 2)
    +-- CacheIOError           (exit 3)
    |   +-- CacheDirectoryError   (exit 3)
    +-- CacheDecodeError       (exit 4)
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from simplecache.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_IO_ERROR,
    EXIT_NOT_FOUND,
)


class SimpleCacheError(Exception):
    """Base exception for all simplecache errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`simplecache.exit_codes`.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(SimpleCacheError):
    """Raised for configuration problems (invalid project JSON, unparseable enable flag)."""

    exit_code = EXIT_GENERIC_FAILURE


class InvalidUsageError(SimpleCacheError):
    """Raised for invalid arguments passed to the cache or the CLI."""

    exit_code = EXIT_INVALID_USAGE


class InvalidFreshnessError(InvalidUsageError):
    """Raised when a freshness mode is neither a TTL nor a known sentinel."""


class CachePathError(InvalidUsageError):
    """Raised when a derived path would fall outside the cache root.

    Addresses containing ``..`` segments are rejected with this error
    rather than being allowed to escape the configured directory.
    """


class CacheIOError(SimpleCacheError):
    """Raised when a cache file cannot be read, written or deleted.

    Args:
        message: Human-readable error description.
        path: The file or directory the failing operation targeted.
    """

    exit_code = EXIT_IO_ERROR

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class CacheDirectoryError(CacheIOError):
    """Raised when a cache subdirectory cannot be created (permissions, disk full)."""


class CacheDecodeError(SimpleCacheError):
    """Raised when an entry file exists but does not hold a valid cache record.

    :class:`~simplecache.cache.SimpleCache` treats this as a miss and
    deletes the offending file; the exception only escapes when
    :class:`~simplecache.store.EntryStore` is used directly.
    """

    exit_code = EXIT_NOT_FOUND

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path
