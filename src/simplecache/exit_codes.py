"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~simplecache.exceptions.SimpleCacheError` subclass.
Shell wrappers and cron jobs can inspect the exit code of the
``simplecache`` command to tell a cache miss from a broken cache tree
without parsing stderr.

Example::

    $ simplecache get /api/v1/users.php
    $ echo $?
    4   # EXIT_NOT_FOUND -- no fresh entry for that address
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments, addresses or freshness modes."""

EXIT_IO_ERROR = 3
"""A cache file or directory could not be read, written or created."""

EXIT_NOT_FOUND = 4
"""No usable cache entry exists for the requested address."""
