"""File-backed response cache keyed by request path and parameters.

:class:`SimpleCache` is bound to one logical address (the current request
path or a forced one) and one set of parameters. It stores the result of
that request as a JSON file below the configured cache root and hands it
back on later identical requests until the entry goes stale or is
cleared.

When caching is disabled, or no cache root is configured, every instance
is a silent no-op: :meth:`SimpleCache.get` returns ``None`` and the other
operations do nothing. Caching is an optimisation layer and must never be
the reason a request fails.

Example::

    from simplecache import SimpleCache

    cache = SimpleCache(3600, {"page": page}, forced_uri="/api/v1/users.php")
    users = cache.get()
    if users is None:
        users = load_users(page)
        cache.save(users)
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

from simplecache.config import resolve_settings
from simplecache.exceptions import CacheDecodeError, CachePathError, ConfigError
from simplecache.freshness import (
    DEFAULT_FRESHNESS,
    FRESH_SAME_DAY_ONLY,
    FRESH_UNTIL_CLEARED,
    FreshnessPolicy,
)
from simplecache.invalidation import InvalidationEngine
from simplecache.keys import DerivedLocation, KeyDeriver, merge_params
from simplecache.models import CacheEntry, CacheSettings, RequestContext
from simplecache.output import get_output
from simplecache.store import EntryStore


class SimpleCache:
    """Cache for the response of a single request.

    Args:
        freshness: TTL in seconds, :attr:`FreshUntilCleared` or
            :attr:`FreshSameDayOnly`. Defaults to one day.
        additional_params: Extra parameters included in the cache key.
            They override request parameters with the same name.
        forced_uri: Address to bind to instead of the current request's.
        settings: Cache configuration. Resolved from the environment and
            ``./simplecache.json`` when omitted.
        request: The current request. Read from CGI-style environment
            variables when omitted.
        clock: Returns the current time in seconds since the epoch.

    A malformed ambient configuration, or a request address that would
    leave the cache root, disables the instance instead of raising.

    Raises:
        InvalidFreshnessError: If *freshness* is not an integer.
        CachePathError: If *forced_uri* contains ``..`` segments.
    """

    FreshUntilCleared = FRESH_UNTIL_CLEARED
    FreshSameDayOnly = FRESH_SAME_DAY_ONLY

    def __init__(
        self,
        freshness: int = DEFAULT_FRESHNESS,
        additional_params: Optional[Mapping[str, Any]] = None,
        forced_uri: Optional[str] = None,
        *,
        settings: Optional[CacheSettings] = None,
        request: Optional[RequestContext] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._policy = FreshnessPolicy(freshness)
        self._settings = settings if settings is not None else self._ambient_settings()
        self._request = request if request is not None else RequestContext.from_environ()
        self._additional_params: dict[str, Any] = dict(additional_params or {})
        self._clock = clock

        self._uri: Optional[str] = None
        self._location: Optional[DerivedLocation] = None
        self._deriver: Optional[KeyDeriver] = None
        self._store: Optional[EntryStore] = None
        self._invalidator: Optional[InvalidationEngine] = None

        root = self._usable_root(self._settings)
        if root is None:
            return

        self._deriver = KeyDeriver(root)
        if forced_uri is not None:
            self._bind(forced_uri)
        else:
            try:
                self._bind(self._request.uri)
            except CachePathError as exc:
                get_output().debug(f"Caching disabled: {exc}")
                self._deriver = None
                return
        self._store = EntryStore(root)
        self._invalidator = InvalidationEngine(self._deriver, self._store)

    @staticmethod
    def _ambient_settings() -> CacheSettings:
        try:
            return resolve_settings()
        except ConfigError as exc:
            get_output().warning(f"Caching disabled: {exc}")
            return CacheSettings(enabled=False)

    @staticmethod
    def _usable_root(settings: CacheSettings) -> Optional[Path]:
        if not settings.is_active:
            get_output().debug("Caching disabled: cache is switched off or has no directory")
            return None
        assert settings.directory is not None
        root = settings.directory.expanduser().resolve()
        if root.exists() and not root.is_dir():
            get_output().debug(f"Caching disabled: {root} is not a directory")
            return None
        return root

    def _bind(self, uri: str) -> None:
        assert self._deriver is not None
        params = merge_params(self._request.params, self._additional_params)
        self._location = self._deriver.derive(uri, params)
        self._uri = uri

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    @property
    def enabled(self) -> bool:
        """Whether this instance actually reads and writes the cache."""
        return self._location is not None

    @property
    def freshness(self) -> int:
        return self._policy.mode

    @property
    def uri(self) -> Optional[str]:
        return self._uri

    @property
    def directory(self) -> Optional[Path]:
        """Directory holding this instance's entry, or ``None`` when disabled."""
        return self._location.directory if self._location else None

    @property
    def filename(self) -> Optional[str]:
        """Entry filename (``<sha256>.json``), or ``None`` when disabled."""
        return self._location.filename if self._location else None

    @property
    def path(self) -> Optional[Path]:
        return self._location.path if self._location else None

    @property
    def endpoint(self) -> Optional[str]:
        return self._location.endpoint if self._location else None

    @property
    def parameters(self) -> dict[str, Any]:
        """The merged parameters the key is derived from."""
        if self._location is None:
            return merge_params(self._request.params, self._additional_params)
        return dict(self._location.parameters)

    # ------------------------------------------------------------------ #
    # Entry operations
    # ------------------------------------------------------------------ #

    def get(self) -> Optional[Any]:
        """Return the cached data if a fresh entry exists.

        A stale entry is deleted as a side effect. So is an entry that
        cannot be decoded, which is then treated as a miss.

        Returns:
            The cached payload, or ``None`` on a miss or when disabled.

        Raises:
            CacheIOError: If the entry exists but cannot be read or removed.
        """
        if self._location is None:
            return None
        assert self._store is not None
        output = get_output()
        location = self._location

        try:
            entry = self._store.read(location.directory, location.filename)
        except CacheDecodeError as exc:
            output.debug(f"Discarding unreadable cache entry: {exc}")
            self._store.delete(location.path)
            return None

        if entry is None:
            output.debug(f"Cache miss: {self._uri}")
            return None

        if not self._policy.is_fresh(entry.timestamp, self._clock()):
            output.debug(f"Cache expired: {self._uri} ({self._policy.describe()})")
            self._store.delete(location.path)
            return None

        output.debug(f"Cache hit: {self._uri}")
        return entry.data

    def save(self, data: Any) -> None:
        """Store *data* as this instance's entry, replacing any previous one.

        Does nothing when the cache is disabled.

        Raises:
            CacheDirectoryError: If the entry's directory cannot be created.
            CacheIOError: If the entry cannot be written.
            InvalidUsageError: If *data* is not JSON-serialisable.
        """
        if self._location is None:
            return
        assert self._store is not None
        location = self._location
        entry = CacheEntry(
            timestamp=int(self._clock()),
            parameters=location.parameters,
            endpoint=location.endpoint,
            data=data,
        )
        path = self._store.write(location.directory, location.filename, entry)
        get_output().debug(f"Cache saved: {self._uri} -> {path}")

    # ------------------------------------------------------------------ #
    # Invalidation
    # ------------------------------------------------------------------ #

    def clear_by_uri(self, uri: Optional[str] = None) -> "SimpleCache":
        """Delete the entries in one address directory.

        Args:
            uri: A directory relative to the cache root, e.g.
                ``/queries/data/``. Defaults to this instance's own
                directory. Subdirectories are not touched.

        Returns:
            This instance, for chaining.
        """
        if self._invalidator is not None:
            assert self._location is not None
            self._invalidator.clear_by_uri(self._location.directory, uri)
        return self

    def clear_all(self) -> "SimpleCache":
        """Delete every entry below the cache root.

        Returns:
            This instance, for chaining.
        """
        if self._invalidator is not None:
            self._invalidator.clear_all()
        return self

    # ------------------------------------------------------------------ #
    # Rebinding
    # ------------------------------------------------------------------ #

    def update_uri(self, uri: str) -> "SimpleCache":
        """Rebind to another address; later get/save use its directory and key."""
        if self._deriver is not None:
            self._bind(uri)
        return self

    def update_additional_params(self, params: Mapping[str, Any]) -> "SimpleCache":
        """Replace the additional parameters and recompute the key."""
        self._additional_params = dict(params)
        if self._deriver is not None and self._uri is not None:
            self._bind(self._uri)
        return self

    def stats(self) -> dict[str, Any]:
        """Return cache statistics.

        Returns:
            ``{"enabled": False}`` when disabled, otherwise the cache root,
            this instance's directory and entry path, entry counts for the
            whole tree and for this directory, and the freshness mode.
        """
        if self._location is None:
            return {"enabled": False}
        assert self._invalidator is not None and self._deriver is not None
        return {
            "enabled": True,
            "root": str(self._deriver.root),
            "directory": str(self._location.directory),
            "path": str(self._location.path),
            "entries": self._invalidator.count(),
            "directory_entries": self._invalidator.count(self._location.directory, recursive=False),
            "freshness": self._policy.describe(),
        }

    def __repr__(self) -> str:
        if self._location is None:
            return "SimpleCache(disabled)"
        return f"SimpleCache(uri={self._uri!r}, freshness={self._policy.describe()!r})"
