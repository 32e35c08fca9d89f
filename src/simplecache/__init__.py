"""simplecache -- file-backed caching of request/response results.

A :class:`SimpleCache` maps a request's logical address (its path) and its
input parameters to a JSON file below a configured cache root, and hands the
stored result back on later identical requests until it goes stale or is
cleared. Entries expire after a TTL, at the next calendar day, or never.

Typical use::

    cache = SimpleCache(SimpleCache.FreshSameDayOnly, {"region": "eu"})
    report = cache.get()
    if report is None:
        report = build_report()
        cache.save(report)

Modules:
    cache: The :class:`SimpleCache` facade.
    keys: Address parsing, directory and key derivation.
    freshness: TTL, until-cleared and same-day freshness decisions.
    store: Locked reads and writes of entry files.
    invalidation: Scoped and full-tree clears.
    config: Settings resolution from arguments, environment and project file.
    models: Pydantic models shared across the package.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting and debug diagnostics.
    app: Typer maintenance CLI.
"""

__version__ = "1.0.0"

from simplecache.cache import SimpleCache  # noqa: E402
from simplecache.freshness import FRESH_SAME_DAY_ONLY, FRESH_UNTIL_CLEARED  # noqa: E402
from simplecache.models import CacheEntry, CacheSettings, RequestContext  # noqa: E402

__all__ = [
    "FRESH_SAME_DAY_ONLY",
    "FRESH_UNTIL_CLEARED",
    "CacheEntry",
    "CacheSettings",
    "RequestContext",
    "SimpleCache",
    "__version__",
]
