"""Entry commands -- read, clear and count cache entries from the shell.

Provides ``simplecache get``, ``simplecache clear`` and ``simplecache
stats``. Each command builds a :class:`~simplecache.cache.SimpleCache`
bound to the address given on the command line, using the settings
resolved from the root options, the environment and ``./simplecache.json``.
"""

from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import typer

from simplecache.exceptions import SimpleCacheError
from simplecache.exit_codes import EXIT_INVALID_USAGE, EXIT_NOT_FOUND
from simplecache.freshness import DEFAULT_FRESHNESS
from simplecache.output import error, format_data, info, print_table, success, warning


@contextmanager
def _reporting_errors() -> Iterator[None]:
    """Turn a :class:`SimpleCacheError` into an error message and its exit code."""
    try:
        yield
    except SimpleCacheError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def _open_cache(
    ctx: typer.Context,
    uri: str,
    params: Optional[dict[str, Any]] = None,
    freshness: int = DEFAULT_FRESHNESS,
):
    """Build a cache bound to *uri* from the settings stored in ``ctx.obj``."""
    from simplecache.cache import SimpleCache
    from simplecache.config import resolve_settings
    from simplecache.models import RequestContext

    obj = ctx.obj or {}
    settings = resolve_settings(cli_directory=obj.get("directory"), cli_enabled=obj.get("enabled"))
    return SimpleCache(freshness, params, uri, settings=settings, request=RequestContext())


def _parse_params(pairs: list[str]) -> dict[str, Any]:
    """Parse ``key=value`` pairs; values are read as JSON when possible."""
    params: dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            error(f"Invalid parameter (expected key=value): {pair}")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        try:
            params[key] = json.loads(raw)
        except json.JSONDecodeError:
            params[key] = raw
    return params


def get_command(
    ctx: typer.Context,
    uri: str = typer.Argument(help="Logical address, e.g. /api/v1/users.php."),
    param: list[str] = typer.Option(
        [], "--param", "-P", help="Request parameter as key=value (repeatable)."
    ),
    freshness: int = typer.Option(
        DEFAULT_FRESHNESS,
        "--freshness",
        help="TTL in seconds, -1 for same day only, -2 for until cleared.",
    ),
) -> None:
    """Print the cached data for an address.

    Exits with code 4 when there is no fresh entry. A stale entry found
    along the way is deleted, exactly as the library does.

    Example::

        simplecache get /api/v1/users.php -P page=2
        simplecache --json get /reports/daily.php --freshness=-1
    """
    params = _parse_params(param)
    with _reporting_errors():
        cache = _open_cache(ctx, uri, params, freshness)
        if not cache.enabled:
            warning("Caching is disabled or no cache directory is configured.")
            raise typer.Exit(code=EXIT_NOT_FOUND)
        data = cache.get()

    if data is None:
        info(f"No fresh entry for {uri}")
        raise typer.Exit(code=EXIT_NOT_FOUND)
    format_data(data)


def clear_command(
    ctx: typer.Context,
    uri: Optional[str] = typer.Argument(
        None, help="Directory to clear, relative to the cache root (e.g. /api/v1/)."
    ),
    all_: bool = typer.Option(False, "--all", help="Clear every entry in the cache tree."),
) -> None:
    """Delete cache entries for one directory or for the whole tree.

    Example::

        simplecache clear /api/v1/
        simplecache clear --all
    """
    if uri is None and not all_:
        error("Give a directory to clear or pass --all.")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    with _reporting_errors():
        cache = _open_cache(ctx, "/")
        if not cache.enabled:
            warning("Caching is disabled or no cache directory is configured.")
            return
        before = cache.stats()["entries"]
        if all_:
            cache.clear_all()
        else:
            cache.clear_by_uri(uri)
        removed = before - cache.stats()["entries"]

    scope = "cache tree" if all_ else uri
    success(f"Removed {removed} entries from {scope}")


def stats_command(
    ctx: typer.Context,
    uri: str = typer.Argument("/", help="Address whose directory is reported."),
) -> None:
    """Show the cache root and entry counts.

    Example::

        simplecache stats
        simplecache --json stats /api/v1/users.php
    """
    with _reporting_errors():
        stats = _open_cache(ctx, uri).stats()
    print_table(
        ["setting", "value"],
        [[key, str(value)] for key, value in stats.items()],
        title="Cache statistics",
    )
