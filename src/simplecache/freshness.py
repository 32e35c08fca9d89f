"""Freshness decisions for stored cache entries.

A freshness mode is a plain ``int``:

* a positive number of seconds -- the entry is fresh while
  ``now - timestamp < ttl``;
* :data:`FRESH_UNTIL_CLEARED` -- fresh until explicitly cleared;
* :data:`FRESH_SAME_DAY_ONLY` -- fresh until the local calendar date changes.

Zero, or any other negative value, means "never fresh". Expiry is lazy:
nothing sweeps the tree, the caller deletes a stale entry when it notices
one.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from simplecache.exceptions import InvalidFreshnessError

FRESH_UNTIL_CLEARED = -2
FRESH_SAME_DAY_ONLY = -1

DEFAULT_FRESHNESS = 86400
"""One day."""


def validate_freshness(mode: Any) -> int:
    """Check that *mode* is an integer freshness mode.

    Any integer is accepted. Values other than the two sentinels that are
    zero or negative make every entry stale.

    Raises:
        InvalidFreshnessError: For non-integers, including ``bool``.
    """
    if isinstance(mode, bool) or not isinstance(mode, int):
        raise InvalidFreshnessError(f"Freshness must be an integer, got {mode!r}")
    return mode


def _local_date(timestamp: float) -> date:
    return datetime.fromtimestamp(timestamp).date()


def is_fresh(
    mode: int,
    stored_timestamp: Optional[int],
    now: float,
    enabled: bool = True,
) -> bool:
    """Decide whether an entry written at *stored_timestamp* is still valid at *now*.

    Args:
        mode: TTL in seconds or a sentinel.
        stored_timestamp: The entry's ``timestamp``; ``None`` when there is
            no usable entry.
        now: Current time in seconds since the epoch.
        enabled: Whether caching is enabled at all.
    """
    if not enabled or stored_timestamp is None:
        return False
    if mode == FRESH_UNTIL_CLEARED:
        return True
    if mode == FRESH_SAME_DAY_ONLY:
        return _local_date(stored_timestamp) == _local_date(now)
    if mode <= 0:
        return False
    return (now - stored_timestamp) < mode


class FreshnessPolicy:
    """A validated freshness mode bound to one cache instance."""

    def __init__(self, mode: int = DEFAULT_FRESHNESS) -> None:
        self._mode = validate_freshness(mode)

    @property
    def mode(self) -> int:
        return self._mode

    def is_fresh(self, stored_timestamp: Optional[int], now: float, enabled: bool = True) -> bool:
        return is_fresh(self._mode, stored_timestamp, now, enabled)

    def describe(self) -> str:
        """Human-readable form of the mode, e.g. for ``simplecache stats``."""
        if self._mode == FRESH_UNTIL_CLEARED:
            return "until cleared"
        if self._mode == FRESH_SAME_DAY_ONLY:
            return "same day only"
        return f"{self._mode}s"

    def __repr__(self) -> str:
        return f"FreshnessPolicy({self._mode})"
