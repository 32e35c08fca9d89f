"""Canonical Pydantic models shared across all simplecache modules.

The models fall into two groups:

**Configuration models** -- resolved once per process by
:func:`~simplecache.config.resolve_settings` and injected into
:class:`~simplecache.cache.SimpleCache`:
    :class:`CacheSettings` and :class:`RequestContext`.

**On-disk models** -- the record written for every cache entry:
    :class:`CacheEntry`.

All models use Pydantic v2.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping, Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator


_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})


def parse_bool(value: Any) -> bool:
    """Interpret a boolean-like value the way a shell user would write it.

    Accepts real booleans and integers as well as the strings
    ``true/false``, ``1/0``, ``yes/no`` and ``on/off`` in any case. An empty
    string counts as false.

    Raises:
        ValueError: If *value* is not recognisably boolean.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
    raise ValueError(f"Not a boolean value: {value!r}")


# --- Configuration ---


class CacheSettings(BaseModel):
    """Process-wide cache configuration.

    The cache is *active* only when it is enabled and a root directory is
    configured. An inactive configuration is not an error: every
    :class:`~simplecache.cache.SimpleCache` built from it silently behaves
    as a no-op.

    Example::

        CacheSettings(directory="/var/cache/api", enabled="yes")
    """

    directory: Optional[Path] = Field(
        default=None, description="Root directory under which all entries live"
    )
    enabled: bool = Field(default=True, description="Enable response caching")

    @field_validator("directory", mode="before")
    @classmethod
    def _blank_directory_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("enabled", mode="before")
    @classmethod
    def _coerce_enabled(cls, value: Any) -> bool:
        if value is None:
            return True
        return parse_bool(value)

    @property
    def is_active(self) -> bool:
        """``True`` when caching is enabled and a root directory is set."""
        return self.enabled and self.directory is not None


class RequestContext(BaseModel):
    """The request a cache instance is bound to.

    Supplies the logical address used when no forced address is given, and
    the input parameters merged with a cache's additional parameters to form
    its key.

    Attributes:
        uri: Slash-delimited request path (e.g. ``/api/v1/users.php``).
        params: Input parameters of the request (e.g. a decoded form body).
    """

    uri: str = ""
    params: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None) -> "RequestContext":
        """Build a context from CGI-style environment variables.

        Reads ``REQUEST_URI`` and drops its query string so that only the
        path contributes to the address.

        Args:
            environ: Mapping to read from. Defaults to :data:`os.environ`.
        """
        env = os.environ if environ is None else environ
        uri = env.get("REQUEST_URI", "")
        return cls(uri=urlsplit(uri).path if uri else "")


# --- On-disk record ---


class CacheEntry(BaseModel):
    """A single cache record as stored in ``<root>/<dirs>/<digest>.json``.

    Attributes:
        timestamp: Creation time in whole seconds since the epoch. The only
            field that can make a stored record undecodable.
        parameters: The merged input parameters the key was derived from.
            Stored for debugging only; anything but an object reads as ``{}``.
        endpoint: The last segment of the logical address. Serialised as
            ``endPoint``.
        data: The cached payload. Any JSON-serialisable value.
    """

    model_config = ConfigDict(populate_by_name=True)

    timestamp: int
    parameters: dict[str, Any] = Field(default_factory=dict)
    endpoint: str = Field(default="", alias="endPoint")
    data: Any = None

    @field_validator("parameters", mode="before")
    @classmethod
    def _parameters_as_read(cls, value: Any) -> Any:
        # An empty map may have been written as ``[]``.
        return value if isinstance(value, dict) else {}

    @field_validator("endpoint", mode="before")
    @classmethod
    def _endpoint_as_read(cls, value: Any) -> Any:
        return value if isinstance(value, str) else ""

    def to_json(self) -> str:
        """Serialise the entry as pretty-printed JSON using on-disk field names."""
        return self.model_dump_json(by_alias=True, indent=4)
