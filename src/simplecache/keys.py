"""Mapping of a request's identity to a location under the cache root.

A logical address such as ``/api/v1/users.php`` is split into segments.
Every segment but the last becomes a subdirectory of the cache root; the
last segment (the *endpoint*) takes part in the key. The key is the
SHA-256 digest of the canonical JSON encoding of the merged parameters
followed by the endpoint, so::

    /api/v1/users.php  {"page": 2}
        -> <root>/api/v1/<sha256('{"page":2}users.php')>.json

Canonical JSON sorts keys, which makes the key independent of the order
in which parameters were supplied.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from simplecache.exceptions import CacheDirectoryError, CachePathError

ENTRY_SUFFIX = ".json"
DIRECTORY_MODE = 0o755


@dataclass(frozen=True)
class DerivedLocation:
    """Where one (address, parameters) combination lives on disk."""

    directory: Path
    filename: str
    endpoint: str
    parameters: dict[str, Any]

    @property
    def path(self) -> Path:
        return self.directory / self.filename


def parse_uri(uri: str) -> list[str]:
    """Split a logical address into its segments.

    Backslashes are treated as forward slashes and leading/trailing
    slashes are dropped. An empty address yields a single empty segment.
    """
    return uri.replace("\\", "/").strip("/").split("/")


def derive_directory(root: Path, segments: list[str]) -> Path:
    """Join *segments* onto *root*.

    Raises:
        CachePathError: If a segment is ``..``, which would escape *root*.
    """
    if ".." in segments:
        raise CachePathError(f"Address segments may not contain '..': {'/'.join(segments)}")
    return root.joinpath(*[s for s in segments if s and s != "."])


def ensure_directory(path: Path) -> Path:
    """Create *path* and its parents if needed.

    Raises:
        CacheDirectoryError: If the directory cannot be created.
    """
    try:
        path.mkdir(mode=DIRECTORY_MODE, parents=True, exist_ok=True)
    except OSError as exc:
        raise CacheDirectoryError(f"Cannot create cache directory {path}: {exc}", path) from exc
    return path


def merge_params(
    request_params: Optional[Mapping[str, Any]],
    extra_params: Optional[Mapping[str, Any]],
) -> dict[str, Any]:
    """Merge request input with a cache's additional parameters.

    Additional parameters win when both define the same key.
    """
    merged: dict[str, Any] = dict(request_params or {})
    merged.update(extra_params or {})
    return merged


def canonical_json(params: Mapping[str, Any]) -> str:
    """Serialise *params* deterministically (sorted keys, compact separators)."""
    return json.dumps(params, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str)


def derive_key(params: Mapping[str, Any], endpoint: str) -> str:
    """Return the entry filename for *params* requested at *endpoint*."""
    raw = canonical_json(params) + endpoint
    return hashlib.sha256(raw.encode("utf-8")).hexdigest() + ENTRY_SUFFIX


class KeyDeriver:
    """Derives directories and keys relative to one cache root.

    Args:
        root: The cache root. Every derived directory is a subpath of it.
    """

    def __init__(self, root: Path) -> None:
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    def derive(self, uri: str, params: Mapping[str, Any]) -> DerivedLocation:
        """Compute the directory, filename and endpoint for *uri* and *params*.

        Pure: the directory is not created here. See :func:`ensure_directory`.
        """
        segments = parse_uri(uri)
        endpoint = segments[-1]
        directory = derive_directory(self._root, segments[:-1])
        parameters = dict(params)
        return DerivedLocation(
            directory=directory,
            filename=derive_key(parameters, endpoint),
            endpoint=endpoint,
            parameters=parameters,
        )

    def scope_directory(self, uri: str) -> Path:
        """Directory covering a whole address, e.g. ``/queries/data/`` -> ``<root>/queries/data``.

        Unlike :meth:`derive`, every segment is treated as a directory.
        """
        return derive_directory(self._root, parse_uri(uri))
