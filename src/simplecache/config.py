"""Configuration resolution for simplecache.

The cache reads exactly two settings -- a root directory and an enable
flag -- and resolves them once into a :class:`~simplecache.models.CacheSettings`
that is then injected into every :class:`~simplecache.cache.SimpleCache`.

Precedence (high to low):
    1. Explicit arguments (``cli_directory``, ``cli_enabled``)
    2. Environment variables (``SIMPLE_CACHE_DIRECTORY``, ``SIMPLE_CACHE_ENABLED``)
    3. Project config (``./simplecache.json``)
    4. Defaults (no directory, enabled)

A missing directory is not an error: the resulting settings are simply
inactive and every cache built from them is a no-op.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from simplecache.exceptions import ConfigError
from simplecache.models import CacheSettings

ENV_DIRECTORY = "SIMPLE_CACHE_DIRECTORY"
ENV_ENABLED = "SIMPLE_CACHE_ENABLED"

_PROJECT_CONFIG_FILENAME = "simplecache.json"


def load_project_config(directory: Optional[Path] = None) -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``simplecache.json``.

    Args:
        directory: Where to look for the file. Defaults to the current
            working directory.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = (directory or Path.cwd()) / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError, OSError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


def resolve_settings(
    cli_directory: Optional[str | Path] = None,
    cli_enabled: Optional[bool | str] = None,
    environ: Optional[Mapping[str, str]] = None,
    project_dir: Optional[Path] = None,
) -> CacheSettings:
    """Resolve cache settings with the full precedence chain.

    Args:
        cli_directory: Explicit cache root, overriding everything else.
        cli_enabled: Explicit enable flag, overriding everything else.
        environ: Environment mapping. Defaults to :data:`os.environ`.
        project_dir: Directory holding ``simplecache.json``. Defaults to
            the current working directory.

    Returns:
        The validated :class:`~simplecache.models.CacheSettings`.

    Raises:
        ConfigError: If the project config is malformed or the enable flag
            is not a recognisable boolean.
    """
    env = os.environ if environ is None else environ

    # 4. Defaults
    values: dict[str, Any] = {"directory": None, "enabled": True}

    # 3. Project-local config
    project = load_project_config(project_dir)
    if project is not None:
        if "directory" in project:
            values["directory"] = project["directory"]
        if "enabled" in project:
            values["enabled"] = project["enabled"]

    # 2. Environment variables
    if ENV_DIRECTORY in env:
        values["directory"] = env[ENV_DIRECTORY]
    if ENV_ENABLED in env:
        values["enabled"] = env[ENV_ENABLED]

    # 1. Explicit arguments
    if cli_directory is not None:
        values["directory"] = cli_directory
    if cli_enabled is not None:
        values["enabled"] = cli_enabled

    try:
        return CacheSettings.model_validate(values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid cache settings: {exc}") from exc
