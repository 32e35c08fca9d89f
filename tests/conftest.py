"""Shared test fixtures for simplecache.

Provides isolated cache roots, injected settings, a controllable clock and
CLI runner fixtures. These fixtures are automatically discovered by pytest
and available to all test modules without explicit imports.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from simplecache.models import CacheSettings, RequestContext
from simplecache.output import reset_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time; CliRunner swaps those streams, so a stale manager would
    write to closed files in later tests.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep ambient cache settings and CGI variables out of every test.

    Clears the SIMPLE_CACHE_* and REQUEST_URI variables and moves into a
    fresh working directory so no stray ``simplecache.json`` is picked up.
    """
    for var in ["SIMPLE_CACHE_DIRECTORY", "SIMPLE_CACHE_ENABLED", "REQUEST_URI"]:
        monkeypatch.delenv(var, raising=False)
    workdir = tmp_path / "cwd"
    workdir.mkdir()
    monkeypatch.chdir(workdir)


# ---------------------------------------------------------------------------
# Cache fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def cache_root(tmp_path: Path) -> Path:
    """An existing, empty cache root directory."""
    root = tmp_path / "caches"
    root.mkdir()
    return root.resolve()


@pytest.fixture
def settings(cache_root: Path) -> CacheSettings:
    """Enabled settings pointing at :func:`cache_root`."""
    return CacheSettings(directory=cache_root, enabled=True)


@pytest.fixture
def request_context() -> RequestContext:
    """An empty request; tests bind addresses via ``forced_uri``."""
    return RequestContext()


class FakeClock:
    """A manually advanced clock returning seconds since the epoch."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_cache(settings: CacheSettings, request_context: RequestContext, clock: FakeClock):
    """Factory building a SimpleCache with the shared settings and clock."""
    from simplecache.cache import SimpleCache

    def _make(freshness: int = 3600, params=None, uri: str = "/api/v1/test.php", **kwargs):
        kwargs.setdefault("settings", settings)
        kwargs.setdefault("request", request_context)
        kwargs.setdefault("clock", clock)
        return SimpleCache(freshness, params, uri, **kwargs)

    return _make


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
