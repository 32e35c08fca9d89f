"""Tests for simplecache.keys -- address parsing, directories and key digests."""

from __future__ import annotations

import hashlib
from pathlib import Path

import pytest

from simplecache.exceptions import CacheDirectoryError, CachePathError
from simplecache.keys import (
    KeyDeriver,
    canonical_json,
    derive_directory,
    derive_key,
    ensure_directory,
    merge_params,
    parse_uri,
)


class TestParseUri:
    @pytest.mark.parametrize(
        "uri, expected",
        [
            ("/api/v1/users.php", ["api", "v1", "users.php"]),
            ("api/v1/users.php/", ["api", "v1", "users.php"]),
            ("\\api\\v1\\users.php", ["api", "v1", "users.php"]),
            ("/users.php", ["users.php"]),
            ("", [""]),
            ("/", [""]),
        ],
    )
    def test_segments(self, uri: str, expected: list[str]) -> None:
        assert parse_uri(uri) == expected


class TestDirectories:
    def test_joins_segments(self, tmp_path: Path) -> None:
        assert derive_directory(tmp_path, ["a", "b"]) == tmp_path / "a" / "b"

    def test_no_segments_is_root(self, tmp_path: Path) -> None:
        assert derive_directory(tmp_path, []) == tmp_path

    def test_empty_segments_skipped(self, tmp_path: Path) -> None:
        assert derive_directory(tmp_path, ["a", "", "b"]) == tmp_path / "a" / "b"

    def test_parent_segment_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(CachePathError):
            derive_directory(tmp_path, ["a", "..", "b"])

    def test_derivation_does_not_create(self, tmp_path: Path) -> None:
        KeyDeriver(tmp_path).derive("/x/y/z.php", {})
        assert not (tmp_path / "x").exists()

    def test_ensure_directory_creates_tree(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "b" / "c"
        assert ensure_directory(target) == target
        assert target.is_dir()
        ensure_directory(target)

    def test_ensure_directory_failure(self, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("x")
        with pytest.raises(CacheDirectoryError) as exc_info:
            ensure_directory(blocker / "sub")
        assert exc_info.value.path == blocker / "sub"


class TestKeys:
    def test_key_is_sha256_of_params_and_endpoint(self) -> None:
        expected = hashlib.sha256(b'{"a":1}get.php').hexdigest() + ".json"
        assert derive_key({"a": 1}, "get.php") == expected

    def test_canonical_json_sorts_keys(self) -> None:
        assert canonical_json({"b": 1, "a": {"d": 2, "c": 3}}) == '{"a":{"c":3,"d":2},"b":1}'

    def test_key_changes_with_params(self) -> None:
        assert derive_key({"a": 1}, "x") != derive_key({"a": 2}, "x")

    def test_key_changes_with_endpoint(self) -> None:
        assert derive_key({}, "x.php") != derive_key({}, "y.php")

    def test_merge_extra_params_win(self) -> None:
        assert merge_params({"a": 1, "b": 1}, {"b": 2}) == {"a": 1, "b": 2}

    def test_merge_handles_none(self) -> None:
        assert merge_params(None, None) == {}


class TestKeyDeriver:
    def test_derive(self, tmp_path: Path) -> None:
        location = KeyDeriver(tmp_path).derive("/api/v1/users.php", {"page": 2})
        assert location.directory == tmp_path / "api" / "v1"
        assert location.endpoint == "users.php"
        assert location.parameters == {"page": 2}
        assert location.filename == derive_key({"page": 2}, "users.php")
        assert location.path == tmp_path / "api" / "v1" / location.filename

    def test_derive_is_deterministic(self, tmp_path: Path) -> None:
        deriver = KeyDeriver(tmp_path)
        assert deriver.derive("/a/b.php", {"x": 1, "y": 2}) == deriver.derive("a/b.php/", {"y": 2, "x": 1})

    def test_scope_directory_uses_all_segments(self, tmp_path: Path) -> None:
        assert KeyDeriver(tmp_path).scope_directory("/queries/data/") == tmp_path / "queries" / "data"
