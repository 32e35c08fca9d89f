"""Tests for simplecache.store -- locked entry reads and writes."""

from __future__ import annotations

import json
import threading
from pathlib import Path

import pytest

from simplecache.exceptions import CacheDecodeError, CachePathError, InvalidUsageError
from simplecache.models import CacheEntry
from simplecache.store import EntryStore


@pytest.fixture()
def store(cache_root: Path) -> EntryStore:
    return EntryStore(cache_root)


def _entry(**overrides) -> CacheEntry:
    values = {"timestamp": 1_700_000_000, "parameters": {"a": 1}, "endpoint": "x.php", "data": {"v": 1}}
    values.update(overrides)
    return CacheEntry(**values)


class TestWriteRead:
    def test_round_trip(self, store: EntryStore, cache_root: Path) -> None:
        store.write(cache_root / "api", "k.json", _entry())
        entry = store.read(cache_root / "api", "k.json")
        assert entry == _entry()

    def test_write_creates_directory(self, store: EntryStore, cache_root: Path) -> None:
        path = store.write(cache_root / "a" / "b", "k.json", _entry())
        assert path == cache_root / "a" / "b" / "k.json"
        assert path.is_file()

    def test_on_disk_field_names(self, store: EntryStore, cache_root: Path) -> None:
        path = store.write(cache_root, "k.json", _entry())
        record = json.loads(path.read_text(encoding="utf-8"))
        assert set(record) == {"timestamp", "parameters", "endPoint", "data"}
        assert record["endPoint"] == "x.php"

    def test_shorter_rewrite_truncates(self, store: EntryStore, cache_root: Path) -> None:
        store.write(cache_root, "k.json", _entry(data={"long": "x" * 1000}))
        store.write(cache_root, "k.json", _entry(data={"s": 1}))
        assert store.read(cache_root, "k.json").data == {"s": 1}

    def test_missing_file_reads_none(self, store: EntryStore, cache_root: Path) -> None:
        assert store.read(cache_root, "nope.json") is None

    def test_missing_directory_reads_none(self, store: EntryStore, cache_root: Path) -> None:
        assert store.read(cache_root / "nowhere", "nope.json") is None

    def test_unserialisable_payload(self, store: EntryStore, cache_root: Path) -> None:
        with pytest.raises(InvalidUsageError):
            store.write(cache_root, "k.json", _entry(data={"x": object()}))
        assert not (cache_root / "k.json").exists()

    def test_reads_entry_written_by_other_tools(self, store: EntryStore, cache_root: Path) -> None:
        (cache_root / "k.json").write_text(
            json.dumps({"timestamp": "1700000000", "endPoint": "get.php", "data": [1]}),
            encoding="utf-8",
        )
        entry = store.read(cache_root, "k.json")
        assert entry.timestamp == 1_700_000_000
        assert entry.endpoint == "get.php"
        assert entry.parameters == {}

    @pytest.mark.parametrize(
        "parameters, endpoint",
        [([], "get.php"), ("page=2", "get.php"), ({"a": 1}, None), ({"a": 1}, 7)],
    )
    def test_loose_parameters_and_endpoint_still_decode(
        self, store: EntryStore, cache_root: Path, parameters, endpoint
    ) -> None:
        (cache_root / "k.json").write_text(
            json.dumps({"timestamp": 1_700_000_000, "parameters": parameters, "endPoint": endpoint, "data": {"v": 1}}),
            encoding="utf-8",
        )
        entry = store.read(cache_root, "k.json")
        assert entry.data == {"v": 1}
        assert isinstance(entry.parameters, dict)
        assert isinstance(entry.endpoint, str)


class TestDecodeFailures:
    @pytest.mark.parametrize(
        "content",
        ["", "{broken", "[1, 2]", '"text"', '{"data": 1}', '{"timestamp": "soon"}'],
    )
    def test_invalid_content(self, store: EntryStore, cache_root: Path, content: str) -> None:
        (cache_root / "k.json").write_text(content, encoding="utf-8")
        with pytest.raises(CacheDecodeError) as exc_info:
            store.read(cache_root, "k.json")
        assert exc_info.value.path == cache_root / "k.json"

    def test_invalid_utf8(self, store: EntryStore, cache_root: Path) -> None:
        (cache_root / "k.json").write_bytes(b"\xff\xfe\x00")
        with pytest.raises(CacheDecodeError):
            store.read(cache_root, "k.json")


class TestDelete:
    def test_delete_existing(self, store: EntryStore, cache_root: Path) -> None:
        path = store.write(cache_root, "k.json", _entry())
        assert store.delete(path) is True
        assert not path.exists()

    def test_delete_missing_is_not_an_error(self, store: EntryStore, cache_root: Path) -> None:
        assert store.delete(cache_root / "gone.json") is False


class TestContainment:
    def test_write_outside_root_refused(self, store: EntryStore, tmp_path: Path) -> None:
        with pytest.raises(CachePathError):
            store.write(tmp_path / "elsewhere", "k.json", _entry())

    def test_delete_outside_root_refused(self, store: EntryStore, tmp_path: Path) -> None:
        outside = tmp_path / "outside.json"
        outside.write_text("{}")
        with pytest.raises(CachePathError):
            store.delete(outside)
        assert outside.exists()

    def test_relative_escape_refused(self, store: EntryStore, cache_root: Path) -> None:
        with pytest.raises(CachePathError):
            store.read(cache_root / ".." / "x", "k.json")


class TestConcurrency:
    def test_concurrent_writers_leave_a_complete_entry(self, store: EntryStore, cache_root: Path) -> None:
        payloads = [{"writer": i, "blob": str(i) * (500 + i * 100)} for i in range(8)]

        def _write(payload: dict) -> None:
            for _ in range(10):
                store.write(cache_root, "k.json", _entry(data=payload))

        threads = [threading.Thread(target=_write, args=(p,)) for p in payloads]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        entry = store.read(cache_root, "k.json")
        assert entry is not None
        assert entry.data in payloads
