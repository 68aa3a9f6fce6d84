from __future__ import annotations

import json
from pathlib import Path

import pytest

from geocoins.errors import StorageUnavailableError
from geocoins.models import CellIndex, GeoPoint
from geocoins.persistence import (
    InMemoryStateStore,
    JsonFileStateStore,
    PersistenceManager,
    SessionRecord,
)


class BrokenStore:
    def __init__(self) -> None:
        self.calls = 0

    def read(self, key: str) -> str | None:
        self.calls += 1
        raise StorageUnavailableError("storage disabled")

    def write(self, key: str, value: str) -> None:
        self.calls += 1
        raise StorageUnavailableError("storage disabled")

    def delete(self, key: str) -> None:
        self.calls += 1
        raise StorageUnavailableError("storage disabled")


def _record() -> SessionRecord:
    return SessionRecord.build(
        player_location=GeoPoint(lat=36.9895, long=-122.0628),
        player_coins='[{"serial": "0", "origin": {"i": 1, "j": 2}}]',
        cache_momentos=[(CellIndex(1, 2), "[]"), (CellIndex(-4, 7), '[{"serial": "3", "origin": {"i": -4, "j": 7}}]')],
        line_points=[
            [GeoPoint(0.0, 0.0), GeoPoint(0.0001, 0.0)],
            [GeoPoint(5.0, 5.0)],
        ],
    )


def test_load_without_saved_state_returns_none() -> None:
    manager = PersistenceManager(InMemoryStateStore())

    assert manager.load() is None
    assert manager.available is True


def test_save_then_load_is_field_for_field_equal() -> None:
    manager = PersistenceManager(InMemoryStateStore())
    record = _record()

    assert manager.save(record) is True
    loaded = manager.load()

    assert loaded == record
    assert loaded.location() == GeoPoint(lat=36.9895, long=-122.0628)
    assert loaded.momentos() == record.momentos()
    assert [len(segment) for segment in loaded.segments()] == [2, 1]


def test_json_file_store_round_trip_and_clear(tmp_path: Path) -> None:
    manager = PersistenceManager(JsonFileStateStore(tmp_path / "state"), key="mapState")
    manager.save(_record())

    stored = json.loads((tmp_path / "state" / "mapState.json").read_text(encoding="utf-8"))
    assert set(stored) == {"playerLocation", "playerCoins", "cacheMomentos", "linePoints"}
    assert stored["cacheMomentos"][0] == [{"i": 1, "j": 2}, "[]"]
    assert manager.load() == _record()

    manager.clear()
    assert not (tmp_path / "state" / "mapState.json").exists()
    assert manager.load() is None


def test_invalid_record_is_treated_as_absent() -> None:
    store = InMemoryStateStore()
    store.write("mapState", '{"playerCoins": "[]"}')
    manager = PersistenceManager(store)

    assert manager.load() is None

    store.write("mapState", "not json at all")
    assert manager.load() is None


def test_unavailable_storage_switches_to_memory_only() -> None:
    store = BrokenStore()
    manager = PersistenceManager(store)

    assert manager.load() is None
    assert manager.available is False
    assert manager.save(_record()) is False
    manager.clear()
    assert store.calls == 1


def test_undecodable_save_file_is_treated_as_absent(tmp_path: Path) -> None:
    (tmp_path / "mapState.json").write_bytes(b"\xff\xfe{garbage")
    manager = PersistenceManager(JsonFileStateStore(tmp_path))

    assert manager.load() is None
    assert manager.available is True


def test_non_finite_location_is_treated_as_absent() -> None:
    store = InMemoryStateStore()
    store.write("mapState", '{"playerLocation": {"lat": NaN, "long": 0.0}}')
    manager = PersistenceManager(store)

    assert manager.load() is None

    store.write("mapState", '{"playerLocation": {"lat": 0.0, "long": 0.0}, "linePoints": [[{"lat": Infinity, "long": 0.0}]]}')
    assert manager.load() is None


def test_failed_write_leaves_no_temp_file(tmp_path: Path, monkeypatch) -> None:
    store = JsonFileStateStore(tmp_path)

    def fail_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr("geocoins.persistence.os.replace", fail_replace)

    with pytest.raises(StorageUnavailableError):
        store.write("mapState", "{}")
    assert list(tmp_path.iterdir()) == []
