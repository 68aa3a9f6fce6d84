"""Durable session storage.

The whole session is written as a single JSON record under one key. Storage
backends implement the small ``StateStore`` protocol; the manager owns the wire
format and degrades to memory-only mode when the backend fails.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import StorageUnavailableError
from .models import CellIndex, GeoPoint

DEFAULT_STATE_KEY = "mapState"


class StateStore(Protocol):
    """Key/value string storage (browser local storage, a directory, ...)."""

    def read(self, key: str) -> str | None:
        """Return the stored text or ``None`` when the key is absent."""

    def write(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    def delete(self, key: str) -> None:
        """Remove ``key``; absent keys are ignored."""


class InMemoryStateStore:
    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    def read(self, key: str) -> str | None:
        return self._items.get(key)

    def write(self, key: str, value: str) -> None:
        self._items[key] = value

    def delete(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStateStore:
    """Stores each key as ``<directory>/<key>.json``, replaced atomically."""

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory).expanduser()

    def _path(self, key: str) -> Path:
        return self._directory / f"{key}.json"

    def read(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageUnavailableError(f"Cannot read {path}: {exc}") from exc

    def write(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._directory, prefix=f".{key}.", suffix=".tmp")
        except OSError as exc:
            raise StorageUnavailableError(f"Cannot write {path}: {exc}") from exc

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp_name, path)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise StorageUnavailableError(f"Cannot write {path}: {exc}") from exc

    def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageUnavailableError(f"Cannot delete {path}: {exc}") from exc


class PointRecord(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    lat: float
    long: float


class CellRecord(BaseModel):
    i: int
    j: int


class SessionRecord(BaseModel):
    """Wire format of a saved session."""

    model_config = ConfigDict(populate_by_name=True)

    player_location: PointRecord = Field(alias="playerLocation")
    player_coins: str = Field(default="[]", alias="playerCoins")
    cache_momentos: list[tuple[CellRecord, str]] = Field(default_factory=list, alias="cacheMomentos")
    line_points: list[list[PointRecord]] = Field(default_factory=list, alias="linePoints")

    @classmethod
    def build(
        cls,
        *,
        player_location: GeoPoint,
        player_coins: str,
        cache_momentos: list[tuple[CellIndex, str]],
        line_points: list[list[GeoPoint]],
    ) -> SessionRecord:
        return cls(
            player_location=PointRecord(**player_location.to_dict()),
            player_coins=player_coins,
            cache_momentos=[(CellRecord(**cell.to_dict()), snapshot) for cell, snapshot in cache_momentos],
            line_points=[[PointRecord(**point.to_dict()) for point in segment] for segment in line_points],
        )

    def location(self) -> GeoPoint:
        return GeoPoint(lat=self.player_location.lat, long=self.player_location.long)

    def momentos(self) -> list[tuple[CellIndex, str]]:
        return [(CellIndex(i=cell.i, j=cell.j), snapshot) for cell, snapshot in self.cache_momentos]

    def segments(self) -> list[list[GeoPoint]]:
        return [[GeoPoint(lat=point.lat, long=point.long) for point in segment] for segment in self.line_points]


class PersistenceManager:
    """Saves, loads and clears the session record."""

    def __init__(
        self,
        store: StateStore,
        *,
        key: str = DEFAULT_STATE_KEY,
        logger: logging.Logger | None = None,
    ) -> None:
        self._store = store
        self._key = key
        self._logger = logger or logging.getLogger("geocoins.persistence")
        self.available = True

    def save(self, record: SessionRecord) -> bool:
        if not self.available:
            return False
        payload = record.model_dump_json(by_alias=True)
        try:
            self._store.write(self._key, payload)
        except StorageUnavailableError as exc:
            self._go_offline(exc)
            return False
        self._logger.debug("session_saved", extra={"key": self._key, "bytes": len(payload)})
        return True

    def load(self) -> SessionRecord | None:
        """Return the saved record, or ``None`` when there is nothing usable to restore."""
        if not self.available:
            return None
        try:
            raw = self._store.read(self._key)
        except StorageUnavailableError as exc:
            self._go_offline(exc)
            return None
        except UnicodeDecodeError as exc:
            self._logger.warning("saved_session_invalid", extra={"key": self._key, "reason": str(exc)})
            return None

        if raw is None:
            self._logger.info("no_saved_session", extra={"key": self._key})
            return None

        try:
            record = SessionRecord.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as exc:
            self._logger.warning("saved_session_invalid", extra={"key": self._key, "reason": str(exc)})
            return None

        self._logger.info(
            "session_loaded",
            extra={"key": self._key, "snapshot_count": len(record.cache_momentos)},
        )
        return record

    def clear(self) -> None:
        if not self.available:
            return
        try:
            self._store.delete(self._key)
        except StorageUnavailableError as exc:
            self._go_offline(exc)

    def _go_offline(self, exc: StorageUnavailableError) -> None:
        self.available = False
        self._logger.warning("storage_unavailable", extra={"key": self._key, "reason": str(exc)})
