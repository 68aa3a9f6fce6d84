"""Coin caches and their snapshot ("momento") codec.

A cache is a stack of coins. ``deposit`` pushes onto the end and ``withdraw``
pops the most recently deposited coin, so snapshots must keep token order for a
restored cache to hand coins out in the same sequence.
"""

from __future__ import annotations

import json
import logging
import math
from typing import Callable, Iterable

from .errors import EmptyCacheError, MalformedSnapshotError
from .models import CellIndex, Token

logger = logging.getLogger("geocoins.cache")

CacheListener = Callable[["Cache"], None]


def encode_snapshot(tokens: Iterable[Token]) -> str:
    payload = [{"serial": token.serial, "origin": token.origin.to_dict()} for token in tokens]
    return json.dumps(payload)


def decode_snapshot(text: str | None) -> list[Token]:
    """Decode snapshot text into coins, raising ``MalformedSnapshotError`` on bad input."""
    if not text:
        raise MalformedSnapshotError("Snapshot is empty")

    try:
        payload = json.loads(text)
    except (TypeError, json.JSONDecodeError) as exc:
        raise MalformedSnapshotError(f"Snapshot is not valid JSON: {exc}") from exc

    if not isinstance(payload, list):
        raise MalformedSnapshotError("Snapshot must be a JSON list")

    tokens: list[Token] = []
    for entry in payload:
        try:
            origin = entry["origin"]
            tokens.append(
                Token(
                    serial=str(entry["serial"]),
                    origin=CellIndex(i=_as_int(origin["i"]), j=_as_int(origin["j"])),
                )
            )
        except (TypeError, KeyError, ValueError) as exc:
            raise MalformedSnapshotError(f"Invalid coin entry: {entry!r}") from exc
    return tokens


def _as_int(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Expected an integer cell coordinate, got {value!r}")
    if isinstance(value, float) and (not math.isfinite(value) or not value.is_integer()):
        raise ValueError(f"Expected an integer cell coordinate, got {value!r}")
    return int(value)


class Cache:
    """Mutable LIFO container of coins located at one grid cell."""

    def __init__(self, cell: CellIndex, tokens: Iterable[Token] = ()) -> None:
        self.cell = cell
        self._tokens: list[Token] = list(tokens)
        self._listeners: list[CacheListener] = []

    @property
    def tokens(self) -> tuple[Token, ...]:
        return tuple(self._tokens)

    def count(self) -> int:
        return len(self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)

    def __repr__(self) -> str:
        return f"Cache(cell=({self.cell.i}, {self.cell.j}), coins={len(self._tokens)})"

    def peek(self) -> Token | None:
        """Return the coin ``withdraw`` would hand out next, without removing it."""
        return self._tokens[-1] if self._tokens else None

    def deposit(self, token: Token | None) -> None:
        if token is None:
            return
        self._tokens.append(token)
        self._notify()

    def withdraw(self) -> Token:
        """Pop and return the most recently deposited coin."""
        if not self._tokens:
            raise EmptyCacheError(f"No coins left in cache at {self.cell.key}")
        token = self._tokens.pop()
        self._notify()
        return token

    def serialize(self) -> str:
        return encode_snapshot(self._tokens)

    def restore(self, snapshot: str | None) -> bool:
        """Replace the coins with the snapshot's; leave the cache untouched if it is unusable."""
        try:
            tokens = decode_snapshot(snapshot)
        except MalformedSnapshotError as exc:
            logger.warning("snapshot_restore_skipped", extra={"cell": self.cell.key, "reason": str(exc)})
            return False

        self._tokens = tokens
        self._notify()
        return True

    def subscribe(self, listener: CacheListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: CacheListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)


def transfer(source: Cache, destination: Cache) -> Token:
    """Move the top coin of ``source`` onto ``destination``."""
    token = source.withdraw()
    destination.deposit(token)
    return token
