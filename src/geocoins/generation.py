"""Deterministic procedural generation of caches.

Every draw comes from ``luck``, a pure hash of a string key, so the same seed
always yields the same world layout without storing it.
"""

from __future__ import annotations

import hashlib

from .cache import Cache
from .models import CellIndex, Token

SPAWN_DOMAIN = "spawn"
COIN_COUNT_DOMAIN = "coin-count"
DEFAULT_SPAWN_PROBABILITY = 0.1
DEFAULT_MAX_INITIAL_COINS = 5

_HASH_SPACE = float(2**64)


def luck(key: str) -> float:
    """Map ``key`` to a reproducible value in ``[0, 1)``."""
    h = hashlib.blake2b(digest_size=8)
    h.update(key.encode("utf-8"))
    return int.from_bytes(h.digest(), "little", signed=False) / _HASH_SPACE


def _cell_key(cell: CellIndex, *parts: str) -> str:
    return ",".join([str(cell.i), str(cell.j), *parts])


def should_spawn(cell: CellIndex, seed: str, probability: float = DEFAULT_SPAWN_PROBABILITY) -> bool:
    return luck(_cell_key(cell, SPAWN_DOMAIN, seed)) < probability


def initial_token_count(cell: CellIndex, max_initial: int, seed: str = "") -> int:
    return int(luck(_cell_key(cell, COIN_COUNT_DOMAIN, seed)) * max_initial)


def token_serial(cell: CellIndex, ordinal: int) -> str:
    # Serials only need to be unique within the minting cell; the origin cell
    # completes a coin's identity.
    return str(ordinal)


class CacheGenerator:
    """Decides where caches spawn and mints their starting coins."""

    def __init__(
        self,
        seed: str,
        *,
        spawn_probability: float = DEFAULT_SPAWN_PROBABILITY,
        max_initial_coins: int = DEFAULT_MAX_INITIAL_COINS,
    ) -> None:
        if not 0.0 <= spawn_probability <= 1.0:
            raise ValueError("spawn_probability must be within [0, 1]")
        if max_initial_coins < 0:
            raise ValueError("max_initial_coins must not be negative")
        self.seed = seed
        self.spawn_probability = spawn_probability
        self.max_initial_coins = max_initial_coins

    def should_spawn(self, cell: CellIndex) -> bool:
        return should_spawn(cell, self.seed, self.spawn_probability)

    def initial_token_count(self, cell: CellIndex) -> int:
        return initial_token_count(cell, self.max_initial_coins, self.seed)

    def mint(self, cell: CellIndex) -> list[Token]:
        return [
            Token(serial=token_serial(cell, ordinal), origin=cell)
            for ordinal in range(self.initial_token_count(cell))
        ]

    def generate(self, cell: CellIndex) -> Cache | None:
        """Return a freshly generated cache for ``cell``, or ``None`` if none spawns there."""
        if not self.should_spawn(cell):
            return None
        return Cache(cell, self.mint(cell))
