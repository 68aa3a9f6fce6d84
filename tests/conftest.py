from __future__ import annotations

import pytest

from geocoins.board import Board
from geocoins.cache import Cache
from geocoins.models import CellIndex, GeoPoint, Token

TILE_WIDTH = 1e-4
ORIGIN = GeoPoint(lat=0.00005, long=0.00005)


class FixedGenerator:
    """Spawns a cache with ``coins`` coins in every cell and records each call."""

    def __init__(self, coins: int = 3) -> None:
        self.coins = coins
        self.calls: list[CellIndex] = []

    def generate(self, cell: CellIndex) -> Cache:
        self.calls.append(cell)
        return Cache(cell, [Token(serial=str(n), origin=cell) for n in range(self.coins)])


@pytest.fixture
def generator() -> FixedGenerator:
    return FixedGenerator()


@pytest.fixture
def board(generator: FixedGenerator) -> Board:
    return Board(tile_width=TILE_WIDTH, visibility_radius=1, generator=generator)
