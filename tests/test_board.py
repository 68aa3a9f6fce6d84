from __future__ import annotations

import pytest

from geocoins.board import Board
from geocoins.generation import CacheGenerator, initial_token_count, should_spawn
from geocoins.grid import CellRegistry
from geocoins.models import CellIndex, GeoPoint

from conftest import ORIGIN, TILE_WIDTH, FixedGenerator

FAR_AWAY = GeoPoint(lat=1.0, long=1.0)
SEED = "board-seed"


def test_visible_cells_form_canonical_square(board: Board) -> None:
    board.visibility_radius = 2
    center = board.cell_for(ORIGIN)

    cells = board.visible_cells(center)

    assert len(cells) == 25
    assert len(set(cells)) == 25
    assert CellIndex(-2, 2) in cells
    assert all(cell is board.registry.canonicalize(cell.i, cell.j) for cell in cells)


def test_materialize_activates_window(board: Board) -> None:
    active = board.materialize(ORIGIN)

    assert len(active) == 9
    assert board.cache_at(CellIndex(0, 0)).count() == 3
    assert board.cache_at(CellIndex(2, 0)) is None


def test_dormant_cache_keeps_mutation(board: Board, generator: FixedGenerator) -> None:
    board.materialize(ORIGIN)
    cache = board.cache_at(CellIndex(0, 0))
    assert cache is not None
    taken = cache.withdraw()

    board.materialize(FAR_AWAY)
    assert board.cache_at(CellIndex(0, 0)) is None
    assert board.snapshot_for(CellIndex(0, 0)) is not None

    generator.calls.clear()
    board.materialize(ORIGIN)

    restored = board.cache_at(CellIndex(0, 0))
    assert restored is not None
    assert restored.count() == 2
    assert taken not in restored.tokens
    assert generator.calls == []


def test_save_snapshots_is_idempotent(board: Board) -> None:
    board.materialize(ORIGIN)
    board.save_snapshots()
    first = board.snapshot_items()
    board.save_snapshots()

    assert board.snapshot_items() == first
    assert len(first) == 9


def test_cold_start_matches_generator() -> None:
    generator = CacheGenerator(SEED, spawn_probability=0.1, max_initial_coins=5)
    board = Board(tile_width=TILE_WIDTH, visibility_radius=8, generator=generator)

    active = board.materialize(ORIGIN)

    for cell in board.visible_cells(board.cell_for(ORIGIN)):
        if should_spawn(cell, SEED):
            assert active[cell].count() == initial_token_count(cell, 5, SEED)
        else:
            assert cell not in active


def test_loaded_snapshots_take_precedence(board: Board, generator: FixedGenerator) -> None:
    board.load_snapshots([(CellIndex(0, 0), "[]"), (CellIndex(1, 1), "garbage")])
    board.materialize(ORIGIN)

    assert board.cache_at(CellIndex(0, 0)).count() == 0
    assert board.cache_at(CellIndex(1, 1)).count() == 0
    assert CellIndex(0, 0) not in generator.calls
    assert board.cache_at(CellIndex(-1, -1)).count() == 3


def test_clear_forgets_everything(board: Board) -> None:
    board.materialize(ORIGIN)
    board.save_snapshots()
    board.clear()

    assert board.active_caches == {}
    assert board.snapshot_items() == []


def test_bounded_registry_keeps_window_cells_canonical(generator: FixedGenerator) -> None:
    registry = CellRegistry(max_cells=9)
    for n in range(9):
        registry.canonicalize(100, n)
    board = Board(tile_width=TILE_WIDTH, visibility_radius=1, generator=generator, registry=registry)

    active = board.materialize(ORIGIN)
    board.materialize(GeoPoint(lat=0.00015, long=0.00005))
    board.materialize(ORIGIN)

    assert len(registry) == 9
    for cell in board.active_caches:
        assert cell is registry.canonicalize(cell.i, cell.j)
    assert set(active) == set(board.active_caches)


def test_registry_bound_must_cover_window(generator: FixedGenerator) -> None:
    with pytest.raises(ValueError):
        Board(tile_width=TILE_WIDTH, visibility_radius=1, generator=generator, registry=CellRegistry(max_cells=4))
