"""The game board: visibility window, active caches and dormant snapshots."""

from __future__ import annotations

import logging
from typing import Iterable

from .cache import Cache
from .generation import CacheGenerator
from .grid import CellRegistry, CoordinateMapper
from .models import CellIndex, GeoPoint


class Board:
    """Owns the grid and materializes caches around the player.

    A cell's cache moves through three states. Unvisited cells consult the
    generator. Active caches are live objects inside the visibility window.
    Dormant caches exist only as snapshots and are restored from them, never
    regenerated, when the player comes back.
    """

    def __init__(
        self,
        *,
        tile_width: float,
        visibility_radius: int,
        generator: CacheGenerator,
        registry: CellRegistry | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        if visibility_radius < 0:
            raise ValueError("visibility_radius must not be negative")
        self.registry = registry if registry is not None else CellRegistry()
        window = (2 * visibility_radius + 1) ** 2
        if self.registry.max_cells is not None and self.registry.max_cells < window:
            raise ValueError(
                f"Cell registry bound {self.registry.max_cells} is smaller than the {window}-cell visibility window"
            )
        self.mapper = CoordinateMapper(tile_width, self.registry)
        self.visibility_radius = visibility_radius
        self.generator = generator
        self._logger = logger or logging.getLogger("geocoins.board")

        self._active: dict[CellIndex, Cache] = {}
        self._snapshots: dict[CellIndex, str] = {}

    @property
    def tile_width(self) -> float:
        return self.mapper.tile_width

    @property
    def active_caches(self) -> dict[CellIndex, Cache]:
        return dict(self._active)

    def cell_for(self, point: GeoPoint) -> CellIndex:
        return self.mapper.cell_for(point)

    def point_for(self, cell: CellIndex) -> GeoPoint:
        return self.mapper.point_for(cell)

    def cell_bounds(self, cell: CellIndex) -> tuple[GeoPoint, GeoPoint]:
        return self.mapper.bounds_for(cell)

    def visible_cells(self, center: CellIndex) -> list[CellIndex]:
        radius = self.visibility_radius
        return [
            self.registry.canonicalize(center.i + di, center.j + dj)
            for di in range(-radius, radius + 1)
            for dj in range(-radius, radius + 1)
        ]

    def cache_at(self, cell: CellIndex) -> Cache | None:
        return self._active.get(cell)

    def snapshot_for(self, cell: CellIndex) -> str | None:
        return self._snapshots.get(cell)

    def snapshot_items(self) -> list[tuple[CellIndex, str]]:
        return list(self._snapshots.items())

    def save_snapshots(self) -> None:
        """Capture every active cache into the snapshot map."""
        for cell, cache in self._active.items():
            self._snapshots[cell] = cache.serialize()

    def load_snapshots(self, items: Iterable[tuple[CellIndex, str]]) -> None:
        """Replace all snapshots with ``items`` and drop the active caches."""
        self._active = {}
        self._snapshots = {self.registry.intern(cell): snapshot for cell, snapshot in items}
        self._logger.info("snapshots_loaded", extra={"snapshot_count": len(self._snapshots)})

    def clear(self) -> None:
        self._active = {}
        self._snapshots = {}

    def materialize(self, location: GeoPoint) -> dict[CellIndex, Cache]:
        """Rebuild the active caches for the window around ``location``."""
        self.save_snapshots()
        center = self.cell_for(location)

        active: dict[CellIndex, Cache] = {}
        restored = generated = 0
        for cell in self.visible_cells(center):
            snapshot = self._snapshots.get(cell)
            if snapshot is not None:
                cache = Cache(cell)
                cache.restore(snapshot)
                restored += 1
            else:
                cache = self.generator.generate(cell)
                if cache is None:
                    continue
                generated += 1
            active[cell] = cache

        self._active = active
        self._logger.info(
            "board_materialized",
            extra={
                "center": center.key,
                "active_count": len(active),
                "restored": restored,
                "generated": generated,
            },
        )
        return dict(active)
