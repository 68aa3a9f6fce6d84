"""Grid geometry: point/cell conversion and canonical cell identities."""

from __future__ import annotations

import math
from collections import OrderedDict

from .models import CellIndex, GeoPoint


class CellRegistry:
    """Intern table that hands out one shared ``CellIndex`` per ``(i, j)``.

    With ``max_cells`` set, least-recently-used cells are evicted once the bound
    is exceeded. Evicted cells remain value-equal to their replacements, so
    callers still holding them keep working.
    """

    def __init__(self, max_cells: int | None = None) -> None:
        if max_cells is not None and max_cells < 1:
            raise ValueError("max_cells must be positive")
        self._max_cells = max_cells
        self._known: OrderedDict[str, CellIndex] = OrderedDict()

    @property
    def max_cells(self) -> int | None:
        return self._max_cells

    def canonicalize(self, i: int, j: int) -> CellIndex:
        key = f"{i},{j}"
        cell = self._known.get(key)
        if cell is None:
            cell = CellIndex(i=i, j=j)
            self._known[key] = cell
            if self._max_cells is not None and len(self._known) > self._max_cells:
                self._known.popitem(last=False)
        elif self._max_cells is not None:
            self._known.move_to_end(key)
        return cell

    def intern(self, cell: CellIndex) -> CellIndex:
        return self.canonicalize(cell.i, cell.j)

    def __len__(self) -> int:
        return len(self._known)

    def __contains__(self, cell: object) -> bool:
        return isinstance(cell, CellIndex) and cell.key in self._known


class CoordinateMapper:
    """Maps geographic points onto a square grid of ``tile_width`` degrees."""

    def __init__(self, tile_width: float, registry: CellRegistry | None = None) -> None:
        if tile_width <= 0:
            raise ValueError("tile_width must be positive")
        self.tile_width = tile_width
        self.registry = registry if registry is not None else CellRegistry()

    def cell_for(self, point: GeoPoint) -> CellIndex:
        i = math.floor(point.lat / self.tile_width)
        j = math.floor(point.long / self.tile_width)
        return self.registry.canonicalize(i, j)

    def point_for(self, cell: CellIndex) -> GeoPoint:
        """Return the centre of ``cell``."""
        half = self.tile_width / 2
        return GeoPoint(
            lat=cell.i * self.tile_width + half,
            long=cell.j * self.tile_width + half,
        )

    def bounds_for(self, cell: CellIndex) -> tuple[GeoPoint, GeoPoint]:
        """Return ``(top_left, bottom_right)`` corners of ``cell``."""
        top_left = GeoPoint(lat=cell.i * self.tile_width, long=cell.j * self.tile_width)
        bottom_right = GeoPoint(
            lat=(cell.i + 1) * self.tile_width,
            long=(cell.j + 1) * self.tile_width,
        )
        return top_left, bottom_right
