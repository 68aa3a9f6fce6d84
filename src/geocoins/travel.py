"""Recorded travel history, split into polylines at every teleport."""

from __future__ import annotations

from typing import Iterable, Sequence

from .models import GeoPoint


class TravelPath:
    def __init__(self, segments: Iterable[Sequence[GeoPoint]] = ()) -> None:
        self._segments: list[list[GeoPoint]] = [list(segment) for segment in segments if segment]

    @property
    def segments(self) -> list[list[GeoPoint]]:
        return [list(segment) for segment in self._segments]

    @property
    def last_point(self) -> GeoPoint | None:
        if not self._segments:
            return None
        return self._segments[-1][-1]

    def __len__(self) -> int:
        return len(self._segments)

    def record(self, point: GeoPoint) -> None:
        """Extend the current polyline with ``point``."""
        if not self._segments:
            self._segments.append([point])
            return
        if self._segments[-1][-1] != point:
            self._segments[-1].append(point)

    def jump(self, point: GeoPoint) -> None:
        """Start a new polyline at ``point`` so no line is drawn across the jump."""
        if self._segments and len(self._segments[-1]) == 1:
            self._segments[-1] = [point]
            return
        self._segments.append([point])

    def clear(self) -> None:
        self._segments = []
