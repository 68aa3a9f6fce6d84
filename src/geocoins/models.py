from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """Continuous latitude/longitude coordinate."""

    lat: float
    long: float

    def to_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "long": self.long}


@dataclass(frozen=True, slots=True)
class CellIndex:
    """Discrete grid coordinate. Equal iff ``i`` and ``j`` match."""

    i: int
    j: int

    @property
    def key(self) -> str:
        return f"{self.i},{self.j}"

    def to_dict(self) -> dict[str, int]:
        return {"i": self.i, "j": self.j}


@dataclass(frozen=True, slots=True)
class Token:
    """A collectible coin, identified by its serial and the cell it was minted in."""

    serial: str
    origin: CellIndex

    @property
    def label(self) -> str:
        return f"{self.origin.i}:{self.origin.j}#{self.serial}"
