"""Session orchestration: the player, the board and persistence together."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from .board import Board
from .cache import Cache, CacheListener, transfer
from .config import Settings
from .generation import CacheGenerator
from .grid import CellRegistry
from .models import CellIndex, GeoPoint, Token
from .persistence import InMemoryStateStore, JsonFileStateStore, PersistenceManager, SessionRecord
from .travel import TravelPath

# The player's inventory is a cache that never sits on the board.
PLAYER_CELL = CellIndex(i=0, j=0)


class Direction(str, Enum):
    """One-tile movement steps as ``(di, dj)``."""

    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"

    @property
    def delta(self) -> tuple[int, int]:
        return {
            Direction.NORTH: (1, 0),
            Direction.SOUTH: (-1, 0),
            Direction.EAST: (0, 1),
            Direction.WEST: (0, -1),
        }[self]


@dataclass(slots=True)
class Player:
    location: GeoPoint
    inventory: Cache


class GameSession:
    """Owns one play session and keeps board, player and storage in step."""

    def __init__(
        self,
        *,
        board: Board,
        persistence: PersistenceManager,
        start_location: GeoPoint,
        logger: logging.Logger | None = None,
    ) -> None:
        self.board = board
        self.persistence = persistence
        self.start_location = start_location
        self.player = Player(location=start_location, inventory=Cache(PLAYER_CELL))
        self.travel = TravelPath()
        self._center: CellIndex | None = None
        self._logger = logger or logging.getLogger("geocoins.session")

    @classmethod
    def from_settings(cls, config: Settings, *, persist: bool = True) -> GameSession:
        generator = CacheGenerator(
            config.seed,
            spawn_probability=config.spawn_probability,
            max_initial_coins=config.max_initial_coins,
        )
        board = Board(
            tile_width=config.tile_width,
            visibility_radius=config.visibility_radius,
            generator=generator,
            registry=CellRegistry(max_cells=config.max_known_cells),
        )
        store = JsonFileStateStore(config.state_dir) if persist else InMemoryStateStore()
        return cls(
            board=board,
            persistence=PersistenceManager(store, key=config.state_key),
            start_location=GeoPoint(lat=config.start_lat, long=config.start_long),
        )

    @property
    def cell(self) -> CellIndex:
        return self.board.cell_for(self.player.location)

    @property
    def active_caches(self) -> dict[CellIndex, Cache]:
        return self.board.active_caches

    def subscribe(self, listener: CacheListener) -> None:
        """Register a callback fired whenever the player's coin holdings change."""
        self.player.inventory.subscribe(listener)

    def unsubscribe(self, listener: CacheListener) -> None:
        self.player.inventory.unsubscribe(listener)

    def start(self) -> bool:
        """Restore the saved session if there is one, then draw the board.

        Returns ``True`` when a saved session was restored.
        """
        record = self.persistence.load()
        if record is None:
            self.player.location = self.start_location
            self.travel.jump(self.start_location)
            self._redraw()
            return False

        self.board.load_snapshots(record.momentos())
        self.player.inventory.restore(record.player_coins)
        self.player.location = record.location()
        self.travel = TravelPath(record.segments())
        if self.travel.last_point != self.player.location:
            self.travel.jump(self.player.location)
        self._redraw()
        self._logger.info(
            "session_restored",
            extra={"cell": self.cell.key, "player_coins": self.player.inventory.count()},
        )
        return True

    def move_to(self, point: GeoPoint) -> None:
        """Player moved to ``point`` by walking."""
        self.travel.record(point)
        self._relocate(point)

    def jump_to(self, point: GeoPoint) -> None:
        """Player position was reset externally, e.g. by a geolocation fix."""
        self.travel.jump(point)
        self._relocate(point)

    def step(self, direction: Direction) -> GeoPoint:
        di, dj = direction.delta
        width = self.board.tile_width
        point = GeoPoint(
            lat=self.player.location.lat + di * width,
            long=self.player.location.long + dj * width,
        )
        self.move_to(point)
        return point

    def collect(self, cell: CellIndex) -> Token:
        """Move the top coin of the cache at ``cell`` into the player's inventory."""
        token = transfer(self._active_cache(cell), self.player.inventory)
        self._logger.info("coin_collected", extra={"cell": cell.key, "coin": token.label})
        self.save()
        return token

    def deposit(self, cell: CellIndex) -> Token:
        """Move the player's most recent coin into the cache at ``cell``."""
        token = transfer(self.player.inventory, self._active_cache(cell))
        self._logger.info("coin_deposited", extra={"cell": cell.key, "coin": token.label})
        self.save()
        return token

    def save(self) -> bool:
        self.board.save_snapshots()
        return self.persistence.save(self.to_record())

    def to_record(self) -> SessionRecord:
        return SessionRecord.build(
            player_location=self.player.location,
            player_coins=self.player.inventory.serialize(),
            cache_momentos=self.board.snapshot_items(),
            line_points=self.travel.segments,
        )

    def reset(self) -> None:
        """Forget all progress and start over at the start location."""
        self.persistence.clear()
        self.board.clear()
        self.player.inventory.restore("[]")
        self.travel.clear()
        self.player.location = self.start_location
        self.travel.jump(self.start_location)
        self._redraw()
        self._logger.info("session_reset")

    def _relocate(self, point: GeoPoint) -> None:
        self.player.location = point
        if self.cell != self._center:
            self._redraw()
        self.save()

    def _redraw(self) -> None:
        self._center = self.cell
        self.board.materialize(self.player.location)

    def _active_cache(self, cell: CellIndex) -> Cache:
        cache = self.board.cache_at(cell)
        if cache is None:
            raise KeyError(f"No active cache at cell {cell.key}")
        return cache
