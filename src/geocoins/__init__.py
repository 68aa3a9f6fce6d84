"""Location-based coin collecting game: grid, caches and persisted world state."""

from .board import Board
from .cache import Cache, transfer
from .errors import EmptyCacheError, GeocoinsError, MalformedSnapshotError, StorageUnavailableError
from .generation import CacheGenerator
from .grid import CellRegistry, CoordinateMapper
from .models import CellIndex, GeoPoint, Token
from .persistence import InMemoryStateStore, JsonFileStateStore, PersistenceManager, SessionRecord, StateStore
from .session import Direction, GameSession, Player
from .travel import TravelPath

__all__ = [
    "Board",
    "Cache",
    "CacheGenerator",
    "CellIndex",
    "CellRegistry",
    "CoordinateMapper",
    "Direction",
    "EmptyCacheError",
    "GameSession",
    "GeoPoint",
    "GeocoinsError",
    "InMemoryStateStore",
    "JsonFileStateStore",
    "MalformedSnapshotError",
    "PersistenceManager",
    "Player",
    "SessionRecord",
    "StateStore",
    "StorageUnavailableError",
    "Token",
    "TravelPath",
    "transfer",
]
