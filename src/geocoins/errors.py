"""Error taxonomy for the world-state core."""


class GeocoinsError(Exception):
    """Base class for geocoins failures."""


class EmptyCacheError(GeocoinsError):
    """Raised when a withdrawal is attempted on a cache with no coins."""


class MalformedSnapshotError(GeocoinsError, ValueError):
    """Raised when snapshot text cannot be decoded into coins."""


class StorageUnavailableError(GeocoinsError, RuntimeError):
    """Raised when the durable storage backend cannot be read or written."""
