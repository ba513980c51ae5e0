# errors.py
# Exception hierarchy. Platform failures are caught by the session controller
# and turned into Err outcomes; everything else propagates.


class MapPathError(Exception):
    """Base class for all mappath errors."""
    pass


class MapLoadError(MapPathError):
    """Map or places file could not be read or parsed."""
    pass


class PlatformError(MapPathError):
    """Raised by a MappingPlatform when a request cannot be served."""
    pass


class SearchFailed(PlatformError):
    pass


class RouteFailed(PlatformError):
    pass
