from .archive_source import IArchiveSource
from .directions_provider import IDirectionsProvider
from .file_cache import IFileCache
from .route_geometry_cache import IRouteGeometryCache

__all__ = [
    "IArchiveSource",
    "IDirectionsProvider",
    "IFileCache",
    "IRouteGeometryCache",
]
