from .gtfs import ArchiveFormatError, GtfsError
from .routing import DirectionsUnavailable, PolylineDecodeError, RoutingError

__all__ = [
    "ArchiveFormatError",
    "DirectionsUnavailable",
    "GtfsError",
    "PolylineDecodeError",
    "RoutingError",
]
