class RoutingError(Exception):
    """Base exception for route geometry failures."""


class PolylineDecodeError(RoutingError, ValueError):
    """Raised when an encoded polyline cannot be decoded."""


class DirectionsUnavailable(RoutingError):
    """Raised when the directions service returns no usable route."""
