from .feed import CacheEntry, CacheStats, FeedSource, cache_key
from .geo import GeoPoint, LngLat, straight_line
from .stop import Stop
from .trip_route import TripRoute

__all__ = [
    "CacheEntry",
    "CacheStats",
    "FeedSource",
    "GeoPoint",
    "LngLat",
    "Stop",
    "TripRoute",
    "cache_key",
    "straight_line",
]
