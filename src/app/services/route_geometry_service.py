from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Sequence

from src.app.ports.output import IDirectionsProvider, IRouteGeometryCache
from src.domain.algorithms.polyline_codec import decode_polyline
from src.domain.exceptions import DirectionsUnavailable
from src.domain.models import CacheStats, GeoPoint, straight_line
from src.domain.models.geo import LngLat

from .request_queue import RequestQueue

logger = logging.getLogger(__name__)

# Origin + destination + 23 intermediates.
MAX_WAYPOINTS = 25

# The directions API allows 50 requests per second.
DEFAULT_MAX_REQUESTS_PER_SECOND = 40.0


def route_geometry_key(waypoints: Sequence[GeoPoint]) -> str:
    """Cache key stable against float noise below ~0.1 m."""

    return "|".join(f"{wp.lat:.6f},{wp.lon:.6f}" for wp in waypoints)


def waypoint_windows(
    waypoints: Sequence[GeoPoint], size: int = MAX_WAYPOINTS
) -> list[list[GeoPoint]]:
    """Split into windows of at most `size` points sharing their end points."""

    step = size - 1
    return [
        list(waypoints[i : min(i + size, len(waypoints))])
        for i in range(0, len(waypoints) - 1, step)
    ]


@dataclass(slots=True)
class RouteGeometryService:
    """Resolves waypoint chains into road-following paths.

    - Requests go through a FIFO queue with a minimum gap between calls.
    - Every resolved geometry, including straight-line fallbacks, is cached
      so a key is never requested twice.
    - `resolve` never raises.
    """

    directions: IDirectionsProvider
    cache: IRouteGeometryCache
    queue: RequestQueue = field(
        default_factory=lambda: RequestQueue(
            min_interval_s=1.0 / DEFAULT_MAX_REQUESTS_PER_SECOND
        )
    )
    max_waypoints: int = MAX_WAYPOINTS

    async def resolve(self, waypoints: Sequence[GeoPoint]) -> tuple[LngLat, ...]:
        waypoints = list(waypoints)
        try:
            if not self.directions.is_configured():
                logger.warning(
                    "Directions API key not configured; using straight-line paths"
                )
                return straight_line(waypoints)
            if len(waypoints) < 2:
                return straight_line(waypoints)

            key = route_geometry_key(waypoints)
            cached = await self.cache.get(key)
            if cached is not None:
                return cached

            if len(waypoints) > self.max_waypoints:
                path = await self._resolve_windows(waypoints)
                await self.cache.put(key, path)
                return path

            return await self.queue.enqueue(lambda: self._request(key, waypoints))
        except Exception:
            logger.error("Unexpected error resolving route geometry", exc_info=True)
            return straight_line(waypoints)

    async def _resolve_windows(self, waypoints: list[GeoPoint]) -> tuple[LngLat, ...]:
        combined: list[LngLat] = []
        for i, window in enumerate(waypoint_windows(waypoints, self.max_waypoints)):
            segment = await self.resolve(window)
            # Each window starts on the previous window's last point.
            combined.extend(segment if i == 0 else segment[1:])
        return tuple(combined)

    async def _request(self, key: str, waypoints: list[GeoPoint]) -> tuple[LngLat, ...]:
        try:
            encoded = await self.directions.overview_polyline(waypoints)
            if not encoded:
                raise DirectionsUnavailable("No route in directions response")
            path = tuple(decode_polyline(encoded))
            if not path:
                raise DirectionsUnavailable("Directions polyline decoded to no points")
        except Exception as exc:
            logger.warning("Error fetching route from directions API: %s", exc)
            path = straight_line(waypoints)

        await self.cache.put(key, path)
        return path

    async def resolve_many(
        self,
        waypoint_lists: Sequence[Sequence[GeoPoint]],
        on_progress: Callable[[int, int], None] | None = None,
    ) -> list[tuple[LngLat, ...]]:
        results: list[tuple[LngLat, ...]] = []
        total = len(waypoint_lists)
        for i, waypoints in enumerate(waypoint_lists):
            results.append(await self.resolve(waypoints))
            if on_progress is not None:
                on_progress(i + 1, total)
        return results

    async def clear_cache(self) -> None:
        try:
            await self.cache.clear()
        except Exception:
            logger.error("Error clearing route geometry cache", exc_info=True)

    async def cache_stats(self) -> CacheStats:
        try:
            return CacheStats(size=await self.cache.size())
        except Exception:
            logger.error("Error reading route geometry cache size", exc_info=True)
            return CacheStats(size=0)
