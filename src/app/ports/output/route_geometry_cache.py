from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models.geo import LngLat


class IRouteGeometryCache(ABC):
    """Cache of resolved road-following geometries keyed by waypoint key."""

    @abstractmethod
    async def get(self, key: str) -> tuple[LngLat, ...] | None:
        raise NotImplementedError

    @abstractmethod
    async def put(self, key: str, path: tuple[LngLat, ...]) -> None:
        raise NotImplementedError

    @abstractmethod
    async def clear(self) -> None:
        raise NotImplementedError

    @abstractmethod
    async def size(self) -> int:
        raise NotImplementedError
