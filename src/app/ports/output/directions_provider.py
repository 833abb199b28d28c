from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from src.domain.models import GeoPoint


class IDirectionsProvider(ABC):
    """Port for an external directions service returning encoded polylines."""

    @abstractmethod
    def is_configured(self) -> bool:
        """Whether a service credential is available."""

    @abstractmethod
    async def overview_polyline(self, waypoints: Sequence[GeoPoint]) -> str | None:
        """Return the encoded overview polyline for the waypoint chain.

        Returns None when the service answered without a usable route.
        Raises on transport failure or a non-success HTTP status.
        """
