from __future__ import annotations

from dataclasses import dataclass

from .geo import LngLat


@dataclass(frozen=True, slots=True)
class TripRoute:
    """Ordered stop-to-stop geometry of a single trip.

    `timestamps` are synthetic (fixed spacing from a base time) and only
    order the path for animation; they are not the scheduled times.
    """

    id: str
    path: tuple[LngLat, ...]
    timestamps: tuple[float, ...]
    route_id: str | None = None

    def __post_init__(self) -> None:
        if len(self.path) < 2:
            raise ValueError(f"Trip {self.id} needs at least 2 points, got {len(self.path)}")
        if len(self.timestamps) != len(self.path):
            raise ValueError(f"Trip {self.id} has {len(self.timestamps)} timestamps for {len(self.path)} points")
