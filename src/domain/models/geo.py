from __future__ import annotations

from dataclasses import dataclass

# GeoJSON axis order, as consumed by map layers: (longitude, latitude).
LngLat = tuple[float, float]


@dataclass(frozen=True, slots=True)
class GeoPoint:
    lat: float
    lon: float

    def __post_init__(self) -> None:
        if not (-90.0 <= self.lat <= 90.0):
            raise ValueError(f"Invalid latitude: {self.lat}")
        if not (-180.0 <= self.lon <= 180.0):
            raise ValueError(f"Invalid longitude: {self.lon}")

    def as_lng_lat(self) -> LngLat:
        return (self.lon, self.lat)


def straight_line(points: "tuple[GeoPoint, ...] | list[GeoPoint]") -> tuple[LngLat, ...]:
    """Identity mapping of waypoints to (lng, lat) pairs."""

    return tuple(p.as_lng_lat() for p in points)
