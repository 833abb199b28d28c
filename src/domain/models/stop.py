from __future__ import annotations

from dataclasses import dataclass

from .geo import GeoPoint


@dataclass(frozen=True, slots=True)
class Stop:
    id: str
    name: str
    location: GeoPoint
    code: str | None = None
    # Only rail feeds carry route_id in stops.txt.
    route_id: str | None = None
