from __future__ import annotations

from pydantic import BaseModel

from src.adapters.api.schemas.geometry import GeoPointSchema


class TripRouteSchema(BaseModel):
    id: str
    route_id: str | None = None
    # [lng, lat] pairs, GeoJSON order.
    path: list[tuple[float, float]]
    timestamps: list[float]


class StopSchema(BaseModel):
    stop_id: str
    name: str
    location: GeoPointSchema
    code: str | None = None
    route_id: str | None = None
