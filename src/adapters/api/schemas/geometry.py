from __future__ import annotations

from pydantic import BaseModel, Field


class GeoPointSchema(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lon: float = Field(..., ge=-180.0, le=180.0)


class GeometryRequestSchema(BaseModel):
    waypoints: list[GeoPointSchema] = Field(..., min_length=1)


class GeometryResponseSchema(BaseModel):
    path: list[tuple[float, float]]


class CacheStatsSchema(BaseModel):
    size: int
