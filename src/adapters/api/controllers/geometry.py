from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from src.adapters.api.dependencies import get_route_geometry_service
from src.adapters.api.schemas.geometry import (
    CacheStatsSchema,
    GeometryRequestSchema,
    GeometryResponseSchema,
)
from src.app.services.route_geometry_service import RouteGeometryService
from src.domain.models import GeoPoint

router = APIRouter(prefix="/geometry", tags=["geometry"])


@router.post("", response_model=GeometryResponseSchema)
async def resolve_geometry(
    req: GeometryRequestSchema,
    service: RouteGeometryService = Depends(get_route_geometry_service),
) -> GeometryResponseSchema:
    waypoints = [GeoPoint(lat=wp.lat, lon=wp.lon) for wp in req.waypoints]
    path = await service.resolve(waypoints)
    return GeometryResponseSchema(path=list(path))


@router.get("/cache", response_model=CacheStatsSchema)
async def geometry_cache_stats(
    service: RouteGeometryService = Depends(get_route_geometry_service),
) -> CacheStatsSchema:
    stats = await service.cache_stats()
    return CacheStatsSchema(size=stats.size)


@router.delete("/cache", status_code=204)
async def clear_geometry_cache(
    service: RouteGeometryService = Depends(get_route_geometry_service),
) -> Response:
    await service.clear_cache()
    return Response(status_code=204)
