from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response

from src.adapters.api.dependencies import get_route_compiler_service
from src.adapters.api.schemas.feeds import StopSchema, TripRouteSchema
from src.adapters.api.schemas.geometry import GeoPointSchema
from src.app.services.route_compiler_service import RouteCompilerService

router = APIRouter(prefix="/feeds", tags=["feeds"])


@router.get("/{provider}/routes", response_model=list[TripRouteSchema])
async def list_trip_routes(
    provider: str,
    category: str | None = Query(default=None),
    service: RouteCompilerService = Depends(get_route_compiler_service),
) -> list[TripRouteSchema]:
    routes = await service.compile(provider, category or None)
    return [
        TripRouteSchema(
            id=r.id,
            route_id=r.route_id,
            path=list(r.path),
            timestamps=list(r.timestamps),
        )
        for r in routes
    ]


@router.get("/{provider}/stops", response_model=list[StopSchema])
async def list_stops(
    provider: str,
    category: str | None = Query(default=None),
    service: RouteCompilerService = Depends(get_route_compiler_service),
) -> list[StopSchema]:
    stops = await service.list_stops(provider, category or None)
    return [
        StopSchema(
            stop_id=s.id,
            name=s.name,
            location=GeoPointSchema(lat=s.location.lat, lon=s.location.lon),
            code=s.code,
            route_id=s.route_id,
        )
        for s in stops
    ]


@router.delete("/cache", status_code=204)
async def clear_feed_cache(
    provider: str | None = Query(default=None),
    category: str | None = Query(default=None),
    service: RouteCompilerService = Depends(get_route_compiler_service),
) -> Response:
    await service.clear_cache(provider or None, category or None)
    return Response(status_code=204)
