from __future__ import annotations

import os
from functools import lru_cache

from src.adapters.directions.google_directions_client import GoogleDirectionsClient
from src.adapters.gtfs.http_gtfs_archive_source import HttpGtfsArchiveSource
from src.adapters.persistence import (
    DynamoDbRouteGeometryCache,
    InMemoryRouteGeometryCache,
    LocalFileCache,
    S3FileCache,
)
from src.app.ports.output import IFileCache, IRouteGeometryCache
from src.app.services.archive_ingest_service import ArchiveIngestService
from src.app.services.request_queue import RequestQueue
from src.app.services.route_compiler_service import RouteCompilerService
from src.app.services.route_geometry_service import (
    DEFAULT_MAX_REQUESTS_PER_SECOND,
    RouteGeometryService,
)

# Services are process singletons: the request queue and the in-memory
# geometry cache must be shared by every request.


@lru_cache(maxsize=1)
def get_file_cache() -> IFileCache:
    if os.getenv("GTFS_CACHE_BUCKET"):
        return S3FileCache()
    return LocalFileCache()


@lru_cache(maxsize=1)
def get_route_compiler_service() -> RouteCompilerService:
    file_cache = get_file_cache()
    ingester = ArchiveIngestService(
        archive_source=HttpGtfsArchiveSource(), file_cache=file_cache
    )
    return RouteCompilerService(file_cache=file_cache, ingester=ingester)


@lru_cache(maxsize=1)
def get_route_geometry_service() -> RouteGeometryService:
    cache: IRouteGeometryCache = InMemoryRouteGeometryCache()
    if os.getenv("ROUTE_GEOMETRY_TABLE"):
        cache = DynamoDbRouteGeometryCache()

    max_rps = DEFAULT_MAX_REQUESTS_PER_SECOND
    if os.getenv("DIRECTIONS_MAX_RPS"):
        max_rps = float(os.environ["DIRECTIONS_MAX_RPS"])

    return RouteGeometryService(
        directions=GoogleDirectionsClient(),
        cache=cache,
        queue=RequestQueue(min_interval_s=1.0 / max_rps),
    )
