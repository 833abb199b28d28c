from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterable

from src.app.ports.output import IFileCache
from src.domain.algorithms.table_parser import parse_table
from src.domain.algorithms.trip_paths import (
    build_trip_routes,
    parse_stops,
    stop_sequences_by_trip,
    trip_route_ids,
)
from src.domain.models import FeedSource, Stop, TripRoute

from .archive_ingest_service import ArchiveIngestService

logger = logging.getLogger(__name__)

STOPS_FILE = "stops.txt"
TRIPS_FILE = "trips.txt"
STOP_TIMES_FILE = "stop_times.txt"


@dataclass(slots=True)
class _FeedLoader:
    """Load-or-ingest for one feed; ingests at most once per instance."""

    source: FeedSource
    file_cache: IFileCache
    ingester: ArchiveIngestService
    ingested: bool = False

    async def load(self, filename: str) -> str | None:
        provider, sub_category = self.source.provider, self.source.sub_category

        content = await self.file_cache.get(provider, sub_category, filename)
        if content:
            return content
        if self.ingested:
            return None

        logger.info("%s not cached for %s, downloading feed", filename, self.source.label)
        self.ingested = True
        if not await self.ingester.ingest(provider, sub_category):
            return None
        return await self.file_cache.get(provider, sub_category, filename) or None


@dataclass(slots=True)
class RouteCompilerService:
    """Compiles cached static GTFS tables into per-trip path geometries.

    Public methods never raise; failures are logged and yield empty results.
    """

    file_cache: IFileCache
    ingester: ArchiveIngestService
    clock: Callable[[], float] = time.time

    def _loader(self, provider: str, sub_category: str | None) -> _FeedLoader:
        return _FeedLoader(
            source=FeedSource(provider, sub_category),
            file_cache=self.file_cache,
            ingester=self.ingester,
        )

    async def list_stops(
        self, provider: str, sub_category: str | None = None
    ) -> tuple[Stop, ...]:
        loader = self._loader(provider, sub_category)
        try:
            stops_text = await loader.load(STOPS_FILE)
            if not stops_text:
                logger.warning("Failed to load %s for %s", STOPS_FILE, loader.source.label)
                return ()
            return tuple(parse_stops(parse_table(stops_text)))
        except Exception:
            logger.error("Error loading stops for %s", loader.source.label, exc_info=True)
            return ()

    async def compile(
        self, provider: str, sub_category: str | None = None
    ) -> tuple[TripRoute, ...]:
        loader = self._loader(provider, sub_category)
        try:
            stops_text = await loader.load(STOPS_FILE)
            trips_text = await loader.load(TRIPS_FILE)
            stop_times_text = await loader.load(STOP_TIMES_FILE)

            if not stops_text or not trips_text or not stop_times_text:
                logger.warning(
                    "Missing required GTFS files (%s, %s, %s) for %s",
                    STOPS_FILE,
                    TRIPS_FILE,
                    STOP_TIMES_FILE,
                    loader.source.label,
                )
                return ()

            stops = parse_stops(parse_table(stops_text))
            if not stops:
                logger.warning("No usable stops for %s", loader.source.label)
                return ()

            routes = build_trip_routes(
                stops,
                stop_sequences_by_trip(parse_table(stop_times_text)),
                trip_route_ids(parse_table(trips_text)),
                base_time=self.clock(),
            )
            logger.info("Compiled %d trip routes for %s", len(routes), loader.source.label)
            return tuple(routes)
        except Exception:
            logger.error("Error compiling routes for %s", loader.source.label, exc_info=True)
            return ()

    async def compile_many(self, sources: Iterable[FeedSource]) -> tuple[TripRoute, ...]:
        results = await asyncio.gather(
            *(self.compile(s.provider, s.sub_category) for s in sources)
        )
        return tuple(route for routes in results for route in routes)

    async def list_stops_many(self, sources: Iterable[FeedSource]) -> tuple[Stop, ...]:
        results = await asyncio.gather(
            *(self.list_stops(s.provider, s.sub_category) for s in sources)
        )
        return tuple(stop for stops in results for stop in stops)

    async def clear_cache(
        self, provider: str | None = None, sub_category: str | None = None
    ) -> None:
        try:
            await self.file_cache.clear(provider, sub_category)
        except Exception:
            logger.error("Error clearing GTFS cache", exc_info=True)
            return
        label = FeedSource(provider, sub_category).label if provider else "all"
        logger.info("GTFS cache cleared for %s", label)
