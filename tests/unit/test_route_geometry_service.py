from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Sequence

import httpx
import pytest

from src.adapters.persistence.memory_cache import InMemoryRouteGeometryCache
from src.app.services.request_queue import RequestQueue
from src.app.services.route_geometry_service import (
    RouteGeometryService,
    route_geometry_key,
    waypoint_windows,
)
from src.domain.algorithms.polyline_codec import encode_polyline
from src.domain.models import GeoPoint


@dataclass(slots=True)
class FakeDirections:
    configured: bool = True
    encoded: str | None = None
    error: Exception | None = None
    echo: bool = False
    calls: list[list[GeoPoint]] = field(default_factory=list)

    def is_configured(self) -> bool:
        return self.configured

    async def overview_polyline(self, waypoints: Sequence[GeoPoint]) -> str | None:
        self.calls.append(list(waypoints))
        if self.error is not None:
            raise self.error
        if self.echo:
            return encode_polyline([(wp.lon, wp.lat) for wp in waypoints])
        return self.encoded


def _service(directions: FakeDirections) -> tuple[RouteGeometryService, InMemoryRouteGeometryCache]:
    cache = InMemoryRouteGeometryCache()

    async def _no_sleep(_: float) -> None:
        return None

    svc = RouteGeometryService(
        directions=directions,
        cache=cache,
        queue=RequestQueue(min_interval_s=0.0, sleep=_no_sleep),
    )
    return svc, cache


def _chain(n: int) -> list[GeoPoint]:
    return [GeoPoint(lat=3.0 + i * 0.001, lon=101.0 + i * 0.001) for i in range(n)]


def test_without_credential_returns_straight_line_and_skips_network() -> None:
    directions = FakeDirections(configured=False)
    svc, cache = _service(directions)
    waypoints = _chain(3)

    path = asyncio.run(svc.resolve(waypoints))

    assert path == tuple((wp.lon, wp.lat) for wp in waypoints)
    assert directions.calls == []
    assert cache.paths == {}


def test_single_waypoint_is_returned_without_caching() -> None:
    directions = FakeDirections()
    svc, cache = _service(directions)

    path = asyncio.run(svc.resolve([GeoPoint(lat=1.0, lon=2.0)]))

    assert path == ((2.0, 1.0),)
    assert directions.calls == []
    assert cache.paths == {}


def test_success_decodes_polyline_and_caches() -> None:
    directions = FakeDirections(encoded="_p~iF~ps|U_ulLnnqC_mqNvxq`@")
    svc, cache = _service(directions)
    waypoints = [GeoPoint(lat=38.5, lon=-120.2), GeoPoint(lat=43.252, lon=-126.453)]

    first = asyncio.run(svc.resolve(waypoints))
    second = asyncio.run(svc.resolve(waypoints))

    assert first == ((-120.2, 38.5), (-120.95, 40.7), (-126.453, 43.252))
    assert second == first
    assert len(directions.calls) == 1
    assert cache.paths[route_geometry_key(waypoints)] == first


def test_transport_failure_falls_back_and_is_cached() -> None:
    directions = FakeDirections(error=httpx.ConnectError("refused"))
    svc, cache = _service(directions)
    waypoints = _chain(4)

    first = asyncio.run(svc.resolve(waypoints))
    second = asyncio.run(svc.resolve(waypoints))

    expected = tuple((wp.lon, wp.lat) for wp in waypoints)
    assert first == expected
    assert second == expected
    assert len(directions.calls) == 1
    assert asyncio.run(svc.cache_stats()).size == 1


def test_missing_route_or_bad_polyline_falls_back() -> None:
    for encoded in (None, "", "_p~iF~ps|U_"):
        directions = FakeDirections(encoded=encoded)
        svc, _ = _service(directions)
        waypoints = _chain(2)

        assert asyncio.run(svc.resolve(waypoints)) == tuple(
            (wp.lon, wp.lat) for wp in waypoints
        )


def test_keys_collide_beyond_sixth_decimal() -> None:
    a = [GeoPoint(lat=3.1234561, lon=101.6543211), GeoPoint(lat=3.2, lon=101.7)]
    b = [GeoPoint(lat=3.1234564, lon=101.6543214), GeoPoint(lat=3.2, lon=101.7)]

    assert route_geometry_key(a) == route_geometry_key(b)
    assert route_geometry_key(a) == "3.123456,101.654321|3.200000,101.700000"

    directions = FakeDirections(error=httpx.ConnectError("refused"))
    svc, cache = _service(directions)
    asyncio.run(svc.resolve(a))
    asyncio.run(svc.resolve(b))

    assert len(directions.calls) == 1
    assert len(cache.paths) == 1


def test_waypoint_windows_overlap_on_boundaries() -> None:
    points = _chain(50)

    windows = waypoint_windows(points, 25)

    assert [len(w) for w in windows] == [25, 25, 2]
    assert windows[1][0] == windows[0][-1]
    assert windows[2][0] == windows[1][-1]
    assert windows[-1][-1] == points[-1]


def test_long_chain_is_split_and_concatenated_without_duplicates() -> None:
    directions = FakeDirections(echo=True)
    svc, cache = _service(directions)
    waypoints = _chain(60)

    path = asyncio.run(svc.resolve(waypoints))

    assert len(directions.calls) == 3
    assert all(len(call) <= 25 for call in directions.calls)
    assert len(path) == 60
    assert all(p != q for p, q in zip(path, path[1:]))
    assert path[0] == pytest.approx((waypoints[0].lon, waypoints[0].lat))
    assert path[-1] == pytest.approx((waypoints[-1].lon, waypoints[-1].lat))
    # Outer key plus one per window.
    assert route_geometry_key(waypoints) in cache.paths
    assert len(cache.paths) == 4


def test_twenty_six_waypoints_with_fallback_equal_input() -> None:
    directions = FakeDirections(error=httpx.ReadTimeout("slow"))
    svc, _ = _service(directions)
    waypoints = _chain(26)

    path = asyncio.run(svc.resolve(waypoints))

    assert path == tuple((wp.lon, wp.lat) for wp in waypoints)
    assert [len(c) for c in directions.calls] == [25, 2]


def test_concurrent_resolves_are_serialized_in_order() -> None:
    directions = FakeDirections(error=httpx.ConnectError("refused"))
    svc, _ = _service(directions)
    chains = [_chain(2), _chain(3), _chain(4)]

    async def scenario() -> None:
        await asyncio.gather(*(svc.resolve(c) for c in chains))

    asyncio.run(scenario())

    assert [len(c) for c in directions.calls] == [2, 3, 4]


def test_resolve_many_reports_progress_and_clear_cache_empties() -> None:
    directions = FakeDirections(error=httpx.ConnectError("refused"))
    svc, _ = _service(directions)
    progress: list[tuple[int, int]] = []

    results = asyncio.run(
        svc.resolve_many([_chain(2), _chain(3)], on_progress=lambda d, t: progress.append((d, t)))
    )

    assert [len(r) for r in results] == [2, 3]
    assert progress == [(1, 2), (2, 2)]
    assert asyncio.run(svc.cache_stats()).size == 2

    asyncio.run(svc.clear_cache())
    assert asyncio.run(svc.cache_stats()).size == 0
