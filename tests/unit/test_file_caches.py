from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from src.adapters.persistence.local_file_cache import LocalFileCache
from src.adapters.persistence.memory_cache import (
    InMemoryFileCache,
    InMemoryRouteGeometryCache,
)
from src.domain.models import cache_key


def test_cache_key_inserts_sub_category_segment() -> None:
    assert cache_key("prasarana", "rapid-bus-kl", "stops.txt") == (
        "prasarana/rapid-bus-kl/stops.txt"
    )
    assert cache_key("ktmb", None, "stops.txt") == "ktmb/stops.txt"
    assert cache_key("ktmb", "", "stops.txt") == "ktmb/stops.txt"


@pytest.fixture(params=["memory", "local"])
def file_cache(request, tmp_path: Path):
    if request.param == "memory":
        return InMemoryFileCache()
    return LocalFileCache(root=tmp_path / "cache")


def test_get_after_put_returns_latest_value(file_cache) -> None:
    async def scenario() -> tuple[str | None, str | None]:
        await file_cache.put("ktmb", None, "stops.txt", "v1")
        await file_cache.put("ktmb", None, "stops.txt", "v2")
        return (
            await file_cache.get("ktmb", None, "stops.txt"),
            await file_cache.get("ktmb", None, "trips.txt"),
        )

    latest, missing = asyncio.run(scenario())

    assert latest == "v2"
    assert missing is None


def test_sub_categories_are_isolated(file_cache) -> None:
    async def scenario() -> list[str | None]:
        await file_cache.put("prasarana", "rapid-bus-kl", "stops.txt", "kl")
        await file_cache.put("prasarana", "rapid-rail-kl", "stops.txt", "rail")
        return [
            await file_cache.get("prasarana", "rapid-bus-kl", "stops.txt"),
            await file_cache.get("prasarana", "rapid-rail-kl", "stops.txt"),
            await file_cache.get("prasarana", None, "stops.txt"),
        ]

    assert asyncio.run(scenario()) == ["kl", "rail", None]


def test_clear_by_provider_and_sub_category(file_cache) -> None:
    async def scenario() -> list[str | None]:
        await file_cache.put("prasarana", "rapid-bus-kl", "stops.txt", "kl")
        await file_cache.put("prasarana", "rapid-rail-kl", "stops.txt", "rail")
        await file_cache.put("ktmb", None, "stops.txt", "ktmb")

        await file_cache.clear("prasarana", "rapid-bus-kl")
        after_sub = [
            await file_cache.get("prasarana", "rapid-bus-kl", "stops.txt"),
            await file_cache.get("prasarana", "rapid-rail-kl", "stops.txt"),
        ]

        await file_cache.clear("prasarana")
        after_provider = [await file_cache.get("prasarana", "rapid-rail-kl", "stops.txt")]

        await file_cache.clear()
        after_all = [await file_cache.get("ktmb", None, "stops.txt")]
        return after_sub + after_provider + after_all

    assert asyncio.run(scenario()) == [None, "rail", None, None]


def test_local_cache_rejects_path_traversal_without_raising(tmp_path: Path) -> None:
    cache = LocalFileCache(root=tmp_path / "cache")

    async def scenario() -> tuple[bool, str | None]:
        stored = await cache.put("..", None, "stops.txt", "x")
        return stored, await cache.get("../..", None, "stops.txt")

    stored, value = asyncio.run(scenario())

    assert stored is False
    assert value is None
    assert not (tmp_path / "stops.txt").exists()


def test_local_cache_persists_across_instances(tmp_path: Path) -> None:
    root = tmp_path / "cache"
    asyncio.run(LocalFileCache(root=root).put("ktmb", None, "trips.txt", "trip_id\n"))

    assert (root / "ktmb" / "trips.txt").read_text(encoding="utf-8") == "trip_id\n"
    assert asyncio.run(LocalFileCache(root=root).get("ktmb", None, "trips.txt")) == (
        "trip_id\n"
    )


def test_local_cache_reads_root_from_env(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("GTFS_CACHE_DIR", str(tmp_path / "env-cache"))

    asyncio.run(LocalFileCache().put("ktmb", None, "stops.txt", "x"))

    assert (tmp_path / "env-cache" / "ktmb" / "stops.txt").exists()


def test_in_memory_route_geometry_cache_counts_and_clears() -> None:
    cache = InMemoryRouteGeometryCache()

    async def scenario() -> tuple[int, int]:
        await cache.put("a", ((1.0, 2.0), (3.0, 4.0)))
        await cache.put("a", ((1.0, 2.0), (5.0, 6.0)))
        await cache.put("b", ((0.0, 0.0), (1.0, 1.0)))
        before = await cache.size()
        assert await cache.get("a") == ((1.0, 2.0), (5.0, 6.0))
        await cache.clear()
        return before, await cache.size()

    assert asyncio.run(scenario()) == (2, 0)
