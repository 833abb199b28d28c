from __future__ import annotations

import time
from dataclasses import dataclass, field

from src.app.ports.output import IFileCache, IRouteGeometryCache
from src.domain.models import CacheEntry, cache_key
from src.domain.models.geo import LngLat


@dataclass(slots=True)
class InMemoryFileCache(IFileCache):
    """Process-local file cache; contents are lost on restart."""

    entries: dict[str, CacheEntry] = field(default_factory=dict)

    async def put(
        self, provider: str, sub_category: str | None, filename: str, content: str
    ) -> bool:
        entry = CacheEntry.create(
            provider=provider,
            sub_category=sub_category,
            filename=filename,
            content=content,
            timestamp=int(time.time() * 1000),
        )
        self.entries[entry.key] = entry
        return True

    async def get(
        self, provider: str, sub_category: str | None, filename: str
    ) -> str | None:
        entry = self.entries.get(cache_key(provider, sub_category, filename))
        return entry.content if entry else None

    async def clear(
        self, provider: str | None = None, sub_category: str | None = None
    ) -> None:
        if not provider:
            self.entries.clear()
            return
        prefix = cache_key(provider, sub_category, "")
        for key in [k for k in self.entries if k.startswith(prefix)]:
            del self.entries[key]


@dataclass(slots=True)
class InMemoryRouteGeometryCache(IRouteGeometryCache):
    """Session-scoped route geometry cache."""

    paths: dict[str, tuple[LngLat, ...]] = field(default_factory=dict)

    async def get(self, key: str) -> tuple[LngLat, ...] | None:
        return self.paths.get(key)

    async def put(self, key: str, path: tuple[LngLat, ...]) -> None:
        self.paths[key] = tuple(path)

    async def clear(self) -> None:
        self.paths.clear()

    async def size(self) -> int:
        return len(self.paths)
