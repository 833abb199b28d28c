from __future__ import annotations

from dataclasses import dataclass


def cache_key(provider: str, sub_category: str | None, filename: str) -> str:
    """Composite key `provider[/sub_category]/filename`."""

    category_part = f"/{sub_category}" if sub_category else ""
    return f"{provider}{category_part}/{filename}"


@dataclass(frozen=True, slots=True)
class FeedSource:
    """A static GTFS feed: a provider plus an optional sub-category."""

    provider: str
    sub_category: str | None = None

    @property
    def label(self) -> str:
        return f"{self.provider}/{self.sub_category}" if self.sub_category else self.provider


@dataclass(frozen=True, slots=True)
class CacheEntry:
    key: str
    provider: str
    sub_category: str  # "" when the feed has no sub-category
    filename: str
    content: str
    timestamp: int  # write time, ms since epoch

    @staticmethod
    def create(
        *,
        provider: str,
        sub_category: str | None,
        filename: str,
        content: str,
        timestamp: int,
    ) -> "CacheEntry":
        return CacheEntry(
            key=cache_key(provider, sub_category, filename),
            provider=provider,
            sub_category=sub_category or "",
            filename=filename,
            content=content,
            timestamp=timestamp,
        )


@dataclass(frozen=True, slots=True)
class CacheStats:
    size: int
