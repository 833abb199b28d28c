from __future__ import annotations

from abc import ABC, abstractmethod


class IFileCache(ABC):
    """Durable store of raw GTFS file contents keyed by feed and filename.

    Implementations never raise from these methods: storage failures are
    logged and reported as a miss (`get`), `False` (`put`) or a no-op
    (`clear`).
    """

    @abstractmethod
    async def put(
        self, provider: str, sub_category: str | None, filename: str, content: str
    ) -> bool:
        """Store content, overwriting any previous value for the key."""

    @abstractmethod
    async def get(
        self, provider: str, sub_category: str | None, filename: str
    ) -> str | None:
        raise NotImplementedError

    @abstractmethod
    async def clear(
        self, provider: str | None = None, sub_category: str | None = None
    ) -> None:
        """Remove one feed's entries, or everything when provider is None."""
