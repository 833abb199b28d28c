from __future__ import annotations

from abc import ABC, abstractmethod


class IArchiveSource(ABC):
    """Port for downloading a static GTFS archive."""

    @abstractmethod
    async def fetch(self, provider: str, sub_category: str | None = None) -> bytes:
        """Return the raw payload; raise on transport or status failure."""
