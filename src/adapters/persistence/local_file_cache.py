from __future__ import annotations

import asyncio
import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path

from src.app.ports.output import IFileCache

logger = logging.getLogger(__name__)


def _segment(value: str) -> str:
    if not value or value in {".", ".."} or "/" in value or "\\" in value:
        raise ValueError(f"Invalid cache path segment: {value!r}")
    return value


@dataclass(slots=True)
class LocalFileCache(IFileCache):
    """Stores raw GTFS files on disk as `<root>/<provider>[/<sub>]/<filename>`.

    Env vars:
      - GTFS_CACHE_DIR (default: data/gtfs-cache)
    """

    root: str | Path | None = None

    def _root(self) -> Path:
        value = self.root or os.getenv("GTFS_CACHE_DIR") or "data/gtfs-cache"
        path = Path(value)
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _dir(self, provider: str, sub_category: str | None) -> Path:
        path = self._root() / _segment(provider)
        if sub_category:
            path = path / _segment(sub_category)
        return path

    def _put_sync(
        self, provider: str, sub_category: str | None, filename: str, content: str
    ) -> None:
        directory = self._dir(provider, sub_category)
        directory.mkdir(parents=True, exist_ok=True)
        target = directory / _segment(filename)
        tmp = target.with_name(f".{target.name}.tmp")
        tmp.write_text(content, encoding="utf-8")
        os.replace(tmp, target)

    def _get_sync(
        self, provider: str, sub_category: str | None, filename: str
    ) -> str | None:
        path = self._dir(provider, sub_category) / _segment(filename)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def _clear_sync(self, provider: str | None, sub_category: str | None) -> None:
        if provider:
            target = self._dir(provider, sub_category)
            if target.exists():
                shutil.rmtree(target)
            return

        for child in self._root().iterdir():
            if child.is_dir():
                shutil.rmtree(child)
            else:
                child.unlink()

    async def put(
        self, provider: str, sub_category: str | None, filename: str, content: str
    ) -> bool:
        try:
            await asyncio.to_thread(
                self._put_sync, provider, sub_category, filename, content
            )
            return True
        except (OSError, ValueError) as exc:
            logger.warning("Failed to store %s in cache: %s", filename, exc)
            return False

    async def get(
        self, provider: str, sub_category: str | None, filename: str
    ) -> str | None:
        try:
            return await asyncio.to_thread(
                self._get_sync, provider, sub_category, filename
            )
        except (OSError, ValueError) as exc:
            logger.warning("Failed to get %s from cache: %s", filename, exc)
            return None

    async def clear(
        self, provider: str | None = None, sub_category: str | None = None
    ) -> None:
        try:
            await asyncio.to_thread(self._clear_sync, provider, sub_category)
        except (OSError, ValueError) as exc:
            logger.error("Error clearing cache: %s", exc)
