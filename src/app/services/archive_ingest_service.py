from __future__ import annotations

import asyncio
import io
import logging
import zipfile
from dataclasses import dataclass

import httpx

from src.app.ports.output import IArchiveSource, IFileCache
from src.domain.exceptions import ArchiveFormatError
from src.domain.models import FeedSource

logger = logging.getLogger(__name__)

ZIP_MAGIC = b"PK"

# zipfile reports unsupported versions and bad offsets outside BadZipFile.
_ARCHIVE_ERRORS = (
    ArchiveFormatError,
    zipfile.BadZipFile,
    NotImplementedError,
    ValueError,
    OSError,
)


@dataclass(frozen=True, slots=True)
class IngestResult:
    """Outcome of one archive ingestion; truthy only on success."""

    ok: bool
    filenames: tuple[str, ...] = ()
    error: str | None = None

    def __bool__(self) -> bool:
        return self.ok

    @staticmethod
    def failed(error: str) -> "IngestResult":
        return IngestResult(ok=False, error=error)


def ensure_zip(payload: bytes) -> None:
    """Reject payloads without the ZIP signature (e.g. HTML error pages)."""

    if len(payload) < 2 or payload[:2] != ZIP_MAGIC:
        head = " ".join(f"0x{b:02x}" for b in payload[:10])
        raise ArchiveFormatError(f"Payload is not a ZIP archive (first bytes: {head or 'none'})")


@dataclass(slots=True)
class ArchiveIngestService:
    """Downloads a static GTFS archive and commits every file to the cache."""

    archive_source: IArchiveSource
    file_cache: IFileCache

    async def ingest(self, provider: str, sub_category: str | None = None) -> IngestResult:
        label = FeedSource(provider, sub_category).label

        try:
            payload = await self.archive_source.fetch(provider, sub_category)
        except httpx.HTTPError as exc:
            logger.warning("Failed to fetch GTFS archive for %s: %s", label, exc)
            return IngestResult.failed(f"transport: {exc}")
        except Exception as exc:
            logger.error("Unexpected error fetching GTFS archive for %s", label, exc_info=True)
            return IngestResult.failed(f"transport: {exc}")

        logger.info("Downloaded GTFS archive for %s (%d bytes)", label, len(payload))

        try:
            ensure_zip(payload)
            archive = zipfile.ZipFile(io.BytesIO(payload))
        except _ARCHIVE_ERRORS as exc:
            logger.warning("Rejected GTFS archive for %s: %s", label, exc)
            return IngestResult.failed(f"format: {exc}")

        with archive:
            entries = [info for info in archive.infolist() if not info.is_dir()]
            if not entries:
                logger.warning("GTFS archive for %s contains no files", label)
                return IngestResult.failed("format: archive contains no files")

            results = await asyncio.gather(
                *(
                    self._extract(archive, info, provider=provider, sub_category=sub_category)
                    for info in entries
                )
            )

        filenames = tuple(name for name in results if name is not None)
        if not filenames:
            return IngestResult.failed("format: no entry could be extracted")

        logger.info("Cached %d GTFS files for %s", len(filenames), label)
        return IngestResult(ok=True, filenames=filenames)

    async def _extract(
        self,
        archive: zipfile.ZipFile,
        info: zipfile.ZipInfo,
        *,
        provider: str,
        sub_category: str | None,
    ) -> str | None:
        # Directory components are dropped; equal base names overwrite.
        filename = info.filename.rsplit("/", 1)[-1] or info.filename
        try:
            raw = await asyncio.to_thread(archive.read, info)
            content = raw.decode("utf-8-sig", errors="replace")
        except Exception as exc:
            logger.error("Error extracting %s: %s", info.filename, exc)
            return None

        await self.file_cache.put(provider, sub_category, filename, content)
        logger.debug("Stored %s (%d chars)", filename, len(content))
        return filename
