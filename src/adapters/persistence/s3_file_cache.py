from __future__ import annotations

import asyncio
import logging
import os
import threading
import time
from dataclasses import dataclass, field
from typing import Any

from botocore.exceptions import ClientError

from src.adapters.aws import s3_client
from src.app.ports.output import IFileCache
from src.domain.models import cache_key

logger = logging.getLogger(__name__)

_MISSING_CODES = {"404", "NoSuchKey", "NoSuchBucket", "NotFound"}


def _error_code(exc: ClientError) -> str | None:
    return exc.response.get("Error", {}).get("Code")


@dataclass(slots=True)
class S3FileCache(IFileCache):
    """Stores raw GTFS files as S3 objects under `<prefix>/<cache key>`.

    Object metadata carries provider, sub-category, filename and the write
    timestamp (ms). The bucket is created on first use when missing.

    Env vars:
      - GTFS_CACHE_BUCKET (required)
      - GTFS_CACHE_PREFIX (default: gtfs-files)
      - ENDPOINT_URL (preferred for LocalStack)
    """

    bucket: str | None = None
    prefix: str | None = None

    _client: Any = field(default=None, init=False, repr=False)
    _init_lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False
    )

    def _bucket(self) -> str:
        value = self.bucket or os.getenv("GTFS_CACHE_BUCKET")
        if not value:
            raise RuntimeError("Missing GTFS_CACHE_BUCKET")
        return value

    def _prefix(self) -> str:
        return (self.prefix or os.getenv("GTFS_CACHE_PREFIX") or "gtfs-files").strip("/")

    def _object_key(self, key: str) -> str:
        return f"{self._prefix()}/{key}"

    def _open(self) -> Any:
        with self._init_lock:
            if self._client is not None:
                return self._client

            s3 = s3_client()
            bucket = self._bucket()
            try:
                s3.head_bucket(Bucket=bucket)
            except ClientError as exc:
                if _error_code(exc) not in _MISSING_CODES:
                    raise
                region = getattr(s3.meta, "region_name", None)
                if region and region != "us-east-1":
                    s3.create_bucket(
                        Bucket=bucket,
                        CreateBucketConfiguration={"LocationConstraint": region},
                    )
                else:
                    s3.create_bucket(Bucket=bucket)
                logger.info("Created GTFS cache bucket %s", bucket)

            self._client = s3
            return s3

    def _put_sync(
        self, provider: str, sub_category: str | None, filename: str, content: str
    ) -> None:
        s3 = self._open()
        s3.put_object(
            Bucket=self._bucket(),
            Key=self._object_key(cache_key(provider, sub_category, filename)),
            Body=content.encode("utf-8"),
            ContentType="text/plain; charset=utf-8",
            Metadata={
                "provider": provider,
                "sub-category": sub_category or "",
                "filename": filename,
                "timestamp": str(int(time.time() * 1000)),
            },
        )

    def _get_sync(
        self, provider: str, sub_category: str | None, filename: str
    ) -> str | None:
        s3 = self._open()
        try:
            obj = s3.get_object(
                Bucket=self._bucket(),
                Key=self._object_key(cache_key(provider, sub_category, filename)),
            )
        except ClientError as exc:
            if _error_code(exc) in _MISSING_CODES:
                return None
            raise
        return obj["Body"].read().decode("utf-8")

    def _clear_sync(self, provider: str | None, sub_category: str | None) -> int:
        s3 = self._open()
        bucket = self._bucket()
        if provider:
            key_prefix = self._object_key(cache_key(provider, sub_category, ""))
        else:
            key_prefix = f"{self._prefix()}/"

        deleted = 0
        paginator = s3.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=bucket, Prefix=key_prefix):
            keys = [{"Key": obj["Key"]} for obj in page.get("Contents", []) or []]
            if not keys:
                continue
            s3.delete_objects(Bucket=bucket, Delete={"Objects": keys, "Quiet": True})
            deleted += len(keys)
        return deleted

    async def put(
        self, provider: str, sub_category: str | None, filename: str, content: str
    ) -> bool:
        try:
            await asyncio.to_thread(
                self._put_sync, provider, sub_category, filename, content
            )
            return True
        except Exception as exc:
            logger.warning("Failed to store %s in cache: %s", filename, exc)
            return False

    async def get(
        self, provider: str, sub_category: str | None, filename: str
    ) -> str | None:
        try:
            return await asyncio.to_thread(
                self._get_sync, provider, sub_category, filename
            )
        except Exception as exc:
            logger.warning("Failed to get %s from cache: %s", filename, exc)
            return None

    async def clear(
        self, provider: str | None = None, sub_category: str | None = None
    ) -> None:
        try:
            deleted = await asyncio.to_thread(self._clear_sync, provider, sub_category)
        except Exception as exc:
            logger.error("Error clearing cache: %s", exc)
            return
        logger.debug("Deleted %d cached objects", deleted)
