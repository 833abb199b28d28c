from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import os
import threading
import time
from dataclasses import dataclass, field
from typing import Any

from botocore.exceptions import ClientError

from src.adapters.aws import dynamodb_client
from src.app.ports.output import IRouteGeometryCache
from src.domain.models.geo import LngLat

logger = logging.getLogger(__name__)


def key_hash(key: str) -> str:
    # Waypoint keys grow with the chain; DynamoDB caps partition keys at 2 KB.
    return hashlib.sha256(key.encode("utf-8")).hexdigest()


@dataclass(slots=True)
class DynamoDbRouteGeometryCache(IRouteGeometryCache):
    """Stores resolved route geometries in DynamoDB.

    Items: key_hash (S, partition key), waypoint_key (S), path (S, JSON list
    of [lng, lat]), updated_at_ms (N). The table is created on first use.

    Env vars:
      - ROUTE_GEOMETRY_TABLE (default: transit-route-geometries)
      - ENDPOINT_URL (preferred for LocalStack)
      - AWS_REGION
    """

    table_name: str | None = None

    _client: Any = field(default=None, init=False, repr=False)
    _init_lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False
    )

    def _table(self) -> str:
        return (
            self.table_name
            or os.getenv("ROUTE_GEOMETRY_TABLE")
            or "transit-route-geometries"
        )

    def _open(self) -> Any:
        with self._init_lock:
            if self._client is not None:
                return self._client

            ddb = dynamodb_client()
            table = self._table()
            try:
                ddb.describe_table(TableName=table)
            except ClientError as exc:
                if exc.response.get("Error", {}).get("Code") != "ResourceNotFoundException":
                    raise
                ddb.create_table(
                    TableName=table,
                    BillingMode="PAY_PER_REQUEST",
                    AttributeDefinitions=[
                        {"AttributeName": "key_hash", "AttributeType": "S"}
                    ],
                    KeySchema=[{"AttributeName": "key_hash", "KeyType": "HASH"}],
                )
                ddb.get_waiter("table_exists").wait(TableName=table)
                logger.info("Created route geometry table %s", table)

            self._client = ddb
            return ddb

    def _get_sync(self, key: str) -> tuple[LngLat, ...] | None:
        ddb = self._open()
        resp = ddb.get_item(
            TableName=self._table(),
            Key={"key_hash": {"S": key_hash(key)}},
            ConsistentRead=True,
        )
        item = resp.get("Item")
        if not item or item.get("waypoint_key", {}).get("S") != key:
            return None
        return tuple((float(p[0]), float(p[1])) for p in json.loads(item["path"]["S"]))

    def _put_sync(self, key: str, path: tuple[LngLat, ...]) -> None:
        ddb = self._open()
        ddb.put_item(
            TableName=self._table(),
            Item={
                "key_hash": {"S": key_hash(key)},
                "waypoint_key": {"S": key},
                "path": {"S": json.dumps([[lng, lat] for lng, lat in path])},
                "updated_at_ms": {"N": str(int(time.time() * 1000))},
            },
        )

    def _scan_pages(self, **kwargs: Any):
        ddb = self._open()
        paginator = ddb.get_paginator("scan")
        return paginator.paginate(TableName=self._table(), **kwargs)

    def _clear_sync(self) -> None:
        ddb = self._open()
        for page in self._scan_pages(ProjectionExpression="key_hash"):
            for item in page.get("Items", []):
                ddb.delete_item(
                    TableName=self._table(), Key={"key_hash": item["key_hash"]}
                )

    def _size_sync(self) -> int:
        return sum(int(page.get("Count", 0)) for page in self._scan_pages(Select="COUNT"))

    async def get(self, key: str) -> tuple[LngLat, ...] | None:
        try:
            return await asyncio.to_thread(self._get_sync, key)
        except Exception as exc:
            logger.warning("Failed to read route geometry from cache: %s", exc)
            return None

    async def put(self, key: str, path: tuple[LngLat, ...]) -> None:
        try:
            await asyncio.to_thread(self._put_sync, key, path)
        except Exception as exc:
            logger.warning("Failed to store route geometry in cache: %s", exc)

    async def clear(self) -> None:
        try:
            await asyncio.to_thread(self._clear_sync)
        except Exception as exc:
            logger.error("Error clearing route geometry cache: %s", exc)

    async def size(self) -> int:
        try:
            return await asyncio.to_thread(self._size_sync)
        except Exception as exc:
            logger.warning("Failed to count route geometry cache: %s", exc)
            return 0
