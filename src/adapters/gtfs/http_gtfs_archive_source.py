from __future__ import annotations

import os
from dataclasses import dataclass

import httpx

from src.app.ports.output import IArchiveSource

DEFAULT_BASE_URL = "https://api.data.gov.my/gtfs-static"


@dataclass(slots=True)
class HttpGtfsArchiveSource(IArchiveSource):
    """Downloads static GTFS ZIP archives over HTTP.

    `GET {base}/{provider}[?category={sub_category}]`

    Env vars:
      - GTFS_STATIC_BASE_URL: archive endpoint base (default: data.gov.my)
      - GTFS_STATIC_TIMEOUT_S: request timeout; unset means no timeout

    Notes:
      - Non-2xx responses raise httpx.HTTPStatusError; no retries.
      - The payload is returned as-is, whatever the content-type says.
    """

    base_url: str | None = None
    timeout_s: float | None = None
    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        if self.base_url is None:
            self.base_url = os.getenv("GTFS_STATIC_BASE_URL") or DEFAULT_BASE_URL
        if self.timeout_s is None and os.getenv("GTFS_STATIC_TIMEOUT_S"):
            self.timeout_s = float(os.environ["GTFS_STATIC_TIMEOUT_S"])

    def url_for(self, provider: str) -> str:
        return f"{(self.base_url or DEFAULT_BASE_URL).rstrip('/')}/{provider}"

    async def fetch(self, provider: str, sub_category: str | None = None) -> bytes:
        params = {"category": sub_category} if sub_category else None
        async with httpx.AsyncClient(
            timeout=self.timeout_s, transport=self.transport, follow_redirects=True
        ) as client:
            resp = await client.get(self.url_for(provider), params=params)
            resp.raise_for_status()
            return resp.content
