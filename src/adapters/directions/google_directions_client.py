from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Sequence

import httpx

from src.app.ports.output import IDirectionsProvider
from src.domain.models import GeoPoint

DEFAULT_DIRECTIONS_URL = "https://maps.googleapis.com/maps/api/directions/json"


def _latlng(point: GeoPoint) -> str:
    return f"{point.lat},{point.lon}"


def directions_params(waypoints: Sequence[GeoPoint], api_key: str) -> dict[str, str]:
    """Query parameters for a driving request through the given waypoints."""

    params = {
        "origin": _latlng(waypoints[0]),
        "destination": _latlng(waypoints[-1]),
    }
    intermediates = "|".join(_latlng(wp) for wp in waypoints[1:-1])
    if intermediates:
        params["waypoints"] = intermediates
    params["key"] = api_key
    params["mode"] = "driving"
    params["alternatives"] = "false"
    return params


def overview_points(data: Any) -> str | None:
    """Extract `routes[0].overview_polyline.points` from an OK response."""

    if not isinstance(data, dict) or data.get("status") != "OK":
        return None
    routes = data.get("routes") or []
    if not routes or not isinstance(routes[0], dict):
        return None
    overview = routes[0].get("overview_polyline") or {}
    points = overview.get("points") if isinstance(overview, dict) else None
    return points if isinstance(points, str) and points else None


@dataclass(slots=True)
class GoogleDirectionsClient(IDirectionsProvider):
    """Google Directions API client returning overview polylines.

    Env vars:
      - GOOGLE_DIRECTIONS_API_KEY (falls back to GOOGLE_MAPS_API_KEY)
      - DIRECTIONS_PROXY_URL: optional endpoint replacing the Google URL,
        e.g. a CORS or egress proxy forwarding the same query string
      - DIRECTIONS_TIMEOUT_S: request timeout; unset means no timeout
    """

    api_key: str | None = None
    url: str | None = None
    timeout_s: float | None = None
    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        if self.api_key is None:
            self.api_key = os.getenv("GOOGLE_DIRECTIONS_API_KEY") or os.getenv(
                "GOOGLE_MAPS_API_KEY"
            )
        if self.url is None:
            self.url = os.getenv("DIRECTIONS_PROXY_URL") or DEFAULT_DIRECTIONS_URL
        if self.timeout_s is None and os.getenv("DIRECTIONS_TIMEOUT_S"):
            self.timeout_s = float(os.environ["DIRECTIONS_TIMEOUT_S"])

    def is_configured(self) -> bool:
        return bool((self.api_key or "").strip())

    async def overview_polyline(self, waypoints: Sequence[GeoPoint]) -> str | None:
        if not self.is_configured():
            raise RuntimeError("Directions API key not configured")
        if len(waypoints) < 2:
            raise ValueError("At least two waypoints are required")

        params = directions_params(waypoints, (self.api_key or "").strip())
        async with httpx.AsyncClient(
            timeout=self.timeout_s, transport=self.transport
        ) as client:
            resp = await client.get(self.url or DEFAULT_DIRECTIONS_URL, params=params)
            resp.raise_for_status()
            data = resp.json()

        return overview_points(data)
