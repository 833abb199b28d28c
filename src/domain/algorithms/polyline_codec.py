from __future__ import annotations

from typing import Iterable

import polyline

from src.domain.exceptions import PolylineDecodeError
from src.domain.models.geo import LngLat

PRECISION = 5


def decode_polyline(encoded: str) -> list[LngLat]:
    """Decode an encoded polyline (precision 5) into (lng, lat) pairs."""

    if not isinstance(encoded, str):
        raise PolylineDecodeError(f"Expected str, got {type(encoded).__name__}")
    try:
        points = polyline.decode(encoded, PRECISION, geojson=True)
    except (IndexError, TypeError, ValueError) as exc:
        raise PolylineDecodeError(f"Malformed polyline: {exc}") from exc
    return [(float(lng), float(lat)) for lng, lat in points]


def encode_polyline(points: Iterable[LngLat]) -> str:
    return polyline.encode([(lng, lat) for lng, lat in points], PRECISION, geojson=True)
