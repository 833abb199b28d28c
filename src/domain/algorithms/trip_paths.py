from __future__ import annotations

import math
import re
from typing import Iterable, Mapping

from src.domain.models import GeoPoint, Stop, TripRoute
from src.domain.models.geo import LngLat

# Spacing of the synthetic per-stop timestamps, in seconds.
STOP_INTERVAL_S = 30

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _coordinate(raw: str | None) -> float | None:
    try:
        value = float(raw or "")
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _sequence(raw: str | None) -> int | None:
    # Leading digits only, so "1.0" and "2 " count as 1 and 2.
    match = _LEADING_INT.match(raw or "")
    return int(match.group(1)) if match else None


def parse_stops(rows: Iterable[Mapping[str, str]]) -> list[Stop]:
    """Build stops, skipping rows without a usable id or coordinates.

    Coordinates must be finite numbers inside the latitude and longitude
    ranges; out-of-range rows are dropped like non-numeric ones.
    """

    stops: list[Stop] = []
    for row in rows:
        stop_id = (row.get("stop_id") or "").strip()
        lat = _coordinate(row.get("stop_lat"))
        lon = _coordinate(row.get("stop_lon"))
        if not stop_id or lat is None or lon is None:
            continue
        try:
            location = GeoPoint(lat=lat, lon=lon)
        except ValueError:
            continue
        stops.append(
            Stop(
                id=stop_id,
                name=row.get("stop_name") or stop_id,
                location=location,
                code=row.get("stop_code") or None,
                route_id=row.get("route_id") or None,
            )
        )
    return stops


def trip_route_ids(rows: Iterable[Mapping[str, str]]) -> dict[str, str | None]:
    out: dict[str, str | None] = {}
    for row in rows:
        trip_id = row.get("trip_id") or ""
        if trip_id:
            out[trip_id] = row.get("route_id") or None
    return out


def stop_sequences_by_trip(
    rows: Iterable[Mapping[str, str]],
) -> dict[str, list[tuple[str, int]]]:
    """Group (stop_id, stop_sequence) by trip, sorted by sequence.

    The sort is stable: duplicate sequence numbers keep their input order.
    """

    by_trip: dict[str, list[tuple[str, int]]] = {}
    for row in rows:
        trip_id = row.get("trip_id") or ""
        stop_id = row.get("stop_id") or ""
        if not trip_id or not stop_id:
            continue
        seq = _sequence(row.get("stop_sequence"))
        if seq is None:
            continue
        by_trip.setdefault(trip_id, []).append((stop_id, seq))

    for entries in by_trip.values():
        entries.sort(key=lambda x: x[1])
    return by_trip


def build_trip_routes(
    stops: Iterable[Stop],
    sequences: Mapping[str, list[tuple[str, int]]],
    route_ids: Mapping[str, str | None],
    *,
    base_time: float,
) -> list[TripRoute]:
    coords: dict[str, LngLat] = {s.id: s.location.as_lng_lat() for s in stops}

    routes: list[TripRoute] = []
    for trip_id, entries in sequences.items():
        path: list[LngLat] = []
        timestamps: list[float] = []
        for index, (stop_id, _) in enumerate(entries):
            point = coords.get(stop_id)
            if point is None:
                # Dangling stop reference; keep the rest of the trip.
                continue
            path.append(point)
            timestamps.append(base_time + index * STOP_INTERVAL_S)

        if len(path) < 2:
            continue
        routes.append(
            TripRoute(
                id=trip_id,
                path=tuple(path),
                timestamps=tuple(timestamps),
                route_id=route_ids.get(trip_id),
            )
        )
    return routes
