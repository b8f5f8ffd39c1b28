from __future__ import annotations

import math
import time

from fastapi import HTTPException

from src.domain.models import GeoPoint


def parse_point(lat: float | None, lon: float | None) -> GeoPoint:
    """Build the origin point or reject the request with a 400."""

    if lat is None or lon is None or not (math.isfinite(lat) and math.isfinite(lon)):
        raise HTTPException(status_code=400, detail="lat and lon are required numbers")
    try:
        return GeoPoint(lat=lat, lon=lon)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def parse_depart_ms(depart_ms: int | None) -> int:
    # Omitted means "now".
    if depart_ms is None:
        return int(time.time() * 1000)
    return depart_ms


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))
