from __future__ import annotations

import math

# Spherical Web-Mercator radius (EPSG:3857).
MERCATOR_RADIUS_M = 6378137.0
MAX_MERCATOR_LAT = 85.0


def mercator_project_m(lat: float, lon: float) -> tuple[float, float]:
    """Project WGS84 degrees onto planar Web-Mercator meters.

    Latitude is clamped to +/-85 degrees to stay clear of the polar singularity.
    Planar distances are only meaningful at metro scale.
    """

    clamped_lat = max(-MAX_MERCATOR_LAT, min(MAX_MERCATOR_LAT, lat))
    x = MERCATOR_RADIUS_M * math.radians(lon)
    y = MERCATOR_RADIUS_M * math.log(
        math.tan(math.pi / 4.0 + math.radians(clamped_lat) / 2.0)
    )
    return x, y


def mercator_unproject(x: float, y: float) -> tuple[float, float]:
    """Inverse of mercator_project_m (for latitudes inside the clamp)."""

    lon = math.degrees(x / MERCATOR_RADIUS_M)
    lat = math.degrees(
        2.0 * math.atan(math.exp(y / MERCATOR_RADIUS_M)) - math.pi / 2.0
    )
    return lat, lon
