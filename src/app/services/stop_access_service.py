from __future__ import annotations

import math
from dataclasses import dataclass

from src.domain.models import (
    AccessCell,
    AccessGrid,
    GeoPoint,
    NearbyStop,
    NearestStops,
)

from .feed_cache import FeedSnapshot, FeedSnapshotCache

# Meters per degree of latitude, good enough for sizing a local grid.
METERS_PER_DEG_LAT = 111_320.0


@dataclass(slots=True)
class StopAccessService:
    """How far the nearest stops are from a point.

    - `nearest`: nearest distance, the k closest stops, and how many stops
      lie within a walking radius.
    - `access_grid`: nearest-stop distance sampled over a grid of cells
      around a point (the accessibility overlay of the map).
    """

    feed_cache: FeedSnapshotCache

    async def nearest(
        self, point: GeoPoint, *, k: int, radius_m: float
    ) -> NearestStops:
        snapshot = await self.feed_cache.get()
        return nearest_on_snapshot(snapshot, point, k=k, radius_m=radius_m)

    async def access_grid(
        self, center: GeoPoint, *, radius_m: float, grid_size: int
    ) -> AccessGrid:
        snapshot = await self.feed_cache.get()
        return access_grid_on_snapshot(
            snapshot, center, radius_m=radius_m, grid_size=grid_size
        )


def nearest_on_snapshot(
    snapshot: FeedSnapshot, point: GeoPoint, *, k: int, radius_m: float
) -> NearestStops:
    index = snapshot.stop_index
    stops_by_id = snapshot.feed.stops_by_id

    nearby: list[NearbyStop] = []
    for stop_id, meters in index.nearest_k(point.lat, point.lon, k):
        stop = stops_by_id.get(stop_id)
        if stop is not None:
            nearby.append(NearbyStop(stop=stop, distance_m=meters))

    return NearestStops(
        nearest_m=index.nearest_distance(point.lat, point.lon),
        within_radius=index.count_within_radius(point.lat, point.lon, radius_m),
        stops=tuple(nearby),
    )


def access_grid_on_snapshot(
    snapshot: FeedSnapshot, center: GeoPoint, *, radius_m: float, grid_size: int
) -> AccessGrid:
    """Sample nearest-stop distance on a grid_size x grid_size square.

    The square spans +/- radius_m around the center. Distances are capped at
    radius_m, which is also reported for cells with no stop nearby.
    """

    index = snapshot.stop_index
    lat_delta = radius_m / METERS_PER_DEG_LAT
    # Keep longitudinal extent finite close to the poles.
    cos_lat = max(0.15, math.cos(math.radians(center.lat)))
    lon_delta = radius_m / (METERS_PER_DEG_LAT * cos_lat)

    lat_min = center.lat - lat_delta
    lon_min = center.lon - lon_delta
    lat_step = 2.0 * lat_delta / grid_size
    lon_step = 2.0 * lon_delta / grid_size

    cells: list[AccessCell] = []
    for i in range(grid_size):
        south = lat_min + i * lat_step
        for j in range(grid_size):
            west = lon_min + j * lon_step
            d = index.nearest_distance(south + lat_step / 2.0, west + lon_step / 2.0)
            cells.append(
                AccessCell(
                    south=south,
                    west=west,
                    north=south + lat_step,
                    east=west + lon_step,
                    distance_m=radius_m if d is None else min(d, radius_m),
                )
            )

    return AccessGrid(
        center=center, radius_m=radius_m, grid_size=grid_size, cells=tuple(cells)
    )
