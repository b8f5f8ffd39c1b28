from __future__ import annotations

import math
from typing import Iterable

DEFAULT_WALK_SPEED_MPS = 1.33


def walk_seconds(distance_m: float, walk_speed_mps: float) -> int:
    """Whole seconds needed to walk `distance_m`, rounded up."""

    return int(math.ceil(distance_m / walk_speed_mps))


def seed_walking_access(
    nearby_stops: Iterable[tuple[str, float]],
    *,
    depart_s: int,
    walk_speed_mps: float = DEFAULT_WALK_SPEED_MPS,
) -> dict[str, int]:
    """Initial arrival labels for stops reachable on foot from the origin.

    Takes (stop_id, meters) pairs, as produced by
    SpatialStopIndex.within_radius, and keeps the earliest arrival per stop.
    """

    if walk_speed_mps <= 0:
        raise ValueError(f"walk_speed_mps must be positive, got {walk_speed_mps}")

    arrivals: dict[str, int] = {}
    for stop_id, meters in nearby_stops:
        t = depart_s + walk_seconds(meters, walk_speed_mps)
        cur = arrivals.get(stop_id)
        if cur is None or t < cur:
            arrivals[stop_id] = t
    return arrivals
