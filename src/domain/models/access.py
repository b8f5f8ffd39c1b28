from __future__ import annotations

from dataclasses import dataclass

from .geo import GeoPoint
from .stop import Stop


@dataclass(frozen=True, slots=True)
class NearbyStop:
    stop: Stop
    distance_m: float


@dataclass(frozen=True, slots=True)
class NearestStops:
    nearest_m: float | None
    within_radius: int
    stops: tuple[NearbyStop, ...] = ()


@dataclass(frozen=True, slots=True)
class AccessCell:
    """One grid cell with the distance from its center to the nearest stop."""

    south: float
    west: float
    north: float
    east: float
    distance_m: float


@dataclass(frozen=True, slots=True)
class AccessGrid:
    center: GeoPoint
    radius_m: float
    grid_size: int
    cells: tuple[AccessCell, ...] = ()
