from __future__ import annotations

from src.adapters.api.schemas.reachability import CamelModel


class NearbyStopSchema(CamelModel):
    stop_id: str
    name: str
    lat: float
    lon: float
    meters: float


class NearestStopsSchema(CamelModel):
    nearest_meters: float | None = None
    within_radius: int
    radius_meters: float
    stops: list[NearbyStopSchema]


class AccessCellSchema(CamelModel):
    south: float
    west: float
    north: float
    east: float
    meters: float


class AccessGridSchema(CamelModel):
    radius_meters: float
    grid_size: int
    cells: list[AccessCellSchema]
