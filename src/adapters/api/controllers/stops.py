from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from src.adapters.api.dependencies import get_stop_access_service
from src.adapters.api.params import clamp, parse_point
from src.adapters.api.schemas.stops import (
    AccessCellSchema,
    AccessGridSchema,
    NearbyStopSchema,
    NearestStopsSchema,
)
from src.app.services.stop_access_service import StopAccessService

router = APIRouter(prefix="/stops", tags=["stops"])


@router.get("/nearest", response_model=NearestStopsSchema)
async def nearest_stops(
    lat: float | None = Query(default=None),
    lon: float | None = Query(default=None),
    k: int = Query(default=5),
    radius_meters: float = Query(default=1200.0, alias="radiusMeters"),
    service: StopAccessService = Depends(get_stop_access_service),
) -> NearestStopsSchema:
    point = parse_point(lat, lon)
    radius = clamp(radius_meters, 0.0, 5000.0)
    found = await service.nearest(point, k=k, radius_m=radius)
    return NearestStopsSchema(
        nearest_meters=found.nearest_m,
        within_radius=found.within_radius,
        radius_meters=radius,
        stops=[
            NearbyStopSchema(
                stop_id=s.stop.id,
                name=s.stop.name,
                lat=s.stop.location.lat,
                lon=s.stop.location.lon,
                meters=s.distance_m,
            )
            for s in found.stops
        ],
    )


@router.get("/access-grid", response_model=AccessGridSchema)
async def access_grid(
    lat: float | None = Query(default=None),
    lon: float | None = Query(default=None),
    radius_meters: float = Query(default=3000.0, alias="radiusMeters"),
    grid_size: int = Query(default=42, alias="gridSize"),
    service: StopAccessService = Depends(get_stop_access_service),
) -> AccessGridSchema:
    center = parse_point(lat, lon)
    grid = await service.access_grid(
        center,
        radius_m=clamp(radius_meters, 200.0, 10000.0),
        grid_size=int(clamp(grid_size, 1, 100)),
    )
    return AccessGridSchema(
        radius_meters=grid.radius_m,
        grid_size=grid.grid_size,
        cells=[
            AccessCellSchema(
                south=c.south,
                west=c.west,
                north=c.north,
                east=c.east,
                meters=c.distance_m,
            )
            for c in grid.cells
        ],
    )
