from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from src.adapters.api.dependencies import get_reachability_service
from src.adapters.api.params import parse_depart_ms, parse_point
from src.adapters.api.schemas.reachability import (
    ReachabilityMetaSchema,
    ReachabilityResponseSchema,
)
from src.app.services.reachability_service import ReachabilityService
from src.domain.exceptions import InvalidQuery
from src.domain.models import ReachabilityQuery, ReachabilityResult

router = APIRouter(tags=["reachability"])


def _result_to_schema(result: ReachabilityResult) -> ReachabilityResponseSchema:
    meta = result.meta
    return ReachabilityResponseSchema(
        stop_eta_sec_by_id=dict(result.stop_eta_s_by_id),
        meta=ReachabilityMetaSchema(
            depart_ms=meta.depart_ms,
            time_zone=meta.time_zone,
            date_number=meta.date_number,
            weekday=meta.weekday.value,
            depart_sec=meta.depart_s,
            budget_min=meta.budget_min,
            max_walk_meters=meta.max_walk_m,
            max_transfers=meta.max_transfers,
            active_services=meta.active_services,
            active_trips=meta.active_trips,
            stop_count=meta.stop_count,
            nearby_stops=meta.nearby_stops,
        ),
    )


@router.get("/reachability", response_model=ReachabilityResponseSchema)
async def get_reachability(
    lat: float | None = Query(default=None),
    lon: float | None = Query(default=None),
    depart_ms: int | None = Query(default=None, alias="departMs"),
    budget_min: float | None = Query(default=None, alias="budgetMin"),
    max_walk_meters: float | None = Query(default=None, alias="maxWalkMeters"),
    max_transfers: int | None = Query(default=None, alias="maxTransfers"),
    service: ReachabilityService = Depends(get_reachability_service),
) -> ReachabilityResponseSchema:
    origin = parse_point(lat, lon)
    try:
        query = ReachabilityQuery.from_params(
            origin=origin,
            depart_ms=parse_depart_ms(depart_ms),
            budget_min=budget_min,
            max_walk_m=max_walk_meters,
            max_transfers=max_transfers,
        )
        result = await service.compute(query)
    except InvalidQuery as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _result_to_schema(result)
