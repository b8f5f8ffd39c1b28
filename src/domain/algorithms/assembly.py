from __future__ import annotations

from typing import Mapping

from src.domain.models.reachability import (
    LocalDateParts,
    ReachabilityMeta,
    ReachabilityQuery,
    ReachabilityResult,
)


def etas_within_budget(
    arrival_s_by_stop: Mapping[str, int], *, depart_s: int, budget_s: int
) -> dict[str, int]:
    """Elapsed seconds from departure per stop, keeping eta <= budget_s."""

    out: dict[str, int] = {}
    for stop_id, arrival_s in arrival_s_by_stop.items():
        eta = max(0, int(round(arrival_s - depart_s)))
        if eta <= budget_s:
            out[stop_id] = eta
    return out


def assemble_result(
    arrival_s_by_stop: Mapping[str, int],
    *,
    query: ReachabilityQuery,
    local: LocalDateParts,
    time_zone: str,
    active_services: int,
    active_trips: int,
    stop_count: int,
    nearby_stops: int,
) -> ReachabilityResult:
    depart_s = local.seconds_since_midnight
    return ReachabilityResult(
        stop_eta_s_by_id=etas_within_budget(
            arrival_s_by_stop, depart_s=depart_s, budget_s=query.budget_s
        ),
        meta=ReachabilityMeta(
            depart_ms=query.depart_ms,
            time_zone=time_zone,
            date_number=local.date_number,
            weekday=local.weekday,
            depart_s=depart_s,
            budget_min=query.budget_min,
            max_walk_m=query.max_walk_m,
            max_transfers=query.max_transfers,
            active_services=active_services,
            active_trips=active_trips,
            stop_count=stop_count,
            nearby_stops=nearby_stops,
        ),
    )
