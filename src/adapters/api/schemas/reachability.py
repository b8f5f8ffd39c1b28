from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReachabilityMetaSchema(CamelModel):
    depart_ms: int
    time_zone: str
    date_number: int
    weekday: str
    depart_sec: int
    budget_min: float
    max_walk_meters: float
    max_transfers: int
    active_services: int
    active_trips: int
    stop_count: int
    nearby_stops: int


class ReachabilityResponseSchema(CamelModel):
    stop_eta_sec_by_id: dict[str, int]
    meta: ReachabilityMetaSchema
