from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone

from src.domain.exceptions import InvalidQuery

from .geo import GeoPoint
from .gtfs import Weekday

DEFAULT_BUDGET_MIN = 45.0
DEFAULT_MAX_WALK_M = 1200.0
DEFAULT_MAX_TRANSFERS = 2


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def _finite_or(value: float | None, default: float) -> float:
    if value is None or not math.isfinite(value):
        return default
    return float(value)


@dataclass(frozen=True, slots=True)
class ReachabilityQuery:
    """A validated, clamped reachability request."""

    origin: GeoPoint
    depart_ms: int
    budget_min: float = DEFAULT_BUDGET_MIN
    max_walk_m: float = DEFAULT_MAX_WALK_M
    max_transfers: int = DEFAULT_MAX_TRANSFERS

    @classmethod
    def from_params(
        cls,
        *,
        origin: GeoPoint,
        depart_ms: int,
        budget_min: float | None = None,
        max_walk_m: float | None = None,
        max_transfers: float | None = None,
    ) -> "ReachabilityQuery":
        try:
            datetime.fromtimestamp(depart_ms / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as exc:
            raise InvalidQuery(f"departMs out of range: {depart_ms}") from exc

        # Non-finite values fall back to the default before clamping.
        budget = _clamp(_finite_or(budget_min, DEFAULT_BUDGET_MIN), 5.0, 300.0)
        walk = _clamp(_finite_or(max_walk_m, DEFAULT_MAX_WALK_M), 200.0, 5000.0)
        transfers = int(
            _clamp(
                math.floor(_finite_or(max_transfers, DEFAULT_MAX_TRANSFERS)), 0, 4
            )
        )
        return cls(
            origin=origin,
            depart_ms=int(depart_ms),
            budget_min=budget,
            max_walk_m=walk,
            max_transfers=transfers,
        )

    @property
    def budget_s(self) -> int:
        return int(math.floor(self.budget_min * 60))


@dataclass(frozen=True, slots=True)
class LocalDateParts:
    """Civil date/time of an instant in a given timezone."""

    year: int
    month: int
    day: int
    weekday: Weekday
    hour: int
    minute: int
    second: int

    @property
    def date_number(self) -> int:
        return self.year * 10000 + self.month * 100 + self.day

    @property
    def seconds_since_midnight(self) -> int:
        return self.hour * 3600 + self.minute * 60 + self.second


@dataclass(frozen=True, slots=True)
class ReachabilityMeta:
    depart_ms: int
    time_zone: str
    date_number: int
    weekday: Weekday
    depart_s: int
    budget_min: float
    max_walk_m: float
    max_transfers: int
    active_services: int
    active_trips: int
    stop_count: int
    nearby_stops: int


@dataclass(frozen=True, slots=True)
class ReachabilityResult:
    stop_eta_s_by_id: dict[str, int]
    meta: ReachabilityMeta
