from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .stop import Stop


class Weekday(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def from_iso(cls, iso_weekday: int) -> "Weekday":
        """Map an ISO weekday (1=Monday .. 7=Sunday) to its calendar.txt column."""

        return _WEEKDAYS[iso_weekday - 1]

    @property
    def position(self) -> int:
        return _WEEKDAYS.index(self)


_WEEKDAYS: tuple[Weekday, ...] = tuple(Weekday)


class ExceptionKind(str, Enum):
    ADD = "add"  # exception_type=1
    REMOVE = "remove"  # exception_type=2


@dataclass(frozen=True, slots=True)
class CalendarEntry:
    """One calendar.txt row: a weekly pattern over an inclusive date range."""

    service_id: str
    start_date: int  # YYYYMMDD
    end_date: int  # YYYYMMDD
    days: tuple[bool, bool, bool, bool, bool, bool, bool]  # Monday..Sunday

    def runs_on(self, date_number: int, weekday: Weekday) -> bool:
        if date_number < self.start_date or date_number > self.end_date:
            return False
        return bool(self.days[weekday.position])


@dataclass(frozen=True, slots=True)
class ServiceException:
    date: int  # YYYYMMDD
    service_id: str
    kind: ExceptionKind


@dataclass(frozen=True, slots=True)
class StopTimeEntry:
    """A scheduled call of a trip at a stop.

    Times are seconds since service day midnight (GTFS time semantics; may exceed 24h).
    """

    trip_id: str
    stop_id: str
    sequence: int
    arrival_s: int
    departure_s: int


@dataclass(frozen=True, slots=True)
class GtfsFeed:
    """In-memory representation of the subset of GTFS needed for reachability.

    Instances are shared read-only between concurrent requests; a feed refresh
    produces a new instance instead of mutating this one.
    """

    stops_by_id: dict[str, Stop] = field(default_factory=dict)
    stop_times_by_trip: dict[str, tuple[StopTimeEntry, ...]] = field(
        default_factory=dict
    )
    trips_by_service: dict[str, frozenset[str]] = field(default_factory=dict)
    calendar_by_service: dict[str, CalendarEntry] = field(default_factory=dict)
    added_by_date: dict[int, frozenset[str]] = field(default_factory=dict)
    removed_by_date: dict[int, frozenset[str]] = field(default_factory=dict)
    time_zone: str | None = None
    stops_version: str = ""

    @property
    def stop_index_key(self) -> str:
        return f"{self.stops_version}:{len(self.stops_by_id)}"
