from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable
from zoneinfo import ZoneInfo

from src.domain.models.gtfs import (
    CalendarEntry,
    ExceptionKind,
    GtfsFeed,
    ServiceException,
    Weekday,
)
from src.domain.models.reachability import LocalDateParts

DEFAULT_FEED_TIME_ZONE = "Australia/Brisbane"


@dataclass(frozen=True, slots=True)
class CalendarResolver:
    """Answers "which services run on this date" for one feed version.

    Exceptions are applied after the weekly calendar: removals first, then
    additions, so an added service runs even if calendar.txt says it doesn't.
    """

    calendar_by_service: dict[str, CalendarEntry] = field(default_factory=dict)
    added_by_date: dict[int, frozenset[str]] = field(default_factory=dict)
    removed_by_date: dict[int, frozenset[str]] = field(default_factory=dict)

    @classmethod
    def from_feed(cls, feed: GtfsFeed) -> "CalendarResolver":
        return cls(
            calendar_by_service=feed.calendar_by_service,
            added_by_date=feed.added_by_date,
            removed_by_date=feed.removed_by_date,
        )

    def active_services(self, date_number: int, weekday: Weekday) -> frozenset[str]:
        active = {
            service_id
            for service_id, entry in self.calendar_by_service.items()
            if entry.runs_on(date_number, weekday)
        }
        active -= self.removed_by_date.get(date_number, frozenset())
        active |= self.added_by_date.get(date_number, frozenset())
        return frozenset(active)


def local_date_parts(instant_ms: int, time_zone: str) -> LocalDateParts:
    """Convert an epoch instant (ms) into civil date/time parts in `time_zone`.

    Raises OverflowError/OSError/ValueError for instants outside the platform's
    supported range and ZoneInfoNotFoundError for unknown zones.
    """

    local = datetime.fromtimestamp(instant_ms / 1000.0, tz=ZoneInfo(time_zone))
    return LocalDateParts(
        year=local.year,
        month=local.month,
        day=local.day,
        weekday=Weekday.from_iso(local.isoweekday()),
        hour=local.hour,
        minute=local.minute,
        second=local.second,
    )


def active_trip_ids(
    trips_by_service: dict[str, frozenset[str]], active_services: frozenset[str]
) -> frozenset[str]:
    out: set[str] = set()
    for service_id in active_services:
        out.update(trips_by_service.get(service_id, ()))
    return frozenset(out)


def index_exceptions(
    exceptions: Iterable[ServiceException],
) -> tuple[dict[int, frozenset[str]], dict[int, frozenset[str]]]:
    """Split calendar_dates rows into (added_by_date, removed_by_date).

    A later exception for the same (date, service_id) replaces an earlier one.
    """

    latest: dict[tuple[int, str], ExceptionKind] = {}
    for ex in exceptions:
        latest[(ex.date, ex.service_id)] = ex.kind

    added: dict[int, set[str]] = {}
    removed: dict[int, set[str]] = {}
    for (date, service_id), kind in latest.items():
        target = added if kind is ExceptionKind.ADD else removed
        target.setdefault(date, set()).add(service_id)

    return (
        {d: frozenset(s) for d, s in added.items()},
        {d: frozenset(s) for d, s in removed.items()},
    )
