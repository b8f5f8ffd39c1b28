from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

from src.domain.algorithms.calendar import (
    CalendarResolver,
    active_trip_ids,
    index_exceptions,
    local_date_parts,
)
from src.domain.models.gtfs import (
    CalendarEntry,
    ExceptionKind,
    ServiceException,
    Weekday,
)

WEEKDAYS_ONLY = (True, True, True, True, True, False, False)
MONDAYS_ONLY = (True, False, False, False, False, False, False)


def _ms(tz: str, *args: int) -> int:
    return int(datetime(*args, tzinfo=ZoneInfo(tz)).timestamp() * 1000)


def test_monday_service_with_removed_date() -> None:
    calendar = {
        "MON": CalendarEntry(
            service_id="MON", start_date=20240101, end_date=20240131, days=MONDAYS_ONLY
        )
    }
    added, removed = index_exceptions(
        [ServiceException(date=20240108, service_id="MON", kind=ExceptionKind.REMOVE)]
    )
    resolver = CalendarResolver(
        calendar_by_service=calendar, added_by_date=added, removed_by_date=removed
    )

    assert "MON" in resolver.active_services(20240101, Weekday.MONDAY)
    assert "MON" in resolver.active_services(20240115, Weekday.MONDAY)
    assert "MON" not in resolver.active_services(20240108, Weekday.MONDAY)


def test_calendar_range_is_inclusive_and_weekday_filtered() -> None:
    resolver = CalendarResolver(
        calendar_by_service={
            "WK": CalendarEntry(
                service_id="WK",
                start_date=20240101,
                end_date=20240105,
                days=WEEKDAYS_ONLY,
            )
        }
    )

    assert resolver.active_services(20240101, Weekday.MONDAY) == {"WK"}
    assert resolver.active_services(20240105, Weekday.FRIDAY) == {"WK"}
    assert resolver.active_services(20240106, Weekday.SATURDAY) == frozenset()
    assert resolver.active_services(20231231, Weekday.SUNDAY) == frozenset()
    assert resolver.active_services(20240108, Weekday.MONDAY) == frozenset()


def test_add_exception_reinstates_service_outside_calendar() -> None:
    added, removed = index_exceptions(
        [
            ServiceException(20240106, "WK", ExceptionKind.REMOVE),
            ServiceException(20240106, "XMAS", ExceptionKind.ADD),
        ]
    )
    resolver = CalendarResolver(
        calendar_by_service={
            "WK": CalendarEntry("WK", 20240101, 20240131, WEEKDAYS_ONLY),
        },
        added_by_date=added,
        removed_by_date=removed,
    )

    # XMAS has no calendar.txt row at all.
    assert resolver.active_services(20240106, Weekday.SATURDAY) == {"XMAS"}


def test_addition_wins_when_same_service_is_added_and_removed() -> None:
    resolver = CalendarResolver(
        calendar_by_service={},
        added_by_date={20240106: frozenset({"S"})},
        removed_by_date={20240106: frozenset({"S"})},
    )
    assert resolver.active_services(20240106, Weekday.SATURDAY) == {"S"}


def test_later_exception_for_same_key_overwrites_earlier() -> None:
    added, removed = index_exceptions(
        [
            ServiceException(20240301, "S", ExceptionKind.ADD),
            ServiceException(20240301, "S", ExceptionKind.REMOVE),
            ServiceException(20240302, "S", ExceptionKind.REMOVE),
            ServiceException(20240302, "S", ExceptionKind.ADD),
        ]
    )

    assert added == {20240302: frozenset({"S"})}
    assert removed == {20240301: frozenset({"S"})}


def test_empty_tables_give_no_active_services() -> None:
    assert CalendarResolver().active_services(20240101, Weekday.MONDAY) == frozenset()


def test_local_date_parts_uses_target_timezone_weekday() -> None:
    # 2024-01-07 22:30 UTC is already Monday 08:30 in Brisbane (UTC+10).
    instant = _ms("UTC", 2024, 1, 7, 22, 30, 15)
    parts = local_date_parts(instant, "Australia/Brisbane")

    assert parts.date_number == 20240108
    assert parts.weekday is Weekday.MONDAY
    assert parts.seconds_since_midnight == 8 * 3600 + 30 * 60 + 15
    assert (parts.year, parts.month, parts.day) == (2024, 1, 8)


def test_local_date_parts_follows_daylight_saving_changes() -> None:
    # Sydney leaves DST on 2024-04-07 at 03:00 local (UTC+11 -> UTC+10).
    before = local_date_parts(_ms("UTC", 2024, 4, 6, 12, 0, 0), "Australia/Sydney")
    after = local_date_parts(_ms("UTC", 2024, 4, 7, 12, 0, 0), "Australia/Sydney")

    assert before.date_number == 20240406
    assert before.hour == 23
    assert after.date_number == 20240407
    assert after.hour == 22
    assert after.weekday is Weekday.SUNDAY


def test_active_trip_ids_unions_services() -> None:
    trips_by_service = {
        "A": frozenset({"t1", "t2"}),
        "B": frozenset({"t2", "t3"}),
        "C": frozenset({"t4"}),
    }
    assert active_trip_ids(trips_by_service, frozenset({"A", "B", "Z"})) == {
        "t1",
        "t2",
        "t3",
    }
