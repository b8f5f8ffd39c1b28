from __future__ import annotations

import csv
import hashlib
import io
import logging
import re
import zipfile
from pathlib import Path
from typing import Callable, Iterable, Iterator, Mapping

from src.domain.algorithms.calendar import index_exceptions
from src.domain.models import (
    CalendarEntry,
    ExceptionKind,
    GeoPoint,
    GtfsFeed,
    ServiceException,
    Stop,
    StopTimeEntry,
)

logger = logging.getLogger(__name__)

# Returns the raw bytes of a GTFS table (e.g. "stops.txt"), or None if absent.
TableReader = Callable[[str], bytes | None]

Row = Mapping[str, str | None]

_DATE_RE = re.compile(r"^\d{8}$")
_LINE_BREAK = re.compile(r"\r?\n")
_EXCEPTION_KINDS = {"1": ExceptionKind.ADD, "2": ExceptionKind.REMOVE}
_DAY_COLUMNS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


def parse_gtfs_time_to_seconds(raw: str) -> int:
    # GTFS time can be HH:MM:SS with HH possibly > 24.
    hh, mm, ss = raw.strip().split(":")
    return int(hh) * 3600 + int(mm) * 60 + int(ss)


def parse_date_number(raw: str) -> int | None:
    value = raw.strip().strip('"').strip()
    if not _DATE_RE.match(value):
        return None
    return int(value)


def _split_line(line: str) -> list[str] | None:
    try:
        return next(csv.reader((line,)), [])
    except csv.Error:
        return None


def iter_rows(data: bytes) -> Iterator[Row]:
    """Rows of a GTFS table as header -> value mappings.

    Every physical line is parsed on its own, so a stray quote or an oversized
    field costs only that line. A line the csv module rejects comes out as an
    empty row, which the table readers count as dropped.
    """

    # utf-8-sig drops the BOM some agencies prepend to the header line.
    text = data.decode("utf-8-sig", errors="replace")
    header: list[str] | None = None
    for line in _LINE_BREAK.split(text):
        if not line.strip():
            continue
        fields = _split_line(line)
        if header is None:
            if fields is None:
                logger.warning("Unreadable GTFS header line; table skipped")
                return
            header = [name.strip() for name in fields]
            continue
        yield dict(zip(header, fields)) if fields is not None else {}


def _field(row: Row, name: str) -> str:
    return (row.get(name) or "").strip()


def _log_dropped(table: str, dropped: int) -> None:
    if dropped:
        logger.warning("Skipped %d malformed rows in %s", dropped, table)


def read_agency_time_zone(rows: Iterable[Row]) -> str | None:
    for row in rows:
        return _field(row, "agency_timezone") or None
    return None


def read_stops(rows: Iterable[Row]) -> dict[str, Stop]:
    stops_by_id: dict[str, Stop] = {}
    dropped = 0
    for row in rows:
        stop_id = _field(row, "stop_id")
        if not stop_id:
            dropped += 1
            continue
        try:
            location = GeoPoint(
                lat=float(_field(row, "stop_lat")), lon=float(_field(row, "stop_lon"))
            )
        except ValueError:
            dropped += 1
            continue
        name = _field(row, "stop_name") or stop_id
        stops_by_id[stop_id] = Stop(id=stop_id, name=name, location=location)

    _log_dropped("stops.txt", dropped)
    return stops_by_id


def read_stop_times(rows: Iterable[Row]) -> dict[str, tuple[StopTimeEntry, ...]]:
    grouped: dict[str, list[StopTimeEntry]] = {}
    dropped = 0
    for row in rows:
        trip_id = _field(row, "trip_id")
        stop_id = _field(row, "stop_id")
        if not trip_id or not stop_id:
            dropped += 1
            continue

        arr_raw = _field(row, "arrival_time")
        dep_raw = _field(row, "departure_time")
        try:
            seq = int(_field(row, "stop_sequence"))
            # A call may publish only one of the two times.
            arr_s = parse_gtfs_time_to_seconds(arr_raw or dep_raw)
            dep_s = parse_gtfs_time_to_seconds(dep_raw or arr_raw)
        except ValueError:
            dropped += 1
            continue

        grouped.setdefault(trip_id, []).append(
            StopTimeEntry(
                trip_id=trip_id,
                stop_id=stop_id,
                sequence=seq,
                arrival_s=arr_s,
                departure_s=dep_s,
            )
        )

    _log_dropped("stop_times.txt", dropped)
    return {
        trip_id: tuple(sorted(entries, key=lambda e: e.sequence))
        for trip_id, entries in grouped.items()
    }


def read_trips_by_service(rows: Iterable[Row]) -> dict[str, frozenset[str]]:
    grouped: dict[str, set[str]] = {}
    dropped = 0
    for row in rows:
        trip_id = _field(row, "trip_id")
        service_id = _field(row, "service_id")
        if not trip_id or not service_id:
            dropped += 1
            continue
        grouped.setdefault(service_id, set()).add(trip_id)

    _log_dropped("trips.txt", dropped)
    return {sid: frozenset(trips) for sid, trips in grouped.items()}


def read_calendar(rows: Iterable[Row]) -> dict[str, CalendarEntry]:
    calendar_by_service: dict[str, CalendarEntry] = {}
    dropped = 0
    for row in rows:
        service_id = _field(row, "service_id")
        start = parse_date_number(_field(row, "start_date"))
        end = parse_date_number(_field(row, "end_date"))
        if not service_id or start is None or end is None:
            dropped += 1
            continue
        if any(row.get(day) is None for day in _DAY_COLUMNS):
            dropped += 1
            continue

        days = tuple(_field(row, day) == "1" for day in _DAY_COLUMNS)
        calendar_by_service[service_id] = CalendarEntry(
            service_id=service_id,
            start_date=start,
            end_date=end,
            days=days,  # type: ignore[arg-type]
        )

    _log_dropped("calendar.txt", dropped)
    return calendar_by_service


def read_calendar_dates(rows: Iterable[Row]) -> list[ServiceException]:
    """calendar_dates.txt rows in file order (types other than 1/2 dropped)."""

    exceptions: list[ServiceException] = []
    dropped = 0
    for row in rows:
        service_id = _field(row, "service_id")
        date = parse_date_number(_field(row, "date"))
        ex = _field(row, "exception_type")
        if not service_id or date is None:
            dropped += 1
            continue
        kind = _EXCEPTION_KINDS.get(ex)
        if kind is None:
            dropped += 1
            continue
        exceptions.append(
            ServiceException(date=date, service_id=service_id, kind=kind)
        )

    _log_dropped("calendar_dates.txt", dropped)
    return exceptions


def build_feed(read_table: TableReader) -> GtfsFeed:
    """Assemble a GtfsFeed from raw tables; absent tables become empty."""

    def rows(name: str) -> Iterable[Row]:
        data = read_table(name)
        if data is None:
            logger.info("GTFS table %s not present", name)
            return ()
        return iter_rows(data)

    stops_raw = read_table("stops.txt")
    stops_by_id = read_stops(iter_rows(stops_raw)) if stops_raw is not None else {}
    stops_version = hashlib.sha256(stops_raw or b"").hexdigest()[:16]

    added_by_date, removed_by_date = index_exceptions(
        read_calendar_dates(rows("calendar_dates.txt"))
    )

    feed = GtfsFeed(
        stops_by_id=stops_by_id,
        stop_times_by_trip=read_stop_times(rows("stop_times.txt")),
        trips_by_service=read_trips_by_service(rows("trips.txt")),
        calendar_by_service=read_calendar(rows("calendar.txt")),
        added_by_date=added_by_date,
        removed_by_date=removed_by_date,
        time_zone=read_agency_time_zone(rows("agency.txt")),
        stops_version=stops_version,
    )

    logger.info(
        "Loaded GTFS feed: %d stops, %d trips with stop times, %d services",
        len(feed.stops_by_id),
        len(feed.stop_times_by_trip),
        len(feed.calendar_by_service),
    )
    return feed


def load_feed_from_directory(base: Path) -> GtfsFeed:
    def read_table(name: str) -> bytes | None:
        path = base / name
        return path.read_bytes() if path.exists() else None

    return build_feed(read_table)


def parse_gtfs_zip(content: bytes) -> GtfsFeed:
    with zipfile.ZipFile(io.BytesIO(content)) as zf:
        # Some feeds nest the tables in a folder; match on the file name only.
        members = {
            Path(info.filename).name: info
            for info in zf.infolist()
            if not info.is_dir()
        }

        def read_table(name: str) -> bytes | None:
            info = members.get(name)
            return zf.read(info) if info is not None else None

        return build_feed(read_table)
