from __future__ import annotations

import math

import pytest

from src.app.ports.output import IGtfsRepository
from src.app.services.feed_cache import FeedSnapshotCache
from src.domain.algorithms.geo_utils import MERCATOR_RADIUS_M
from src.domain.models import (
    CalendarEntry,
    GeoPoint,
    GtfsFeed,
    Stop,
    StopTimeEntry,
)

# Monday 2024-01-08 08:00:00 UTC.
MONDAY_8AM_MS = 1_704_700_800_000
MONDAY_8AM_S = 8 * 3600

# Exactly 400 projected meters east of (0, 0).
STOP_A_LON = math.degrees(400.0 / MERCATOR_RADIUS_M)


class FakeGtfsRepository(IGtfsRepository):
    def __init__(self, feed: GtfsFeed | None = None) -> None:
        self.feed = feed if feed is not None else GtfsFeed()
        self.calls = 0

    async def load_feed(self) -> GtfsFeed:
        self.calls += 1
        return self.feed


def _stop(stop_id: str, lat: float, lon: float) -> Stop:
    return Stop(id=stop_id, name=f"Stop {stop_id}", location=GeoPoint(lat=lat, lon=lon))


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def equator_feed() -> GtfsFeed:
    """One weekday trip from A (400 m from the origin) to B."""

    board_s = MONDAY_8AM_S + 301 + 60
    return GtfsFeed(
        stops_by_id={
            "A": _stop("A", 0.0, STOP_A_LON),
            "B": _stop("B", 0.0, 0.02),
            "C": _stop("C", 0.0, 0.5),
        },
        stop_times_by_trip={
            "T1": (
                StopTimeEntry("T1", "A", 1, board_s, board_s),
                StopTimeEntry("T1", "B", 2, board_s + 500, board_s + 500),
            )
        },
        trips_by_service={"WK": frozenset({"T1"})},
        calendar_by_service={
            "WK": CalendarEntry(
                service_id="WK",
                start_date=20240101,
                end_date=20241231,
                days=(True, True, True, True, True, False, False),
            )
        },
        time_zone="UTC",
        stops_version="v1",
    )


@pytest.fixture
def equator_cache(equator_feed: GtfsFeed) -> FeedSnapshotCache:
    return FeedSnapshotCache(repository=FakeGtfsRepository(equator_feed))


@pytest.fixture
def make_cache():
    """Build a FeedSnapshotCache over a FakeGtfsRepository."""

    def _make(feed: GtfsFeed | None = None, **kwargs) -> FeedSnapshotCache:
        return FeedSnapshotCache(repository=FakeGtfsRepository(feed), **kwargs)

    return _make
