from __future__ import annotations

import asyncio
import dataclasses
import logging
import time
from dataclasses import dataclass, field
from typing import Callable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from src.app.ports.output import IGtfsRepository
from src.domain.algorithms.calendar import DEFAULT_FEED_TIME_ZONE, CalendarResolver
from src.domain.algorithms.spatial_index import DEFAULT_BIN_SIZE_M, SpatialStopIndex
from src.domain.models.gtfs import GtfsFeed

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FeedSnapshot:
    """Everything a request needs from one feed version, shared read-only."""

    feed: GtfsFeed
    calendar: CalendarResolver
    stop_index: SpatialStopIndex
    time_zone: str
    version: int
    built_at: float  # wall clock, for diagnostics
    expires_at: float  # cache clock


@dataclass(slots=True)
class FeedSnapshotCache:
    """Process-wide TTL cache of feed snapshots.

    - Readers get the current snapshot without locking; a refresh swaps in a
      new FeedSnapshot object and never mutates the old one.
    - Only one refresh runs at a time; concurrent callers await it.
    - Each load is bounded by `fetch_timeout_s`. On failure the previous
      snapshot keeps being served (or an empty one if there is none) and the
      load is retried after `retry_after_s`.
    - A timeout stops waiting but does not stop the load itself (a parse in a
      worker thread cannot be interrupted). A retry that finds that load still
      running waits on it again instead of starting a second one.
    """

    repository: IGtfsRepository
    ttl_s: float = 86400.0
    fetch_timeout_s: float = 60.0
    retry_after_s: float = 60.0
    default_time_zone: str = DEFAULT_FEED_TIME_ZONE
    bin_size_m: float = DEFAULT_BIN_SIZE_M
    clock: Callable[[], float] = time.monotonic

    _snapshot: FeedSnapshot | None = field(default=None, init=False, repr=False)
    _inflight: asyncio.Task[FeedSnapshot] | None = field(
        default=None, init=False, repr=False
    )
    _load: asyncio.Task[GtfsFeed] | None = field(
        default=None, init=False, repr=False
    )
    _builds: int = field(default=0, init=False, repr=False)

    @property
    def snapshot(self) -> FeedSnapshot | None:
        return self._snapshot

    async def get(self) -> FeedSnapshot:
        snap = self._snapshot
        if snap is not None and self.clock() < snap.expires_at:
            return snap

        task = self._inflight
        if task is None:
            task = asyncio.create_task(self._refresh())
            self._inflight = task
        # A cancelled caller must not cancel the refresh other callers wait on.
        return await asyncio.shield(task)

    async def _refresh(self) -> FeedSnapshot:
        try:
            return await self._rebuild(self._snapshot)
        finally:
            self._inflight = None

    def _current_load(self) -> asyncio.Task[GtfsFeed]:
        load = self._load
        if load is None or load.done():
            load = asyncio.create_task(self.repository.load_feed())
            load.add_done_callback(_consume_exception)
            self._load = load
        return load

    async def _rebuild(self, previous: FeedSnapshot | None) -> FeedSnapshot:
        try:
            feed = await asyncio.wait_for(
                asyncio.shield(self._current_load()), timeout=self.fetch_timeout_s
            )
        except Exception as exc:
            logger.warning(
                "GTFS feed refresh failed (%s: %s); serving %s snapshot",
                type(exc).__name__,
                exc,
                "previous" if previous is not None else "empty",
            )
            retry_at = self.clock() + self.retry_after_s
            if previous is not None:
                snap = dataclasses.replace(previous, expires_at=retry_at)
            else:
                snap = self._build(GtfsFeed(), previous=None, expires_at=retry_at)
            self._snapshot = snap
            return snap

        snap = self._build(
            feed, previous=previous, expires_at=self.clock() + self.ttl_s
        )
        self._snapshot = snap
        logger.info(
            "GTFS snapshot v%d ready: %d stops, tz=%s",
            snap.version,
            len(feed.stops_by_id),
            snap.time_zone,
        )
        return snap

    def _build(
        self, feed: GtfsFeed, *, previous: FeedSnapshot | None, expires_at: float
    ) -> FeedSnapshot:
        if (
            previous is not None
            and previous.feed.stop_index_key == feed.stop_index_key
            and previous.stop_index.bin_size_m == self.bin_size_m
        ):
            stop_index = previous.stop_index
        else:
            stop_index = SpatialStopIndex.from_stops(
                feed.stops_by_id.values(), bin_size_m=self.bin_size_m
            )

        self._builds += 1
        return FeedSnapshot(
            feed=feed,
            calendar=CalendarResolver.from_feed(feed),
            stop_index=stop_index,
            time_zone=self._resolve_time_zone(feed.time_zone),
            version=self._builds,
            built_at=time.time(),
            expires_at=expires_at,
        )

    def _resolve_time_zone(self, time_zone: str | None) -> str:
        if time_zone:
            try:
                ZoneInfo(time_zone)
                return time_zone
            except (ZoneInfoNotFoundError, ValueError):
                logger.warning(
                    "Unknown feed timezone %r; using %s",
                    time_zone,
                    self.default_time_zone,
                )
        return self.default_time_zone


def _consume_exception(task: asyncio.Task[GtfsFeed]) -> None:
    # A load nobody waits on any more must not log "exception never retrieved".
    if not task.cancelled():
        task.exception()
