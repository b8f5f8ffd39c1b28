from __future__ import annotations

import logging
from dataclasses import dataclass, field

from src.domain.algorithms.access import DEFAULT_WALK_SPEED_MPS, seed_walking_access
from src.domain.algorithms.assembly import assemble_result
from src.domain.algorithms.calendar import active_trip_ids, local_date_parts
from src.domain.algorithms.propagation import (
    DEFAULT_TRANSFER_PENALTY_S,
    BoardingPolicy,
    EarliestFeasibleBoarding,
    propagate_arrivals,
)
from src.domain.exceptions import InvalidQuery
from src.domain.models.reachability import ReachabilityQuery, ReachabilityResult

from .feed_cache import FeedSnapshot, FeedSnapshotCache

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ReachabilityService:
    """Which stops can be reached from a point within a time budget.

    Pipeline: active services for the local date -> walking access to nearby
    stops -> round-based trip propagation -> budget clip.
    """

    feed_cache: FeedSnapshotCache
    walk_speed_mps: float = DEFAULT_WALK_SPEED_MPS
    transfer_penalty_s: int = DEFAULT_TRANSFER_PENALTY_S
    boarding_policy: BoardingPolicy = field(default_factory=EarliestFeasibleBoarding)

    async def compute(self, query: ReachabilityQuery) -> ReachabilityResult:
        snapshot = await self.feed_cache.get()
        return self.compute_on_snapshot(snapshot, query)

    def compute_on_snapshot(
        self, snapshot: FeedSnapshot, query: ReachabilityQuery
    ) -> ReachabilityResult:
        feed = snapshot.feed
        try:
            local = local_date_parts(query.depart_ms, snapshot.time_zone)
        except (OverflowError, OSError, ValueError) as exc:
            # In range as UTC but not once shifted into the feed timezone.
            raise InvalidQuery(
                f"departMs out of range for {snapshot.time_zone}: {query.depart_ms}"
            ) from exc
        depart_s = local.seconds_since_midnight

        services = snapshot.calendar.active_services(local.date_number, local.weekday)
        trips = active_trip_ids(feed.trips_by_service, services)

        nearby = snapshot.stop_index.within_radius(
            query.origin.lat, query.origin.lon, query.max_walk_m
        )
        seed = seed_walking_access(
            nearby, depart_s=depart_s, walk_speed_mps=self.walk_speed_mps
        )

        arrivals: dict[str, int] = {}
        if seed and trips:
            result = propagate_arrivals(
                feed.stop_times_by_trip,
                trips,
                seed_s_by_stop=seed,
                depart_s=depart_s,
                budget_s=query.budget_s,
                max_transfers=query.max_transfers,
                transfer_penalty_s=self.transfer_penalty_s,
                boarding_policy=self.boarding_policy,
            )
            arrivals = result.arrival_s_by_stop
            logger.debug(
                "Reachability from %s: %d rounds, %d labelled stops",
                query.origin,
                result.rounds_run,
                len(arrivals),
            )

        return assemble_result(
            arrivals,
            query=query,
            local=local,
            time_zone=snapshot.time_zone,
            active_services=len(services),
            active_trips=len(trips),
            stop_count=len(feed.stops_by_id),
            nearby_stops=len(nearby),
        )
