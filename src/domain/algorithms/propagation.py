from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Protocol, Sequence

from src.domain.models.gtfs import StopTimeEntry

DEFAULT_TRANSFER_PENALTY_S = 120


class BoardingPolicy(Protocol):
    """Chooses where a rider boards a trip given the current arrival labels."""

    def board_index(
        self,
        stop_times: Sequence[StopTimeEntry],
        arrival_s_by_stop: Mapping[str, int],
        *,
        penalty_s: int,
        cutoff_s: int,
    ) -> int | None: ...


@dataclass(frozen=True, slots=True)
class EarliestFeasibleBoarding:
    """Board at the first stop along the trip where the rider is in time.

    This is not necessarily the boarding point with the best downstream
    arrivals; a later stop on the same trip is never considered once an
    earlier one qualifies.
    """

    def board_index(
        self,
        stop_times: Sequence[StopTimeEntry],
        arrival_s_by_stop: Mapping[str, int],
        *,
        penalty_s: int,
        cutoff_s: int,
    ) -> int | None:
        for i, entry in enumerate(stop_times):
            arrival = arrival_s_by_stop.get(entry.stop_id)
            if arrival is None:
                continue
            if entry.departure_s > cutoff_s:
                # Departures are non-decreasing along a trip.
                return None
            if arrival + penalty_s <= entry.departure_s:
                return i
        return None


@dataclass(frozen=True, slots=True)
class PropagationResult:
    arrival_s_by_stop: dict[str, int]
    # Labels after each completed round; element 0 is the walking seed.
    labels_by_round: tuple[dict[str, int], ...]
    rounds_run: int


def propagate_arrivals(
    stop_times_by_trip: Mapping[str, Sequence[StopTimeEntry]],
    active_trip_ids: Iterable[str],
    *,
    seed_s_by_stop: Mapping[str, int],
    depart_s: int,
    budget_s: int,
    max_transfers: int,
    transfer_penalty_s: int = DEFAULT_TRANSFER_PENALTY_S,
    boarding_policy: BoardingPolicy | None = None,
) -> PropagationResult:
    """Earliest arrival per stop using round-based trip relaxation.

    Round r allows r transfers. Boarding in every round reads the labels as
    they were at the start of that round, so the visiting order of trips does
    not change the outcome. Rounds stop early at a fixed point.
    """

    policy = boarding_policy or EarliestFeasibleBoarding()
    cutoff_s = depart_s + budget_s
    trip_ids = tuple(active_trip_ids)

    best: dict[str, int] = dict(seed_s_by_stop)
    prev = best
    history: list[dict[str, int]] = [best]
    rounds_run = 0

    for round_no in range(max_transfers + 1):
        penalty_s = 0 if round_no == 0 else transfer_penalty_s
        nxt = dict(best)
        improved = 0

        for trip_id in trip_ids:
            st = stop_times_by_trip.get(trip_id)
            if not st or len(st) < 2:
                continue
            if st[-1].arrival_s < depart_s or st[0].departure_s > cutoff_s:
                continue

            board = policy.board_index(
                st, prev, penalty_s=penalty_s, cutoff_s=cutoff_s
            )
            if board is None:
                continue

            for j in range(board + 1, len(st)):
                entry = st[j]
                if entry.arrival_s > cutoff_s:
                    break
                cur = nxt.get(entry.stop_id)
                if cur is None or entry.arrival_s < cur:
                    nxt[entry.stop_id] = entry.arrival_s
                    improved += 1

        rounds_run += 1
        if improved == 0:
            break
        best = nxt
        prev = nxt
        history.append(nxt)

    return PropagationResult(
        arrival_s_by_stop=best,
        labels_by_round=tuple(history),
        rounds_run=rounds_run,
    )
