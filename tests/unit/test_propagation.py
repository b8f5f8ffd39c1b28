from __future__ import annotations

from src.domain.algorithms.propagation import (
    EarliestFeasibleBoarding,
    propagate_arrivals,
)
from src.domain.models.gtfs import StopTimeEntry

DEPART = 8 * 3600


def _trip(trip_id: str, *calls: tuple) -> tuple[StopTimeEntry, ...]:
    # Each call is (stop_id, time) or (stop_id, arrival, departure).
    entries = []
    for i, (stop_id, arr, *dep) in enumerate(calls):
        entries.append(
            StopTimeEntry(
                trip_id=trip_id,
                stop_id=stop_id,
                sequence=i + 1,
                arrival_s=arr,
                departure_s=dep[0] if dep else arr,
            )
        )
    return tuple(entries)


def _run(trips, seed, *, budget_s=3600, max_transfers=2, order=None, **kwargs):
    return propagate_arrivals(
        trips,
        order if order is not None else list(trips),
        seed_s_by_stop=seed,
        depart_s=DEPART,
        budget_s=budget_s,
        max_transfers=max_transfers,
        **kwargs,
    )


def test_single_ride_labels_downstream_stops() -> None:
    trips = {
        "T1": _trip(
            "T1",
            ("A", DEPART + 600),
            ("B", DEPART + 900, DEPART + 930),
            ("C", DEPART + 1200),
        )
    }

    result = _run(trips, {"A": DEPART + 300})

    assert result.arrival_s_by_stop == {
        "A": DEPART + 300,
        "B": DEPART + 900,
        "C": DEPART + 1200,
    }
    assert result.labels_by_round[0] == {"A": DEPART + 300}


def test_missed_departure_is_not_boarded() -> None:
    trips = {"T1": _trip("T1", ("A", DEPART + 100), ("B", DEPART + 400))}
    result = _run(trips, {"A": DEPART + 300})
    assert "B" not in result.arrival_s_by_stop


def test_transfer_penalty_applies_after_first_ride() -> None:
    # B is reached at +900. T2 leaves B 100 s later, inside the transfer
    # penalty; T3 leaves exactly 120 s later.
    trips = {
        "T1": _trip("T1", ("A", DEPART + 600), ("B", DEPART + 900)),
        "T2": _trip("T2", ("B", DEPART + 1000), ("C", DEPART + 1100)),
        "T3": _trip("T3", ("B", DEPART + 1020), ("D", DEPART + 1300)),
    }

    result = _run(trips, {"A": DEPART})

    assert result.arrival_s_by_stop["B"] == DEPART + 900
    assert "C" not in result.arrival_s_by_stop
    assert result.arrival_s_by_stop["D"] == DEPART + 1300


def test_no_penalty_when_boarding_from_walk() -> None:
    trips = {
        "T1": _trip("T1", ("A", DEPART + 60), ("B", DEPART + 500)),
    }
    result = _run(trips, {"A": DEPART + 60})
    assert result.arrival_s_by_stop["B"] == DEPART + 500


def test_max_transfers_zero_allows_only_direct_rides() -> None:
    trips = {
        "T1": _trip("T1", ("A", DEPART + 600), ("B", DEPART + 900)),
        "T2": _trip("T2", ("B", DEPART + 1500), ("C", DEPART + 1800)),
    }

    direct = _run(trips, {"A": DEPART}, max_transfers=0)
    with_transfer = _run(trips, {"A": DEPART}, max_transfers=1)

    assert "B" in direct.arrival_s_by_stop
    assert "C" not in direct.arrival_s_by_stop
    assert with_transfer.arrival_s_by_stop["C"] == DEPART + 1800


def test_boarding_uses_first_feasible_stop() -> None:
    # Both A and B are seeded; the trip is boarded at A, so B keeps its seed.
    trip = _trip(
        "T1",
        ("A", DEPART + 300),
        ("B", DEPART + 600),
        ("C", DEPART + 900),
    )
    policy = EarliestFeasibleBoarding()

    assert (
        policy.board_index(
            trip,
            {"A": DEPART + 100, "B": DEPART + 50},
            penalty_s=0,
            cutoff_s=DEPART + 3600,
        )
        == 0
    )
    assert (
        policy.board_index(
            trip, {"A": DEPART + 400, "B": DEPART + 50}, penalty_s=0, cutoff_s=DEPART
        )
        is None
    )


def test_arrivals_after_cutoff_are_not_labelled() -> None:
    trips = {
        "T1": _trip(
            "T1",
            ("A", DEPART + 60),
            ("B", DEPART + 500),
            ("C", DEPART + 700),
        )
    }

    result = _run(trips, {"A": DEPART}, budget_s=600)

    assert result.arrival_s_by_stop["B"] == DEPART + 500
    # Scanning stops at the first call past the cutoff.
    assert "C" not in result.arrival_s_by_stop


def test_trips_outside_window_or_too_short_are_ignored() -> None:
    trips = {
        "early": _trip("early", ("A", 100), ("X", 200)),
        "late": _trip("late", ("A", DEPART + 7200), ("Y", DEPART + 7500)),
        "short": _trip("short", ("A", DEPART + 60)),
    }

    result = _run(trips, {"A": DEPART})

    assert result.arrival_s_by_stop == {"A": DEPART}


def test_labels_never_increase_between_rounds() -> None:
    trips = {
        "slow": _trip("slow", ("A", DEPART + 60), ("C", DEPART + 3000)),
        "T1": _trip("T1", ("A", DEPART + 120), ("B", DEPART + 600)),
        "T2": _trip("T2", ("B", DEPART + 900), ("C", DEPART + 1200)),
    }

    result = _run(trips, {"A": DEPART})

    rounds = result.labels_by_round
    for earlier, later in zip(rounds, rounds[1:]):
        for stop_id, t in earlier.items():
            assert later[stop_id] <= t
    assert result.arrival_s_by_stop["C"] == DEPART + 1200


def test_result_does_not_depend_on_trip_order() -> None:
    trips = {
        "T1": _trip("T1", ("A", DEPART + 120), ("B", DEPART + 600)),
        "T2": _trip("T2", ("B", DEPART + 900), ("C", DEPART + 1200)),
        "T3": _trip("T3", ("A", DEPART + 300), ("C", DEPART + 1500)),
    }

    forward = _run(trips, {"A": DEPART}, order=["T1", "T2", "T3"])
    backward = _run(trips, {"A": DEPART}, order=["T3", "T2", "T1"])

    assert forward.arrival_s_by_stop == backward.arrival_s_by_stop
    assert forward.labels_by_round == backward.labels_by_round


def test_stops_early_at_fixed_point() -> None:
    trips = {
        "T1": _trip("T1", ("A", DEPART + 60), ("B", DEPART + 300)),
    }

    result = _run(trips, {"A": DEPART}, max_transfers=4)

    # Round 0 improves B, round 1 finds nothing new.
    assert result.rounds_run == 2
    assert len(result.labels_by_round) == 2


def test_custom_boarding_policy_is_used() -> None:
    class _NeverBoard:
        def board_index(self, stop_times, arrival_s_by_stop, *, penalty_s, cutoff_s):
            return None

    trips = {
        "T1": _trip("T1", ("A", DEPART + 60), ("B", DEPART + 300)),
    }

    result = _run(trips, {"A": DEPART}, boarding_policy=_NeverBoard())

    assert result.arrival_s_by_stop == {"A": DEPART}
    assert result.rounds_run == 1
