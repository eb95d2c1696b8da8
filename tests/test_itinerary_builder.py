from datetime import time

import pytest

from core.enums import TransportMode
from core.errors import EmptyRefinementError, InputError
from modules.planning.itinerary_builder import ItineraryBuilder
from schemas.context import TimeWindow
from schemas.destination import GeoPoint
from schemas.itinerary import Break, Stop

from conftest import CENTER, make_scored


@pytest.fixture
def builder():
    return ItineraryBuilder()


@pytest.fixture
def morning():
    return TimeWindow(start=time(9, 0), end=time(12, 0))


@pytest.fixture
def full_day():
    return TimeWindow(start=time(9, 0), end=time(17, 0))


def _trio():
    # Co-located with the start: every hop is the 5-minute buffer
    return [make_scored("a", 0.9), make_scored("b", 0.8), make_scored("c", 0.7)]


def _assert_well_formed(itinerary, window):
    items = itinerary.items
    for prev, nxt in zip(items, items[1:]):
        assert prev.start_time < nxt.start_time
        assert prev.end_time <= nxt.start_time
    if items:
        assert items[-1].end_time <= window.end
        assert items[0].start_time >= window.start


def test_empty_candidate_list_gives_empty_itinerary(builder, morning):
    itinerary = builder.build([], morning, CENTER)

    assert itinerary.items == ()
    assert itinerary.is_empty


def test_stops_are_timed_and_fit_the_window(builder, morning):
    itinerary = builder.build(_trio(), morning, CENTER, TransportMode.WALKING)

    assert itinerary.destination_ids == ["a", "b"]
    first, second = itinerary.items
    assert (first.start_time, first.end_time) == (time(9, 5), time(10, 5))
    assert (second.start_time, second.end_time) == (time(10, 10), time(11, 10))
    assert first.travel_time_from_previous == 5
    assert [first.sequence, second.sequence] == [1, 2]


def test_break_inserted_after_stops_ending_in_lunch_hours(builder, full_day):
    itinerary = builder.build(_trio(), full_day, CENTER)

    kinds = [item.kind for item in itinerary.items]
    assert kinds == ["stop", "stop", "break", "stop"]
    lunch = itinerary.items[2]
    assert isinstance(lunch, Break)
    assert (lunch.start_time, lunch.end_time, lunch.duration) == (time(11, 10), time(12, 10), 60)
    assert itinerary.items[3].start_time == time(12, 15)
    _assert_well_formed(itinerary, full_day)


def test_break_skipped_when_it_would_overrun(builder):
    window = TimeWindow(start=time(10, 0), end=time(12, 0))

    itinerary = builder.build([make_scored("a", 0.9)], window, CENTER)

    # stop ends 11:05, a break would end 12:05
    assert [item.kind for item in itinerary.items] == ["stop"]


def test_no_break_after_the_last_candidate(builder):
    window = TimeWindow(start=time(10, 0), end=time(17, 0))

    itinerary = builder.build([make_scored("a", 0.9)], window, CENTER)

    # stop ends 11:05 inside the lunch band, but nothing is left to visit
    assert [item.kind for item in itinerary.items] == ["stop"]
    assert not isinstance(itinerary.items[-1], Break)


def test_candidates_that_cannot_finish_are_discarded(builder, morning):
    candidates = [make_scored("long", 0.95, visit_duration=300), make_scored("short", 0.5, visit_duration=45)]

    itinerary = builder.build(candidates, morning, CENTER)

    assert itinerary.destination_ids == ["short"]


def test_travel_penalty_beats_small_score_gap(builder, morning):
    far = make_scored("far", 0.80, location=GeoPoint(CENTER.lat + 0.01, CENTER.lng))
    near = make_scored("near", 0.79)

    itinerary = builder.build([far, near], morning, CENTER, TransportMode.WALKING)

    # far: 0.80 − 19 min × 0.01; near: 0.79 − 5 min × 0.01
    assert itinerary.destination_ids == ["near", "far"]
    assert itinerary.stops[1].travel_time_from_previous == 19


def test_equal_value_tie_goes_to_higher_ranked(builder, morning):
    itinerary = builder.build([make_scored("x", 0.5), make_scored("y", 0.5)], morning, CENTER)
    assert itinerary.destination_ids == ["x", "y"]


def test_invalid_candidates_are_skipped(builder, morning):
    candidates = [make_scored("zero", 0.9, visit_duration=0), make_scored("ok", 0.5)]

    itinerary = builder.build(candidates, morning, CENTER)

    assert itinerary.destination_ids == ["ok"]


def test_missing_start_location_is_rejected(builder, morning):
    with pytest.raises(InputError, match="start location"):
        builder.build(_trio(), morning, None)


def test_malformed_window_is_rejected(builder):
    with pytest.raises(InputError):
        TimeWindow(start=time(17, 0), end=time(9, 0))
    with pytest.raises(InputError):
        builder.build(_trio(), ("09:00", "17:00"), CENTER)


def test_time_budget_holds_for_scattered_candidates(builder, full_day):
    candidates = [
        make_scored(f"d{i}", 1.0 - i * 0.05, visit_duration=20 + (i * 37) % 140,
                    location=GeoPoint(CENTER.lat + (i % 4) * 0.01, CENTER.lng + (i % 3) * 0.015))
        for i in range(15)
    ]

    for mode in (TransportMode.WALKING, TransportMode.TRANSIT, TransportMode.DRIVING, None):
        itinerary = builder.build(candidates, full_day, CENTER, mode)
        assert itinerary.stops
        _assert_well_formed(itinerary, full_day)


def test_build_is_deterministic(builder, full_day):
    candidates = [make_scored(f"d{i}", 0.3 + i * 0.07, location=GeoPoint(CENTER.lat + i * 0.004, CENTER.lng))
                  for i in range(6)]

    first = builder.build(candidates, full_day, CENTER, TransportMode.TRANSIT)
    second = builder.build(candidates, full_day, CENTER, TransportMode.TRANSIT)

    assert first.items == second.items


# ── Refinement ──────────────────────────────────────────────────────────────

def test_refine_with_no_changes_reproduces_the_build(builder, full_day):
    original = builder.build(_trio(), full_day, CENTER)

    refined = builder.refine(original)

    assert refined.items == original.items
    assert refined.itinerary_id == original.itinerary_id


def test_refine_removes_destinations(builder, full_day):
    original = builder.build(_trio(), full_day, CENTER)

    refined = builder.refine(original, removed_destinations=["a"])

    assert refined.destination_ids == ["b", "c"]
    assert refined.itinerary_id == original.itinerary_id
    assert original.destination_ids == ["a", "b", "c"]


def test_refine_with_tighter_window(builder, full_day, morning):
    original = builder.build(_trio(), full_day, CENTER)

    refined = builder.refine(original, window=morning)

    assert refined.destination_ids == ["a", "b"]
    _assert_well_formed(refined, morning)


def test_refine_removing_everything_fails_fast(builder, full_day):
    original = builder.build(_trio(), full_day, CENTER)

    with pytest.raises(EmptyRefinementError, match="all destinations removed"):
        builder.refine(original, removed_destinations=["a", "b", "c"])


def test_refine_removing_every_stop_fails_even_with_unscheduled_candidates(builder):
    short_window = TimeWindow(start=time(9, 0), end=time(11, 0))
    original = builder.build(_trio(), short_window, CENTER)
    assert original.destination_ids == ["a"]

    with pytest.raises(EmptyRefinementError):
        builder.refine(original, removed_destinations=["a"])


def test_refine_never_adds_unscheduled_candidates(builder, full_day):
    original = builder.build(_trio(), TimeWindow(start=time(9, 0), end=time(11, 0)), CENTER)

    refined = builder.refine(original, window=full_day)

    assert refined.destination_ids == ["a"]


def test_stop_serialisation(builder, morning):
    itinerary = builder.build([make_scored("a", 0.9)], morning, CENTER)

    payload = itinerary.to_dict()

    assert payload["items"][0] == {
        "type": "stop",
        "sequence": 1,
        "destinationId": "a",
        "name": "Place a",
        "startTime": "09:05",
        "endTime": "10:05",
        "travelTimeFromPrevious": 5,
        "score": 0.9,
    }
    assert isinstance(itinerary.items[0], Stop)
