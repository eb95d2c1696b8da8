from datetime import date, time

import pytest
from pydantic import ValidationError

from core.enums import ActivityLevel, Impact, PreferenceSource, Season, TimeOfDay, TransportMode, Weather
from core.errors import InputError, MalformedRecordError
from schemas.context import (
    Context,
    Event,
    TimeWindow,
    day_of_week_for,
    determine_time_of_day,
    season_for,
)
from schemas.destination import Destination, GeoPoint
from schemas.preferences import PreferenceProfile, PreferenceUpdate, clamp_cost_level
from schemas.recommendation import ReasoningEntry

from conftest import make_scored


# ── Destination records ─────────────────────────────────────────────────────

def test_destination_from_catalog_record():
    dest = Destination.from_record({
        "id": "louvre",
        "name": "Louvre",
        "location": {"type": "Point", "coordinates": [2.3376, 48.8606]},
        "categories": ["museums", {"id": "art", "name": "Art"}],
        "costLevel": 3,
        "visitDuration": 180,
        "popularity": 4.8,
        "attributes": {"indoor": True, "wheelchair": "yes"},
        "seasonality": {"Summer": {"rating": 4, "isPeak": True}},
        "bestTimeOfDay": "Morning",
    })

    assert dest.location == GeoPoint(lat=48.8606, lng=2.3376)
    assert dest.categories == {"museums", "art"}
    assert dest.has_attribute("indoor")
    assert "wheelchair" not in dest.attributes
    assert dest.seasonality["summer"].is_peak
    assert dest.best_time_of_day is TimeOfDay.MORNING
    assert dest.popularity_score == pytest.approx(0.96)


def test_destination_accepts_latitude_longitude():
    dest = Destination.from_record({"id": "x", "location": {"latitude": 1.5, "longitude": 2.5}})
    assert dest.location == GeoPoint(1.5, 2.5)
    assert dest.visit_duration == 60


@pytest.mark.parametrize("record", [
    {"name": "no id", "location": {"lat": 0, "lng": 0}},
    {"id": "x"},
    {"id": "x", "location": {"lat": "north", "lng": 0}},
    {"id": "x", "location": {"lat": 0, "lng": 0}, "visitDuration": "long"},
])
def test_malformed_destination_records(record):
    with pytest.raises(MalformedRecordError):
        Destination.from_record(record)


def test_popularity_score_is_clamped():
    assert make_scored("a", 0, popularity=7.0).destination.popularity_score == 1.0
    assert make_scored("b", 0, popularity=-1.0).destination.popularity_score == 0.0


# ── Preferences ─────────────────────────────────────────────────────────────

@pytest.mark.parametrize("raw,level", [(0, 1), (2.5, 3), (3.49, 3), (4.5, 5), (9, 5)])
def test_clamp_cost_level(raw, level):
    assert clamp_cost_level(raw) == level


def test_update_is_allow_listed_and_validated():
    update = PreferenceUpdate.model_validate({
        "costLevel": 9,
        "preferredTransportation": ["walking", "Teleport", "DRIVING"],
        "role": "admin",
    })

    assert update.cost_level == 5
    assert update.preferred_transportation == [TransportMode.WALKING, TransportMode.DRIVING]
    assert not hasattr(update, "role")


def test_update_rejects_bad_schedule():
    with pytest.raises(ValidationError):
        PreferenceUpdate.model_validate({"schedule": {"morningStart": "25:00"}})


def test_partial_update_keeps_other_fields():
    profile = PreferenceProfile(
        categories=frozenset({"museums"}),
        cost_level=2,
        activity_level=ActivityLevel.ACTIVE,
    )

    updated = PreferenceUpdate.model_validate({"cost_level": 4, "schedule": {"eveningEnd": "20:00"}}).apply(profile)

    assert updated.cost_level == 4
    assert updated.categories == {"museums"}
    assert updated.activity_level is ActivityLevel.ACTIVE
    assert updated.schedule.morning_start == "09:00"
    assert updated.schedule.evening_end == "20:00"
    assert profile.cost_level == 2


def test_update_payload_holds_supplied_fields_only():
    update = PreferenceUpdate.model_validate({"activityLevel": "Relaxed", "schedule": {"morningStart": "08:30"}})

    assert update.to_payload() == {"activityLevel": "relaxed", "schedule": {"morningStart": "08:30"}}


def test_profile_from_service_payload():
    profile = PreferenceProfile.from_payload({
        "categories": {"beach": 5, "hiking": 4},
        "budgetLevel": 1,
        "pacePreference": "active",
        "excludedActivities": ["nightlife"],
    })

    assert profile.categories == {"beach", "hiking"}
    assert profile.cost_level == 1
    assert profile.activity_level is ActivityLevel.ACTIVE
    assert profile.excluded_activities == {"nightlife"}
    assert not profile.is_default


def test_only_the_fallback_profile_is_default():
    assert PreferenceProfile.default().is_default
    assert not PreferenceProfile().is_default
    assert not PreferenceProfile(source=PreferenceSource.DERIVED).is_default


# ── Context ─────────────────────────────────────────────────────────────────

def test_context_coerces_strings():
    ctx = Context(weather="Rainy", time_of_day="evening", season="winter",
                  events=[{"name": "Fair", "location": {"lat": 1, "lng": 2}, "categories": "food"}])

    assert ctx.weather is Weather.RAINY
    assert ctx.time_of_day is TimeOfDay.EVENING
    assert ctx.season is Season.WINTER
    assert ctx.events == (Event(name="Fair", location=GeoPoint(1.0, 2.0), categories=frozenset({"food"})),)


@pytest.mark.parametrize("kwargs", [{"weather": "foggy"}, {"season": "monsoon"}, {"day_of_week": 7}])
def test_context_rejects_invalid_dimensions(kwargs):
    with pytest.raises(InputError):
        Context(**kwargs)


def test_weekend_is_sunday_and_saturday():
    assert Context(day_of_week=0).is_weekend
    assert Context(day_of_week=6).is_weekend
    assert not Context(day_of_week=3).is_weekend
    assert not Context().is_weekend


def test_day_of_week_starts_on_sunday():
    assert day_of_week_for(date(2024, 6, 2)) == 0      # Sunday
    assert day_of_week_for(date(2024, 6, 8)) == 6      # Saturday


@pytest.mark.parametrize("start,expected", [
    (time(8, 0), TimeOfDay.MORNING),
    (time(11, 59), TimeOfDay.MORNING),
    (time(12, 0), TimeOfDay.AFTERNOON),
    (time(17, 0), TimeOfDay.EVENING),
    (None, TimeOfDay.AFTERNOON),
])
def test_time_of_day_from_start(start, expected):
    assert determine_time_of_day(start) is expected


def test_season_flips_south_of_equator():
    assert season_for(date(2025, 1, 15)) is Season.WINTER
    assert season_for(date(2025, 1, 15), latitude=-33.9) is Season.SUMMER
    assert season_for(date(2025, 10, 1), latitude=-33.9) is Season.SPRING


def test_context_for_window():
    window = TimeWindow.parse("09:30", "13:00")

    ctx = Context.for_window(window, date=date(2025, 7, 5), weather="sunny")

    assert ctx.time_of_day is TimeOfDay.MORNING
    assert ctx.season is Season.SUMMER
    assert ctx.day_of_week == 6
    assert ctx.available_time_minutes == 210


def test_time_window_parsing():
    assert TimeWindow.parse("09:00", "17:00").duration_minutes == 480
    with pytest.raises(InputError):
        TimeWindow.parse("9am", "17:00")
    with pytest.raises(InputError):
        TimeWindow.parse("12:00", "12:00")


def test_reasoning_entry_serialisation():
    entry = ReasoningEntry(type="weather", description="strong positive adjustment due to rainy weather",
                           impact=Impact.POSITIVE)

    assert entry.to_dict() == {
        "type": "weather",
        "description": "strong positive adjustment due to rainy weather",
        "impact": "positive",
    }
