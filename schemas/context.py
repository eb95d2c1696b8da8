"""
schemas/context.py
------------------
Request-scoped situational context: weather, time of day, season, day of
week, nearby events and the time budget.

Weather and events are supplied by the caller; this package never looks them
up. The helpers below derive the calendar dimensions from a date and a time
window the same way for every request.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import date as date_type, datetime, time
from enum import Enum
from typing import Any, Iterable, Mapping, Optional

from core.enums import Season, TimeOfDay, Weather
from core.errors import InputError
from schemas.destination import GeoPoint


_SOUTHERN_SWAP = {
    Season.SPRING: Season.FALL,
    Season.SUMMER: Season.WINTER,
    Season.FALL: Season.SPRING,
    Season.WINTER: Season.SUMMER,
}


def _coerce(enum_cls: type[Enum], value: Any, field_name: str):
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).lower())
    except ValueError as exc:
        raise InputError(f"invalid {field_name}: {value!r}") from exc


def parse_hhmm(value: str | time) -> time:
    """'HH:MM' → datetime.time. Raises InputError on malformed input."""
    if isinstance(value, time):
        return value
    try:
        return datetime.strptime(value, "%H:%M").time()
    except (TypeError, ValueError) as exc:
        raise InputError(f"time must be HH:MM, got {value!r}") from exc


@dataclass(frozen=True)
class TimeWindow:
    """Wall-clock window for one day of visits. start must precede end."""
    start: time
    end: time

    def __post_init__(self):
        if not isinstance(self.start, time) or not isinstance(self.end, time):
            raise InputError("time window bounds must be datetime.time values")
        if self.start >= self.end:
            raise InputError(
                f"time window start {self.start:%H:%M} must be before end {self.end:%H:%M}"
            )

    @classmethod
    def parse(cls, start: str | time, end: str | time) -> "TimeWindow":
        return cls(start=parse_hhmm(start), end=parse_hhmm(end))

    @property
    def start_minutes(self) -> int:
        return self.start.hour * 60 + self.start.minute

    @property
    def end_minutes(self) -> int:
        return self.end.hour * 60 + self.end.minute

    @property
    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes


@dataclass(frozen=True)
class Event:
    """
    A calendar event near the candidates.
    Matches a destination directly (destination_id), by proximity (location)
    or thematically (categories).
    """
    name: str
    destination_id: Optional[str] = None
    location: Optional[GeoPoint] = None
    categories: frozenset[str] = frozenset()

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "Event":
        cats = raw.get("categories") or []
        if isinstance(cats, str):
            cats = [cats]
        location = raw.get("location")
        return cls(
            name=str(raw.get("name", "")),
            destination_id=raw.get("destinationId", raw.get("destination_id")),
            location=GeoPoint.from_mapping(location) if location is not None else None,
            categories=frozenset(str(c) for c in cats),
        )


@dataclass
class Context:
    """
    Situational context of one request.

    day_of_week follows 0 = Sunday … 6 = Saturday; 0 and 6 are the weekend.
    Every dimension is optional. An absent dimension leaves scores untouched.
    """
    date: Optional[date_type] = None
    time_of_day: Optional[TimeOfDay] = None
    weather: Optional[Weather] = None
    season: Optional[Season] = None
    day_of_week: Optional[int] = None
    events: tuple[Event, ...] = ()
    available_time_minutes: Optional[int] = None

    def __post_init__(self):
        self.time_of_day = _coerce(TimeOfDay, self.time_of_day, "time_of_day")
        self.weather = _coerce(Weather, self.weather, "weather")
        self.season = _coerce(Season, self.season, "season")
        if self.day_of_week is not None and not 0 <= int(self.day_of_week) <= 6:
            raise InputError(f"day_of_week must be in 0..6, got {self.day_of_week}")
        self.events = tuple(
            e if isinstance(e, Event) else Event.from_mapping(e) for e in (self.events or ())
        )

    @property
    def is_weekend(self) -> bool:
        return self.day_of_week in (0, 6)

    @classmethod
    def for_window(
        cls,
        window: TimeWindow,
        date: Optional[date_type] = None,
        weather: Weather | str | None = None,
        latitude: Optional[float] = None,
        events: Iterable[Event] = (),
    ) -> "Context":
        """Derive a full context for a day visit in `window`."""
        return cls(
            date=date,
            time_of_day=determine_time_of_day(window.start),
            weather=weather,
            season=season_for(date, latitude) if date else None,
            day_of_week=day_of_week_for(date) if date else None,
            events=tuple(events),
            available_time_minutes=window.duration_minutes,
        )


# ── Calendar helpers ──────────────────────────────────────────────────────────

def determine_time_of_day(start: Optional[time]) -> TimeOfDay:
    """morning before 12:00, afternoon before 17:00, evening after."""
    if start is None:
        return TimeOfDay.AFTERNOON
    if start.hour < 12:
        return TimeOfDay.MORNING
    if start.hour < 17:
        return TimeOfDay.AFTERNOON
    return TimeOfDay.EVENING


def season_for(day: date_type, latitude: Optional[float] = None) -> Season:
    """Meteorological season; inverted south of the equator."""
    month = day.month
    if 3 <= month <= 5:
        season = Season.SPRING
    elif 6 <= month <= 8:
        season = Season.SUMMER
    elif 9 <= month <= 11:
        season = Season.FALL
    else:
        season = Season.WINTER

    if latitude is not None and latitude < 0:
        return _SOUTHERN_SWAP[season]
    return season


def day_of_week_for(day: date_type) -> int:
    """0 = Sunday … 6 = Saturday (date.weekday() counts from Monday)."""
    return (day.weekday() + 1) % 7
