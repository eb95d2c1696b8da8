"""
modules/recommendation/contextual_adjuster.py
-----------------------------------------------
Multiplicative re-ranking of scored destinations by situational context.

Six independent stages, each a pure function taking and returning a list of
ScoredDestination:

  weather → time of day → day of week → season → events → time constraint

A stage runs only when its context dimension is present. Attributes and types
missing from a table multiply by 1.0. A stage whose net multiplier deviates
from 1.0 by more than 0.1 appends a reasoning entry (moderate up to 0.3,
strong above); every matched event is recorded.

Lookup tables are immutable module constants collected in AdjustmentTables and
injected into ContextualAdjuster, so tests can swap them.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from functools import reduce
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Sequence

from core.enums import Impact, Magnitude, Season, TimeOfDay, Weather
from core.logger import logger
from modules.tool_usage.distance_tool import DistanceTool
from schemas.context import Context, Event
from schemas.destination import Destination
from schemas.recommendation import ReasoningEntry, ScoredDestination


Factors = Mapping[str, float]

SIGNIFICANCE_THRESHOLD = 0.1
STRONG_THRESHOLD = 0.3


def _frozen(table: dict) -> Mapping:
    return MappingProxyType({k: MappingProxyType(v) for k, v in table.items()})


# ── Default tables ────────────────────────────────────────────────────────────

WEATHER_FACTORS: Mapping[Weather, Factors] = _frozen({
    Weather.SUNNY:  {"outdoor": 1.3, "beach": 1.5, "park": 1.4, "hiking": 1.4, "indoor": 0.8, "museum": 0.9},
    Weather.RAINY:  {"indoor": 1.4, "museum": 1.3, "shopping": 1.2, "outdoor": 0.7, "beach": 0.4, "hiking": 0.5},
    Weather.COLD:   {"indoor": 1.3, "museum": 1.2, "restaurant": 1.2, "outdoor": 0.8, "beach": 0.5},
    Weather.HOT:    {"water": 1.5, "beach": 1.4, "park": 1.2, "indoor": 1.1, "museum": 0.9},
    Weather.CLOUDY: {"outdoor": 1.0, "indoor": 1.0, "museum": 1.1},
    Weather.SNOW:   {"indoor": 1.3, "winter_sports": 1.5, "outdoor": 0.7},
})

TIME_OF_DAY_FACTORS: Mapping[TimeOfDay, Factors] = _frozen({
    TimeOfDay.MORNING:   {"breakfast": 1.5, "cafe": 1.3, "park": 1.2, "museum": 0.9, "bar": 0.6, "nightclub": 0.3},
    TimeOfDay.AFTERNOON: {"restaurant": 1.2, "museum": 1.2, "park": 1.2, "shopping": 1.3, "cafe": 1.0, "bar": 0.8},
    TimeOfDay.EVENING:   {"restaurant": 1.4, "bar": 1.5, "entertainment": 1.4, "nightclub": 1.5, "museum": 0.7,
                          "shopping": 0.8},
})

WEEKEND_FACTORS: Factors = MappingProxyType({
    "shopping_mall": 1.3, "park": 1.3, "museum": 1.2, "entertainment": 1.3, "restaurant": 1.2, "market": 1.4,
})

WEEKDAY_FACTORS: Factors = MappingProxyType({
    "business": 1.2, "museum": 1.1, "shopping": 1.1, "tourist_attraction": 1.1,
})

SEASON_FACTORS: Mapping[Season, Factors] = _frozen({
    Season.SPRING: {"park": 1.4, "garden": 1.5, "outdoor": 1.3, "hiking": 1.3},
    Season.SUMMER: {"beach": 1.5, "water": 1.4, "outdoor": 1.3, "park": 1.2, "hiking": 1.1},
    Season.FALL:   {"park": 1.3, "hiking": 1.4, "scenic_view": 1.3, "outdoor": 1.1},
    Season.WINTER: {"indoor": 1.2, "museum": 1.2, "winter_sports": 1.5, "shopping": 1.2},
})

# (max minutes over budget, multiplier); anything beyond the last tier gets OVER_BUDGET_FLOOR
OVER_BUDGET_TIERS: tuple[tuple[int, float], ...] = ((30, 0.8), (60, 0.6))
OVER_BUDGET_FLOOR = 0.3


@dataclass(frozen=True)
class AdjustmentTables:
    weather: Mapping[Weather, Factors] = field(default_factory=lambda: WEATHER_FACTORS)
    time_of_day: Mapping[TimeOfDay, Factors] = field(default_factory=lambda: TIME_OF_DAY_FACTORS)
    weekend: Factors = field(default_factory=lambda: WEEKEND_FACTORS)
    weekday: Factors = field(default_factory=lambda: WEEKDAY_FACTORS)
    season: Mapping[Season, Factors] = field(default_factory=lambda: SEASON_FACTORS)

    best_time_bonus: float = 1.3
    popular_on_weekends: float = 1.3
    less_crowded_weekdays: float = 1.2

    # seasonality: rating r (1..5) → base + r / 5 × span
    season_rating_base: float = 0.8
    season_rating_span: float = 0.6
    peak_season: float = 1.3
    off_season: float = 0.7

    event_direct: float = 1.5
    event_nearby: float = 1.2
    event_thematic: float = 1.1
    event_radius_km: float = 1.0

    over_budget_tiers: tuple[tuple[int, float], ...] = OVER_BUDGET_TIERS
    over_budget_floor: float = OVER_BUDGET_FLOOR
    good_fit_band: tuple[float, float] = (70.0, 90.0)   # % of available time
    good_fit_bonus: float = 1.2


DEFAULT_TABLES = AdjustmentTables()


# ── Helpers ───────────────────────────────────────────────────────────────────

def _attribute_product(destination: Destination, factors: Factors) -> float:
    product = 1.0
    for attr, value in destination.attributes.items():
        if value is True and attr in factors:
            product *= factors[attr]
    return product


def _type_factor(destination: Destination, factors: Factors) -> float:
    return factors.get(destination.type.lower(), 1.0) if destination.type else 1.0


def significance_entry(
    multiplier: float,
    type_: str,
    description: str,
    detail: str = "",
) -> Optional[ReasoningEntry]:
    """Reasoning entry for a net multiplier, or None if the deviation is ≤ 0.1."""
    deviation = round(abs(multiplier - 1.0), 6)
    if deviation <= SIGNIFICANCE_THRESHOLD:
        return None
    impact = Impact.POSITIVE if multiplier > 1.0 else Impact.NEGATIVE
    magnitude = Magnitude.MODERATE if deviation <= STRONG_THRESHOLD else Magnitude.STRONG
    return ReasoningEntry(
        type=type_,
        description=f"{magnitude.value} {impact.value} adjustment due to {description}",
        impact=impact,
        magnitude=magnitude,
        detail=detail,
    )


def _apply(
    items: Sequence[ScoredDestination],
    multiplier_for: Callable[[Destination], float],
    type_: str,
    description: str,
) -> list[ScoredDestination]:
    out = []
    for item in items:
        m = multiplier_for(item.destination)
        out.append(item.with_adjustment(m, significance_entry(m, type_, description)))
    return out


# ── Stages ────────────────────────────────────────────────────────────────────

def apply_weather(items: Sequence[ScoredDestination], weather: Weather,
                  tables: AdjustmentTables = DEFAULT_TABLES) -> list[ScoredDestination]:
    factors = tables.weather.get(weather, {})
    return _apply(items, lambda d: _attribute_product(d, factors), "weather", f"{weather.value} weather")


def apply_time_of_day(items: Sequence[ScoredDestination], time_of_day: TimeOfDay,
                      tables: AdjustmentTables = DEFAULT_TABLES) -> list[ScoredDestination]:
    factors = tables.time_of_day.get(time_of_day, {})

    def multiplier(d: Destination) -> float:
        m = _attribute_product(d, factors) * _type_factor(d, factors)
        if d.best_time_of_day == time_of_day:
            m *= tables.best_time_bonus
        return m

    return _apply(items, multiplier, "time_of_day", f"{time_of_day.value} visit")


def apply_day_of_week(items: Sequence[ScoredDestination], day_of_week: int,
                      tables: AdjustmentTables = DEFAULT_TABLES) -> list[ScoredDestination]:
    weekend = day_of_week in (0, 6)
    factors = tables.weekend if weekend else tables.weekday

    def multiplier(d: Destination) -> float:
        m = _type_factor(d, factors) * _attribute_product(d, factors)
        if weekend and d.has_attribute("popularOnWeekends"):
            m *= tables.popular_on_weekends
        if not weekend and d.has_attribute("lessCrowdedWeekdays"):
            m *= tables.less_crowded_weekdays
        return m

    return _apply(items, multiplier, "day_of_week", "weekend" if weekend else "weekday")


def apply_season(items: Sequence[ScoredDestination], season: Season,
                 tables: AdjustmentTables = DEFAULT_TABLES) -> list[ScoredDestination]:
    factors = tables.season.get(season, {})

    def multiplier(d: Destination) -> float:
        m = _attribute_product(d, factors)
        info = d.seasonality.get(season.value)
        if info is not None:
            if info.rating is not None:
                m *= tables.season_rating_base + (info.rating / 5) * tables.season_rating_span
            if info.is_peak:
                m *= tables.peak_season
            if info.is_off:
                m *= tables.off_season
        return m

    return _apply(items, multiplier, "season", f"{season.value} season")


def _event_match(
    event: Event,
    destination: Destination,
    tables: AdjustmentTables,
    distance_tool: DistanceTool,
) -> Optional[tuple[float, str, str]]:
    """(multiplier, kind, description) of the strongest match for one event."""
    if event.destination_id is not None and event.destination_id == destination.id:
        return tables.event_direct, "direct", f"This place is hosting {event.name}"
    if event.location is not None:
        km = distance_tool.calculate(event.location, destination.location)
        if km < tables.event_radius_km:
            return (tables.event_nearby, "nearby",
                    f"{event.name} is happening nearby ({round(km * 1000)}m away)")
    if event.categories & destination.categories:
        return tables.event_thematic, "thematic", f"{event.name} is related to this destination's theme"
    return None


def apply_events(items: Sequence[ScoredDestination], events: Sequence[Event],
                 tables: AdjustmentTables = DEFAULT_TABLES,
                 distance_tool: Optional[DistanceTool] = None) -> list[ScoredDestination]:
    distance_tool = distance_tool or DistanceTool()
    out = []
    for item in items:
        for event in events:
            match = _event_match(event, item.destination, tables, distance_tool)
            if match is None:
                continue
            multiplier, kind, description = match
            item = item.with_adjustment(multiplier, ReasoningEntry(
                type="event",
                description=description,
                impact=Impact.POSITIVE,
                detail=f"{kind}:{event.name}",
            ))
        out.append(item)
    return out


def time_constraint_multiplier(visit_duration: int, available_minutes: int,
                               tables: AdjustmentTables = DEFAULT_TABLES) -> float:
    if available_minutes <= 0:
        return 1.0
    multiplier = 1.0
    if visit_duration > available_minutes:
        excess = visit_duration - available_minutes
        multiplier = next(
            (m for limit, m in tables.over_budget_tiers if excess <= limit),
            tables.over_budget_floor,
        )
    low, high = tables.good_fit_band
    if low <= visit_duration * 100 / available_minutes <= high:
        multiplier *= tables.good_fit_bonus
    return multiplier


def apply_time_constraint(items: Sequence[ScoredDestination], available_minutes: int,
                          tables: AdjustmentTables = DEFAULT_TABLES) -> list[ScoredDestination]:
    out = []
    for item in items:
        duration = item.visit_duration
        m = time_constraint_multiplier(duration, available_minutes, tables)
        if m < 1.0:
            text = f"visit time ({duration} min) exceeding available time ({available_minutes} min)"
        else:
            text = f"a good fit within the available {available_minutes} minutes"
        out.append(item.with_adjustment(m, significance_entry(m, "time_constraint", text)))
    return out


# ── Pipeline ──────────────────────────────────────────────────────────────────

Stage = Callable[[Sequence[ScoredDestination]], list[ScoredDestination]]


@dataclass
class ContextualAdjuster:
    """Composes the stages that apply to a given Context."""
    tables: AdjustmentTables = field(default_factory=lambda: DEFAULT_TABLES)
    distance_tool: DistanceTool = field(default_factory=DistanceTool)

    def stages_for(self, context: Context) -> list[tuple[str, Stage]]:
        t = self.tables
        stages: list[tuple[str, Stage]] = []
        if context.weather is not None:
            stages.append(("weather", lambda xs: apply_weather(xs, context.weather, t)))
        if context.time_of_day is not None:
            stages.append(("time_of_day", lambda xs: apply_time_of_day(xs, context.time_of_day, t)))
        if context.day_of_week is not None:
            stages.append(("day_of_week", lambda xs: apply_day_of_week(xs, context.day_of_week, t)))
        if context.season is not None:
            stages.append(("season", lambda xs: apply_season(xs, context.season, t)))
        if context.events:
            stages.append(("events", lambda xs: apply_events(xs, context.events, t, self.distance_tool)))
        if context.available_time_minutes is not None and context.available_time_minutes > 0:
            stages.append(("time_constraint",
                           lambda xs: apply_time_constraint(xs, context.available_time_minutes, t)))
        return stages

    def adjust(
        self,
        items: Sequence[ScoredDestination],
        context: Optional[Context],
    ) -> list[ScoredDestination]:
        """Apply every applicable stage. The input list is left untouched."""
        if context is None:
            return list(items)

        def run(acc: list[ScoredDestination], named: tuple[str, Stage]) -> list[ScoredDestination]:
            name, stage = named
            logger.debug("applying %s adjustments to %d destinations", name, len(acc))
            return stage(acc)

        return reduce(run, self.stages_for(context), list(items))
