"""
modules/planning/itinerary_builder.py
---------------------------------------
Greedy single-day itinerary construction over a ranked candidate list.

Each step:
  1. For every remaining candidate, estimate travel minutes from the current
     location (TimeTool: haversine / mode speed + buffer, rounded up).
  2. Drop candidates that cannot finish before the window end:
       current + travel + visit_duration > end
  3. Pick the survivor maximising  score − travel × distance_penalty_factor.
     Ties go to the earlier candidate in score order.
  4. Append a Stop and advance current time and location.
  5. If the hour after that stop is inside the break band and a break still
     fits and candidates remain, append a Break. Checked once per stop.
Stops when the pool is empty or nothing survives step 2. A partial or empty
itinerary is a valid result.

Refinement re-runs the same algorithm over the itinerary's own stops minus the
removed destinations; candidates that were never scheduled are not pulled in.
"""

from __future__ import annotations
from dataclasses import replace
from typing import Iterable, Optional, Sequence

import config
from core.enums import TransportMode
from core.errors import EmptyRefinementError, InputError
from core.logger import logger
from modules.tool_usage.time_tool import TimeTool
from schemas.context import Context, TimeWindow
from schemas.destination import GeoPoint
from schemas.itinerary import Break, Itinerary, ItineraryItem, Stop
from schemas.recommendation import ScoredDestination


class ItineraryBuilder:
    """
    Stateless apart from its tunables; one instance can serve concurrent requests.
    """

    def __init__(
        self,
        time_tool: TimeTool | None = None,
        distance_penalty_factor: float = config.DISTANCE_PENALTY_FACTOR,
        break_duration: int = config.BREAK_DURATION_MINUTES,
        break_window_hours: tuple[int, int] = (config.BREAK_WINDOW_START_HOUR, config.BREAK_WINDOW_END_HOUR),
    ):
        self.time_tool = time_tool or TimeTool()
        self.distance_penalty_factor = distance_penalty_factor
        self.break_duration = break_duration
        self.break_window_hours = break_window_hours

    # ── Public entry points ───────────────────────────────────────────────────

    def build(
        self,
        scored: Sequence[ScoredDestination],
        window: TimeWindow,
        start_location: GeoPoint | None,
        transport_mode: TransportMode | None = None,
        context: Context | None = None,
    ) -> Itinerary:
        """
        Sequence ranked candidates into timed stops inside `window`.

        Raises:
            InputError: window is not a TimeWindow, or start_location is missing.
        """
        self._validate(window, start_location)
        items = self._sequence(self._usable(scored), window, start_location, transport_mode)
        itinerary = Itinerary(
            window=window,
            start_location=start_location,
            transport_mode=transport_mode,
            items=tuple(items),
            candidates=tuple(scored),
            context=context,
        )
        logger.info("itinerary %s generated with %d stops", itinerary.itinerary_id, len(itinerary.stops))
        return itinerary

    def refine(
        self,
        itinerary: Itinerary,
        removed_destinations: Iterable[str] = (),
        window: TimeWindow | None = None,
        start_location: GeoPoint | None = None,
        transport_mode: TransportMode | None = None,
    ) -> Itinerary:
        """
        Rebuild `itinerary` without the removed destinations and/or with a new
        window, start or mode. Keeps the itinerary_id.

        Raises:
            EmptyRefinementError: the removal leaves none of the scheduled stops.
        """
        removed = set(removed_destinations)
        by_id = {c.destination_id: c for c in itinerary.candidates}
        remaining = [by_id[s.destination_id] for s in itinerary.stops
                     if s.destination_id not in removed and s.destination_id in by_id]
        if removed and not remaining:
            raise EmptyRefinementError()

        window = window or itinerary.window
        start_location = start_location or itinerary.start_location
        transport_mode = transport_mode or itinerary.transport_mode
        self._validate(window, start_location)

        items = self._sequence(self._usable(remaining), window, start_location, transport_mode)
        refined = replace(
            itinerary,
            window=window,
            start_location=start_location,
            transport_mode=transport_mode,
            items=tuple(items),
            candidates=tuple(c for c in itinerary.candidates if c.destination_id not in removed),
        )
        logger.info("itinerary %s refined: %d removed, %d stops",
                    refined.itinerary_id, len(removed), len(refined.stops))
        return refined

    # ── Internals ─────────────────────────────────────────────────────────────

    @staticmethod
    def _validate(window: TimeWindow, start_location: GeoPoint | None) -> None:
        if not isinstance(window, TimeWindow):
            raise InputError("a TimeWindow with start before end is required")
        if start_location is None:
            raise InputError("start location is required")

    @staticmethod
    def _usable(scored: Iterable[ScoredDestination]) -> list[ScoredDestination]:
        """Drop candidates without a location or a positive duration; stable-sort by score."""
        pool = []
        for candidate in scored:
            if candidate.location is None or candidate.visit_duration <= 0:
                logger.warning("skipping candidate %s: missing location or visit duration",
                               candidate.destination_id)
                continue
            pool.append(candidate)
        return sorted(pool, key=lambda c: c.score, reverse=True)

    def _sequence(
        self,
        pool: list[ScoredDestination],
        window: TimeWindow,
        start_location: GeoPoint,
        mode: Optional[TransportMode],
    ) -> list[ItineraryItem]:
        to_time = self.time_tool.from_minutes
        end = window.end_minutes
        current = window.start_minutes
        location = start_location
        items: list[ItineraryItem] = []

        while pool:
            best_index: Optional[int] = None
            best_value = float("-inf")
            best_travel = 0
            for i, candidate in enumerate(pool):
                travel = self.time_tool.estimate_travel_time(location, candidate.location, mode)
                if current + travel + candidate.visit_duration > end:
                    continue
                value = candidate.score - travel * self.distance_penalty_factor
                if value > best_value:
                    best_index, best_value, best_travel = i, value, travel

            if best_index is None:
                break

            chosen = pool.pop(best_index)
            arrival = current + best_travel
            current = arrival + chosen.visit_duration
            location = chosen.location
            items.append(Stop(
                sequence=sum(1 for item in items if isinstance(item, Stop)) + 1,
                destination_id=chosen.destination_id,
                name=chosen.destination.name,
                location=chosen.location,
                start_time=to_time(arrival),
                end_time=to_time(current),
                travel_time_from_previous=best_travel,
                score=chosen.score,
            ))

            if pool and self._break_due(current) and current + self.break_duration <= end:
                items.append(Break(
                    start_time=to_time(current),
                    end_time=to_time(current + self.break_duration),
                    duration=self.break_duration,
                ))
                current += self.break_duration

        return items

    def _break_due(self, minutes: int) -> bool:
        first, last = self.break_window_hours
        return first <= minutes // 60 <= last
