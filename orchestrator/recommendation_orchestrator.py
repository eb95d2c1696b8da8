"""
orchestrator/recommendation_orchestrator.py
---------------------------------------------
Wires the tools, memory and core components into the call shapes the
surrounding service uses:

  score(user_id, destination_ids, context)          → ranked ScoredDestinations
  build_itinerary(scored, window, start, mode)      → Itinerary
  learn_preferences(user_id, window_days)           → LearningResult
  generate_itinerary(user_id, start, window, …)     → nearby search → score → build
  refine_itinerary(itinerary, removed, …)           → Itinerary (same id)

Holds no per-request state; one instance serves concurrent requests.
"""

from __future__ import annotations
from datetime import date as date_type
from typing import Iterable, Optional, Sequence

import config
from core.enums import TransportMode, Weather
from core.errors import InputError
from core.logger import logger
from modules.learning import tasks
from modules.learning.preference_learner import PreferenceLearner
from modules.memory.long_term_memory import LongTermMemory
from modules.memory.response_cache import ResponseCache, build_cache
from modules.planning.itinerary_builder import ItineraryBuilder
from modules.recommendation.contextual_adjuster import ContextualAdjuster
from modules.recommendation.preference_matcher import PreferenceMatcher
from modules.recommendation.preference_resolver import PreferenceResolver
from modules.recommendation.scorer import Scorer
from modules.tool_usage.destination_tool import DestinationTool
from modules.tool_usage.feedback_tool import FeedbackTool
from modules.tool_usage.profile_tool import ProfileTool
from schemas.context import Context, Event, TimeWindow
from schemas.destination import GeoPoint
from schemas.feedback import LearningResult
from schemas.itinerary import Itinerary
from schemas.recommendation import ScoredDestination


class RecommendationOrchestrator:

    def __init__(
        self,
        memory: Optional[LongTermMemory] = None,
        profile_tool: Optional[ProfileTool] = None,
        destination_tool: Optional[DestinationTool] = None,
        feedback_tool: Optional[FeedbackTool] = None,
        cache: Optional[ResponseCache] = None,
        adjuster: Optional[ContextualAdjuster] = None,
        builder: Optional[ItineraryBuilder] = None,
    ):
        cache = cache if cache is not None else build_cache()
        self.memory = memory or LongTermMemory()
        self.profile_tool = profile_tool or ProfileTool(cache=cache)
        self.destination_tool = destination_tool or DestinationTool(cache=cache)
        self.feedback_tool = feedback_tool or FeedbackTool()

        self.scorer = Scorer(
            matcher=PreferenceMatcher(),
            adjuster=adjuster or ContextualAdjuster(),
            resolver=PreferenceResolver(self.memory, self.profile_tool),
            destination_tool=self.destination_tool,
        )
        self.builder = builder or ItineraryBuilder()
        self.learner = PreferenceLearner(
            memory=self.memory,
            feedback_tool=self.feedback_tool,
            destination_tool=self.destination_tool,
            profile_tool=self.profile_tool,
        )

    def register_tasks(self) -> None:
        """Route queue-task learning runs into this orchestrator's memory."""
        tasks.register(self.learner)

    # ── Core call shapes ──────────────────────────────────────────────────────

    def score(
        self,
        user_id: str,
        destination_ids: Sequence[str],
        context: Optional[Context] = None,
    ) -> list[ScoredDestination]:
        return self.scorer.score(user_id, destination_ids, context)

    def build_itinerary(
        self,
        scored: Sequence[ScoredDestination],
        window: TimeWindow,
        start_location: GeoPoint,
        transport_mode: Optional[TransportMode] = None,
        context: Optional[Context] = None,
    ) -> Itinerary:
        return self.builder.build(scored, window, start_location, transport_mode, context)

    def learn_preferences(self, user_id: str, window_days: Optional[int] = None) -> LearningResult:
        return self.learner.learn(user_id, window_days)

    # ── Composite flows ───────────────────────────────────────────────────────

    def generate_itinerary(
        self,
        user_id: str,
        start_location: GeoPoint,
        window: Optional[TimeWindow] = None,
        date: Optional[date_type] = None,
        weather: Weather | str | None = None,
        events: Iterable[Event] = (),
        transport_mode: Optional[TransportMode] = None,
        radius_km: float = config.DEFAULT_SEARCH_RADIUS_KM,
        categories: Optional[Iterable[str]] = None,
    ) -> Itinerary:
        """
        Search around start_location, derive the context, score and build.
        No nearby destinations yields an empty itinerary.
        """
        if start_location is None:
            raise InputError("start location is required")
        window = window or TimeWindow.parse(config.DEFAULT_DAY_START, config.DEFAULT_DAY_END)
        context = Context.for_window(
            window,
            date=date,
            weather=weather,
            latitude=start_location.lat,
            events=events,
        )

        nearby = self.destination_tool.find_nearby(start_location, radius_km, categories)
        if not nearby:
            logger.info("no destinations within %.1f km for user %s", radius_km, user_id)
            return self.builder.build([], window, start_location, transport_mode, context)

        scored = self.scorer.score_candidates(user_id, nearby, context)
        return self.builder.build(scored, window, start_location, transport_mode, context)

    def refine_itinerary(
        self,
        itinerary: Itinerary,
        removed_destinations: Iterable[str] = (),
        window: Optional[TimeWindow] = None,
        start_location: Optional[GeoPoint] = None,
        transport_mode: Optional[TransportMode] = None,
    ) -> Itinerary:
        return self.builder.refine(itinerary, removed_destinations, window, start_location, transport_mode)
