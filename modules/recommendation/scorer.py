"""
modules/recommendation/scorer.py
----------------------------------
Combines preference match, popularity and context into one ranked list.

  final = (preference × W_pref + popularity/5 × W_pop) × contextual multiplier

The final score is not bounded to [0, 1]; only the ordering is meaningful.
Sorting is stable, so equal scores keep the candidates' input order.
"""

from __future__ import annotations
from typing import Iterable, Optional, Sequence

import config
from core.enums import Impact
from core.logger import logger
from modules.recommendation.contextual_adjuster import ContextualAdjuster
from modules.recommendation.preference_matcher import PreferenceMatcher
from modules.recommendation.preference_resolver import PreferenceResolver
from modules.tool_usage.destination_tool import DestinationTool
from schemas.context import Context
from schemas.destination import Destination
from schemas.preferences import PreferenceProfile
from schemas.recommendation import Reasoning, ReasoningEntry, ScoredDestination


DEFAULT_PREFERENCES_ENTRY = ReasoningEntry(
    type="default_preferences",
    description="default preferences used; ranked by popularity",
    impact=Impact.NEGATIVE,
)


class Scorer:

    def __init__(
        self,
        matcher: Optional[PreferenceMatcher] = None,
        adjuster: Optional[ContextualAdjuster] = None,
        resolver: Optional[PreferenceResolver] = None,
        destination_tool: Optional[DestinationTool] = None,
        preference_weight: float = config.PREFERENCE_WEIGHT,
        popularity_weight: float = config.POPULARITY_WEIGHT,
    ):
        self.matcher = matcher or PreferenceMatcher()
        self.adjuster = adjuster or ContextualAdjuster()
        self.resolver = resolver
        self.destination_tool = destination_tool
        self.preference_weight = preference_weight
        self.popularity_weight = popularity_weight

    # ── Pure scoring ──────────────────────────────────────────────────────────

    def base_score(self, destination: Destination, profile: Optional[PreferenceProfile]) -> ScoredDestination:
        match = self.matcher.match(destination, profile)
        popularity = destination.popularity_score
        score = match.score * self.preference_weight + popularity * self.popularity_weight
        return ScoredDestination(
            destination=destination,
            score=score,
            reasoning=Reasoning(
                preference_score=match.score,
                popularity_score=popularity,
                preference_factors=match.factors,
            ),
        )

    @staticmethod
    def popularity_score(destination: Destination) -> ScoredDestination:
        popularity = destination.popularity_score
        return ScoredDestination(
            destination=destination,
            score=popularity,
            reasoning=Reasoning(
                preference_score=0.5,
                popularity_score=popularity,
                preference_factors=(DEFAULT_PREFERENCES_ENTRY,),
            ),
        )

    def score_destinations(
        self,
        destinations: Iterable[Destination],
        profile: Optional[PreferenceProfile],
        context: Optional[Context] = None,
        popularity_only: bool = False,
    ) -> list[ScoredDestination]:
        """Score, adjust by context, and sort descending (stable)."""
        if popularity_only:
            base = [self.popularity_score(d) for d in destinations]
        else:
            base = [self.base_score(d, profile) for d in destinations]
        adjusted = self.adjuster.adjust(base, context)
        return sorted(adjusted, key=lambda s: s.score, reverse=True)

    # ── Score(userId, destinationIds, context) ───────────────────────────────

    def score(
        self,
        user_id: str,
        destination_ids: Sequence[str],
        context: Optional[Context] = None,
    ) -> list[ScoredDestination]:
        """
        Fetch the candidates, resolve the user's preferences and rank.

        Destinations the catalog does not return are dropped; the rest keep the
        caller's id order as the tie-break.
        """
        if self.destination_tool is None or self.resolver is None:
            raise RuntimeError("Scorer.score() needs a destination tool and a preference resolver")

        fetched = {d.id: d for d in self.destination_tool.get_batch(destination_ids)}
        destinations = [fetched[i] for i in dict.fromkeys(destination_ids) if i in fetched]
        missing = len(set(destination_ids)) - len(destinations)
        if missing:
            logger.warning("%d requested destinations were not returned by the catalog", missing)

        return self.score_candidates(user_id, destinations, context)

    def score_candidates(
        self,
        user_id: str,
        destinations: Sequence[Destination],
        context: Optional[Context] = None,
    ) -> list[ScoredDestination]:
        """Rank already-fetched destinations with the user's resolved preferences."""
        if self.resolver is None:
            raise RuntimeError("Scorer.score_candidates() needs a preference resolver")
        resolved = self.resolver.resolve(user_id)
        logger.info("scoring %d destinations for user %s with %s preferences",
                    len(destinations), user_id, resolved.source)
        return self.score_destinations(
            destinations,
            resolved.profile,
            context,
            popularity_only=not resolved.available,
        )
