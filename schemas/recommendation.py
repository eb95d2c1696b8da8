"""
schemas/recommendation.py
-------------------------
Scored destinations and their reasoning trail.

ScoredDestination is immutable: every contextual stage returns a new instance
via with_adjustment(), so a stage can never corrupt the input of another.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any, Optional

from core.enums import Impact, Magnitude
from schemas.destination import Destination, GeoPoint


@dataclass(frozen=True)
class ReasoningEntry:
    """One human-readable explanation of a score factor."""
    type: str
    description: str
    impact: Impact
    magnitude: Optional[Magnitude] = None
    detail: str = ""

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "type": self.type,
            "description": self.description,
            "impact": self.impact.value,
        }
        if self.magnitude is not None:
            out["magnitude"] = self.magnitude.value
        if self.detail:
            out["detail"] = self.detail
        return out


@dataclass(frozen=True)
class Reasoning:
    preference_score: float = 0.5
    popularity_score: float = 0.0
    contextual_multiplier: float = 1.0
    preference_factors: tuple[ReasoningEntry, ...] = ()
    context_factors: tuple[ReasoningEntry, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "preferenceScore": self.preference_score,
            "popularityScore": self.popularity_score,
            "contextualMultiplier": self.contextual_multiplier,
            "preferenceFactors": [f.to_dict() for f in self.preference_factors],
            "contextFactors": [f.to_dict() for f in self.context_factors],
        }


@dataclass(frozen=True)
class ScoredDestination:
    destination: Destination
    score: float
    reasoning: Reasoning = field(default_factory=Reasoning)

    @property
    def destination_id(self) -> str:
        return self.destination.id

    @property
    def location(self) -> GeoPoint:
        return self.destination.location

    @property
    def visit_duration(self) -> int:
        return self.destination.visit_duration

    def with_adjustment(
        self,
        multiplier: float,
        entry: Optional[ReasoningEntry] = None,
    ) -> "ScoredDestination":
        """New instance with score × multiplier and `entry` appended to the trail."""
        factors = self.reasoning.context_factors + ((entry,) if entry else ())
        reasoning = replace(
            self.reasoning,
            contextual_multiplier=self.reasoning.contextual_multiplier * multiplier,
            context_factors=factors,
        )
        return replace(self, score=self.score * multiplier, reasoning=reasoning)

    def to_dict(self) -> dict[str, Any]:
        return {
            "destinationId": self.destination_id,
            "name": self.destination.name,
            "score": self.score,
            "reasoning": self.reasoning.to_dict(),
        }
