"""
modules/recommendation/preference_matcher.py
----------------------------------------------
Scores one destination against a user's preference profile.

  score = 0.5                                   (neutral start)
        + 0.3 × category overlap                (|dest ∩ liked| / |dest|)
        − 0.4 if any category is excluded       (veto)
        − 0.1 × |dest.cost − profile.cost|
        + 0.1 if visit duration fits the activity band
  clamped to [0, 1]

A missing or default profile yields the neutral 0.5 with no factors.
"""

from __future__ import annotations
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Mapping, Optional

from core.enums import ActivityLevel, Impact, Magnitude
from schemas.destination import Destination
from schemas.preferences import PreferenceProfile
from schemas.recommendation import ReasoningEntry


NEUTRAL_SCORE = 0.5
CATEGORY_WEIGHT = 0.3
EXCLUSION_PENALTY = 0.4
COST_PENALTY_PER_LEVEL = 0.1
ACTIVITY_BONUS = 0.1

# visit duration (minutes) → fits the activity level
ACTIVITY_BANDS: Mapping[ActivityLevel, Callable[[int], bool]] = MappingProxyType({
    ActivityLevel.RELAXED: lambda minutes: minutes > 120,
    ActivityLevel.MODERATE: lambda minutes: 60 <= minutes <= 180,
    ActivityLevel.ACTIVE: lambda minutes: minutes < 120,
})


@dataclass(frozen=True)
class PreferenceMatch:
    score: float
    factors: tuple[ReasoningEntry, ...] = ()


class PreferenceMatcher:
    """Stateless; safe to share across requests."""

    def match(self, destination: Destination, profile: Optional[PreferenceProfile]) -> PreferenceMatch:
        if profile is None or profile.is_default:
            return PreferenceMatch(score=NEUTRAL_SCORE)

        score = NEUTRAL_SCORE
        factors: list[ReasoningEntry] = []

        # Category overlap
        categories = destination.categories
        matched = categories & profile.categories
        overlap = len(matched) / len(categories) if categories else 0.0
        if overlap > 0:
            score += CATEGORY_WEIGHT * overlap
            factors.append(ReasoningEntry(
                type="category_match",
                description=f"Matches your interest in {', '.join(sorted(matched))}",
                impact=Impact.POSITIVE,
                magnitude=Magnitude.STRONG if overlap > 0.5 else Magnitude.MODERATE,
            ))

        # Excluded-activity veto
        excluded = categories & profile.excluded_activities
        if excluded:
            score -= EXCLUSION_PENALTY
            factors.append(ReasoningEntry(
                type="excluded_activity",
                description=f"Includes activities you prefer to avoid: {', '.join(sorted(excluded))}",
                impact=Impact.NEGATIVE,
                magnitude=Magnitude.STRONG,
            ))

        # Cost fit
        cost_diff = abs(destination.cost_level - profile.cost_level)
        score -= COST_PENALTY_PER_LEVEL * cost_diff
        if cost_diff == 0:
            factors.append(ReasoningEntry(
                type="cost_match",
                description="Matches your preferred cost level",
                impact=Impact.POSITIVE,
                magnitude=Magnitude.MODERATE,
            ))
        elif cost_diff >= 2:
            factors.append(ReasoningEntry(
                type="cost_mismatch",
                description=("More expensive" if destination.cost_level > profile.cost_level
                             else "Less expensive") + " than your preferred cost level",
                impact=Impact.NEGATIVE,
                magnitude=Magnitude.STRONG if cost_diff >= 3 else Magnitude.MODERATE,
            ))

        # Activity / duration fit
        fits = ACTIVITY_BANDS.get(profile.activity_level)
        if fits is not None and fits(destination.visit_duration):
            score += ACTIVITY_BONUS
            factors.append(ReasoningEntry(
                type="activity_fit",
                description=f"Visit length suits a {profile.activity_level.value} pace",
                impact=Impact.POSITIVE,
                magnitude=Magnitude.MODERATE,
            ))

        return PreferenceMatch(score=max(0.0, min(1.0, score)), factors=tuple(factors))
