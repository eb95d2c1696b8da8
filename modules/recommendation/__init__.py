"""modules/recommendation: preference matching, contextual adjustment and scoring."""

from modules.recommendation.preference_matcher import PreferenceMatch, PreferenceMatcher
from modules.recommendation.contextual_adjuster import (
    AdjustmentTables, ContextualAdjuster, DEFAULT_TABLES,
)
from modules.recommendation.preference_resolver import PreferenceResolver, ResolvedPreferences
from modules.recommendation.scorer import Scorer

__all__ = [
    "PreferenceMatch",
    "PreferenceMatcher",
    "AdjustmentTables",
    "ContextualAdjuster",
    "DEFAULT_TABLES",
    "PreferenceResolver",
    "ResolvedPreferences",
    "Scorer",
]
