"""
modules/learning/preference_learner.py
----------------------------------------
Re-estimates a user's preferences from recent accept / reject / complete
feedback. Runs as a background job, never on the request path.

Per feedback record, oldest first, a signed multiplier:
  rejected  → −1
  completed → rating / 3 (1 if unrated)
  accepted  → 0.5
is added to every category of the destination. Categories with a positive
sum become the preferred set; if none is positive the previous set is kept.

Cost level and activity level move toward *completed* destinations only, by
an exponential moving average:  new = (1 − w) × old + w × observed.
Activity is averaged on the scale active=1, moderate=2, relaxed=3, where a
destination's implied level comes from its visit duration.

Writes the result to LongTermMemory (source = derived). Last write wins.
"""

from __future__ import annotations
import math
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Callable, Mapping, Optional, Sequence

import config
from core.enums import ActivityLevel, FeedbackOutcome, PreferenceSource
from core.errors import LearnerInputError, PreferenceUnavailableError
from core.logger import logger
from modules.memory.long_term_memory import LongTermMemory
from modules.tool_usage.destination_tool import DestinationTool
from modules.tool_usage.feedback_tool import FeedbackTool
from modules.tool_usage.profile_tool import ProfileTool
from schemas.destination import Destination
from schemas.feedback import FeedbackRecord, LearningResult
from schemas.preferences import PreferenceProfile, clamp_cost_level


NO_FEEDBACK_MESSAGE = "No recent feedback data to process"

ACCEPTED_WEIGHT = 0.5
REJECTED_WEIGHT = -1.0
UNRATED_COMPLETED_WEIGHT = 1.0
RATING_PIVOT = 3.0

_ACTIVITY_SCALE = {ActivityLevel.ACTIVE: 1, ActivityLevel.MODERATE: 2, ActivityLevel.RELAXED: 3}
_SCALE_ACTIVITY = {v: k for k, v in _ACTIVITY_SCALE.items()}


def feedback_weight(record: FeedbackRecord) -> Optional[float]:
    """Signed multiplier of one record; None for outcomes that carry no signal."""
    if record.outcome is FeedbackOutcome.REJECTED:
        return REJECTED_WEIGHT
    if record.outcome is FeedbackOutcome.COMPLETED:
        return record.rating / RATING_PIVOT if record.rating is not None else UNRATED_COMPLETED_WEIGHT
    if record.outcome is FeedbackOutcome.ACCEPTED:
        return ACCEPTED_WEIGHT
    return None


def implied_activity(visit_duration: int) -> ActivityLevel:
    """Long visits suggest a relaxed pace, short ones an active pace."""
    if visit_duration > 180:
        return ActivityLevel.RELAXED
    if visit_duration >= 60:
        return ActivityLevel.MODERATE
    return ActivityLevel.ACTIVE


def _chronological(feedback: Sequence[FeedbackRecord]) -> list[FeedbackRecord]:
    def key(record: FeedbackRecord) -> float:
        return record.updated_at.timestamp() if record.updated_at else float("-inf")
    return sorted(feedback, key=key)


class PreferenceLearner:

    def __init__(
        self,
        memory: LongTermMemory,
        feedback_tool: FeedbackTool,
        destination_tool: DestinationTool,
        profile_tool: Optional[ProfileTool] = None,
        window_days: int = config.LEARNER_WINDOW_DAYS,
        ema_weight: float = config.LEARNER_EMA_WEIGHT,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.memory = memory
        self.feedback_tool = feedback_tool
        self.destination_tool = destination_tool
        self.profile_tool = profile_tool
        self.window_days = window_days
        self.ema_weight = ema_weight
        self.clock = clock

    # ── LearnPreferences(userId, feedbackWindow) ──────────────────────────────

    def learn(self, user_id: str, window_days: Optional[int] = None) -> LearningResult:
        """
        Read the feedback window, recompute preferences and store them.

        Raises:
            LearnerInputError: missing user id or non-positive window.
            ServiceUnavailableError: feedback store or catalog unreachable.
        """
        days = self.window_days if window_days is None else window_days
        if not user_id:
            raise LearnerInputError("user id is required")
        if days <= 0:
            raise LearnerInputError(f"feedback window must be positive, got {days} days")

        since = self.clock() - timedelta(days=days)
        feedback = self.feedback_tool.get_feedback(user_id, since)
        if not feedback:
            logger.info("no recent feedback history for user %s", user_id)
            return LearningResult(user_id=user_id, updated=False, message=NO_FEEDBACK_MESSAGE)

        current = self.current_preferences(user_id)
        destinations = {d.id: d for d in self.destination_tool.get_batch(r.destination_id for r in feedback)}
        profile = self.compute(current, feedback, destinations)

        self.memory.set_learned_preferences(user_id, profile)
        logger.info("updated preferences for user %s from %d feedback records", user_id, len(feedback))
        return LearningResult(
            user_id=user_id,
            updated=True,
            profile=profile,
            message=f"Preferences updated from {len(feedback)} feedback records",
        )

    def current_preferences(self, user_id: str) -> PreferenceProfile:
        """Starting point: learned profile, else explicit profile, else default."""
        learned = self.memory.get_learned_preferences(user_id)
        if learned is not None:
            return learned
        if self.profile_tool is not None:
            try:
                explicit = self.profile_tool.get_preferences(user_id)
            except PreferenceUnavailableError as exc:
                logger.warning("starting from default preferences for user %s: %s", user_id, exc)
                explicit = None
            if explicit is not None:
                return explicit
        return PreferenceProfile.default()

    # ── Pure update ───────────────────────────────────────────────────────────

    def compute(
        self,
        current: PreferenceProfile,
        feedback: Sequence[FeedbackRecord],
        destinations: Mapping[str, Destination],
    ) -> PreferenceProfile:
        w = self.ema_weight
        category_sums: dict[str, float] = {}
        cost = float(current.cost_level)
        activity = float(_ACTIVITY_SCALE[current.activity_level])

        for record in _chronological(feedback):
            destination = destinations.get(record.destination_id)
            weight = feedback_weight(record)
            if destination is None or weight is None:
                continue

            for category in destination.categories:
                category_sums[category] = category_sums.get(category, 0.0) + weight

            if record.outcome is FeedbackOutcome.COMPLETED:
                cost = (1 - w) * cost + w * destination.cost_level
                activity = (1 - w) * activity + w * _ACTIVITY_SCALE[implied_activity(destination.visit_duration)]

        liked = frozenset(c for c, total in category_sums.items() if total > 0)
        level = min(3, max(1, math.floor(activity + 0.5)))
        return replace(
            current,
            categories=liked or current.categories,
            cost_level=clamp_cost_level(cost),
            activity_level=_SCALE_ACTIVITY[level],
            source=PreferenceSource.DERIVED,
        )
