"""
modules/recommendation/preference_resolver.py
-----------------------------------------------
Decides which preference profile feeds the Scorer for a user:

  1. learned preferences (LongTermMemory), when present with categories;
  2. else the explicit profile from the user-profile service;
  3. else the neutral default profile.

If the profile service fails and no usable learned profile exists, the result
is marked unavailable and the Scorer ranks by popularity only.
PreferenceUnavailableError never leaves this module.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from core.errors import PreferenceUnavailableError
from core.logger import logger
from modules.memory.long_term_memory import LongTermMemory
from modules.tool_usage.profile_tool import ProfileTool
from schemas.preferences import PreferenceProfile


@dataclass(frozen=True)
class ResolvedPreferences:
    profile: PreferenceProfile
    source: str                 # "learned" | "profile" | "default" | "unavailable"

    @property
    def available(self) -> bool:
        return self.source != "unavailable"


class PreferenceResolver:

    def __init__(self, memory: LongTermMemory, profile_tool: Optional[ProfileTool] = None):
        self.memory = memory
        self.profile_tool = profile_tool

    def resolve(self, user_id: str) -> ResolvedPreferences:
        learned = self.memory.get_learned_preferences(user_id)

        if learned is not None and learned.categories:
            logger.info("using learned preferences for user %s", user_id)
            return ResolvedPreferences(learned, "learned")

        if self.profile_tool is None:
            return self._fallback(user_id, learned)

        try:
            explicit = self.profile_tool.get_preferences(user_id)
        except PreferenceUnavailableError as exc:
            logger.warning("profile service unavailable for user %s: %s", user_id, exc)
            if learned is not None:
                return ResolvedPreferences(learned, "learned")
            logger.warning("no preference source for user %s; ranking by popularity only", user_id)
            return ResolvedPreferences(PreferenceProfile.default(), "unavailable")

        if explicit is not None:
            logger.info("using profile-service preferences for user %s", user_id)
            return ResolvedPreferences(explicit, "profile")
        return self._fallback(user_id, learned)

    @staticmethod
    def _fallback(user_id: str, learned: Optional[PreferenceProfile]) -> ResolvedPreferences:
        if learned is not None:
            logger.info("using learned preferences for user %s", user_id)
            return ResolvedPreferences(learned, "learned")
        logger.info("no stored preferences for user %s; using default profile", user_id)
        return ResolvedPreferences(PreferenceProfile.default(), "default")
