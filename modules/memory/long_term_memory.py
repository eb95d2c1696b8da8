"""
modules/memory/long_term_memory.py
------------------------------------
Retains learned user preferences across requests.

Written by PreferenceLearner after each feedback pass; read by the Scorer,
where a learned profile takes precedence over the profile-service one.
Concurrent writes for the same user are last-write-wins.

TODO: in-memory dict only; a shared backend is needed once the learner runs
      in a separate worker process from the scorer.
"""

from __future__ import annotations
import threading
from datetime import datetime, timezone
from typing import Optional

from schemas.preferences import PreferenceProfile


class LongTermMemory:
    """Per-user store of learned PreferenceProfiles."""

    def __init__(self) -> None:
        # Key: user_id, Value: (profile, last updated)
        self._learned: dict[str, tuple[PreferenceProfile, datetime]] = {}
        self._lock = threading.Lock()

    # ── Learned preferences ───────────────────────────────────────────────────

    def get_learned_preferences(self, user_id: str) -> Optional[PreferenceProfile]:
        """Learned profile for a user, or None if the learner never ran for them."""
        entry = self._learned.get(user_id)
        return entry[0] if entry else None

    def set_learned_preferences(self, user_id: str, profile: PreferenceProfile) -> None:
        with self._lock:
            self._learned[user_id] = (profile, datetime.now(timezone.utc))

    def last_updated(self, user_id: str) -> Optional[datetime]:
        entry = self._learned.get(user_id)
        return entry[1] if entry else None
