"""
config.py
---------
Central configuration for the recommendation core.
Every tunable is read from environment variables with a typed default.

Components take these values as constructor defaults; tests override them
through constructor arguments rather than the environment.
"""

import os


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


# ── Scoring weights ───────────────────────────────────────────────────────────
# finalScore = (preference × W_pref + popularity × W_pop) × contextual multiplier
PREFERENCE_WEIGHT: float = float(os.getenv("PREFERENCE_WEIGHT", "0.6"))
POPULARITY_WEIGHT: float = float(os.getenv("POPULARITY_WEIGHT", "0.4"))

# ── Itinerary construction ────────────────────────────────────────────────────
# Greedy pick: score − travel_minutes × DISTANCE_PENALTY_FACTOR
DISTANCE_PENALTY_FACTOR: float = float(os.getenv("DISTANCE_PENALTY_FACTOR", "0.01"))
TRAVEL_BUFFER_MINUTES: int     = int(os.getenv("TRAVEL_BUFFER_MINUTES", "5"))
DEFAULT_SPEED_KMH: float       = float(os.getenv("DEFAULT_SPEED_KMH", "10.0"))

BREAK_DURATION_MINUTES: int   = int(os.getenv("BREAK_DURATION_MINUTES", "60"))
BREAK_WINDOW_START_HOUR: int  = int(os.getenv("BREAK_WINDOW_START_HOUR", "11"))
BREAK_WINDOW_END_HOUR: int    = int(os.getenv("BREAK_WINDOW_END_HOUR", "13"))   # inclusive

DEFAULT_DAY_START: str         = os.getenv("DEFAULT_DAY_START", "09:00")
DEFAULT_DAY_END: str           = os.getenv("DEFAULT_DAY_END", "17:00")
DEFAULT_SEARCH_RADIUS_KM: float = float(os.getenv("DEFAULT_SEARCH_RADIUS_KM", "5.0"))

# ── Preference learning ───────────────────────────────────────────────────────
LEARNER_WINDOW_DAYS: int   = int(os.getenv("LEARNER_WINDOW_DAYS", "90"))
LEARNER_EMA_WEIGHT: float  = float(os.getenv("LEARNER_EMA_WEIGHT", "0.3"))

# ── External services ─────────────────────────────────────────────────────────
USER_PROFILE_SERVICE_URL: str = os.getenv("USER_PROFILE_SERVICE_URL", "http://localhost:3000")
DESTINATION_SERVICE_URL: str  = os.getenv("DESTINATION_SERVICE_URL", "http://localhost:4000")
FEEDBACK_SERVICE_URL: str     = os.getenv("FEEDBACK_SERVICE_URL", "http://localhost:3002")
HTTP_TIMEOUT_SECONDS: float   = float(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))

# ── Response cache ────────────────────────────────────────────────────────────
# Only the in-memory backend is implemented.
CACHE_ENABLED: bool     = _flag("CACHE_ENABLED", "false")
CACHE_TTL_SECONDS: int  = int(os.getenv("CACHE_TTL_SECONDS", "3600"))

# ── Logging ───────────────────────────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE: str  = os.getenv("LOG_FILE", "")    # empty → console only
