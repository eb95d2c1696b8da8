"""modules/learning: offline preference learning from feedback history."""

from modules.learning.preference_learner import PreferenceLearner

__all__ = ["PreferenceLearner"]
