"""
modules/learning/tasks.py
---------------------------
Queue-task entry point for asynchronous preference learning.

The external task queue calls update_user_features({"userId": ...}).
Concurrent runs for the same user must be serialised by the queue.
"""

from __future__ import annotations
from typing import Any, Mapping, Optional

from core.errors import LearnerInputError
from core.logger import logger
from modules.learning.preference_learner import PreferenceLearner


TASK_NAME = "tasks.update_user_features"

_learner: Optional[PreferenceLearner] = None


def register(learner: PreferenceLearner) -> None:
    """Bind the learner whose memory the request path reads from."""
    global _learner
    _learner = learner
    logger.info("registered %s task", TASK_NAME)


def update_user_features(
    payload: Mapping[str, Any],
    learner: Optional[PreferenceLearner] = None,
) -> dict[str, Any]:
    """
    Args:
        payload: {"userId": str, "windowDays": int (optional)}

    Returns:
        {"success": True, "updated": bool, "message": str}
    """
    learner = learner or _learner
    if learner is None:
        raise RuntimeError(f"{TASK_NAME} called before a PreferenceLearner was registered")

    user_id = payload.get("userId") or payload.get("user_id")
    if not user_id:
        raise LearnerInputError("task payload has no userId")

    window = payload.get("windowDays")
    logger.info("starting feature update task for user %s", user_id)
    try:
        result = learner.learn(str(user_id), int(window) if window is not None else None)
    except Exception:
        logger.exception("feature update task failed for user %s", user_id)
        raise
    return {"success": True, "updated": result.updated, "message": result.message}
