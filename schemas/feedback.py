"""
schemas/feedback.py
-------------------
Feedback history records consumed by PreferenceLearner, and the learner's result.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from core.enums import FeedbackOutcome
from core.errors import MalformedRecordError
from schemas.preferences import PreferenceProfile


@dataclass(frozen=True)
class FeedbackRecord:
    destination_id: str
    outcome: FeedbackOutcome
    rating: Optional[int] = None          # 1..5, completed visits only
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "FeedbackRecord":
        dest_id = record.get("destinationId") or record.get("destination_id")
        if not dest_id:
            raise MalformedRecordError("feedback record has no destinationId")
        status = record.get("status", record.get("outcome"))
        try:
            outcome = FeedbackOutcome(str(status).lower())
            rating = record.get("rating")
            if rating is None and isinstance(record.get("feedback"), Mapping):
                rating = record["feedback"].get("rating")
            updated = record.get("updatedAt") or record.get("updated_at")
            if isinstance(updated, str):
                updated = datetime.fromisoformat(updated.replace("Z", "+00:00"))
            return cls(
                destination_id=str(dest_id),
                outcome=outcome,
                rating=int(rating) if rating is not None else None,
                updated_at=updated,
            )
        except (TypeError, ValueError) as exc:
            raise MalformedRecordError(f"unreadable feedback record: {exc}", record_id=str(dest_id)) from exc


@dataclass(frozen=True)
class LearningResult:
    user_id: str
    updated: bool
    profile: Optional[PreferenceProfile] = None
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"success": True, "updated": self.updated, "message": self.message}
        if self.profile is not None:
            out["preferences"] = self.profile.to_payload()
        return out
