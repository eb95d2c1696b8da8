"""
modules/tool_usage/feedback_tool.py
-------------------------------------
Client for the feedback/history store: time-windowed feedback per user,
filtered by outcome.
"""

from __future__ import annotations
from datetime import datetime, timezone
from typing import Iterable, Optional

import requests

import config
from core.enums import FeedbackOutcome
from core.errors import MalformedRecordError, ServiceUnavailableError
from core.logger import logger
from modules.tool_usage.service_client import ServiceClient
from schemas.feedback import FeedbackRecord


LEARNABLE_OUTCOMES = (FeedbackOutcome.ACCEPTED, FeedbackOutcome.REJECTED, FeedbackOutcome.COMPLETED)


class FeedbackTool(ServiceClient):

    service_name = "feedback-store"

    def __init__(
        self,
        base_url: str = config.FEEDBACK_SERVICE_URL,
        timeout: float = config.HTTP_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        super().__init__(base_url, timeout=timeout, session=session)

    def get_feedback(
        self,
        user_id: str,
        since: datetime,
        statuses: Iterable[FeedbackOutcome] = LEARNABLE_OUTCOMES,
    ) -> list[FeedbackRecord]:
        """
        Feedback for user_id updated at or after `since`, with an outcome in `statuses`.

        The filters are sent to the store and re-applied locally, so a store
        that ignores them still yields the requested window.
        """
        wanted = set(statuses)
        params = {
            "since": since.isoformat(),
            "status": ",".join(sorted(s.value for s in wanted)),
        }
        try:
            data = self._data(self._get(f"/api/users/{user_id}/feedback", params=params))
        except (requests.RequestException, ValueError) as exc:
            logger.error("feedback lookup failed for user %s: %s", user_id, exc)
            raise ServiceUnavailableError(f"feedback store unavailable: {exc}",
                                          service=self.service_name) from exc

        records: list[FeedbackRecord] = []
        for raw in data if isinstance(data, list) else []:
            if not isinstance(raw, dict):
                logger.warning("skipping non-object feedback record for user %s", user_id)
                continue
            try:
                record = FeedbackRecord.from_record(raw)
            except MalformedRecordError as exc:
                logger.warning("skipping feedback record for user %s: %s", user_id, exc)
                continue
            if record.outcome not in wanted:
                continue
            if record.updated_at is not None and _aware(record.updated_at) < _aware(since):
                continue
            records.append(record)
        return records


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
