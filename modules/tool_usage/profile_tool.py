"""
modules/tool_usage/profile_tool.py
------------------------------------
Client for the external user-profile service (explicit preferences).

GET  /api/users/{id}/preferences  → PreferenceProfile, or None on 404.
PUT  /api/users/{id}/preferences  ← allow-listed PreferenceUpdate.

Any other failure is logged and raised as PreferenceUnavailableError, which
the Scorer absorbs.
"""

from __future__ import annotations
from typing import Any, Mapping, Optional

import requests
from pydantic import ValidationError

import config
from core.enums import PreferenceSource
from core.errors import InputError, PreferenceUnavailableError
from core.logger import logger
from modules.memory.response_cache import ResponseCache
from modules.tool_usage.service_client import ServiceClient
from schemas.preferences import PreferenceProfile, PreferenceUpdate


class ProfileTool(ServiceClient):

    service_name = "user-profile"

    def __init__(
        self,
        base_url: str = config.USER_PROFILE_SERVICE_URL,
        timeout: float = config.HTTP_TIMEOUT_SECONDS,
        cache: Optional[ResponseCache] = None,
        session: Optional[requests.Session] = None,
    ):
        super().__init__(base_url, timeout=timeout, cache=cache, session=session)

    @staticmethod
    def _cache_key(user_id: str) -> str:
        return f"user_preferences:{user_id}"

    def get_preferences(self, user_id: str) -> Optional[PreferenceProfile]:
        """
        Fetch the user's explicit preferences.

        Returns:
            PreferenceProfile, or None if the service has no profile for the user.

        Raises:
            PreferenceUnavailableError: service unreachable or payload unreadable.
        """
        key = self._cache_key(user_id)
        payload = self._cached(key)
        if payload is None:
            try:
                response = self._get(f"/api/users/{user_id}/preferences")
                if response.status_code == 404:
                    return None
                payload = self._data(response)
            except (requests.RequestException, ValueError) as exc:
                logger.error("preference lookup failed for user %s: %s", user_id, exc)
                raise PreferenceUnavailableError(f"profile service unavailable: {exc}") from exc
            self._store(key, payload)

        if not isinstance(payload, Mapping):
            raise PreferenceUnavailableError("profile service returned a non-object payload")
        preferences = payload.get("preferences", payload)
        try:
            return PreferenceProfile.from_payload(preferences, source=PreferenceSource.EXPLICIT)
        except (ValidationError, ValueError) as exc:
            logger.error("unreadable preferences for user %s: %s", user_id, exc)
            raise PreferenceUnavailableError(f"unreadable preferences: {exc}") from exc

    def set_preferences(
        self,
        user_id: str,
        update: PreferenceUpdate | Mapping[str, Any],
    ) -> PreferenceProfile:
        """
        Write an allow-listed update. Unknown keys are dropped before sending.

        Raises:
            InputError: the update fails field validation.
            PreferenceUnavailableError: the service rejected or never received it.
        """
        if not isinstance(update, PreferenceUpdate):
            try:
                update = PreferenceUpdate.model_validate(update)
            except ValidationError as exc:
                raise InputError(f"invalid preference update: {exc}") from exc

        try:
            data = self._data(self._put(f"/api/users/{user_id}/preferences", update.to_payload()))
        except (requests.RequestException, ValueError) as exc:
            logger.error("preference update failed for user %s: %s", user_id, exc)
            raise PreferenceUnavailableError(f"profile service unavailable: {exc}") from exc
        finally:
            self._evict(self._cache_key(user_id))

        return PreferenceProfile.from_payload(data.get("preferences", data))
