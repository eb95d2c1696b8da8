"""
modules/tool_usage/service_client.py
--------------------------------------
Shared HTTP plumbing for the external collaborator tools (profile store,
destination catalog, feedback store).

Every service answers with a {"data": ...} envelope. Transport failures,
non-2xx statuses and envelopes without "data" all surface as
requests.RequestException or ValueError; each tool converts them into its own
error from core.errors.
"""

from __future__ import annotations
from typing import Any, Optional

import requests

import config
from core.logger import logger
from modules.memory.response_cache import ResponseCache


class ServiceClient:
    """Base class: base URL, timeout, optional cache, JSON envelope handling."""

    service_name = "service"

    def __init__(
        self,
        base_url: str,
        timeout: float = config.HTTP_TIMEOUT_SECONDS,
        cache: Optional[ResponseCache] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.cache = cache
        self.http = session or requests

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _get(self, path: str, params: Optional[dict[str, Any]] = None) -> requests.Response:
        return self.http.get(self._url(path), params=params, timeout=self.timeout)

    def _put(self, path: str, payload: dict[str, Any]) -> requests.Response:
        return self.http.put(self._url(path), json=payload, timeout=self.timeout)

    @staticmethod
    def _data(response: requests.Response) -> Any:
        """Raise for non-2xx and unwrap the {"data": ...} envelope."""
        response.raise_for_status()
        body = response.json()
        if not isinstance(body, dict) or body.get("data") is None:
            raise ValueError("response has no data envelope")
        return body["data"]

    # ── Cache helpers ─────────────────────────────────────────────────────────

    def _cached(self, key: str) -> Optional[Any]:
        if self.cache is None:
            return None
        hit = self.cache.get(key)
        if hit is not None:
            logger.debug("cache hit %s", key)
        return hit

    def _store(self, key: str, value: Any) -> None:
        if self.cache is not None:
            self.cache.set(key, value)

    def _evict(self, key: str) -> None:
        if self.cache is not None:
            self.cache.delete(key)
