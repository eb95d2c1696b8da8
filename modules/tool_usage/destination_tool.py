"""
modules/tool_usage/destination_tool.py
----------------------------------------
Client for the external destination catalog.

  get_batch(ids)          GET /api/destinations/batch?ids=a,b,c
  find_nearby(point, …)   GET /api/destinations/nearby?lat=&lng=&radius=&categories=

Records are parsed one by one; a malformed record is skipped with a warning
and the rest of the batch is kept. Catalog outages raise ServiceUnavailableError.
"""

from __future__ import annotations
from typing import Any, Iterable, Optional

import requests

import config
from core.errors import MalformedRecordError, ServiceUnavailableError
from core.logger import logger
from modules.memory.response_cache import ResponseCache
from modules.tool_usage.service_client import ServiceClient
from schemas.destination import Destination, GeoPoint


def parse_destinations(records: Iterable[Any]) -> list[Destination]:
    """Parse catalog records, skipping (and logging) the malformed ones."""
    parsed: list[Destination] = []
    for record in records:
        if not isinstance(record, dict):
            logger.warning("skipping non-object destination record: %r", record)
            continue
        try:
            parsed.append(Destination.from_record(record))
        except MalformedRecordError as exc:
            logger.warning("skipping destination %s: %s", exc.record_id or "<no id>", exc)
    return parsed


class DestinationTool(ServiceClient):

    service_name = "destination-catalog"

    def __init__(
        self,
        base_url: str = config.DESTINATION_SERVICE_URL,
        timeout: float = config.HTTP_TIMEOUT_SECONDS,
        cache: Optional[ResponseCache] = None,
        session: Optional[requests.Session] = None,
    ):
        super().__init__(base_url, timeout=timeout, cache=cache, session=session)

    def get_batch(self, destination_ids: Iterable[str]) -> list[Destination]:
        """
        Fetch destinations by id. Unknown ids are simply absent from the result.

        Raises:
            ServiceUnavailableError: catalog unreachable or response unreadable.
        """
        ids = list(dict.fromkeys(str(i) for i in destination_ids))
        if not ids:
            return []

        key = f"destinations:{','.join(sorted(ids))}"
        records = self._cached(key)
        if records is None:
            records = self._fetch("/api/destinations/batch", {"ids": ",".join(ids)})
            self._store(key, records)
        return parse_destinations(records)

    def find_nearby(
        self,
        point: GeoPoint,
        radius_km: float = config.DEFAULT_SEARCH_RADIUS_KM,
        categories: Optional[Iterable[str]] = None,
    ) -> list[Destination]:
        """Candidate destinations within radius_km of point (catalog geo search)."""
        params: dict[str, Any] = {"lat": point.lat, "lng": point.lng, "radius": radius_km}
        if categories:
            params["categories"] = ",".join(categories)
        return parse_destinations(self._fetch("/api/destinations/nearby", params))

    def _fetch(self, path: str, params: dict[str, Any]) -> list[Any]:
        try:
            data = self._data(self._get(path, params=params))
        except (requests.RequestException, ValueError) as exc:
            logger.error("destination catalog request %s failed: %s", path, exc)
            raise ServiceUnavailableError(f"destination catalog unavailable: {exc}",
                                          service=self.service_name) from exc
        if not isinstance(data, list):
            raise ServiceUnavailableError("destination catalog returned a non-list payload",
                                          service=self.service_name)
        return data
