"""
schemas/destination.py
----------------------
Immutable destination snapshots as fetched from the external catalog.

Catalog payloads come in a few shapes (GeoJSON or lat/lng locations, category
ids or {id, name} objects). Destination.from_record() normalises them and
raises MalformedRecordError for records missing id or location, so callers
can skip a bad record without aborting the batch.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from core.enums import TimeOfDay
from core.errors import MalformedRecordError


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float

    @classmethod
    def from_mapping(cls, raw: Any) -> "GeoPoint":
        """
        Accepts {"lat","lng"}, {"latitude","longitude"} or GeoJSON
        {"coordinates": [lng, lat]}. Raises MalformedRecordError otherwise.
        """
        if isinstance(raw, GeoPoint):
            return raw
        if not isinstance(raw, Mapping):
            raise MalformedRecordError(f"location must be a mapping, got {type(raw).__name__}")
        try:
            if "coordinates" in raw:
                lng, lat = raw["coordinates"][0], raw["coordinates"][1]
            elif "latitude" in raw:
                lat, lng = raw["latitude"], raw["longitude"]
            else:
                lat, lng = raw["lat"], raw["lng"]
            return cls(lat=float(lat), lng=float(lng))
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise MalformedRecordError(f"unreadable location {raw!r}") from exc


@dataclass(frozen=True)
class SeasonInfo:
    """Per-season rating (1–5) and peak/off flags."""
    rating: float | None = None
    is_peak: bool = False
    is_off: bool = False


@dataclass(frozen=True)
class Destination:
    """
    One catalog entry.

    attributes  boolean flags such as indoor / outdoor / beach / popularOnWeekends;
                the contextual tables match on keys whose value is True.
    type        coarse venue type ("museum", "bar", ...); matched by the
                time-of-day and day-of-week tables.
    seasonality {season name: SeasonInfo}.
    """
    id: str
    location: GeoPoint
    name: str = ""
    categories: frozenset[str] = frozenset()
    cost_level: int = 3                  # 1..5
    visit_duration: int = 60             # minutes
    popularity: float = 0.0              # 0..5
    attributes: Mapping[str, bool] = field(default_factory=lambda: MappingProxyType({}))
    seasonality: Mapping[str, SeasonInfo] = field(default_factory=lambda: MappingProxyType({}))
    type: str = ""
    best_time_of_day: TimeOfDay | None = None

    @property
    def popularity_score(self) -> float:
        """Popularity normalised to [0,1]."""
        return max(0.0, min(self.popularity, 5.0)) / 5.0

    def has_attribute(self, name: str) -> bool:
        return self.attributes.get(name) is True

    # ── Parsing ───────────────────────────────────────────────────────────────

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Destination":
        """Build a Destination from a catalog JSON record."""
        dest_id = record.get("id") or record.get("destinationId")
        if not dest_id:
            raise MalformedRecordError("destination record has no id")
        if record.get("location") is None:
            raise MalformedRecordError("destination record has no location", record_id=str(dest_id))

        try:
            location = GeoPoint.from_mapping(record["location"])
        except MalformedRecordError as exc:
            raise MalformedRecordError(str(exc), record_id=str(dest_id)) from exc

        categories = frozenset(
            str(c.get("id") or c.get("name")) if isinstance(c, Mapping) else str(c)
            for c in (record.get("categories") or [])
        )
        attributes = {
            str(k): v for k, v in (record.get("attributes") or {}).items()
            if isinstance(v, bool)
        }
        seasonality = {
            str(season).lower(): SeasonInfo(
                rating=info.get("rating"),
                is_peak=bool(info.get("isPeak", info.get("is_peak", False))),
                is_off=bool(info.get("isOff", info.get("is_off", False))),
            )
            for season, info in (record.get("seasonality") or {}).items()
            if isinstance(info, Mapping)
        }

        best = record.get("bestTimeOfDay") or record.get("best_time_of_day")
        try:
            best_time = TimeOfDay(str(best).lower()) if best else None
            return cls(
                id=str(dest_id),
                location=location,
                name=str(record.get("name", "")),
                categories=categories,
                cost_level=int(record.get("costLevel", record.get("cost_level", 3)) or 3),
                visit_duration=int(record.get("visitDuration", record.get("visit_duration", 60)) or 60),
                popularity=float(record.get("popularity", 0.0) or 0.0),
                attributes=MappingProxyType(attributes),
                seasonality=MappingProxyType(seasonality),
                type=str(record.get("type", "") or ""),
                best_time_of_day=best_time,
            )
        except (TypeError, ValueError) as exc:
            raise MalformedRecordError(f"unreadable destination fields: {exc}", record_id=str(dest_id)) from exc
