"""
schemas/preferences.py
----------------------
A user's travel preference profile and the allow-listed update record used to
change it.

PreferenceProfile is read-only to scoring. It is replaced, never mutated, by
PreferenceLearner or by PreferenceUpdate.apply().
"""

from __future__ import annotations
import math
import re
from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from core.enums import ActivityLevel, PreferenceSource, TransportMode


_HHMM = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

MIN_COST_LEVEL = 1
MAX_COST_LEVEL = 5
DEFAULT_COST_LEVEL = 3


def clamp_cost_level(value: float) -> int:
    """Round half up, then clamp to 1..5."""
    return int(max(MIN_COST_LEVEL, min(MAX_COST_LEVEL, math.floor(value + 0.5))))


@dataclass(frozen=True)
class DailySchedule:
    morning_start: str = "09:00"    # "HH:MM"
    evening_end: str = "17:00"      # "HH:MM"


@dataclass(frozen=True)
class PreferenceProfile:
    """
    Stored preferences for one user.

    categories           liked category ids.
    excluded_activities  category ids that veto a destination.
    source               where the profile came from (explicit / derived / default).
    """
    categories: frozenset[str] = frozenset()
    cost_level: int = DEFAULT_COST_LEVEL
    activity_level: ActivityLevel = ActivityLevel.MODERATE
    excluded_activities: frozenset[str] = frozenset()
    preferred_transportation: frozenset[TransportMode] = frozenset()
    schedule: DailySchedule = field(default_factory=DailySchedule)
    source: PreferenceSource = PreferenceSource.EXPLICIT

    @classmethod
    def default(cls) -> "PreferenceProfile":
        """New-user fallback profile."""
        return cls(source=PreferenceSource.DEFAULT)

    @property
    def is_default(self) -> bool:
        """True only for the new-user fallback; a stored profile is always matched."""
        return self.source is PreferenceSource.DEFAULT

    @classmethod
    def from_payload(
        cls,
        payload: Mapping[str, Any],
        source: PreferenceSource = PreferenceSource.EXPLICIT,
    ) -> "PreferenceProfile":
        """
        Map a profile-service payload onto a profile.
        Field names of both the profile service (budgetLevel, pacePreference)
        and this package (costLevel, activityLevel) are understood.
        """
        update = PreferenceUpdate.model_validate({
            "categories": _category_ids(payload.get("categories")),
            "cost_level": payload.get("costLevel", payload.get("budgetLevel", DEFAULT_COST_LEVEL)),
            "activity_level": payload.get("activityLevel", payload.get("pacePreference", "moderate")),
            "excluded_activities": payload.get("excludedActivities") or [],
            "preferred_transportation": payload.get("preferredTransportation") or [],
            "schedule": payload.get("schedule"),
        })
        return update.apply(cls(source=source))

    def to_payload(self) -> dict[str, Any]:
        return {
            "categories": sorted(self.categories),
            "costLevel": self.cost_level,
            "activityLevel": self.activity_level.value,
            "excludedActivities": sorted(self.excluded_activities),
            "preferredTransportation": sorted(m.value for m in self.preferred_transportation),
            "schedule": {
                "morningStart": self.schedule.morning_start,
                "eveningEnd": self.schedule.evening_end,
            },
            "source": self.source.value,
        }


def _category_ids(raw: Any) -> list[str]:
    """Categories may arrive as ids, {id, name} objects, or a {id: rating} map."""
    if not raw:
        return []
    if isinstance(raw, Mapping):
        return [str(k) for k in raw]
    return [str(c.get("id") or c.get("name")) if isinstance(c, Mapping) else str(c) for c in raw]


class ScheduleUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    morning_start: Optional[str] = None
    evening_end: Optional[str] = None

    @field_validator("morning_start", "evening_end", mode="before")
    @classmethod
    def must_be_hhmm(cls, v):
        if v is None:
            return v
        if not isinstance(v, str) or not _HHMM.match(v):
            raise ValueError(f"time must be HH:MM, got {v!r}")
        return v

    @classmethod
    def from_any(cls, raw: Any) -> Optional["ScheduleUpdate"]:
        if raw is None or isinstance(raw, ScheduleUpdate):
            return raw
        if not isinstance(raw, Mapping):
            raise ValueError(f"schedule must be a mapping, got {type(raw).__name__}")
        return cls(
            morning_start=raw.get("morningStart", raw.get("morning_start")),
            evening_end=raw.get("eveningEnd", raw.get("evening_end")),
        )


class PreferenceUpdate(BaseModel):
    """
    Allow-listed preference update.

    Unknown keys are dropped; each field is accepted under its snake_case or
    camelCase name. Only fields the caller actually supplied are
    applied (pydantic's model_fields_set), so a partial update never resets
    the remaining fields.
    """
    model_config = ConfigDict(extra="ignore")

    categories: Optional[list[str]] = None
    cost_level: Optional[int] = Field(None, validation_alias=AliasChoices("cost_level", "costLevel"))
    activity_level: Optional[ActivityLevel] = Field(
        None, validation_alias=AliasChoices("activity_level", "activityLevel"))
    excluded_activities: Optional[list[str]] = Field(
        None, validation_alias=AliasChoices("excluded_activities", "excludedActivities"))
    preferred_transportation: Optional[list[TransportMode]] = Field(
        None, validation_alias=AliasChoices("preferred_transportation", "preferredTransportation"))
    schedule: Optional[ScheduleUpdate] = None

    @field_validator("cost_level", mode="before")
    @classmethod
    def clamp_cost(cls, v):
        if v is None:
            return v
        return clamp_cost_level(float(v))

    @field_validator("activity_level", mode="before")
    @classmethod
    def normalise_activity(cls, v):
        return v.lower() if isinstance(v, str) else v

    @field_validator("preferred_transportation", mode="before")
    @classmethod
    def known_modes_only(cls, v):
        if v is None:
            return v
        known = {m.value for m in TransportMode}
        names = [m.value if isinstance(m, TransportMode) else str(m).lower() for m in v]
        return [name for name in names if name in known]

    @field_validator("schedule", mode="before")
    @classmethod
    def parse_schedule(cls, v):
        return ScheduleUpdate.from_any(v)

    def apply(self, profile: PreferenceProfile) -> PreferenceProfile:
        """Return a new profile with the supplied fields replaced."""
        changes: dict[str, Any] = {}
        provided = self.model_fields_set

        if "categories" in provided and self.categories is not None:
            changes["categories"] = frozenset(self.categories)
        if "cost_level" in provided and self.cost_level is not None:
            changes["cost_level"] = self.cost_level
        if "activity_level" in provided and self.activity_level is not None:
            changes["activity_level"] = self.activity_level
        if "excluded_activities" in provided and self.excluded_activities is not None:
            changes["excluded_activities"] = frozenset(self.excluded_activities)
        if "preferred_transportation" in provided and self.preferred_transportation is not None:
            changes["preferred_transportation"] = frozenset(self.preferred_transportation)
        if "schedule" in provided and self.schedule is not None:
            changes["schedule"] = DailySchedule(
                morning_start=self.schedule.morning_start or profile.schedule.morning_start,
                evening_end=self.schedule.evening_end or profile.schedule.evening_end,
            )
        return replace(profile, **changes)

    def to_payload(self) -> dict[str, Any]:
        """Profile-service payload holding only the supplied fields."""
        names = {
            "categories": "categories",
            "cost_level": "costLevel",
            "activity_level": "activityLevel",
            "excluded_activities": "excludedActivities",
            "preferred_transportation": "preferredTransportation",
        }
        data = self.model_dump(mode="json", exclude_unset=True, exclude_none=True)
        payload = {names[k]: v for k, v in data.items() if k in names}
        if self.schedule is not None and "schedule" in self.model_fields_set:
            schedule = {}
            if self.schedule.morning_start:
                schedule["morningStart"] = self.schedule.morning_start
            if self.schedule.evening_end:
                schedule["eveningEnd"] = self.schedule.evening_end
            payload["schedule"] = schedule
        return payload

