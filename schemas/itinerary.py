"""
schemas/itinerary.py
--------------------
Dataclass definitions for the output itinerary structures.

An Itinerary is built once per generation or refinement call. Refinement
produces a new Itinerary (same itinerary_id) rather than editing items in place.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, time, timezone
from typing import Any, Optional, Union
import uuid

from core.enums import TransportMode
from schemas.context import Context, TimeWindow
from schemas.destination import GeoPoint
from schemas.recommendation import ScoredDestination


@dataclass(frozen=True)
class Stop:
    """A visit to one destination."""
    sequence: int
    destination_id: str
    name: str
    location: GeoPoint
    start_time: time
    end_time: time
    travel_time_from_previous: int      # minutes
    score: float

    kind = "stop"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "sequence": self.sequence,
            "destinationId": self.destination_id,
            "name": self.name,
            "startTime": self.start_time.strftime("%H:%M"),
            "endTime": self.end_time.strftime("%H:%M"),
            "travelTimeFromPrevious": self.travel_time_from_previous,
            "score": self.score,
        }


@dataclass(frozen=True)
class Break:
    """Lunch break inserted between stops."""
    start_time: time
    end_time: time
    duration: int                       # minutes

    kind = "break"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "startTime": self.start_time.strftime("%H:%M"),
            "endTime": self.end_time.strftime("%H:%M"),
            "duration": self.duration,
        }


ItineraryItem = Union[Stop, Break]


@dataclass
class Itinerary:
    """
    Ordered, time-stamped day plan.

    candidates: the scored list the items were selected from; refinement
                looks up the scheduled stops in it.
    """
    window: TimeWindow
    start_location: GeoPoint
    transport_mode: Optional[TransportMode] = None
    items: tuple[ItineraryItem, ...] = ()
    candidates: tuple[ScoredDestination, ...] = ()
    context: Optional[Context] = None
    itinerary_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def stops(self) -> list[Stop]:
        return [item for item in self.items if isinstance(item, Stop)]

    @property
    def destination_ids(self) -> list[str]:
        return [s.destination_id for s in self.stops]

    @property
    def is_empty(self) -> bool:
        return not self.items

    def to_dict(self) -> dict[str, Any]:
        return {
            "itineraryId": self.itinerary_id,
            "startTime": self.window.start.strftime("%H:%M"),
            "endTime": self.window.end.strftime("%H:%M"),
            "transportMode": self.transport_mode.value if self.transport_mode else None,
            "items": [item.to_dict() for item in self.items],
            "generatedAt": self.generated_at.isoformat(),
        }
