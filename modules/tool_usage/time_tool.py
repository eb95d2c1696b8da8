"""
modules/tool_usage/time_tool.py
---------------------------------
Arithmetic tool: travel-time estimation and minute-of-day arithmetic used by
the ItineraryBuilder.

Travel time is a speed approximation: haversine distance / mode speed, plus a
fixed buffer, rounded up to the whole minute.
"""

from __future__ import annotations
import math
from datetime import time
from types import MappingProxyType
from typing import Mapping, Optional

import config
from core.enums import TransportMode
from modules.tool_usage.distance_tool import DistanceTool
from schemas.destination import GeoPoint


# km/h per transport mode; anything else uses config.DEFAULT_SPEED_KMH
MODE_SPEEDS_KMH: Mapping[TransportMode, float] = MappingProxyType({
    TransportMode.WALKING: 5.0,
    TransportMode.TRANSIT: 15.0,
    TransportMode.DRIVING: 30.0,
})


class TimeTool:
    """
    Wraps time-arithmetic operations used by the ItineraryBuilder.
    Provides travel-time estimation and minutes ↔ datetime.time conversion.
    """

    def __init__(
        self,
        speeds_kmh: Mapping[TransportMode, float] = MODE_SPEEDS_KMH,
        default_speed_kmh: float = config.DEFAULT_SPEED_KMH,
        buffer_minutes: int = config.TRAVEL_BUFFER_MINUTES,
        distance_tool: Optional[DistanceTool] = None,
    ):
        self.speeds_kmh = speeds_kmh
        self.default_speed_kmh = default_speed_kmh
        self.buffer_minutes = buffer_minutes
        self.distance_tool = distance_tool or DistanceTool()

    def speed_for(self, mode: Optional[TransportMode]) -> float:
        return self.speeds_kmh.get(mode, self.default_speed_kmh)

    def estimate_travel_time(
        self,
        origin: GeoPoint,
        destination: GeoPoint,
        mode: Optional[TransportMode] = None,
    ) -> int:
        """
        Estimate door-to-door travel minutes between two points.

        Returns:
            ceil(distance_km / speed × 60) + buffer, in whole minutes.
        """
        distance_km = self.distance_tool.calculate(origin, destination)
        return math.ceil(distance_km / self.speed_for(mode) * 60) + self.buffer_minutes

    @staticmethod
    def to_minutes(value: time) -> int:
        """datetime.time → minutes since midnight."""
        return value.hour * 60 + value.minute

    @staticmethod
    def from_minutes(minutes: int) -> time:
        """
        Minutes since midnight → datetime.time.
        NOTE: Does NOT handle day overflow; callers keep minutes below 24 h.
        """
        return time(hour=minutes // 60, minute=minutes % 60)
