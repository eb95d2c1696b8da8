"""
modules/tool_usage/distance_tool.py
-------------------------------------
Arithmetic tool: calculates distance between two geographic coordinates.
Local computation, straight-line (haversine) distance in kilometres.
"""

from __future__ import annotations
import math

from schemas.destination import GeoPoint


_EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Compute great-circle distance between two points using the Haversine formula.

    Args:
        lat1, lon1: Coordinates of point A (decimal degrees).
        lat2, lon2: Coordinates of point B (decimal degrees).

    Returns:
        Distance in kilometres.
    """
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lam = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lam / 2) ** 2
    return 2 * _EARTH_RADIUS_KM * math.atan2(math.sqrt(a), math.sqrt(1 - a))


class DistanceTool:
    """Distance between GeoPoints, in km."""

    def calculate(self, a: GeoPoint, b: GeoPoint) -> float:
        return haversine_km(a.lat, a.lng, b.lat, b.lng)

    def within(self, a: GeoPoint, b: GeoPoint, radius_km: float) -> bool:
        return self.calculate(a, b) <= radius_km
