"""Great-circle distance for geofenced check-in."""

from __future__ import annotations

import math
from dataclasses import dataclass

from ..core.constants import EARTH_RADIUS_M
from .validators import require_coordinate


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float

    @classmethod
    def parse(cls, lat, lng) -> "GeoPoint":
        """Build a point from untrusted input, raising ValidationError."""
        return cls(
            lat=require_coordinate(lat, "lat", limit=90.0),
            lng=require_coordinate(lng, "lng", limit=180.0),
        )


def distance_meters(p1: GeoPoint, p2: GeoPoint) -> float:
    """Haversine distance between two points, in meters."""
    phi1 = math.radians(p1.lat)
    phi2 = math.radians(p2.lat)
    dphi = math.radians(p2.lat - p1.lat)
    dlambda = math.radians(p2.lng - p1.lng)

    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def is_within_radius(point: GeoPoint, center: GeoPoint, radius_m: float) -> bool:
    return distance_meters(point, center) <= radius_m
