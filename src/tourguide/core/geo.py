from __future__ import annotations
from dataclasses import dataclass
from math import acos, cos, degrees, radians, sin

"""
Geospatial helpers.

Distances are statute miles computed with the spherical law of cosines. Every
proximity rule (reward radius, nearby radius, nearby ranking) goes through
`distance_miles` so they all agree on the same unit.
"""

STATUTE_MILES_PER_NAUTICAL_MILE = 1.15077945


@dataclass(frozen=True)
class Coordinate:
    """A latitude/longitude pair in decimal degrees."""

    latitude: float
    longitude: float


def distance_miles(a: Coordinate, b: Coordinate) -> float:
    """Compute great-circle distance in statute miles between two points."""
    lat1 = radians(a.latitude)
    lon1 = radians(a.longitude)
    lat2 = radians(b.latitude)
    lon2 = radians(b.longitude)

    cos_angle = sin(lat1) * sin(lat2) + cos(lat1) * cos(lat2) * cos(lon1 - lon2)
    # Rounding can push identical/antipodal points just outside acos's domain.
    angle = acos(max(-1.0, min(1.0, cos_angle)))

    nautical_miles = 60 * degrees(angle)
    return STATUTE_MILES_PER_NAUTICAL_MILE * nautical_miles
