"""
Proximity rules.

Two radii, both in statute miles:
- the reward radius decides whether a visit earns points; it can be changed at runtime
  and reset to its configured default;
- the nearby radius is a wider, informational "you are close to this" threshold.

The reward radius is the only mutable piece of policy state. Reads and writes go
through a lock, so a change is visible to every match started after it. Each engine
gets its own policy instance (no module-level radius).
"""

from __future__ import annotations

import threading

from tourguide.config.settings import ProximitySettings
from tourguide.core.geo import Coordinate, distance_miles
from tourguide.domain.models import Attraction, LocationSample


class ProximityPolicy:
    def __init__(self, *, reward_radius_miles: float = 10, nearby_radius_miles: float = 200):
        _check_radius(reward_radius_miles)
        _check_radius(nearby_radius_miles)
        self._default_reward_radius = float(reward_radius_miles)
        self._reward_radius = float(reward_radius_miles)
        self._nearby_radius = float(nearby_radius_miles)
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: ProximitySettings) -> "ProximityPolicy":
        return cls(
            reward_radius_miles=settings.reward_radius_miles,
            nearby_radius_miles=settings.nearby_radius_miles,
        )

    @property
    def reward_radius(self) -> float:
        with self._lock:
            return self._reward_radius

    @property
    def default_reward_radius(self) -> float:
        return self._default_reward_radius

    @property
    def nearby_radius(self) -> float:
        return self._nearby_radius

    def set_reward_radius(self, miles: float) -> None:
        _check_radius(miles)
        with self._lock:
            self._reward_radius = float(miles)

    def reset_reward_radius(self) -> None:
        with self._lock:
            self._reward_radius = self._default_reward_radius

    def is_reward_eligible(self, attraction: Attraction, sample: LocationSample) -> bool:
        return distance_miles(attraction.coordinate, sample.coordinate) <= self.reward_radius

    def is_nearby(self, attraction: Attraction, location: Coordinate) -> bool:
        return distance_miles(attraction.coordinate, location) <= self._nearby_radius


def _check_radius(miles: float) -> None:
    if not float(miles) > 0:
        raise ValueError(f"Radius must be a positive number of miles (got {miles}).")
