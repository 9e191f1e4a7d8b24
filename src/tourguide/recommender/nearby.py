"""
Nearby attraction finder.

Ranks the whole catalog by distance to a sample and prices only the closest few.
Results are informational ("what would I earn there"); the ledger is never touched.
"""

from __future__ import annotations

from typing import Sequence

from tourguide.core.geo import distance_miles
from tourguide.domain.models import Attraction, LocationSample, NearbyAttraction
from tourguide.domain.traveler import Traveler
from tourguide.rewards.engine import RewardsEngine


class NearbyAttractionFinder:
    def __init__(self, *, engine: RewardsEngine, result_limit: int = 5):
        if int(result_limit) < 1:
            raise ValueError("result_limit must be >= 1")
        self._engine = engine
        self._result_limit = int(result_limit)

    @property
    def attractions(self) -> Sequence[Attraction]:
        return self._engine.attractions

    def nearby_attractions(self, sample: LocationSample, traveler: Traveler) -> list[NearbyAttraction]:
        """Closest attractions to `sample`, nearest first; ties keep catalog order."""
        ranked = sorted(
            ((a, distance_miles(a.coordinate, sample.coordinate)) for a in self.attractions),
            key=lambda pair: pair[1],
        )
        policy = self._engine.policy

        # Oracle calls only for the kept entries.
        return [
            NearbyAttraction(
                attraction_id=attraction.id,
                attraction_name=attraction.name,
                attraction_coordinate=attraction.coordinate,
                traveler_coordinate=sample.coordinate,
                distance_miles=distance,
                reward_points=self._engine.points_for(attraction, traveler),
                within_nearby_radius=policy.is_nearby(attraction, sample.coordinate),
            )
            for attraction, distance in ranked[: self._result_limit]
        ]
