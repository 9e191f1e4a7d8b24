"""
Internal (in-memory) test travelers.

In test mode the service starts with `internalUser0..N-1`, each carrying a short
random location history so rewards and nearby lookups have something to work on
before the tracker has run.
"""

from __future__ import annotations

import random
from datetime import timedelta

from tourguide.core.geo import Coordinate
from tourguide.core.time import utc_now
from tourguide.domain.models import LocationSample
from tourguide.domain.traveler import Traveler
from tourguide.ingestion.location_client import MAX_LATITUDE


def generate_internal_travelers(
    count: int,
    *,
    history_size: int = 3,
    history_days: int = 30,
    rng: random.Random | None = None,
) -> list[Traveler]:
    rng = rng or random.Random()
    now = utc_now()
    travelers: list[Traveler] = []
    for i in range(int(count)):
        user_name = f"internalUser{i}"
        traveler = Traveler(user_name, phone="000", email=f"{user_name}@tourGuide.com")
        timestamps = sorted(now - timedelta(days=rng.randrange(history_days)) for _ in range(history_size))
        for ts in timestamps:
            traveler.record_location(
                LocationSample(
                    traveler_id=traveler.id,
                    coordinate=Coordinate(
                        latitude=rng.uniform(-MAX_LATITUDE, MAX_LATITUDE),
                        longitude=rng.uniform(-180.0, 180.0),
                    ),
                    timestamp=ts,
                )
            )
        travelers.append(traveler)
    return travelers
