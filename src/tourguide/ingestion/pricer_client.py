"""
Trip pricing clients.

The pricing engine turns a traveler's preferences and accumulated reward points into
priced offers. It sits outside the reward engine: we only forward the ledger's point
total and return whatever offers come back. Transport errors and malformed offers
are raised as `PricerUnavailable`.
"""

from __future__ import annotations

import logging
import random
import threading
from typing import Protocol
from uuid import UUID, uuid4

import httpx
from pydantic import TypeAdapter

from tourguide.config.settings import Settings
from tourguide.core.errors import PricerUnavailable
from tourguide.core.http import get_json
from tourguide.domain.models import Offer, TravelerPreferences

logger = logging.getLogger(__name__)

PROVIDER_NAMES = [
    "Holiday Travels",
    "Enterprize Ventures Limited",
    "Sunny Days",
    "FlyAway Trips",
    "United Partners Vacations",
    "Dream Trips",
    "Live Free",
    "Dancing Waves Cruselines and Partners",
    "AdventureCo",
    "Cure-Your-Blues",
]

_OFFERS_ADAPTER = TypeAdapter(list[Offer])


class TripPricer(Protocol):
    def price_offers(
        self,
        api_key: str,
        traveler_id: UUID,
        preferences: TravelerPreferences,
        total_points: int,
    ) -> list[Offer]: ...


class SimulatedTripPricer:
    """Five random providers; each point is worth one cent off the trip price."""

    offers_per_call = 5

    def __init__(self, *, rng: random.Random | None = None):
        self._rng = rng or random.Random()
        self._rng_lock = threading.Lock()

    def price_offers(
        self,
        api_key: str,
        traveler_id: UUID,
        preferences: TravelerPreferences,
        total_points: int,
    ) -> list[Offer]:
        with self._rng_lock:
            names = self._rng.sample(PROVIDER_NAMES, self.offers_per_call)
            bases = [self._rng.randint(100, 700) for _ in names]

        offers = []
        for name, base in zip(names, bases):
            per_night = base * preferences.number_of_adults + base * 0.5 * preferences.number_of_children
            price = per_night * preferences.trip_duration - total_points * 0.01
            offers.append(Offer(name=name, price=round(max(0.0, price), 2), trip_id=uuid4()))
        return offers


class HttpTripPricer:
    """GET `{base_url}` with the trip parameters -> list of `{"name", "price", "trip_id"}`."""

    def __init__(self, *, base_url: str, timeout_seconds: float = 15):
        self._base_url = base_url
        self._timeout_seconds = float(timeout_seconds)

    @classmethod
    def from_settings(cls, settings: Settings) -> "HttpTripPricer":
        return cls(
            base_url=settings.ingestion.pricer.base_url,
            timeout_seconds=settings.app.http_timeout_seconds,
        )

    def price_offers(
        self,
        api_key: str,
        traveler_id: UUID,
        preferences: TravelerPreferences,
        total_points: int,
    ) -> list[Offer]:
        params = {
            "apiKey": api_key,
            "userId": str(traveler_id),
            "adults": preferences.number_of_adults,
            "children": preferences.number_of_children,
            "nightsStay": preferences.trip_duration,
            "rewardsPoints": int(total_points),
        }
        try:
            payload = get_json(self._base_url, params=params, timeout_seconds=self._timeout_seconds)
            return _OFFERS_ADAPTER.validate_python(payload)
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Trip pricing failed for traveler=%s: %s", traveler_id, exc)
            message = f"trip pricing failed ({type(exc).__name__})"
            raise PricerUnavailable(traveler_id, message=message) from exc
