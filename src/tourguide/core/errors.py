"""
Domain error taxonomy.

Adapters translate transport failures into these so the engine and orchestrator
can contain them per pair / per traveler without knowing about httpx.
"""

from __future__ import annotations

from uuid import UUID


class TourGuideError(Exception):
    """Base class for all tourguide errors."""


class SourceUnavailable(TourGuideError):
    """The location source could not produce a sample for a traveler."""

    def __init__(self, traveler_id: UUID, message: str = "location source unavailable"):
        super().__init__(f"{message} (traveler_id={traveler_id})")
        self.traveler_id = traveler_id


class OracleUnavailable(TourGuideError):
    """The points oracle failed for one (attraction, traveler) pair."""

    def __init__(self, attraction_id: str, traveler_id: UUID, message: str = "points oracle unavailable"):
        super().__init__(f"{message} (attraction_id={attraction_id}, traveler_id={traveler_id})")
        self.attraction_id = attraction_id
        self.traveler_id = traveler_id


class NotFound(TourGuideError):
    """No traveler is registered under the requested user name."""

    def __init__(self, user_name: str):
        super().__init__(f"Unknown traveler '{user_name}'.")
        self.user_name = user_name


class PricerUnavailable(TourGuideError):
    """The trip pricing engine failed or returned unusable offers."""

    def __init__(self, traveler_id: UUID, message: str = "trip pricer unavailable"):
        super().__init__(f"{message} (traveler_id={traveler_id})")
        self.traveler_id = traveler_id
