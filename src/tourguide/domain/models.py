"""
Domain models (Pydantic).

These types represent the stable "contract" between layers:
- collaborator outputs (`LocationSample`, `Offer`)
- catalog entities (`Attraction`)
- engine output (`RewardRecord`)
- read-model output (`NearbyAttraction`)

Everything here is immutable except `TravelerPreferences`, which a traveler may
update between pricing calls. The mutable per-traveler state (history + ledger)
lives in `tourguide.domain.traveler`.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tourguide.core.geo import Coordinate
from tourguide.core.time import ensure_utc


class LocationSample(BaseModel):
    """One timestamped position reported for a traveler."""

    model_config = ConfigDict(frozen=True)

    traveler_id: UUID
    coordinate: Coordinate
    timestamp: datetime

    @field_validator("timestamp")
    @classmethod
    def _normalize_timestamp(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class Attraction(BaseModel):
    """A catalog point of interest. `id` is the identity; names may repeat."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    coordinate: Coordinate
    city: str | None = None
    state: str | None = None


class RewardRecord(BaseModel):
    """An awarded visit: the sample that qualified, the attraction and its points."""

    model_config = ConfigDict(frozen=True)

    sample: LocationSample
    attraction: Attraction
    points: int = Field(..., ge=0)


class TravelerPreferences(BaseModel):
    """Trip parameters consumed by the pricing engine."""

    trip_duration: int = Field(1, ge=1)
    ticket_quantity: int = Field(1, ge=1)
    number_of_adults: int = Field(1, ge=0)
    number_of_children: int = Field(0, ge=0)


class Offer(BaseModel):
    """One priced trip offer returned by the pricing engine."""

    model_config = ConfigDict(frozen=True)

    name: str
    price: float = Field(..., ge=0)
    trip_id: UUID


class NearbyAttraction(BaseModel):
    """One entry of the nearby-attractions ranking (informational, never an award)."""

    model_config = ConfigDict(frozen=True)

    attraction_id: str
    attraction_name: str
    attraction_coordinate: Coordinate
    traveler_coordinate: Coordinate
    distance_miles: float = Field(..., ge=0)
    reward_points: int = Field(..., ge=0)
    within_nearby_radius: bool
