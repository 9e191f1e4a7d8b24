"""
API routes.

Endpoints:
- GET  `/api/travelers`: registered user names.
- POST `/api/travelers`: register a traveler.
- GET  `/api/travelers/{user_name}/location|rewards|nearby-attractions|trip-deals`
- POST `/api/travelers/{user_name}/track`: one tracking cycle.
- POST `/api/tracking/run`: one bulk tracking cycle over every traveler.
- GET/PUT `/api/settings/reward-radius`, POST `/api/settings/reward-radius/reset`
"""

from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache
from typing import Iterator

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from tourguide.config.settings import get_settings
from tourguide.core.errors import NotFound, OracleUnavailable, PricerUnavailable, SourceUnavailable
from tourguide.domain.models import LocationSample, NearbyAttraction, Offer, RewardRecord, TravelerPreferences
from tourguide.domain.traveler import Traveler
from tourguide.service import TourGuideService, build_service

router = APIRouter()


class TravelerCreate(BaseModel):
    user_name: str = Field(..., min_length=1)
    phone: str = ""
    email: str = ""
    preferences: TravelerPreferences | None = None


class RewardRadius(BaseModel):
    miles: float = Field(..., gt=0)


@lru_cache
def _service() -> TourGuideService:
    return build_service(get_settings())


@contextmanager
def _domain_errors() -> Iterator[None]:
    """Translate domain errors into HTTP errors with a `{code, message}` detail."""
    try:
        yield
    except NotFound as e:
        raise HTTPException(status_code=404, detail={"code": "NOT_FOUND", "message": str(e)}) from e
    except SourceUnavailable as e:
        raise HTTPException(status_code=503, detail={"code": "SOURCE_UNAVAILABLE", "message": str(e)}) from e
    except OracleUnavailable as e:
        raise HTTPException(status_code=503, detail={"code": "ORACLE_UNAVAILABLE", "message": str(e)}) from e
    except PricerUnavailable as e:
        raise HTTPException(status_code=503, detail={"code": "PRICER_UNAVAILABLE", "message": str(e)}) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail={"code": "VALIDATION_ERROR", "message": str(e)}) from e


@router.get("/api/travelers")
def list_travelers() -> dict:
    return {"travelers": sorted(t.user_name for t in _service().all_travelers())}


@router.post("/api/travelers", status_code=201)
def register_traveler(req: TravelerCreate) -> dict:
    traveler = Traveler(req.user_name, phone=req.phone, email=req.email, preferences=req.preferences)
    added = _service().add_traveler(traveler)
    existing = _service().get_traveler(req.user_name)
    return {"user_name": existing.user_name, "id": str(existing.id), "added": added}


@router.get("/api/travelers/{user_name}/location", response_model=LocationSample)
def get_location(user_name: str) -> LocationSample:
    with _domain_errors():
        return _service().current_location(user_name)


@router.get("/api/travelers/{user_name}/rewards")
def get_rewards(user_name: str) -> dict:
    with _domain_errors():
        rewards: list[RewardRecord] = _service().get_rewards(user_name)
    return {
        "user_name": user_name,
        "total_points": sum(r.points for r in rewards),
        "rewards": [r.model_dump(mode="json") for r in rewards],
    }


@router.get("/api/travelers/{user_name}/nearby-attractions", response_model=list[NearbyAttraction])
def get_nearby_attractions(user_name: str) -> list[NearbyAttraction]:
    with _domain_errors():
        return _service().nearby_attractions(user_name)


@router.get("/api/travelers/{user_name}/trip-deals", response_model=list[Offer])
def get_trip_deals(user_name: str) -> list[Offer]:
    with _domain_errors():
        return _service().trip_deals(user_name)


@router.post("/api/travelers/{user_name}/track", response_model=LocationSample)
def track_traveler(user_name: str) -> LocationSample:
    with _domain_errors():
        return _service().track(user_name)


@router.post("/api/tracking/run")
def run_tracking() -> dict:
    outcomes = _service().track_all()
    return {
        "tracked": len(outcomes),
        "failed": sum(1 for o in outcomes if o.error is not None),
        "outcomes": [
            {
                "user_name": o.user_name,
                "ok": o.ok,
                "rewards_awarded": o.rewards_awarded,
                "reward_failures": [f.attraction_id for f in o.reward_failures],
                "error": str(o.error) if o.error is not None else None,
            }
            for o in outcomes
        ],
    }


@router.get("/api/settings/reward-radius", response_model=RewardRadius)
def get_reward_radius() -> RewardRadius:
    return RewardRadius(miles=_service().reward_radius)


@router.put("/api/settings/reward-radius", response_model=RewardRadius)
def put_reward_radius(req: RewardRadius) -> RewardRadius:
    with _domain_errors():
        _service().set_reward_radius(req.miles)
    return RewardRadius(miles=_service().reward_radius)


@router.post("/api/settings/reward-radius/reset", response_model=RewardRadius)
def reset_reward_radius() -> RewardRadius:
    _service().reset_reward_radius()
    return RewardRadius(miles=_service().reward_radius)
