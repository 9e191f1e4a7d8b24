import random
import time
from uuid import UUID, uuid4

import pytest

from tourguide.config.settings import get_settings
from tourguide.core.errors import NotFound
from tourguide.core.geo import Coordinate
from tourguide.core.time import utc_now
from tourguide.domain.internal import generate_internal_travelers
from tourguide.domain.models import Attraction, LocationSample, Offer, TravelerPreferences
from tourguide.domain.traveler import Traveler
from tourguide.ingestion.location_client import HttpLocationSource
from tourguide.ingestion.points_client import HttpPointsOracle
from tourguide.ingestion.pricer_client import HttpTripPricer
from tourguide.service import build_service

SPOT = Coordinate(latitude=33.817595, longitude=-117.922008)
ATTRACTIONS = [
    Attraction(id="disneyland", name="Disneyland", coordinate=SPOT),
    Attraction(id="far-away", name="Far Away", coordinate=Coordinate(latitude=-33.0, longitude=151.0)),
]


class _StubLocationSource:
    def fetch_location(self, traveler_id: UUID) -> LocationSample:
        return LocationSample(traveler_id=traveler_id, coordinate=SPOT, timestamp=utc_now())


class _StubOracle:
    def points_for(self, attraction_id: str, traveler_id: UUID) -> int:
        return 150


class _RecordingPricer:
    def __init__(self):
        self.calls: list[tuple[str, UUID, TravelerPreferences, int]] = []

    def price_offers(self, api_key, traveler_id, preferences, total_points):
        self.calls.append((api_key, traveler_id, preferences, total_points))
        return [Offer(name="Live Free", price=99.0, trip_id=uuid4())]


def _settings(**internal_users):
    settings = get_settings()
    workers = settings.workers.model_copy(update={"tracking_pool_size": 4, "reward_pool_size": 4})
    users = settings.internal_users.model_copy(update=internal_users)
    return settings.model_copy(update={"workers": workers, "internal_users": users})


@pytest.fixture()
def service():
    svc = build_service(
        _settings(),
        attractions=ATTRACTIONS,
        location_source=_StubLocationSource(),
        oracle=_StubOracle(),
        pricer=_RecordingPricer(),
        seed_internal_travelers=False,
    )
    yield svc
    svc.shutdown()


def test_unknown_traveler_raises_not_found(service):
    with pytest.raises(NotFound, match="nobody"):
        service.get_rewards("nobody")


def test_add_traveler_keeps_the_first_registration(service):
    first = Traveler("jon")
    assert service.add_traveler(first)
    assert not service.add_traveler(Traveler("jon"))
    assert service.get_traveler("jon") is first


def test_current_location_tracks_when_history_is_empty(service):
    service.add_traveler(Traveler("jon"))

    sample = service.current_location("jon")

    assert sample.coordinate == SPOT
    assert [r.attraction.id for r in service.get_rewards("jon")] == ["disneyland"]
    # A known location is returned as-is, without a new fetch.
    assert service.current_location("jon") is sample
    assert len(service.get_traveler("jon").history()) == 1


def test_trip_deals_use_the_ledger_total(service):
    service.add_traveler(Traveler("jon"))
    service.track("jon")

    offers = service.trip_deals("jon")

    api_key, _, _, total_points = service._pricer.calls[-1]
    assert api_key == "test-server-api-key"
    assert total_points == 150
    assert service.get_traveler("jon").trip_deals == offers


def test_reward_radius_administration(service):
    service.set_reward_radius(50)
    assert service.reward_radius == 50
    with pytest.raises(ValueError):
        service.set_reward_radius(-1)
    service.reset_reward_radius()
    assert service.reward_radius == 10


def test_track_all_covers_every_registered_traveler(service):
    for i in range(8):
        service.add_traveler(Traveler(f"user{i}"))

    outcomes = service.track_all()

    assert len(outcomes) == 8
    assert all(o.rewards_awarded == 1 for o in outcomes)


def test_background_tracker_can_be_stopped(service):
    service.add_traveler(Traveler("jon"))
    tracker = service.start_tracker(interval_seconds=60)
    assert service.start_tracker(interval_seconds=60) is tracker

    deadline = time.monotonic() + 5
    while tracker.cycles < 1 and time.monotonic() < deadline:
        time.sleep(0.01)
    tracker.stop_tracking(timeout=5)

    assert not tracker.is_alive()
    assert "disneyland" in service.get_traveler("jon").ledger


def test_test_mode_seeds_internal_travelers():
    svc = build_service(
        _settings(count=3),
        attractions=ATTRACTIONS,
        location_source=_StubLocationSource(),
        oracle=_StubOracle(),
        pricer=_RecordingPricer(),
    )
    try:
        names = sorted(t.user_name for t in svc.all_travelers())
        assert names == ["internalUser0", "internalUser1", "internalUser2"]
        assert all(len(t.history()) == 3 for t in svc.all_travelers())
    finally:
        svc.shutdown()


def test_generated_internal_travelers_look_like_test_accounts():
    travelers = generate_internal_travelers(2, history_size=4, rng=random.Random(3))

    assert travelers[0].email == "internalUser0@tourGuide.com"
    assert travelers[0].phone == "000"
    history = travelers[1].history()
    assert len(history) == 4
    assert [s.timestamp for s in history] == sorted(s.timestamp for s in history)
    assert all(s.traveler_id == travelers[1].id for s in history)


def test_http_mode_wires_http_adapters():
    settings = _settings()
    ingestion = settings.ingestion.model_copy(update={"mode": "http", "max_requests_per_minute": 120})
    svc = build_service(
        settings.model_copy(update={"ingestion": ingestion}),
        attractions=ATTRACTIONS,
        seed_internal_travelers=False,
    )
    try:
        assert isinstance(svc.orchestrator._location_source, HttpLocationSource)
        assert isinstance(svc.engine._oracle, HttpPointsOracle)
        assert isinstance(svc._pricer, HttpTripPricer)
    finally:
        svc.shutdown()
