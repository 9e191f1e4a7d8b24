import threading
import time
from concurrent.futures import ThreadPoolExecutor
from uuid import UUID

import pytest

from tourguide.core.errors import SourceUnavailable
from tourguide.core.geo import Coordinate
from tourguide.core.time import utc_now
from tourguide.domain.models import Attraction, LocationSample
from tourguide.domain.traveler import Traveler
from tourguide.rewards.engine import RewardsEngine
from tourguide.rewards.proximity import ProximityPolicy
from tourguide.tracking.orchestrator import TrackingOrchestrator
from tourguide.tracking.tracker import Tracker

SPOT = Coordinate(latitude=28.419411, longitude=-81.5812)


class _StubLocationSource:
    def __init__(self, failing: set[UUID] | None = None):
        self.failing = failing or set()
        self.calls = 0
        self._lock = threading.Lock()

    def fetch_location(self, traveler_id: UUID) -> LocationSample:
        with self._lock:
            self.calls += 1
        if traveler_id in self.failing:
            raise ConnectionError("gps offline")
        return LocationSample(traveler_id=traveler_id, coordinate=SPOT, timestamp=utc_now())


class _SlowOracle:
    def __init__(self, delay: float = 0.0):
        self.delay = delay

    def points_for(self, attraction_id: str, traveler_id: UUID) -> int:
        if self.delay:
            time.sleep(self.delay)
        return 7


@pytest.fixture()
def pools():
    tracking = ThreadPoolExecutor(max_workers=10)
    rewards = ThreadPoolExecutor(max_workers=10)
    yield tracking, rewards
    tracking.shutdown(wait=True)
    rewards.shutdown(wait=True)


def _orchestrator(pools, source, oracle=None) -> TrackingOrchestrator:
    tracking, rewards = pools
    engine = RewardsEngine(
        attractions=[Attraction(id="castle", name="Cinderella Castle", coordinate=SPOT)],
        oracle=oracle or _SlowOracle(),
        policy=ProximityPolicy(),
        executor=rewards,
    )
    return TrackingOrchestrator(location_source=source, engine=engine, executor=tracking)


def test_track_all_gives_every_traveler_one_sample_and_its_rewards(pools):
    travelers = [Traveler(f"user{i}") for i in range(50)]
    orchestrator = _orchestrator(pools, _StubLocationSource(), oracle=_SlowOracle(delay=0.01))

    outcomes = orchestrator.track_all(travelers)

    assert [o.user_name for o in outcomes] == [t.user_name for t in travelers]
    assert all(o.ok for o in outcomes)
    for traveler in travelers:
        assert len(traveler.history()) == 1
        assert "castle" in traveler.ledger


def test_fetch_failure_only_affects_that_traveler(pools):
    travelers = [Traveler(f"user{i}") for i in range(5)]
    broken = travelers[2]
    orchestrator = _orchestrator(pools, _StubLocationSource(failing={broken.id}))

    outcomes = orchestrator.track_all(travelers)

    failed = [o for o in outcomes if o.error is not None]
    assert [o.user_name for o in failed] == ["user2"]
    assert isinstance(failed[0].error, SourceUnavailable)
    assert broken.history() == ()
    assert len(broken.ledger) == 0
    for t in travelers:
        if t is not broken:
            assert len(t.history()) == 1
            assert "castle" in t.ledger


def test_blocking_track_raises_source_unavailable(pools):
    traveler = Traveler("solo")
    orchestrator = _orchestrator(pools, _StubLocationSource(failing={traveler.id}))

    with pytest.raises(SourceUnavailable):
        orchestrator.track_traveler(traveler)
    assert traveler.history() == ()


def test_async_track_resolves_after_rewards_are_in(pools):
    traveler = Traveler("solo")
    orchestrator = _orchestrator(pools, _StubLocationSource(), oracle=_SlowOracle(delay=0.05))

    sample = orchestrator.track_traveler_async(traveler).result(timeout=5)

    assert sample.coordinate == SPOT
    assert traveler.latest_location() == sample
    assert "castle" in traveler.ledger


def test_tracker_runs_cycles_until_stopped(pools):
    travelers = [Traveler("a"), Traveler("b")]
    source = _StubLocationSource()
    tracker = Tracker(_orchestrator(pools, source), lambda: travelers, interval_seconds=60)

    tracker.start()
    deadline = time.monotonic() + 5
    while tracker.cycles < 1 and time.monotonic() < deadline:
        time.sleep(0.01)
    tracker.stop_tracking(timeout=5)

    assert not tracker.is_alive()
    assert tracker.cycles == 1
    assert source.calls == 2
    assert len(tracker.last_outcomes) == 2


def test_orchestrator_refuses_to_share_the_reward_pool(pools):
    _, rewards = pools
    engine = RewardsEngine(attractions=[], oracle=_SlowOracle(), policy=ProximityPolicy(), executor=rewards)

    with pytest.raises(ValueError, match="distinct"):
        TrackingOrchestrator(location_source=_StubLocationSource(), engine=engine, executor=rewards)
