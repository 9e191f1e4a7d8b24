from uuid import uuid4

import pytest

from tourguide.config.settings import ProximitySettings
from tourguide.core.geo import Coordinate, distance_miles
from tourguide.core.time import utc_now
from tourguide.domain.models import Attraction, LocationSample
from tourguide.rewards.proximity import ProximityPolicy

ATTRACTION = Attraction(id="origin", name="Origin", coordinate=Coordinate(latitude=0.0, longitude=0.0))


def _sample_at(longitude: float) -> LocationSample:
    return LocationSample(
        traveler_id=uuid4(),
        coordinate=Coordinate(latitude=0.0, longitude=longitude),
        timestamp=utc_now(),
    )


def test_reward_radius_decides_eligibility():
    near = _sample_at(0.07)  # ~4.8 miles
    far = _sample_at(4.3)  # ~297 miles
    assert distance_miles(ATTRACTION.coordinate, near.coordinate) < 5
    assert 290 < distance_miles(ATTRACTION.coordinate, far.coordinate) < 300

    policy = ProximityPolicy()
    assert policy.reward_radius == 10
    assert policy.is_reward_eligible(ATTRACTION, near)
    assert not policy.is_reward_eligible(ATTRACTION, far)

    policy.set_reward_radius(300)
    assert policy.is_reward_eligible(ATTRACTION, far)

    policy.reset_reward_radius()
    assert policy.reward_radius == 10
    assert not policy.is_reward_eligible(ATTRACTION, far)


def test_distance_equal_to_radius_is_eligible():
    sample = _sample_at(0.1)
    policy = ProximityPolicy(reward_radius_miles=distance_miles(ATTRACTION.coordinate, sample.coordinate))
    assert policy.is_reward_eligible(ATTRACTION, sample)


@pytest.mark.parametrize("bad", [0, -1, float("nan")])
def test_invalid_radius_is_rejected_and_previous_value_kept(bad):
    policy = ProximityPolicy(reward_radius_miles=25)
    with pytest.raises(ValueError):
        policy.set_reward_radius(bad)
    assert policy.reward_radius == 25


def test_nearby_radius_is_fixed_and_wider():
    policy = ProximityPolicy.from_settings(ProximitySettings(reward_radius_miles=10, nearby_radius_miles=200))
    policy.set_reward_radius(1)
    assert policy.nearby_radius == 200
    assert policy.is_nearby(ATTRACTION, _sample_at(2.0).coordinate)  # ~138 miles
    assert not policy.is_nearby(ATTRACTION, _sample_at(3.0).coordinate)  # ~207 miles


def test_policies_do_not_share_radius():
    a = ProximityPolicy()
    b = ProximityPolicy()
    a.set_reward_radius(500)
    assert b.reward_radius == 10
