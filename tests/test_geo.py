import pytest

from tourguide.core.geo import Coordinate, distance_miles


def test_distance_is_zero_for_identical_points():
    p = Coordinate(latitude=33.817595, longitude=-117.922008)
    assert distance_miles(p, p) == pytest.approx(0.0, abs=1e-6)


def test_distance_is_symmetric():
    a = Coordinate(latitude=33.817595, longitude=-117.922008)
    b = Coordinate(latitude=28.419411, longitude=-81.5812)
    assert distance_miles(a, b) == pytest.approx(distance_miles(b, a))


def test_antipodal_points_are_half_the_circumference_apart():
    a = Coordinate(latitude=0.0, longitude=0.0)
    b = Coordinate(latitude=0.0, longitude=180.0)
    # 180 degrees * 60 nautical miles * 1.15077945 statute miles per nautical mile.
    assert distance_miles(a, b) == pytest.approx(12428.418, abs=1e-3)


def test_one_degree_of_longitude_at_the_equator():
    a = Coordinate(latitude=0.0, longitude=0.0)
    b = Coordinate(latitude=0.0, longitude=1.0)
    assert distance_miles(a, b) == pytest.approx(60 * 1.15077945, rel=1e-9)
