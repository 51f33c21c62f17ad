import math

import pytest
from haversine import Unit, haversine

from runstats.analyze.geometry import EARTH_RADIUS_M, point_distance, surface_distance
from runstats.formats.gpx import TrackPoint


def test_earth_radius():
    assert EARTH_RADIUS_M == pytest.approx(6371008.8)


def test_zero_distance():
    assert surface_distance(0.0, 0.0, 0.0, 0.0) == 0.0
    assert surface_distance(55.755826, 37.6173, 55.755826, 37.6173) == 0.0


def test_distance_between_cities():
    # Moscow -> Saint Petersburg
    d = surface_distance(55.755826, 37.6173, 59.9342802, 30.3350986)
    assert d == pytest.approx(633016.49, abs=1.0)


@pytest.mark.parametrize(
    "a, b",
    [
        ((55.755826, 37.6173), (59.9342802, 30.3350986)),
        ((-33.8688, 151.2093), (51.5074, -0.1278)),
        ((10.1025420, 15.1583540), (10.1025432, 15.1583542)),
    ],
)
def test_distance_is_symmetric(a, b):
    assert surface_distance(*a, *b) == surface_distance(*b, *a)


def test_antipodal_points():
    assert surface_distance(0.0, 0.0, 0.0, 180.0) == pytest.approx(math.pi * EARTH_RADIUS_M)
    assert surface_distance(90.0, 0.0, -90.0, 0.0) == pytest.approx(math.pi * EARTH_RADIUS_M)


@pytest.mark.parametrize(
    "a, b",
    [
        ((10.1025420, 15.1583540), (10.1025432, 15.1583542)),
        ((48.8566, 2.3522), (48.8570, 2.3530)),
        ((55.755826, 37.6173), (59.9342802, 30.3350986)),
    ],
)
def test_agrees_with_haversine(a, b):
    expected = haversine(a, b, unit=Unit.METERS)
    assert surface_distance(*a, *b) == pytest.approx(expected, rel=1e-6, abs=1e-6)


def test_point_distance_is_flat_distance_without_climb():
    p0 = TrackPoint(lat=1.0, lon=2.0, ele=100.0)
    p1 = TrackPoint(lat=1.5, lon=2.1, ele=100.0)
    assert point_distance(p0, p1) == surface_distance(1.0, 2.0, 1.5, 2.1)


def test_point_distance_with_climb_equal_to_horizontal():
    p0 = TrackPoint(lat=0.0, lon=0.0, ele=0.0)
    flat = TrackPoint(lat=0.001, lon=0.0, ele=0.0)
    d = point_distance(p0, flat)

    up = TrackPoint(lat=0.001, lon=0.0, ele=d)
    assert point_distance(p0, up) == pytest.approx(d * math.sqrt(2))
    assert point_distance(up, p0) == pytest.approx(d * math.sqrt(2))


def test_point_distance_vertical_only():
    p0 = TrackPoint(lat=45.0, lon=7.0, ele=1000.0)
    p1 = TrackPoint(lat=45.0, lon=7.0, ele=1012.5)
    assert point_distance(p0, p1) == pytest.approx(12.5)
