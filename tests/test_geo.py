from math import asin, cos, degrees, radians, sin

import pytest

from app.core.errors import ValidationError
from app.services.geo import (
    EARTH_RADIUS_M,
    bounding_box,
    clamp_radius,
    distance_meters,
    is_valid_coordinate,
    quantize,
)
from helpers import north_of


def test_distance_zero_for_same_point():
    assert distance_meters(52.52, 13.405, 52.52, 13.405) == 0.0


def test_distance_one_degree_of_latitude():
    assert distance_meters(0.0, 0.0, 1.0, 0.0) == pytest.approx(111_194.93, rel=1e-6)


def test_distance_berlin_paris():
    d = distance_meters(52.5200, 13.4050, 48.8566, 2.3522)
    assert 870_000 < d < 885_000


def test_distance_is_symmetric():
    a = distance_meters(48.2082, 16.3738, 47.0707, 15.4395)
    b = distance_meters(47.0707, 15.4395, 48.2082, 16.3738)
    assert a == pytest.approx(b)


def test_distance_precise_at_threshold_scale():
    lat, lon = north_of(52.52, 13.405, 20.0)
    assert distance_meters(52.52, 13.405, lat, lon) == pytest.approx(20.0, abs=1e-6)


def test_bounding_box_longitude_widens_with_latitude():
    box = bounding_box(60.0, 10.0, 1110.0)
    lat_delta = box.max_lat - 60.0
    lon_delta = box.max_lon - 10.0
    assert lat_delta == pytest.approx(0.01)
    assert lon_delta == pytest.approx(0.02, rel=1e-6)
    assert not box.wraps_antimeridian


def test_bounding_box_near_pole_covers_all_longitudes():
    box = bounding_box(89.999, 45.0, 1000.0)
    assert box.max_lat == 90.0
    assert (box.min_lon, box.max_lon) == (-180.0, 180.0)


def test_bounding_box_wraps_antimeridian():
    box = bounding_box(0.0, 179.999, 1000.0)
    assert box.wraps_antimeridian
    assert box.max_lon > 180.0


@pytest.mark.parametrize("lat, radius", [(80.0, 300_000.0), (60.0, 1_000_000.0), (-75.0, 500_000.0)])
def test_bounding_box_covers_circle_longitude_extent(lat, radius):
    box = bounding_box(lat, 0.0, radius)
    # easternmost point of the circle sits on the tangent meridian
    extent = degrees(asin(sin(radius / EARTH_RADIUS_M) / cos(radians(lat))))
    assert box.max_lon >= extent
    assert distance_meters(lat, 0.0, lat, box.max_lon) >= radius


def test_bounding_box_circle_over_pole_covers_all_longitudes():
    box = bounding_box(70.0, 10.0, 2_300_000.0)
    assert (box.min_lon, box.max_lon) == (-180.0, 180.0)


@pytest.mark.parametrize(
    "requested, expected",
    [
        (None, 5000),
        (0, 300),
        (120, 300),
        (250, 300),
        (349, 300),
        (350, 400),
        (1049, 1000),
        (1050, 1100),
        (12345, 12300),
    ],
)
def test_clamp_radius(requested, expected):
    assert clamp_radius(requested) == expected


def test_clamp_radius_custom_default():
    assert clamp_radius(None, default_m=2000) == 2000


def test_quantize():
    assert quantize(52.5149, 2) == 52.51
    assert quantize(13.4051, 2) == 13.41
    assert str(quantize(-0.001, 2)) == "0.0"


def test_is_valid_coordinate():
    assert is_valid_coordinate(90, 180)
    assert is_valid_coordinate(-90, -180)
    assert not is_valid_coordinate(90.0001, 0)
    assert not is_valid_coordinate(0, -180.5)


@pytest.mark.parametrize("requested", [float("inf"), float("-inf"), float("nan")])
def test_clamp_radius_rejects_non_finite(requested):
    with pytest.raises(ValidationError):
        clamp_radius(requested)
