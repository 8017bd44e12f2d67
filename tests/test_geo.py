from __future__ import annotations

import pytest

from app.models import Coordinate
from app.services.geo import (
    directions_url,
    format_distance,
    haversine_km,
    minutes_from_km,
    search_radius_km,
    search_radius_m,
)

PAIRS = [
    (Coordinate(lat=0, lon=0), Coordinate(lat=0, lon=1)),
    (Coordinate(lat=12.9716, lon=77.5946), Coordinate(lat=28.6139, lon=77.2090)),
    (Coordinate(lat=-33.8688, lon=151.2093), Coordinate(lat=51.5074, lon=-0.1278)),
    (Coordinate(lat=89.9, lon=-179.9), Coordinate(lat=-89.9, lon=179.9)),
]


@pytest.mark.parametrize("a,b", PAIRS)
def test_haversine_is_symmetric(a, b):
    assert haversine_km(a, b) == pytest.approx(haversine_km(b, a), rel=1e-12)


def test_haversine_zero_for_same_point():
    p = Coordinate(lat=40.7128, lon=-74.0060)
    assert haversine_km(p, p) == 0


def test_one_degree_of_longitude_at_equator():
    d = haversine_km(Coordinate(lat=0, lon=0), Coordinate(lat=0, lon=1))
    assert d == pytest.approx(111.19, abs=0.5)


def test_minutes_never_below_one():
    assert minutes_from_km(0.001, 30) == 1
    assert minutes_from_km(0.0, 30) == 1


def test_minutes_rounds_to_nearest():
    assert minutes_from_km(5.0, 30) == 10
    assert minutes_from_km(2.6, 30) == 5


def test_radius_for_default_travel_time():
    assert search_radius_km(10, 30) == pytest.approx(5.0)
    assert search_radius_m(10, 30) == 5000


def test_small_radius_is_floored():
    assert search_radius_km(1, 30) == pytest.approx(0.5)
    assert search_radius_m(1, 30) == 500
    assert search_radius_m(0.5, 30) == 500
    assert search_radius_m(0.5, 30, min_radius_m=100) == 250


def test_invalid_speed_rejected():
    with pytest.raises(ValueError):
        minutes_from_km(1.0, 0)
    with pytest.raises(ValueError):
        search_radius_km(10, -5)


def test_negative_minutes_rejected():
    with pytest.raises(ValueError):
        search_radius_km(-1, 30)
    with pytest.raises(ValueError):
        search_radius_m(-1, 30)


def test_format_distance():
    assert format_distance(5.23, 30) == "5.2 km (~10 min)"
    assert format_distance(0.02, 30) == "0.0 km (~1 min)"


def test_directions_url_with_and_without_origin():
    dest = Coordinate(lat=12.5, lon=77.25)
    url = directions_url(dest, Coordinate(lat=12.0, lon=77.0))
    assert url.startswith("https://www.openstreetmap.org/directions?")
    assert "from=12.000000%2C77.000000" in url
    assert "to=12.500000%2C77.250000" in url

    assert "from=&" in directions_url(dest)
