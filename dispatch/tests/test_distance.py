"""
Haversine distance tests.
"""

import pytest
from dispatch.app.domain.geo.distance import Coordinate, distance_km, haversine_distance

COLOMBO = Coordinate(6.9271, 79.8612)
KANDY = Coordinate(7.2906, 80.6337)
GALLE = Coordinate(6.0535, 80.2210)


def test_distance_is_symmetric():
    assert distance_km(COLOMBO, KANDY) == distance_km(KANDY, COLOMBO)
    assert distance_km(GALLE, KANDY) == distance_km(KANDY, GALLE)


def test_distance_to_self_is_zero():
    assert distance_km(COLOMBO, COLOMBO) == 0
    assert distance_km(Coordinate(-33.8688, 151.2093), Coordinate(-33.8688, 151.2093)) == 0


def test_colombo_to_kandy():
    assert 93.0 < distance_km(COLOMBO, KANDY) < 96.0


def test_distance_rounded_to_one_decimal():
    raw = haversine_distance(COLOMBO.lat, COLOMBO.lng, GALLE.lat, GALLE.lng)
    assert distance_km(COLOMBO, GALLE) == round(raw, 1)


def test_quarter_meridian():
    # Equator to pole along a meridian is a quarter of the circumference
    assert distance_km(Coordinate(0, 0), Coordinate(90, 0)) == pytest.approx(10007.5, abs=0.1)
