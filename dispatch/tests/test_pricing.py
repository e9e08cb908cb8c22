"""
Pricing calculator tests.
"""

from datetime import date
from types import SimpleNamespace

import pytest

from dispatch.app.domain.pricing.pricing_calculator import estimate_cost, resolve_vehicle_rates
from dispatch.app.domain.pricing.rates import (
    PricingRates, CATEGORY_MULTIPLIERS, PRIORITY_MULTIPLIERS, VEHICLE_TYPE_RATES, DEFAULT_VEHICLE_RATES
)
from dispatch.app.models.trip import Trip
from dispatch.app.models.trip_enums import TripCategory, TripPriority


def make_trip(passenger_count=2, return_date=None, priority=None, estimated_distance_km=None):
    return Trip(
        passenger_count=passenger_count,
        return_date=return_date,
        priority=priority,
        estimated_distance_km=estimated_distance_km,
    )


DRIVER = SimpleNamespace(base_rate=50.0, per_km_rate=2.0)
CAR = SimpleNamespace(
    vehicle_type="Car", base_cost=30.0, per_km_cost=1.5,
    fuel_efficiency_km_per_liter=15.0, category=TripCategory.CASUAL,
)


def test_happy_path_breakdown():
    breakdown = estimate_cost(make_trip(), DRIVER, CAR, distance_km=100.0)

    assert breakdown.base_cost == 80.0
    assert breakdown.distance_cost == 350.0
    assert breakdown.passenger_cost == 10.0
    assert breakdown.estimated_hours == 2.0
    assert breakdown.time_cost == 40.0
    assert breakdown.subtotal == 480.0
    assert breakdown.fuel_cost == pytest.approx(16.67)
    assert breakdown.total == 496.67
    assert breakdown.minimum_fare_applied is False


def test_long_trip_bills_driving_hours():
    breakdown = estimate_cost(make_trip(), DRIVER, CAR, distance_km=300.0)
    assert breakdown.estimated_hours == 5.0
    assert breakdown.time_cost == 100.0


def test_round_trip_multiplier():
    breakdown = estimate_cost(make_trip(return_date=date(2026, 11, 5)), DRIVER, CAR, distance_km=100.0)
    assert breakdown.round_trip_multiplier == 1.8
    assert breakdown.total == 880.67


def test_category_multiplier_follows_vehicle():
    luxury = SimpleNamespace(**{**vars(CAR), "category": TripCategory.LUXURY})
    breakdown = estimate_cost(make_trip(), DRIVER, luxury, distance_km=100.0)
    assert breakdown.category_multiplier == 2.0
    assert breakdown.total == 976.67


def test_priority_multiplier():
    breakdown = estimate_cost(make_trip(priority=TripPriority.HIGH), DRIVER, CAR, distance_km=100.0)
    assert breakdown.priority_multiplier == 1.5
    assert breakdown.total == 736.67


def test_monotonic_in_distance():
    totals = [
        estimate_cost(make_trip(), DRIVER, CAR, distance_km=km).total
        for km in (0, 1, 10, 50, 120, 121, 500, 2000)
    ]
    assert totals == sorted(totals)


def test_minimum_fare_floor():
    rates = PricingRates(per_passenger_rate=0, per_hour_rate=0)
    free_driver = SimpleNamespace(base_rate=0, per_km_rate=0)
    free_vehicle = SimpleNamespace(
        vehicle_type="Car", base_cost=0, per_km_cost=0,
        fuel_efficiency_km_per_liter=15.0, category=None,
    )

    breakdown = estimate_cost(make_trip(), free_driver, free_vehicle, distance_km=0, rates=rates)

    assert breakdown.total == 50.0
    assert breakdown.minimum_fare_applied is True


def test_missing_driver_rates_use_defaults():
    breakdown = estimate_cost(make_trip(), SimpleNamespace(base_rate=None, per_km_rate=-1), CAR, distance_km=100.0)
    assert breakdown.base_cost == 80.0
    assert breakdown.distance_cost == 350.0


def test_missing_vehicle_rates_use_type_table():
    van = SimpleNamespace(
        vehicle_type="Van", base_cost=None, per_km_cost=None,
        fuel_efficiency_km_per_liter=0, category=None,
    )
    assert resolve_vehicle_rates(van) == (50.0, 2.5, 10.0)

    unknown = SimpleNamespace(vehicle_type="Tuk Tuk")
    assert resolve_vehicle_rates(unknown) == DEFAULT_VEHICLE_RATES


def test_missing_distance_uses_cached_then_default():
    cached = estimate_cost(make_trip(estimated_distance_km=120.0), DRIVER, CAR)
    assert cached.distance_km == 120.0

    defaulted = estimate_cost(make_trip(), DRIVER, CAR)
    assert defaulted.distance_km == 50.0


def test_none_resources_never_raise():
    breakdown = estimate_cost(make_trip(passenger_count=None), None, None, distance_km=None)
    assert breakdown.total > 0


def test_rate_tables_cover_every_enum_member():
    assert set(CATEGORY_MULTIPLIERS) == set(TripCategory)
    assert set(PRIORITY_MULTIPLIERS) == set(TripPriority)
    rates = PricingRates()
    for category in TripCategory:
        assert rates.category_multiplier(category) == CATEGORY_MULTIPLIERS[category]
    assert rates.category_multiplier(None) == 1.0
    assert rates.priority_multiplier(None) == 1.0


def test_vehicle_type_table():
    assert VEHICLE_TYPE_RATES["Bus"] == (80.0, 4.0, 8.0)
    assert VEHICLE_TYPE_RATES["Luxury Car"] == (100.0, 3.5, 12.0)


def test_rates_overridable_from_environment(monkeypatch):
    monkeypatch.setenv("PRICING_MINIMUM_FARE", "75")
    monkeypatch.setenv("PRICING_FUEL_PRICE_PER_LITER", "3.1")

    rates = PricingRates()

    assert rates.minimum_fare == 75.0
    assert rates.fuel_price_per_liter == 3.1
