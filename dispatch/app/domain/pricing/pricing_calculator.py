"""
Trip cost estimation.

    subtotal = (base + distance + passenger + time)
               * category_multiplier * round_trip_multiplier * priority_multiplier
    total    = max(minimum_fare, subtotal + fuel), rounded to 2 decimals

Missing or malformed inputs fall back to the documented defaults in
PricingRates; estimation never raises.
"""

from dataclasses import dataclass, asdict
from typing import Optional

from dispatch.app.domain.pricing.rates import (
    PricingRates, pricing_rates, VEHICLE_TYPE_RATES, DEFAULT_VEHICLE_RATES
)


@dataclass(frozen=True)
class CostBreakdown:
    """Every component of a quote, so operators can reproduce it."""
    distance_km: float
    base_cost: float
    distance_cost: float
    passenger_cost: float
    estimated_hours: float
    time_cost: float
    category_multiplier: float
    round_trip_multiplier: float
    priority_multiplier: float
    subtotal: float
    fuel_cost: float
    minimum_fare_applied: bool
    total: float

    def as_dict(self) -> dict:
        return asdict(self)


def _number_or(value, default: float, allow_zero: bool = True) -> float:
    """Return value as float when it is a usable rate, otherwise the default."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if value < 0 or (value == 0 and not allow_zero):
        return default
    return float(value)


def resolve_vehicle_rates(vehicle, rates: PricingRates = pricing_rates) -> tuple[float, float, float]:
    """Vehicle base cost, per-km cost and fuel efficiency, defaulted by vehicle type."""
    type_base, type_per_km, type_efficiency = VEHICLE_TYPE_RATES.get(
        getattr(vehicle, "vehicle_type", None), DEFAULT_VEHICLE_RATES
    )
    return (
        _number_or(getattr(vehicle, "base_cost", None), type_base),
        _number_or(getattr(vehicle, "per_km_cost", None), type_per_km),
        _number_or(getattr(vehicle, "fuel_efficiency_km_per_liter", None), type_efficiency, allow_zero=False),
    )


def estimate_cost(
    trip,
    driver,
    vehicle,
    distance_km: Optional[float] = None,
    rates: PricingRates = pricing_rates,
) -> CostBreakdown:
    """
    Estimate the cost of a trip with a given driver and vehicle.

    Args:
        trip: object with passenger_count, priority and is_round_trip
        driver: object with base_rate and per_km_rate
        vehicle: object with base_cost, per_km_cost, fuel_efficiency_km_per_liter,
            vehicle_type and category
        distance_km: resolved route distance; falls back to the trip's cached
            estimate, then to rates.default_distance_km
        rates: pricing constants

    Returns:
        CostBreakdown with the rounded total
    """
    if distance_km is None:
        distance_km = getattr(trip, "estimated_distance_km", None)
    distance = _number_or(distance_km, rates.default_distance_km)

    driver_base = _number_or(getattr(driver, "base_rate", None), rates.default_driver_base_rate)
    driver_per_km = _number_or(getattr(driver, "per_km_rate", None), rates.default_driver_per_km_rate)
    vehicle_base, vehicle_per_km, fuel_efficiency = resolve_vehicle_rates(vehicle, rates)

    passenger_count = getattr(trip, "passenger_count", None)
    if isinstance(passenger_count, bool) or not isinstance(passenger_count, int) or passenger_count < 1:
        passenger_count = 1

    base_cost = driver_base + vehicle_base
    distance_cost = distance * (driver_per_km + vehicle_per_km)
    passenger_cost = passenger_count * rates.per_passenger_rate
    estimated_hours = max(rates.minimum_billable_hours, distance / rates.average_speed_kmh)
    time_cost = estimated_hours * rates.per_hour_rate

    category_multiplier = rates.category_multiplier(getattr(vehicle, "category", None))
    round_trip_multiplier = rates.round_trip_multiplier if getattr(trip, "is_round_trip", False) else 1.0
    priority_multiplier = rates.priority_multiplier(getattr(trip, "priority", None))

    subtotal = (
        (base_cost + distance_cost + passenger_cost + time_cost)
        * category_multiplier * round_trip_multiplier * priority_multiplier
    )
    fuel_cost = (distance / fuel_efficiency) * rates.fuel_price_per_liter

    raw_total = subtotal + fuel_cost
    minimum_fare_applied = raw_total < rates.minimum_fare
    total = round(max(rates.minimum_fare, raw_total), 2)

    return CostBreakdown(
        distance_km=distance,
        base_cost=round(base_cost, 2),
        distance_cost=round(distance_cost, 2),
        passenger_cost=round(passenger_cost, 2),
        estimated_hours=round(estimated_hours, 2),
        time_cost=round(time_cost, 2),
        category_multiplier=category_multiplier,
        round_trip_multiplier=round_trip_multiplier,
        priority_multiplier=priority_multiplier,
        subtotal=round(subtotal, 2),
        fuel_cost=round(fuel_cost, 2),
        minimum_fare_applied=minimum_fare_applied,
        total=total,
    )
