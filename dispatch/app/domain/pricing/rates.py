"""
Pricing rate tables.

Every rate and multiplier used by the pricing calculator is a named value
here. PricingRates reads overrides from PRICING_* environment variables so
operators can reproduce and adjust quotes without code changes.
"""

from typing import Dict, Tuple

from pydantic import Field
from pydantic_settings import BaseSettings

from dispatch.app.models.trip_enums import TripCategory, TripPriority


# Multiplier by vehicle category (Casual is the baseline)
CATEGORY_MULTIPLIERS: Dict[TripCategory, float] = {
    TripCategory.LUXURY: 2.0,
    TripCategory.SAFARI: 1.5,
    TripCategory.ADVENTURE: 1.4,
    TripCategory.TOUR: 1.3,
    TripCategory.CASUAL: 1.0,
}

PRIORITY_MULTIPLIERS: Dict[TripPriority, float] = {
    TripPriority.HIGH: 1.5,
    TripPriority.MEDIUM: 1.2,
    TripPriority.LOW: 1.0,
}

# Vehicle rates used when the vehicle record has none:
# vehicle_type -> (base_cost, per_km_cost, fuel_efficiency_km_per_liter)
VEHICLE_TYPE_RATES: Dict[str, Tuple[float, float, float]] = {
    "Car": (30.0, 1.5, 15.0),
    "SUV": (40.0, 2.0, 12.0),
    "Van": (50.0, 2.5, 10.0),
    "Bus": (80.0, 4.0, 8.0),
    "Luxury Car": (100.0, 3.5, 12.0),
    "Mini Bus": (60.0, 3.0, 9.0),
    "Truck": (70.0, 3.5, 7.0),
}
DEFAULT_VEHICLE_RATES: Tuple[float, float, float] = (30.0, 2.0, 12.0)


class PricingRates(BaseSettings):
    """Named constants of the pricing formula."""

    # Driver defaults
    default_driver_base_rate: float = Field(50.0, ge=0)
    default_driver_per_km_rate: float = Field(2.0, ge=0)

    # Per-trip components
    per_passenger_rate: float = Field(5.0, ge=0)
    per_hour_rate: float = Field(20.0, ge=0)
    average_speed_kmh: float = Field(60.0, gt=0)
    minimum_billable_hours: float = Field(2.0, ge=0)

    # Multipliers
    round_trip_multiplier: float = Field(1.8, gt=0)
    default_category_multiplier: float = Field(1.0, gt=0)
    default_priority_multiplier: float = Field(1.0, gt=0)
    category_multipliers: Dict[TripCategory, float] = Field(default_factory=lambda: dict(CATEGORY_MULTIPLIERS))
    priority_multipliers: Dict[TripPriority, float] = Field(default_factory=lambda: dict(PRIORITY_MULTIPLIERS))

    # Fuel
    fuel_price_per_liter: float = Field(2.5, ge=0)

    # Floors and fallbacks
    minimum_fare: float = Field(50.0, ge=0)
    default_distance_km: float = Field(50.0, ge=0)

    class Config:
        env_prefix = "PRICING_"
        case_sensitive = False

    def category_multiplier(self, category) -> float:
        if category is None:
            return self.default_category_multiplier
        return self.category_multipliers.get(category, self.default_category_multiplier)

    def priority_multiplier(self, priority) -> float:
        if priority is None:
            return self.default_priority_multiplier
        return self.priority_multipliers.get(priority, self.default_priority_multiplier)


pricing_rates = PricingRates()
