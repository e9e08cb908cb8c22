"""
Dispatch schemas: eligibility, cost estimates, assignment and transitions.
"""

from pydantic import BaseModel, Field
from typing import List, Optional

from dispatch.app.models.trip_enums import TripStatus
from dispatch.app.schemas.driver import DriverResponse
from dispatch.app.schemas.vehicle import VehicleResponse
from dispatch.app.schemas.trip import TripResponse


class EligibleResourcesResponse(BaseModel):
    """Ranked candidates for a pending trip."""
    trip_id: str
    drivers: List[DriverResponse]
    vehicles: List[VehicleResponse]
    no_resources_available: bool


class CostEstimateRequest(BaseModel):
    driver_id: int
    vehicle_id: int


class CostBreakdownResponse(BaseModel):
    """Every component and multiplier of an estimate."""
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


class CostEstimateResponse(BaseModel):
    trip_id: str
    driver_id: int
    vehicle_id: int
    estimated_cost: float
    breakdown: CostBreakdownResponse


class AssignmentRequest(BaseModel):
    """Operator's confirmation of driver, vehicle and cost."""
    driver_id: Optional[int] = None
    vehicle_id: Optional[int] = None
    estimated_cost: Optional[float] = Field(None, ge=0)


class TransitionRequest(BaseModel):
    """Schema for a status change request."""
    target_status: TripStatus
    reason: Optional[str] = Field(None, max_length=1000, description="Required for cancellation and rejection")
    actual_cost: Optional[float] = Field(None, ge=0, description="Recorded on completion")
    customer_rating: Optional[float] = Field(None, ge=0, le=5, description="Recorded on completion")


class TransitionResponse(BaseModel):
    trip: TripResponse
    previous_status: TripStatus
    released_locks: int = 0
