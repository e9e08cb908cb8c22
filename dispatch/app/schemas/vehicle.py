"""
Vehicle schemas.

Request and response models for vehicle registration and availability.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional

from dispatch.app.models.resource_enums import VehicleAvailability
from dispatch.app.models.trip_enums import TripCategory


class VehicleCreate(BaseModel):
    """Schema for registering a vehicle."""
    vehicle_type: str = Field(..., min_length=1, max_length=100, description="Vehicle type (e.g., Car, Van, Mini Bus)")
    model: Optional[str] = Field(None, max_length=100)
    license_plate: Optional[str] = Field(None, max_length=50, description="Unique registration plate")
    seating_capacity: int = Field(..., ge=1)
    category: Optional[TripCategory] = None
    availability: VehicleAvailability = VehicleAvailability.AVAILABLE

    # Rates (per-type defaults apply at pricing time when unset)
    base_cost: Optional[float] = Field(None, ge=0)
    per_km_cost: Optional[float] = Field(None, ge=0)
    fuel_efficiency_km_per_liter: Optional[float] = Field(None, gt=0)
    fuel_type: Optional[str] = Field(None, max_length=50)


class VehicleAvailabilityUpdate(BaseModel):
    availability: VehicleAvailability


class VehicleResponse(BaseModel):
    """Schema for vehicle response."""
    id: int
    vehicle_type: str
    model: Optional[str]
    license_plate: Optional[str]
    seating_capacity: int
    category: Optional[TripCategory]
    availability: VehicleAvailability
    is_active: bool
    base_cost: Optional[float]
    per_km_cost: Optional[float]
    fuel_efficiency_km_per_liter: Optional[float]
    fuel_type: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class VehicleListResponse(BaseModel):
    """Schema for paginated vehicle list."""
    vehicles: List[VehicleResponse]
    total: int
    page: int
    page_size: int
