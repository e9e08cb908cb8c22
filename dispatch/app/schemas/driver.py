"""
Driver schemas.

Request and response models for driver registration and availability.
"""

from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import List, Optional

from dispatch.app.models.resource_enums import DriverAvailability


class DriverCreate(BaseModel):
    """Schema for registering a driver."""
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=50)
    license_number: Optional[str] = Field(None, max_length=100)
    license_type: Optional[str] = Field(None, max_length=50)
    experience_years: int = Field(0, ge=0)
    availability: DriverAvailability = Field(DriverAvailability.OFFLINE, description="Initial availability")

    # Rates (defaults apply at pricing time when unset)
    base_rate: Optional[float] = Field(None, ge=0)
    per_km_rate: Optional[float] = Field(None, ge=0)


class DriverAvailabilityUpdate(BaseModel):
    availability: DriverAvailability


class DriverResponse(BaseModel):
    """Schema for driver response."""
    id: int
    name: str
    email: str
    phone: Optional[str]
    license_number: Optional[str]
    license_type: Optional[str]
    experience_years: int
    rating: float
    availability: DriverAvailability
    is_active: bool
    base_rate: Optional[float]
    per_km_rate: Optional[float]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class DriverListResponse(BaseModel):
    """Schema for paginated driver list."""
    drivers: List[DriverResponse]
    total: int
    page: int
    page_size: int
