"""
Trip schemas.

Schemas for trip request creation and visibility.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from typing import List, Optional
from datetime import date, time, datetime

from dispatch.app.models.trip_enums import TripStatus, TripCategory, TripPriority


class TripCreate(BaseModel):
    """Schema for submitting a new trip request."""
    title: str = Field(..., min_length=1, max_length=200, description="Short trip title")
    category: TripCategory = Field(..., description="Trip category")
    priority: Optional[TripPriority] = Field(None, description="Optional priority (affects pricing)")

    # Route
    origin: str = Field(..., min_length=1, max_length=500, description="Pickup location (free text or 'lat, lng')")
    destination: str = Field(..., min_length=1, max_length=500, description="Drop-off location")
    stops: Optional[str] = Field(None, description="Intermediate stops (free text)")

    # Schedule
    preferred_date: date
    preferred_time: time
    return_date: Optional[date] = Field(None, description="Set for round trips")
    return_time: Optional[time] = None

    # Passengers
    passenger_count: int = Field(1, ge=1, description="Number of passengers")
    passenger_names: Optional[List[str]] = None

    # Contact
    contact_name: str = Field(..., min_length=1, max_length=200)
    contact_phone: str = Field(..., min_length=1, max_length=50)
    contact_email: EmailStr

    # Preferences
    vehicle_type: Optional[str] = Field(None, max_length=100, description="Preferred vehicle type (advisory)")
    special_requirements: Optional[str] = None
    budget: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None

    @field_validator("title", "origin", "destination", "contact_name", "contact_phone")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @model_validator(mode="after")
    def return_after_departure(self):
        if self.return_date is not None and self.return_date < self.preferred_date:
            raise ValueError("return_date must not be before preferred_date")
        return self


class TripUpdate(BaseModel):
    """
    Partial edit of a pending trip request.

    Only the fields sent are changed. Required fields cannot be cleared.
    """
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    category: Optional[TripCategory] = None
    priority: Optional[TripPriority] = None

    origin: Optional[str] = Field(None, min_length=1, max_length=500)
    destination: Optional[str] = Field(None, min_length=1, max_length=500)
    stops: Optional[str] = None

    preferred_date: Optional[date] = None
    preferred_time: Optional[time] = None
    return_date: Optional[date] = None
    return_time: Optional[time] = None

    passenger_count: Optional[int] = Field(None, ge=1)
    passenger_names: Optional[List[str]] = None

    contact_name: Optional[str] = Field(None, min_length=1, max_length=200)
    contact_phone: Optional[str] = Field(None, min_length=1, max_length=50)
    contact_email: Optional[EmailStr] = None

    vehicle_type: Optional[str] = Field(None, max_length=100)
    special_requirements: Optional[str] = None
    budget: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None

    @field_validator("title", "origin", "destination", "contact_name", "contact_phone")
    @classmethod
    def not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator(
        "title", "category", "origin", "destination", "preferred_date", "preferred_time",
        "passenger_count", "contact_name", "contact_phone", "contact_email",
        mode="before"
    )
    @classmethod
    def required_not_null(cls, value):
        if value is None:
            raise ValueError("required field cannot be cleared")
        return value

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class TripResponse(BaseModel):
    """Schema for trip response."""
    trip_id: str
    title: str
    category: TripCategory
    priority: Optional[TripPriority]
    status: TripStatus
    status_reason: Optional[str]

    origin: str
    destination: str
    stops: Optional[str]
    origin_lat: Optional[float]
    origin_lng: Optional[float]
    destination_lat: Optional[float]
    destination_lng: Optional[float]
    estimated_distance_km: Optional[float]

    preferred_date: date
    preferred_time: time
    return_date: Optional[date]
    return_time: Optional[time]
    is_round_trip: bool

    passenger_count: int
    passenger_names: Optional[List[str]]
    contact_name: str
    contact_phone: str
    contact_email: str

    vehicle_type: Optional[str]
    special_requirements: Optional[str]
    budget: Optional[float]
    notes: Optional[str]

    assigned_driver_id: Optional[int]
    assigned_vehicle_id: Optional[int]
    estimated_cost: Optional[float]
    actual_cost: Optional[float]
    customer_rating: Optional[float]

    created_at: datetime
    updated_at: datetime
    confirmed_at: Optional[datetime]
    started_at: Optional[datetime]
    completed_at: Optional[datetime]
    cancelled_at: Optional[datetime]

    class Config:
        from_attributes = True


class TripListResponse(BaseModel):
    """Schema for paginated trip list."""
    trips: List[TripResponse]
    total: int
    page: int
    page_size: int
