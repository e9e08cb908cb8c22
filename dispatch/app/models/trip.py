"""
Trip database model.

Trips are requested by customers and progress through the dispatch lifecycle.
"""

import uuid
from sqlalchemy import Column, Integer, String, Float, Text, Date, Time, ForeignKey, DateTime, Enum, JSON
from sqlalchemy.sql import func
from dispatch.app.db.session import Base
from dispatch.app.models.trip_enums import TripStatus, TripCategory, TripPriority


def generate_trip_id() -> str:
    return str(uuid.uuid4())


class Trip(Base):
    """
    Trip model.

    Assignment columns stay NULL until the trip is confirmed; status is the
    single source of truth for the lifecycle.
    """
    __tablename__ = "trips"

    trip_id = Column(String(36), primary_key=True, default=generate_trip_id)

    # Request details
    title = Column(String(200), nullable=False)
    category = Column(Enum(TripCategory), nullable=False, index=True)
    priority = Column(Enum(TripPriority), nullable=True)

    # Route
    origin = Column(String(500), nullable=False)
    destination = Column(String(500), nullable=False)
    stops = Column(Text, nullable=True)

    # Resolved route (cached once computed)
    origin_lat = Column(Float, nullable=True)
    origin_lng = Column(Float, nullable=True)
    destination_lat = Column(Float, nullable=True)
    destination_lng = Column(Float, nullable=True)
    estimated_distance_km = Column(Float, nullable=True)

    # Schedule
    preferred_date = Column(Date, nullable=False, index=True)
    preferred_time = Column(Time, nullable=False)
    return_date = Column(Date, nullable=True)
    return_time = Column(Time, nullable=True)

    # Party
    passenger_count = Column(Integer, default=1, nullable=False)
    passenger_names = Column(JSON, nullable=True)

    # Contact
    contact_name = Column(String(200), nullable=False)
    contact_phone = Column(String(50), nullable=False)
    contact_email = Column(String(255), nullable=False)

    # Preferences
    vehicle_type = Column(String(100), nullable=True)  # Advisory hint only
    special_requirements = Column(Text, nullable=True)
    budget = Column(Float, nullable=True)
    notes = Column(Text, nullable=True)

    # Assignment (NULL until confirmed)
    assigned_driver_id = Column(Integer, ForeignKey('drivers.id'), nullable=True, index=True)
    assigned_vehicle_id = Column(Integer, ForeignKey('vehicles.id'), nullable=True, index=True)
    estimated_cost = Column(Float, nullable=True)

    # Status
    status = Column(Enum(TripStatus), default=TripStatus.PENDING, nullable=False, index=True)
    status_reason = Column(Text, nullable=True)

    # Completion
    actual_cost = Column(Float, nullable=True)
    customer_rating = Column(Float, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    @property
    def is_round_trip(self) -> bool:
        return self.return_date is not None

    def __repr__(self):
        return f"<Trip(trip_id={self.trip_id}, {self.origin!r} -> {self.destination!r}, status='{self.status.value}')>"
