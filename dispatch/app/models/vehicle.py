"""
Vehicle database model.

Vehicles carry seating capacity, a category and the rates used for pricing.
"""

from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, Enum
from sqlalchemy.sql import func
from dispatch.app.db.session import Base
from dispatch.app.models.trip_enums import TripCategory
from dispatch.app.models.resource_enums import VehicleAvailability


class Vehicle(Base):
    """
    Vehicle model.

    Seating capacity is the hard eligibility constraint; category drives
    the pricing multiplier and advisory matching.
    """
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Vehicle identification
    vehicle_type = Column(String(100), nullable=False)  # e.g., "Car", "Van", "Mini Bus"
    model = Column(String(100), nullable=True)
    license_plate = Column(String(50), unique=True, nullable=True, index=True)

    # Capacity and classification
    seating_capacity = Column(Integer, nullable=False)
    category = Column(Enum(TripCategory), nullable=True, index=True)

    # Availability
    availability = Column(Enum(VehicleAvailability), default=VehicleAvailability.AVAILABLE, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    # Rates
    base_cost = Column(Float, nullable=True)
    per_km_cost = Column(Float, nullable=True)
    fuel_efficiency_km_per_liter = Column(Float, nullable=True)
    fuel_type = Column(String(50), nullable=True)  # e.g., "petrol", "diesel", "hybrid", "electric"

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Vehicle(id={self.id}, type='{self.vehicle_type}', seats={self.seating_capacity})>"
