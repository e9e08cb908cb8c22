"""
Driver database model.

Drivers are onboarded by operators and are never deleted, only deactivated.
"""

from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, Enum
from sqlalchemy.sql import func
from dispatch.app.db.session import Base
from dispatch.app.models.resource_enums import DriverAvailability


class Driver(Base):
    """
    Driver model.

    A candidate resource for trip assignment, carrying the rates used
    by the pricing calculator.
    """
    __tablename__ = "drivers"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Identity
    name = Column(String(200), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(50), nullable=True)

    # Qualification
    license_number = Column(String(100), nullable=True)
    license_type = Column(String(50), nullable=True)
    experience_years = Column(Integer, default=0, nullable=False)
    rating = Column(Float, default=0.0, nullable=False)  # 0-5, aggregated from completed trips

    # Availability
    availability = Column(Enum(DriverAvailability), default=DriverAvailability.OFFLINE, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    # Rates
    base_rate = Column(Float, nullable=True)
    per_km_rate = Column(Float, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Driver(id={self.id}, name='{self.name}', availability='{self.availability.value}')>"
