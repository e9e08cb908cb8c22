"""
Audit Log Database Model.

Tracks dispatch decisions (assignments, status changes, availability flips)
so operators can reconstruct why a trip or resource ended up where it is.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from dispatch.app.db.session import Base


class AuditLog(Base):
    """
    Audit log model for dispatch events.

    Events logged:
    - TRIP_CREATED / TRIP_UPDATED / TRIP_ASSIGNED
    - TRIP_STATUS_CHANGED (with reason for cancellations and rejections)
    - DRIVER_AVAILABILITY_CHANGED / VEHICLE_AVAILABILITY_CHANGED
    """
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Who performed the action (None for system actions)
    actor = Column(String(100), nullable=True)

    # What action was performed
    action = Column(String(100), nullable=False, index=True)

    # What the action was performed on
    target_type = Column(String(50), nullable=True, index=True)  # "trip", "driver", "vehicle"
    target_id = Column(String(36), nullable=True, index=True)

    # Additional context (JSON for flexibility)
    meta_data = Column(JSON, nullable=True)

    # Timestamp
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}', target={self.target_type}:{self.target_id})>"
