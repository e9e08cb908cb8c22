"""
Resource Lock database model.

Ensures a driver or vehicle is held by at most one active trip through a
DB-level partial unique index.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Enum, Index, text
from sqlalchemy.sql import func
from dispatch.app.db.session import Base
from dispatch.app.models.resource_enums import ResourceType


class ResourceLock(Base):
    """
    Resource Lock model.

    A lock is taken when a trip is confirmed and released when the trip
    completes or is cancelled.
    """
    __tablename__ = "resource_locks"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # References
    resource_type = Column(Enum(ResourceType), nullable=False)
    resource_id = Column(Integer, nullable=False, index=True)
    trip_id = Column(String(36), ForeignKey('trips.trip_id'), nullable=False, index=True)

    # Lock lifecycle
    locked_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    released_at = Column(DateTime(timezone=True), nullable=True)

    # Unique constraint: only one active lock per resource
    __table_args__ = (
        Index(
            'ix_resource_locks_active',
            'resource_type', 'resource_id',
            unique=True,
            postgresql_where=text('released_at IS NULL'),
            sqlite_where=text('released_at IS NULL'),
        ),
    )

    def __repr__(self):
        return (
            f"<ResourceLock({self.resource_type.value} {self.resource_id}, "
            f"trip_id={self.trip_id}, active={self.released_at is None})>"
        )
