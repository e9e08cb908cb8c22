"""
Audit logging service for dispatch decisions.

Entries are added to the caller's session and committed with the change they
describe, so a rolled back assignment leaves no audit trail behind.
"""

from typing import Optional, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from dispatch.app.models.audit_log import AuditLog


# Audit event constants
class AuditAction:
    """Standardized audit action constants."""
    TRIP_CREATED = "TRIP_CREATED"
    TRIP_UPDATED = "TRIP_UPDATED"
    TRIP_ASSIGNED = "TRIP_ASSIGNED"
    TRIP_STATUS_CHANGED = "TRIP_STATUS_CHANGED"

    DRIVER_CREATED = "DRIVER_CREATED"
    DRIVER_AVAILABILITY_CHANGED = "DRIVER_AVAILABILITY_CHANGED"
    DRIVER_DEACTIVATED = "DRIVER_DEACTIVATED"

    VEHICLE_CREATED = "VEHICLE_CREATED"
    VEHICLE_AVAILABILITY_CHANGED = "VEHICLE_AVAILABILITY_CHANGED"
    VEHICLE_DEACTIVATED = "VEHICLE_DEACTIVATED"


async def log_event(
    db: AsyncSession,
    action: str,
    target_type: Optional[str] = None,
    target_id: Optional[Any] = None,
    actor: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None
) -> AuditLog:
    """
    Add a dispatch event to the audit log.

    Args:
        db: Database session (the caller commits)
        action: Action being performed (use AuditAction constants)
        target_type: "trip", "driver" or "vehicle"
        target_id: Identifier of the target, stored as a string
        actor: Who performed the action, None for system actions
        metadata: Additional context as JSON

    Returns:
        Pending AuditLog instance
    """
    audit_log = AuditLog(
        actor=actor,
        action=action,
        target_type=target_type,
        target_id=str(target_id) if target_id is not None else None,
        meta_data=metadata
    )

    db.add(audit_log)
    return audit_log


async def get_audit_trail(
    db: AsyncSession,
    target_type: Optional[str] = None,
    target_id: Optional[Any] = None,
    action: Optional[str] = None,
    limit: int = 100
) -> list[AuditLog]:
    """
    Retrieve audit trail with optional filtering, most recent first.
    """
    query = select(AuditLog).order_by(desc(AuditLog.timestamp), desc(AuditLog.id))

    if target_type:
        query = query.where(AuditLog.target_type == target_type)

    if target_id is not None:
        query = query.where(AuditLog.target_id == str(target_id))

    if action:
        query = query.where(AuditLog.action == action)

    query = query.limit(limit)

    result = await db.execute(query)
    return result.scalars().all()
