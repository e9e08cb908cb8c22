"""
Resource binding service.

Binds a driver and a vehicle to a trip and releases them again. Binding is
a guarded update (flip availability only if it is still "available") plus a
ResourceLock row whose partial unique index rejects a second active lock.
Either guard failing rolls back the whole transaction.
"""

import logging
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from dispatch.app.core.exceptions import ResourceUnavailableError
from dispatch.app.models.driver import Driver
from dispatch.app.models.vehicle import Vehicle
from dispatch.app.models.resource_lock import ResourceLock
from dispatch.app.models.resource_enums import DriverAvailability, VehicleAvailability, ResourceType

logger = logging.getLogger("dispatch.binding")


async def claim_driver(db: AsyncSession, driver_id: int) -> bool:
    """Flip an available, active driver to on-trip. False if someone got there first."""
    result = await db.execute(
        update(Driver)
        .where(
            Driver.id == driver_id,
            Driver.is_active == True,
            Driver.availability == DriverAvailability.AVAILABLE
        )
        .values(availability=DriverAvailability.ON_TRIP)
    )
    return result.rowcount == 1


async def claim_vehicle(db: AsyncSession, vehicle_id: int) -> bool:
    """Flip an available, active vehicle to booked. False if someone got there first."""
    result = await db.execute(
        update(Vehicle)
        .where(
            Vehicle.id == vehicle_id,
            Vehicle.is_active == True,
            Vehicle.availability == VehicleAvailability.AVAILABLE
        )
        .values(availability=VehicleAvailability.BOOKED)
    )
    return result.rowcount == 1


async def create_resource_lock(
    db: AsyncSession,
    resource_type: ResourceType,
    resource_id: int,
    trip_id: str
) -> ResourceLock:
    """
    Create a resource lock for a trip.

    Raises:
        IntegrityError: If the resource already has an active lock
    """
    lock = ResourceLock(
        resource_type=resource_type,
        resource_id=resource_id,
        trip_id=trip_id,
        locked_at=datetime.utcnow(),
        released_at=None
    )

    db.add(lock)
    await db.flush()  # Will raise IntegrityError if unique index violated

    return lock


async def bind_resources(
    db: AsyncSession,
    trip_id: str,
    driver_id: int,
    vehicle_id: int
) -> None:
    """
    Bind a driver and a vehicle to a trip within the caller's transaction.

    Availability is re-validated here, at bind time, not when candidates
    were listed.

    Raises:
        ResourceUnavailableError: the driver or vehicle was claimed concurrently
            (the transaction has been rolled back)
    """
    if not await claim_driver(db, driver_id):
        await db.rollback()
        logger.warning("Driver claim lost", extra={"trip_id": trip_id, "driver_id": driver_id})
        raise ResourceUnavailableError("Driver", driver_id)

    if not await claim_vehicle(db, vehicle_id):
        await db.rollback()
        logger.warning("Vehicle claim lost", extra={"trip_id": trip_id, "vehicle_id": vehicle_id})
        raise ResourceUnavailableError("Vehicle", vehicle_id)

    for resource_type, resource_id in ((ResourceType.DRIVER, driver_id), (ResourceType.VEHICLE, vehicle_id)):
        try:
            await create_resource_lock(db, resource_type, resource_id, trip_id)
        except IntegrityError:
            await db.rollback()
            logger.warning(
                "Resource already locked",
                extra={"trip_id": trip_id, "resource_type": resource_type.value, "resource_id": resource_id}
            )
            raise ResourceUnavailableError(resource_type.value.capitalize(), resource_id)


async def get_active_lock(
    db: AsyncSession,
    resource_type: ResourceType,
    resource_id: int
) -> ResourceLock | None:
    """Return the active lock on a resource, if any."""
    result = await db.execute(
        select(ResourceLock).where(
            ResourceLock.resource_type == resource_type,
            ResourceLock.resource_id == resource_id,
            ResourceLock.released_at.is_(None)
        )
    )
    return result.scalar_one_or_none()


async def release_resources(
    db: AsyncSession,
    trip_id: str,
    driver_id: int | None,
    vehicle_id: int | None
) -> int:
    """
    Release a trip's locks and return its driver and vehicle to the pool.

    Only resources still marked as bound are flipped back, so a driver who
    went on leave in the meantime stays on leave.

    Returns:
        Number of locks released
    """
    if driver_id is not None:
        await db.execute(
            update(Driver)
            .where(Driver.id == driver_id, Driver.availability == DriverAvailability.ON_TRIP)
            .values(availability=DriverAvailability.AVAILABLE)
        )
    if vehicle_id is not None:
        await db.execute(
            update(Vehicle)
            .where(Vehicle.id == vehicle_id, Vehicle.availability == VehicleAvailability.BOOKED)
            .values(availability=VehicleAvailability.AVAILABLE)
        )

    result = await db.execute(
        update(ResourceLock)
        .where(ResourceLock.trip_id == trip_id, ResourceLock.released_at.is_(None))
        .values(released_at=datetime.utcnow())
    )
    return result.rowcount
