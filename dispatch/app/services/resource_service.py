"""
Driver and vehicle registry.

Registration, lookup, manual availability changes and deactivation. The
on-trip / Booked states belong to trip binding: they cannot be set by hand,
and a bound resource cannot be flipped back to available while its lock is
active.
"""

import logging
from typing import List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from sqlalchemy.exc import IntegrityError

from dispatch.app.core.exceptions import (
    ResourceNotFoundError, DuplicateResourceError, AvailabilityChangeError
)
from dispatch.app.models.driver import Driver
from dispatch.app.models.vehicle import Vehicle
from dispatch.app.models.resource_enums import DriverAvailability, VehicleAvailability, ResourceType
from dispatch.app.schemas.driver import DriverCreate
from dispatch.app.schemas.vehicle import VehicleCreate
from dispatch.app.services.audit import log_event, AuditAction
from dispatch.app.services.resource_locking import get_active_lock

logger = logging.getLogger("dispatch.resources")


async def create_driver(db: AsyncSession, payload: DriverCreate) -> Driver:
    if payload.availability == DriverAvailability.ON_TRIP:
        raise AvailabilityChangeError("Driver", None, "on-trip is set by trip assignment")

    driver = Driver(**payload.model_dump())
    db.add(driver)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise DuplicateResourceError("Driver", "email", payload.email)

    await log_event(
        db=db,
        action=AuditAction.DRIVER_CREATED,
        target_type="driver",
        target_id=driver.id,
        metadata={"name": driver.name, "availability": driver.availability.value}
    )
    await db.commit()
    await db.refresh(driver)

    logger.info("Driver registered", extra={"driver_id": driver.id})
    return driver


async def get_driver(db: AsyncSession, driver_id: int) -> Driver:
    result = await db.execute(select(Driver).where(Driver.id == driver_id))
    driver = result.scalar_one_or_none()
    if not driver:
        raise ResourceNotFoundError("Driver", driver_id)
    return driver


async def list_drivers(
    db: AsyncSession,
    availability: Optional[DriverAvailability] = None,
    is_active: Optional[bool] = None,
    min_experience: Optional[int] = None,
    search: Optional[str] = None,
    page: int = 1,
    page_size: int = 50
) -> Tuple[List[Driver], int]:
    """
    Return one page of drivers, best rated first, and the total matching count.

    search matches name, email or license number, case-insensitively.
    """
    filters = []
    if availability is not None:
        filters.append(Driver.availability == availability)
    if is_active is not None:
        filters.append(Driver.is_active == is_active)
    if min_experience is not None:
        filters.append(Driver.experience_years >= min_experience)
    if search and search.strip():
        pattern = f"%{search.strip().lower()}%"
        filters.append(or_(
            func.lower(Driver.name).like(pattern),
            func.lower(Driver.email).like(pattern),
            func.lower(Driver.license_number).like(pattern)
        ))

    total = (await db.execute(select(func.count(Driver.id)).where(*filters))).scalar() or 0

    result = await db.execute(
        select(Driver)
        .where(*filters)
        .order_by(Driver.rating.desc(), Driver.experience_years.desc(), Driver.id)
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return list(result.scalars().all()), total


async def update_driver_availability(
    db: AsyncSession,
    driver_id: int,
    availability: DriverAvailability
) -> Driver:
    """
    Manually change a driver's availability.

    Raises:
        ResourceNotFoundError: unknown driver
        AvailabilityChangeError: the change conflicts with deactivation or an active binding
    """
    driver = await get_driver(db, driver_id)

    if not driver.is_active and availability == DriverAvailability.AVAILABLE:
        raise AvailabilityChangeError("Driver", driver_id, "driver is deactivated")

    lock = await get_active_lock(db, ResourceType.DRIVER, driver_id)
    if availability == DriverAvailability.ON_TRIP and lock is None:
        raise AvailabilityChangeError("Driver", driver_id, "on-trip is set by trip assignment")
    if availability == DriverAvailability.AVAILABLE and lock is not None:
        raise AvailabilityChangeError("Driver", driver_id, f"bound to active trip {lock.trip_id}")

    previous = driver.availability
    driver.availability = availability

    await log_event(
        db=db,
        action=AuditAction.DRIVER_AVAILABILITY_CHANGED,
        target_type="driver",
        target_id=driver_id,
        metadata={"from": previous.value, "to": availability.value}
    )
    await db.commit()
    await db.refresh(driver)

    logger.info(
        "Driver availability changed",
        extra={"driver_id": driver_id, "from": previous.value, "to": availability.value}
    )
    return driver


async def deactivate_driver(db: AsyncSession, driver_id: int) -> Driver:
    """Drivers are never deleted; deactivation takes them out of every pool."""
    driver = await get_driver(db, driver_id)

    lock = await get_active_lock(db, ResourceType.DRIVER, driver_id)
    if lock is not None:
        raise AvailabilityChangeError("Driver", driver_id, f"bound to active trip {lock.trip_id}")

    driver.is_active = False
    driver.availability = DriverAvailability.OFFLINE

    await log_event(db=db, action=AuditAction.DRIVER_DEACTIVATED, target_type="driver", target_id=driver_id)
    await db.commit()
    await db.refresh(driver)
    return driver


async def create_vehicle(db: AsyncSession, payload: VehicleCreate) -> Vehicle:
    if payload.availability == VehicleAvailability.BOOKED:
        raise AvailabilityChangeError("Vehicle", None, "Booked is set by trip assignment")

    vehicle = Vehicle(**payload.model_dump())
    db.add(vehicle)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise DuplicateResourceError("Vehicle", "license_plate", payload.license_plate)

    await log_event(
        db=db,
        action=AuditAction.VEHICLE_CREATED,
        target_type="vehicle",
        target_id=vehicle.id,
        metadata={"vehicle_type": vehicle.vehicle_type, "seating_capacity": vehicle.seating_capacity}
    )
    await db.commit()
    await db.refresh(vehicle)

    logger.info("Vehicle registered", extra={"vehicle_id": vehicle.id})
    return vehicle


async def get_vehicle(db: AsyncSession, vehicle_id: int) -> Vehicle:
    result = await db.execute(select(Vehicle).where(Vehicle.id == vehicle_id))
    vehicle = result.scalar_one_or_none()
    if not vehicle:
        raise ResourceNotFoundError("Vehicle", vehicle_id)
    return vehicle


async def list_vehicles(
    db: AsyncSession,
    availability: Optional[VehicleAvailability] = None,
    vehicle_type: Optional[str] = None,
    min_seating_capacity: Optional[int] = None,
    is_active: Optional[bool] = None,
    page: int = 1,
    page_size: int = 50
) -> Tuple[List[Vehicle], int]:
    """Return one page of vehicles, newest first, and the total matching count."""
    filters = []
    if availability is not None:
        filters.append(Vehicle.availability == availability)
    if vehicle_type:
        filters.append(func.lower(Vehicle.vehicle_type) == vehicle_type.strip().lower())
    if min_seating_capacity is not None:
        filters.append(Vehicle.seating_capacity >= min_seating_capacity)
    if is_active is not None:
        filters.append(Vehicle.is_active == is_active)

    total = (await db.execute(select(func.count(Vehicle.id)).where(*filters))).scalar() or 0

    result = await db.execute(
        select(Vehicle)
        .where(*filters)
        .order_by(Vehicle.created_at.desc(), Vehicle.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return list(result.scalars().all()), total


async def update_vehicle_availability(
    db: AsyncSession,
    vehicle_id: int,
    availability: VehicleAvailability
) -> Vehicle:
    """
    Manually change a vehicle's availability (e.g. send it to maintenance).

    Raises:
        ResourceNotFoundError: unknown vehicle
        AvailabilityChangeError: the change conflicts with deactivation or an active binding
    """
    vehicle = await get_vehicle(db, vehicle_id)

    if not vehicle.is_active and availability == VehicleAvailability.AVAILABLE:
        raise AvailabilityChangeError("Vehicle", vehicle_id, "vehicle is deactivated")

    lock = await get_active_lock(db, ResourceType.VEHICLE, vehicle_id)
    if availability == VehicleAvailability.BOOKED and lock is None:
        raise AvailabilityChangeError("Vehicle", vehicle_id, "Booked is set by trip assignment")
    if availability == VehicleAvailability.AVAILABLE and lock is not None:
        raise AvailabilityChangeError("Vehicle", vehicle_id, f"bound to active trip {lock.trip_id}")

    previous = vehicle.availability
    vehicle.availability = availability

    await log_event(
        db=db,
        action=AuditAction.VEHICLE_AVAILABILITY_CHANGED,
        target_type="vehicle",
        target_id=vehicle_id,
        metadata={"from": previous.value, "to": availability.value}
    )
    await db.commit()
    await db.refresh(vehicle)

    logger.info(
        "Vehicle availability changed",
        extra={"vehicle_id": vehicle_id, "from": previous.value, "to": availability.value}
    )
    return vehicle


async def deactivate_vehicle(db: AsyncSession, vehicle_id: int) -> Vehicle:
    vehicle = await get_vehicle(db, vehicle_id)

    lock = await get_active_lock(db, ResourceType.VEHICLE, vehicle_id)
    if lock is not None:
        raise AvailabilityChangeError("Vehicle", vehicle_id, f"bound to active trip {lock.trip_id}")

    vehicle.is_active = False
    vehicle.availability = VehicleAvailability.UNAVAILABLE

    await log_event(db=db, action=AuditAction.VEHICLE_DEACTIVATED, target_type="vehicle", target_id=vehicle_id)
    await db.commit()
    await db.refresh(vehicle)
    return vehicle
