"""
Eligible resource matching for pending trips.

Hard constraints: active, available, not held by an active lock, and (for
vehicles) enough seats. Category and vehicle type only affect ordering;
operators may pick any eligible vehicle.
"""

from dataclasses import dataclass, field
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dispatch.app.models.driver import Driver
from dispatch.app.models.vehicle import Vehicle
from dispatch.app.models.resource_lock import ResourceLock
from dispatch.app.models.resource_enums import DriverAvailability, VehicleAvailability, ResourceType


@dataclass
class EligibleResources:
    drivers: List[Driver] = field(default_factory=list)
    vehicles: List[Vehicle] = field(default_factory=list)

    @property
    def no_resources_available(self) -> bool:
        """True when either pool is empty, meaning no assignment can be made."""
        return not self.drivers or not self.vehicles


def _active_lock_ids(resource_type: ResourceType):
    return select(ResourceLock.resource_id).where(
        ResourceLock.resource_type == resource_type,
        ResourceLock.released_at.is_(None)
    )


def rank_drivers(drivers: List[Driver]) -> List[Driver]:
    """Highest rating first, then most experienced."""
    return sorted(
        drivers,
        key=lambda d: (-(d.rating or 0.0), -(d.experience_years or 0), d.id)
    )


def rank_vehicles(vehicles: List[Vehicle], category=None, vehicle_type=None) -> List[Vehicle]:
    """Smallest sufficient vehicle first, then category match, then vehicle type match."""
    wanted_type = vehicle_type.strip().lower() if vehicle_type else None

    def key(v: Vehicle):
        category_miss = 0 if category is not None and v.category == category else 1
        type_miss = 0 if wanted_type and (v.vehicle_type or "").lower() == wanted_type else 1
        return (v.seating_capacity, category_miss, type_miss, v.id)

    return sorted(vehicles, key=key)


async def find_eligible(db: AsyncSession, trip) -> EligibleResources:
    """
    List drivers and vehicles that can be assigned to the trip.

    Returns empty lists rather than raising when nothing qualifies.
    """
    passenger_count = max(trip.passenger_count or 1, 1)

    drivers_result = await db.execute(
        select(Driver)
        .where(
            Driver.is_active == True,
            Driver.availability == DriverAvailability.AVAILABLE,
            Driver.id.not_in(_active_lock_ids(ResourceType.DRIVER))
        )
        .execution_options(populate_existing=True)
    )
    vehicles_result = await db.execute(
        select(Vehicle)
        .where(
            Vehicle.is_active == True,
            Vehicle.availability == VehicleAvailability.AVAILABLE,
            Vehicle.seating_capacity >= passenger_count,
            Vehicle.id.not_in(_active_lock_ids(ResourceType.VEHICLE))
        )
        .execution_options(populate_existing=True)
    )

    return EligibleResources(
        drivers=rank_drivers(list(drivers_result.scalars().all())),
        vehicles=rank_vehicles(
            list(vehicles_result.scalars().all()),
            category=trip.category,
            vehicle_type=trip.vehicle_type
        ),
    )
