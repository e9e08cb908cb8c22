"""
Trip dispatch service.

Caller-facing operations over trips: creation and visibility, eligible
resource listing, cost estimation, assignment confirmation and lifecycle
transitions. Each operation owns its transaction.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Tuple, List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, update

from dispatch.app.core.exceptions import (
    ResourceNotFoundError, InvalidTransitionError, TripNotEditableError, InvalidTripUpdateError
)
from dispatch.app.domain.dispatch.resource_matcher import EligibleResources, find_eligible
from dispatch.app.domain.dispatch.trip_lifecycle import (
    ensure_transition_allowed, ensure_assignment_complete, RELEASING_STATUSES
)
from dispatch.app.domain.geo.location_resolver import LocationResolver
from dispatch.app.domain.pricing.pricing_calculator import CostBreakdown, estimate_cost
from dispatch.app.models.driver import Driver
from dispatch.app.models.vehicle import Vehicle
from dispatch.app.models.trip import Trip
from dispatch.app.models.trip_enums import TripStatus, TripCategory
from dispatch.app.schemas.trip import TripCreate, TripUpdate
from dispatch.app.services.audit import log_event, AuditAction
from dispatch.app.services.resource_locking import bind_resources, release_resources
from dispatch.app.services.resource_service import get_driver, get_vehicle

logger = logging.getLogger("dispatch.trips")


def _now() -> datetime:
    return datetime.now(timezone.utc)


async def create_trip(db: AsyncSession, payload: TripCreate) -> Trip:
    """Register a trip request in pending status."""
    trip = Trip(**payload.model_dump(), status=TripStatus.PENDING)
    db.add(trip)
    await db.flush()

    await log_event(
        db=db,
        action=AuditAction.TRIP_CREATED,
        target_type="trip",
        target_id=trip.trip_id,
        metadata={
            "category": trip.category.value,
            "origin": trip.origin,
            "destination": trip.destination,
            "passenger_count": trip.passenger_count,
            "round_trip": trip.is_round_trip
        }
    )
    await db.commit()
    await db.refresh(trip)

    logger.info("Trip created", extra={"trip_id": trip.trip_id, "category": trip.category.value})
    return trip


async def get_trip(db: AsyncSession, trip_id: str) -> Trip:
    result = await db.execute(select(Trip).where(Trip.trip_id == trip_id))
    trip = result.scalar_one_or_none()
    if not trip:
        raise ResourceNotFoundError("Trip", trip_id)
    return trip


async def list_trips(
    db: AsyncSession,
    status: Optional[TripStatus] = None,
    category: Optional[TripCategory] = None,
    page: int = 1,
    page_size: int = 50,
    driver_id: Optional[int] = None,
    contact_email: Optional[str] = None
) -> Tuple[List[Trip], int]:
    """
    Return one page of trips, newest first, and the total matching count.

    driver_id narrows to the trips assigned to one driver; contact_email to
    the requests one customer submitted (case-insensitive).
    """
    filters = []
    if status is not None:
        filters.append(Trip.status == status)
    if category is not None:
        filters.append(Trip.category == category)
    if driver_id is not None:
        filters.append(Trip.assigned_driver_id == driver_id)
    if contact_email:
        filters.append(func.lower(Trip.contact_email) == contact_email.strip().lower())

    total = (await db.execute(select(func.count(Trip.trip_id)).where(*filters))).scalar() or 0

    offset = (page - 1) * page_size
    result = await db.execute(
        select(Trip)
        .where(*filters)
        .order_by(Trip.created_at.desc(), Trip.trip_id)
        .offset(offset)
        .limit(page_size)
    )
    return list(result.scalars().all()), total


# Editing either end invalidates the resolved route
ROUTE_FIELDS = frozenset({"origin", "destination"})


async def update_trip(db: AsyncSession, trip_id: str, payload: TripUpdate) -> Trip:
    """
    Edit a trip request while it is still pending.

    The write is guarded on the pending status, so an edit racing a
    confirmation either lands before it or fails.

    Raises:
        ResourceNotFoundError: unknown trip
        TripNotEditableError: the trip is no longer pending
        InvalidTripUpdateError: nothing to change, or return before departure
    """
    changes = payload.changes()
    if not changes:
        raise InvalidTripUpdateError("No fields to update")

    trip = await get_trip(db, trip_id)
    if trip.status != TripStatus.PENDING:
        raise TripNotEditableError(trip_id, trip.status.value)

    preferred_date = changes.get("preferred_date", trip.preferred_date)
    return_date = changes.get("return_date", trip.return_date)
    if return_date is not None and return_date < preferred_date:
        raise InvalidTripUpdateError(
            "return_date must not be before preferred_date",
            details={"preferred_date": str(preferred_date), "return_date": str(return_date)}
        )

    values = dict(changes)
    route_changed = any(
        field in changes and changes[field] != getattr(trip, field) for field in ROUTE_FIELDS
    )
    if route_changed:
        values.update(
            origin_lat=None, origin_lng=None,
            destination_lat=None, destination_lng=None,
            estimated_distance_km=None
        )

    result = await db.execute(
        update(Trip)
        .where(Trip.trip_id == trip_id, Trip.status == TripStatus.PENDING)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        await db.rollback()
        current = await _current_status(db, trip_id)
        raise TripNotEditableError(trip_id, current.value)

    await log_event(
        db=db,
        action=AuditAction.TRIP_UPDATED,
        target_type="trip",
        target_id=trip_id,
        metadata={"fields": sorted(changes), "route_reset": route_changed}
    )
    await db.commit()
    await db.refresh(trip)

    logger.info("Trip updated", extra={"trip_id": trip_id, "fields": sorted(changes)})
    return trip


async def _current_status(db: AsyncSession, trip_id: str) -> TripStatus:
    return (await db.execute(select(Trip.status).where(Trip.trip_id == trip_id))).scalar_one()


async def _advance_status(
    db: AsyncSession,
    trip_id: str,
    previous: TripStatus,
    target: TripStatus,
    **values
) -> None:
    """
    Write a status change only if the trip is still in the status it was read in.

    A concurrent request that moved the trip first makes this one fail with
    InvalidTransitionError; the transaction is rolled back.
    """
    result = await db.execute(
        update(Trip)
        .where(Trip.trip_id == trip_id, Trip.status == previous)
        .values(status=target, **values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        await db.rollback()
        current = await _current_status(db, trip_id)
        logger.warning(
            "Trip status changed concurrently",
            extra={"trip_id": trip_id, "expected": previous.value, "current": current.value, "to": target.value}
        )
        raise InvalidTransitionError(current.value, target.value)


async def list_eligible_resources(db: AsyncSession, trip_id: str) -> Tuple[Trip, EligibleResources]:
    """
    Ranked drivers and vehicles that could take the trip.

    Empty pools are reported through EligibleResources.no_resources_available.
    """
    trip = await get_trip(db, trip_id)
    eligible = await find_eligible(db, trip)

    if eligible.no_resources_available:
        logger.info(
            "No eligible resources",
            extra={"trip_id": trip_id, "drivers": len(eligible.drivers), "vehicles": len(eligible.vehicles)}
        )
    return trip, eligible


async def ensure_route_distance(db: AsyncSession, trip: Trip, resolver: LocationResolver) -> float:
    """
    Return the trip's route distance, resolving and caching it on first use.

    The cached value is reused as-is; it is only computed when absent.
    """
    if trip.estimated_distance_km is not None:
        return trip.estimated_distance_km

    origin, destination, km = await resolver.resolve_route_distance(trip.origin, trip.destination)
    trip.origin_lat, trip.origin_lng = origin.lat, origin.lng
    trip.destination_lat, trip.destination_lng = destination.lat, destination.lng
    trip.estimated_distance_km = km

    await db.commit()
    await db.refresh(trip)

    logger.info("Route distance resolved", extra={"trip_id": trip.trip_id, "distance_km": km})
    return km


async def estimate_trip_cost(
    db: AsyncSession,
    trip_id: str,
    driver_id: int,
    vehicle_id: int,
    resolver: LocationResolver
) -> Tuple[Trip, Driver, Vehicle, CostBreakdown]:
    """Price the trip for a candidate driver and vehicle. Nothing is reserved."""
    trip = await get_trip(db, trip_id)
    driver = await get_driver(db, driver_id)
    vehicle = await get_vehicle(db, vehicle_id)

    distance = await ensure_route_distance(db, trip, resolver)
    breakdown = estimate_cost(trip, driver, vehicle, distance_km=distance)

    logger.info(
        "Cost estimated",
        extra={"trip_id": trip_id, "driver_id": driver_id, "vehicle_id": vehicle_id, "total": breakdown.total}
    )
    return trip, driver, vehicle, breakdown


async def confirm_assignment(
    db: AsyncSession,
    trip_id: str,
    driver_id: Optional[int],
    vehicle_id: Optional[int],
    estimated_cost: Optional[float]
) -> Trip:
    """
    Confirm a pending trip with a driver, a vehicle and a cost.

    The trip is moved to confirmed and the resources are bound in one
    transaction; on a lost race (for the trip or for a resource) nothing is
    written.

    Raises:
        IncompleteAssignmentError: driver, vehicle or cost missing
        InvalidTransitionError: the trip is not pending, or was confirmed concurrently
        ResourceNotFoundError: unknown trip, driver or vehicle
        ResourceUnavailableError: the driver or vehicle was claimed concurrently
    """
    ensure_assignment_complete(driver_id, vehicle_id, estimated_cost)

    trip = await get_trip(db, trip_id)
    previous = trip.status
    ensure_transition_allowed(previous, TripStatus.CONFIRMED)
    await get_driver(db, driver_id)
    await get_vehicle(db, vehicle_id)

    # Claim the trip first; a second confirmation stops here and binds nothing
    await _advance_status(
        db, trip_id, previous, TripStatus.CONFIRMED,
        assigned_driver_id=driver_id,
        assigned_vehicle_id=vehicle_id,
        estimated_cost=estimated_cost,
        confirmed_at=_now(),
        status_reason=None
    )
    await bind_resources(db, trip_id, driver_id, vehicle_id)

    await log_event(
        db=db,
        action=AuditAction.TRIP_ASSIGNED,
        target_type="trip",
        target_id=trip_id,
        metadata={"driver_id": driver_id, "vehicle_id": vehicle_id, "estimated_cost": estimated_cost}
    )
    await db.commit()
    await db.refresh(trip)

    logger.info(
        "Trip confirmed",
        extra={"trip_id": trip_id, "driver_id": driver_id, "vehicle_id": vehicle_id}
    )
    return trip


async def recompute_driver_rating(db: AsyncSession, driver_id: int) -> Optional[float]:
    """Set the driver's rating to the mean of their rated completed trips."""
    average = (await db.execute(
        select(func.avg(Trip.customer_rating)).where(
            Trip.assigned_driver_id == driver_id,
            Trip.status == TripStatus.COMPLETED,
            Trip.customer_rating.is_not(None)
        )
    )).scalar()
    if average is None:
        return None

    driver = await get_driver(db, driver_id)
    driver.rating = round(float(average), 2)
    return driver.rating


async def transition_trip(
    db: AsyncSession,
    trip_id: str,
    target_status: TripStatus,
    reason: Optional[str] = None,
    actual_cost: Optional[float] = None,
    customer_rating: Optional[float] = None
) -> Tuple[Trip, TripStatus, int]:
    """
    Move a trip to a new status.

    Confirmation goes through confirm_assignment using the trip's current
    assignment fields. Completion, cancellation and rejection release the
    bound driver and vehicle.

    Returns:
        (trip, previous status, number of resource locks released)
    """
    trip = await get_trip(db, trip_id)
    previous = trip.status

    if target_status == TripStatus.CONFIRMED:
        ensure_transition_allowed(previous, target_status)
        trip = await confirm_assignment(
            db, trip_id, trip.assigned_driver_id, trip.assigned_vehicle_id, trip.estimated_cost
        )
        return trip, previous, 0

    ensure_transition_allowed(previous, target_status, reason)

    now = _now()
    values = {}
    if target_status == TripStatus.IN_PROGRESS:
        values["started_at"] = now
    elif target_status == TripStatus.COMPLETED:
        values["completed_at"] = now
        if actual_cost is not None:
            values["actual_cost"] = actual_cost
        if customer_rating is not None:
            values["customer_rating"] = customer_rating
    else:
        values["cancelled_at"] = now
        values["status_reason"] = reason.strip()

    driver_id, vehicle_id = trip.assigned_driver_id, trip.assigned_vehicle_id
    await _advance_status(db, trip_id, previous, target_status, **values)

    released = 0
    if target_status in RELEASING_STATUSES:
        released = await release_resources(db, trip_id, driver_id, vehicle_id)

    if target_status == TripStatus.COMPLETED and customer_rating is not None and driver_id:
        await recompute_driver_rating(db, driver_id)

    await log_event(
        db=db,
        action=AuditAction.TRIP_STATUS_CHANGED,
        target_type="trip",
        target_id=trip_id,
        metadata={
            "from": previous.value,
            "to": target_status.value,
            "reason": reason.strip() if reason else None,
            "released_locks": released
        }
    )
    await db.commit()
    await db.refresh(trip)

    logger.info(
        "Trip status changed",
        extra={"trip_id": trip_id, "from": previous.value, "to": target_status.value, "released_locks": released}
    )
    return trip, previous, released
