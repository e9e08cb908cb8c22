"""
Trip API Endpoints.

Trip requests, eligible resources, cost estimates, assignment and lifecycle.
"""

from typing import Optional
from fastapi import APIRouter, Depends, status, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from dispatch.app.db.session import get_db
from dispatch.app.core.dependencies import get_location_resolver
from dispatch.app.domain.geo.location_resolver import LocationResolver
from dispatch.app.models.trip_enums import TripStatus, TripCategory
from dispatch.app.schemas.trip import TripCreate, TripUpdate, TripResponse, TripListResponse
from dispatch.app.schemas.audit import AuditEntryResponse, AuditTrailResponse
from dispatch.app.schemas.dispatch import (
    EligibleResourcesResponse, CostEstimateRequest, CostEstimateResponse, CostBreakdownResponse,
    AssignmentRequest, TransitionRequest, TransitionResponse
)
from dispatch.app.schemas.driver import DriverResponse
from dispatch.app.schemas.vehicle import VehicleResponse
from dispatch.app.schemas.analytics import TripStatistics
from dispatch.app.services import trip_service
from dispatch.app.services.analytics import AnalyticsService
from dispatch.app.services.audit import get_audit_trail

router = APIRouter(prefix="/trips", tags=["Trips"])


@router.post("", response_model=TripResponse, status_code=status.HTTP_201_CREATED)
async def create_trip(payload: TripCreate, db: AsyncSession = Depends(get_db)):
    """Submit a trip request. New trips start in pending."""
    return await trip_service.create_trip(db, payload)


@router.get("", response_model=TripListResponse)
async def list_trips(
    status_filter: Optional[TripStatus] = Query(None, alias="status"),
    category: Optional[TripCategory] = Query(None),
    contact_email: Optional[str] = Query(None, description="Only requests submitted with this contact email"),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=100),
    db: AsyncSession = Depends(get_db)
):
    trips, total = await trip_service.list_trips(
        db, status_filter, category, page, page_size, contact_email=contact_email
    )
    return TripListResponse(
        trips=[TripResponse.model_validate(trip) for trip in trips],
        total=total,
        page=page,
        page_size=page_size
    )


# Declared before /{trip_id} so "statistics" is not read as an id
@router.get("/statistics", response_model=TripStatistics)
async def trip_statistics(db: AsyncSession = Depends(get_db)):
    return await AnalyticsService.get_trip_statistics(db)


@router.get("/{trip_id}", response_model=TripResponse)
async def get_trip(trip_id: str = Path(..., description="Trip ID"), db: AsyncSession = Depends(get_db)):
    return await trip_service.get_trip(db, trip_id)


@router.get("/{trip_id}/eligible-resources", response_model=EligibleResourcesResponse)
async def eligible_resources(trip_id: str = Path(..., description="Trip ID"), db: AsyncSession = Depends(get_db)):
    """
    Ranked candidates for the trip.

    Drivers: rating, then experience. Vehicles: smallest sufficient capacity,
    then category match, then vehicle type match. Empty pools are a normal
    response with no_resources_available set.
    """
    trip, eligible = await trip_service.list_eligible_resources(db, trip_id)
    return EligibleResourcesResponse(
        trip_id=trip.trip_id,
        drivers=[DriverResponse.model_validate(d) for d in eligible.drivers],
        vehicles=[VehicleResponse.model_validate(v) for v in eligible.vehicles],
        no_resources_available=eligible.no_resources_available
    )


@router.post("/{trip_id}/estimate-cost", response_model=CostEstimateResponse)
async def estimate_cost(
    payload: CostEstimateRequest,
    trip_id: str = Path(..., description="Trip ID"),
    resolver: LocationResolver = Depends(get_location_resolver),
    db: AsyncSession = Depends(get_db)
):
    """Price the trip for a driver/vehicle pair. Does not reserve anything."""
    trip, driver, vehicle, breakdown = await trip_service.estimate_trip_cost(
        db, trip_id, payload.driver_id, payload.vehicle_id, resolver
    )
    return CostEstimateResponse(
        trip_id=trip.trip_id,
        driver_id=driver.id,
        vehicle_id=vehicle.id,
        estimated_cost=breakdown.total,
        breakdown=CostBreakdownResponse(**breakdown.as_dict())
    )


@router.post("/{trip_id}/assign", response_model=TripResponse)
async def assign_trip(
    payload: AssignmentRequest,
    trip_id: str = Path(..., description="Trip ID"),
    db: AsyncSession = Depends(get_db)
):
    """
    Confirm driver, vehicle and cost, moving the trip to confirmed.

    Returns 409 if either resource was taken since candidates were listed.
    """
    return await trip_service.confirm_assignment(
        db, trip_id, payload.driver_id, payload.vehicle_id, payload.estimated_cost
    )


@router.post("/{trip_id}/transition", response_model=TransitionResponse)
async def transition_trip(
    payload: TransitionRequest,
    trip_id: str = Path(..., description="Trip ID"),
    db: AsyncSession = Depends(get_db)
):
    trip, previous, released = await trip_service.transition_trip(
        db,
        trip_id,
        payload.target_status,
        reason=payload.reason,
        actual_cost=payload.actual_cost,
        customer_rating=payload.customer_rating
    )
    return TransitionResponse(
        trip=TripResponse.model_validate(trip),
        previous_status=previous,
        released_locks=released
    )


@router.patch("/{trip_id}", response_model=TripResponse)
async def update_trip(
    payload: TripUpdate,
    trip_id: str = Path(..., description="Trip ID"),
    db: AsyncSession = Depends(get_db)
):
    """
    Edit a pending trip request.

    Changing origin or destination clears the resolved route, so the next
    estimate resolves it again. Returns 409 once the trip has left pending.
    """
    return await trip_service.update_trip(db, trip_id, payload)


@router.get("/{trip_id}/audit", response_model=AuditTrailResponse)
async def trip_audit_trail(
    trip_id: str = Path(..., description="Trip ID"),
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_db)
):
    """Creation, edits, assignment and status changes for one trip, most recent first."""
    await trip_service.get_trip(db, trip_id)
    entries = await get_audit_trail(db, target_type="trip", target_id=trip_id, limit=limit)
    return AuditTrailResponse(
        target_type="trip",
        target_id=trip_id,
        entries=[AuditEntryResponse.model_validate(entry) for entry in entries]
    )
