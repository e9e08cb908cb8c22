"""
Driver API Endpoints.
"""

from typing import Optional
from fastapi import APIRouter, Depends, status, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from dispatch.app.db.session import get_db
from dispatch.app.models.resource_enums import DriverAvailability
from dispatch.app.models.trip_enums import TripStatus
from dispatch.app.schemas.driver import DriverCreate, DriverAvailabilityUpdate, DriverResponse, DriverListResponse
from dispatch.app.schemas.trip import TripResponse, TripListResponse
from dispatch.app.schemas.analytics import DriverStatistics
from dispatch.app.services import resource_service, trip_service
from dispatch.app.services.analytics import AnalyticsService

router = APIRouter(prefix="/drivers", tags=["Drivers"])


@router.post("", response_model=DriverResponse, status_code=status.HTTP_201_CREATED)
async def register_driver(payload: DriverCreate, db: AsyncSession = Depends(get_db)):
    return await resource_service.create_driver(db, payload)


@router.get("", response_model=DriverListResponse)
async def list_drivers(
    availability: Optional[DriverAvailability] = Query(None),
    is_active: Optional[bool] = Query(None),
    min_experience: Optional[int] = Query(None, ge=0),
    search: Optional[str] = Query(None, description="Matches name, email or license number"),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=100),
    db: AsyncSession = Depends(get_db)
):
    drivers, total = await resource_service.list_drivers(
        db, availability, is_active, min_experience, search, page, page_size
    )
    return DriverListResponse(
        drivers=[DriverResponse.model_validate(driver) for driver in drivers],
        total=total,
        page=page,
        page_size=page_size
    )


@router.get("/{driver_id}", response_model=DriverResponse)
async def get_driver(driver_id: int = Path(..., description="Driver ID"), db: AsyncSession = Depends(get_db)):
    return await resource_service.get_driver(db, driver_id)


@router.patch("/{driver_id}/availability", response_model=DriverResponse)
async def update_availability(
    payload: DriverAvailabilityUpdate,
    driver_id: int = Path(..., description="Driver ID"),
    db: AsyncSession = Depends(get_db)
):
    """
    Change a driver's availability.

    on-trip is reserved for trip assignment, and a driver bound to an active
    trip cannot be marked available until the trip ends.
    """
    return await resource_service.update_driver_availability(db, driver_id, payload.availability)


@router.post("/{driver_id}/deactivate", response_model=DriverResponse)
async def deactivate_driver(driver_id: int = Path(..., description="Driver ID"), db: AsyncSession = Depends(get_db)):
    return await resource_service.deactivate_driver(db, driver_id)


@router.get("/{driver_id}/statistics", response_model=DriverStatistics)
async def driver_statistics(driver_id: int = Path(..., description="Driver ID"), db: AsyncSession = Depends(get_db)):
    return await AnalyticsService.get_driver_statistics(db, driver_id)


@router.get("/{driver_id}/trips", response_model=TripListResponse)
async def driver_trips(
    driver_id: int = Path(..., description="Driver ID"),
    status_filter: Optional[TripStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=100),
    db: AsyncSession = Depends(get_db)
):
    """Trips assigned to the driver, newest first."""
    await resource_service.get_driver(db, driver_id)
    trips, total = await trip_service.list_trips(
        db, status=status_filter, page=page, page_size=page_size, driver_id=driver_id
    )
    return TripListResponse(
        trips=[TripResponse.model_validate(trip) for trip in trips],
        total=total,
        page=page,
        page_size=page_size
    )
