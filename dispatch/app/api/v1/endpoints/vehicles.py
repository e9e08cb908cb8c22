"""
Vehicle API Endpoints.
"""

from typing import Optional
from fastapi import APIRouter, Depends, status, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from dispatch.app.db.session import get_db
from dispatch.app.models.resource_enums import VehicleAvailability
from dispatch.app.schemas.vehicle import (
    VehicleCreate, VehicleAvailabilityUpdate, VehicleResponse, VehicleListResponse
)
from dispatch.app.services import resource_service

router = APIRouter(prefix="/vehicles", tags=["Vehicles"])


@router.post("", response_model=VehicleResponse, status_code=status.HTTP_201_CREATED)
async def register_vehicle(payload: VehicleCreate, db: AsyncSession = Depends(get_db)):
    return await resource_service.create_vehicle(db, payload)


@router.get("", response_model=VehicleListResponse)
async def list_vehicles(
    availability: Optional[VehicleAvailability] = Query(None),
    vehicle_type: Optional[str] = Query(None),
    min_seating_capacity: Optional[int] = Query(None, ge=1),
    is_active: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=100),
    db: AsyncSession = Depends(get_db)
):
    vehicles, total = await resource_service.list_vehicles(
        db, availability, vehicle_type, min_seating_capacity, is_active, page, page_size
    )
    return VehicleListResponse(
        vehicles=[VehicleResponse.model_validate(vehicle) for vehicle in vehicles],
        total=total,
        page=page,
        page_size=page_size
    )


@router.get("/{vehicle_id}", response_model=VehicleResponse)
async def get_vehicle(vehicle_id: int = Path(..., description="Vehicle ID"), db: AsyncSession = Depends(get_db)):
    return await resource_service.get_vehicle(db, vehicle_id)


@router.patch("/{vehicle_id}/availability", response_model=VehicleResponse)
async def update_availability(
    payload: VehicleAvailabilityUpdate,
    vehicle_id: int = Path(..., description="Vehicle ID"),
    db: AsyncSession = Depends(get_db)
):
    """Booked is reserved for trip assignment."""
    return await resource_service.update_vehicle_availability(db, vehicle_id, payload.availability)


@router.post("/{vehicle_id}/deactivate", response_model=VehicleResponse)
async def deactivate_vehicle(vehicle_id: int = Path(..., description="Vehicle ID"), db: AsyncSession = Depends(get_db)):
    return await resource_service.deactivate_vehicle(db, vehicle_id)
