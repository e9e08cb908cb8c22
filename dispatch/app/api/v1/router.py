"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from dispatch.app.api.v1.endpoints import trips, drivers, vehicles

router = APIRouter()

# Trip requests, matching, pricing and lifecycle
router.include_router(trips.router)

# Resource registry
router.include_router(drivers.router)
router.include_router(vehicles.router)
