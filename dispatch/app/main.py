"""
FastAPI Application Entry Point.

This is the main application file for the Trip Dispatch Backend.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from dispatch.app.core.config import settings
from dispatch.app.api.v1.router import router as api_v1_router
from dispatch.app.core.dependencies import close_geocoding_client
from dispatch.app.core.observability import ObservabilityMiddleware, configure_logging
from dispatch.app.core.redis_client import ping_redis
from dispatch.app.db.session import engine, Base
from dispatch.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)
from fastapi import HTTPException

# Import models to ensure they are registered with Base
from dispatch.app.models.audit_log import AuditLog
from dispatch.app.models.driver import Driver
from dispatch.app.models.vehicle import Vehicle
from dispatch.app.models.trip import Trip
from dispatch.app.models.resource_lock import ResourceLock

configure_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.

    1. Creates database tables on startup.
    2. Closes the shared geocoding client on shutdown.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await close_geocoding_client()

# Initialize FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug,
    description="Trip assignment, pricing and lifecycle for ground-transport dispatch",
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)

# Register global exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint.

    Redis only backs the optional geocode cache, so it is reported but does
    not make the service unhealthy.
    """
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.api_version,
        "redis": "enabled" if settings.geocode_cache_enabled and await ping_redis() else "disabled",
    }


# Include API v1 router
app.include_router(api_v1_router, prefix=f"/{settings.api_version}")


@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint.

    Returns:
        dict: Welcome message and API documentation links
    """
    return {
        "message": "Welcome to Trip Dispatch Backend API",
        "docs": "/docs",
        "health": "/health",
    }
