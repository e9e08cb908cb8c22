"""
Custom exceptions and error handlers for consistent error responses.

Provides standardized error codes and global exception handlers.
"""

import logging
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from typing import Any, Dict, List

logger = logging.getLogger("dispatch.errors")


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, error_code: str, status_code: int = 500, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class ResourceNotFoundError(AppException):
    """Raised when requested resource is not found."""

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(
            message=message,
            error_code="ERR_NOT_FOUND_001",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "id": resource_id}
        )


class InvalidTransitionError(AppException):
    """Raised when a requested status change is not permitted from the current state."""

    def __init__(self, current_status: str, requested_status: str):
        self.current_status = current_status
        self.requested_status = requested_status
        super().__init__(
            message=f"Cannot transition trip from '{current_status}' to '{requested_status}'",
            error_code="ERR_TRIP_001",
            status_code=status.HTTP_409_CONFLICT,
            details={"current_status": current_status, "requested_status": requested_status}
        )


class IncompleteAssignmentError(AppException):
    """Raised when a trip is confirmed without driver, vehicle and cost."""

    def __init__(self, missing_fields: List[str]):
        self.missing_fields = missing_fields
        super().__init__(
            message=f"Assignment incomplete, missing: {', '.join(missing_fields)}",
            error_code="ERR_TRIP_002",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"missing_fields": missing_fields}
        )


class TransitionReasonRequiredError(AppException):
    """Raised when a cancellation or rejection is requested without a reason."""

    def __init__(self, requested_status: str):
        super().__init__(
            message=f"A reason is required to move a trip to '{requested_status}'",
            error_code="ERR_TRIP_003",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"requested_status": requested_status}
        )


class TripNotEditableError(AppException):
    """Raised when a trip request is edited after it left pending."""

    def __init__(self, trip_id: str, current_status: str):
        super().__init__(
            message=f"Trip {trip_id} is '{current_status}' and can no longer be edited",
            error_code="ERR_TRIP_004",
            status_code=status.HTTP_409_CONFLICT,
            details={"trip_id": trip_id, "current_status": current_status}
        )


class InvalidTripUpdateError(AppException):
    """Raised when a trip edit is empty or leaves the schedule inconsistent."""

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            error_code="ERR_TRIP_005",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details
        )


class ResourceUnavailableError(AppException):
    """Raised at bind time when a driver or vehicle was claimed by another trip."""

    def __init__(self, resource: str, resource_id: Any):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(
            message=f"{resource} {resource_id} is no longer available, refresh eligible resources and retry",
            error_code="ERR_RESOURCE_001",
            status_code=status.HTTP_409_CONFLICT,
            details={"resource": resource, "id": resource_id}
        )


class DuplicateResourceError(AppException):
    """Raised when a unique field (email, license plate) is already registered."""

    def __init__(self, resource: str, field: str, value: Any):
        super().__init__(
            message=f"{resource} with {field} '{value}' already exists",
            error_code="ERR_CONFLICT_001",
            status_code=status.HTTP_409_CONFLICT,
            details={"resource": resource, "field": field}
        )


class AvailabilityChangeError(AppException):
    """Raised when a manual availability change would break a trip binding."""

    def __init__(self, resource: str, resource_id: Any, reason: str):
        super().__init__(
            message=f"Cannot change availability of {resource} {resource_id}: {reason}",
            error_code="ERR_RESOURCE_002",
            status_code=status.HTTP_409_CONFLICT,
            details={"resource": resource, "id": resource_id}
        )


# Global Exception Handlers

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handler for custom application exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": exc.error_code,
            "message": exc.message,
            "details": exc.details
        }
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handler for FastAPI HTTPException with standardized format."""
    # Map status code to error code
    error_code_map = {
        400: "ERR_BAD_REQUEST",
        404: "ERR_NOT_FOUND",
        409: "ERR_CONFLICT",
        500: "ERR_INTERNAL_SERVER"
    }

    error_code = error_code_map.get(exc.status_code, "ERR_UNKNOWN")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": error_code,
            "message": exc.detail,
            "details": {}
        }
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler for Pydantic validation errors."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error_code": "ERR_VALIDATION",
            "message": "Validation error",
            "details": {
                "errors": jsonable_errors(exc)
            }
        }
    )


def jsonable_errors(exc: RequestValidationError) -> List[Dict[str, Any]]:
    """Strip non-serializable context (e.g. raised ValueErrors) from validation errors."""
    return [
        {"loc": list(error.get("loc", [])), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unhandled exceptions."""
    logger.error(
        "Unhandled exception",
        exc_info=exc,
        extra={"path": request.url.path, "exception_type": type(exc).__name__}
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error_code": "ERR_INTERNAL_SERVER",
            "message": "An internal server error occurred",
            "details": {}
        }
    )
