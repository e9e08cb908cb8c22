"""
Driver and vehicle resource enumerations.
"""

import enum


class DriverAvailability(str, enum.Enum):
    """Driver availability enumeration."""
    AVAILABLE = "available"
    ON_TRIP = "on-trip"  # Bound to an active trip
    ON_LEAVE = "on-leave"
    OFFLINE = "offline"
    MAINTENANCE = "maintenance"


class VehicleAvailability(str, enum.Enum):
    """Vehicle availability enumeration."""
    AVAILABLE = "Available"
    UNAVAILABLE = "Unavailable"
    MAINTENANCE = "Maintenance"
    BOOKED = "Booked"  # Bound to an active trip


class ResourceType(str, enum.Enum):
    """Kind of resource held by a resource lock."""
    DRIVER = "DRIVER"
    VEHICLE = "VEHICLE"
