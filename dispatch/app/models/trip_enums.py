"""
Trip-related enumerations.
"""

import enum


class TripStatus(str, enum.Enum):
    """Trip status enumeration."""
    PENDING = "pending"  # Requested by customer, awaiting assignment
    CONFIRMED = "confirmed"  # Driver, vehicle and cost assigned
    IN_PROGRESS = "in-progress"  # Driver has started
    COMPLETED = "completed"  # Trip finished
    CANCELLED = "cancelled"  # Cancelled before start
    REJECTED = "rejected"  # Declined by the operator while pending


class TripCategory(str, enum.Enum):
    """Trip category, shared with vehicle classification."""
    LUXURY = "Luxury"
    SAFARI = "Safari"
    TOUR = "Tour"
    ADVENTURE = "Adventure"
    CASUAL = "Casual"


class TripPriority(str, enum.Enum):
    """Trip priority enumeration."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
