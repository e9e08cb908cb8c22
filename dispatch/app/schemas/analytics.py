"""
Analytics schemas.
"""

from pydantic import BaseModel
from typing import Dict, Optional


class TripStatistics(BaseModel):
    """Trip counts per status."""
    total_trips: int
    by_status: Dict[str, int]


class DriverStatistics(BaseModel):
    """Per-driver performance aggregated from trips."""
    driver_id: int
    total_trips: int
    completed_trips: int
    active_trips: int
    cancelled_trips: int
    total_earnings: float
    average_rating: Optional[float]
