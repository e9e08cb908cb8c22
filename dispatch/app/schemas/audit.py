"""
Audit trail schemas.
"""

from pydantic import BaseModel
from datetime import datetime
from typing import Any, Dict, List, Optional


class AuditEntryResponse(BaseModel):
    id: int
    action: str
    actor: Optional[str]
    target_type: Optional[str]
    target_id: Optional[str]
    meta_data: Optional[Dict[str, Any]]
    timestamp: datetime

    class Config:
        from_attributes = True


class AuditTrailResponse(BaseModel):
    """Audit entries for one target, most recent first."""
    target_type: str
    target_id: str
    entries: List[AuditEntryResponse]
