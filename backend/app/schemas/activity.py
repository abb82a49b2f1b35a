from datetime import datetime
from uuid import UUID
from typing import Any, Dict
from pydantic import BaseModel

from ..models.activity import ActivityAction, ActivityEventType


class ActivityFeedItemResponse(BaseModel):
    """Activity feed item response model."""

    id: UUID
    group_id: UUID
    group_name: str | None = None
    event_type: ActivityEventType
    action: ActivityAction
    actor_id: UUID
    actor_name: str
    details: Dict[str, Any]
    timestamp: datetime

    class Config:
        from_attributes = True
