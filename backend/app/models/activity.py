from sqlmodel import SQLModel, Field, Column
from sqlalchemy import JSON
from uuid import UUID, uuid4
from datetime import datetime

from .types import UTCDateTime, utc_now
from typing import Optional, Dict, Any
from enum import Enum


class ActivityEventType(str, Enum):
    MEMBER_JOINED = "member-joined"


class ActivityAction(str, Enum):
    JOIN = "join"


class ActivityFeedItem(SQLModel, table=True):
    """One entry in a user's personal activity feed. Append-only."""

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    # Recipient whose feed this row belongs to
    user_id: UUID = Field(foreign_key="user.id", index=True)

    group_id: UUID = Field(foreign_key="group.id", index=True)
    group_name: Optional[str] = Field(default=None, max_length=100)

    event_type: ActivityEventType
    action: ActivityAction
    actor_id: UUID
    actor_name: str = Field(max_length=100)
    details: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))

    # Timestamps
    timestamp: datetime = Field(index=True, sa_type=UTCDateTime)
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
