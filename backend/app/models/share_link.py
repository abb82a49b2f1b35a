from sqlmodel import SQLModel, Field
from uuid import UUID, uuid4
from datetime import datetime

from .types import UTCDateTime, utc_now
from typing import Optional


class ShareLink(SQLModel, table=True):
    """Time-limited invitation to join a group."""

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    token: str = Field(unique=True, max_length=64)
    group_id: UUID = Field(foreign_key="group.id", index=True)
    created_by: UUID = Field(foreign_key="user.id")

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    expires_at: datetime = Field(index=True, sa_type=UTCDateTime)


class ShareLinkToken(SQLModel, table=True):
    """Token-keyed lookup so a token resolves without scanning a group's links."""

    token: str = Field(primary_key=True, max_length=64)
    group_id: UUID = Field(foreign_key="group.id")
    share_link_id: UUID = Field(index=True)
