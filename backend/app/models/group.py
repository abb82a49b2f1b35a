from sqlmodel import SQLModel, Field
from uuid import UUID, uuid4
from datetime import datetime

from .types import UTCDateTime, utc_now
from typing import Optional
from enum import Enum


class ApprovalPolicy(str, Enum):
    """How new members enter a group."""

    AUTOMATIC = "automatic"
    ADMIN_REQUIRED = "admin-required"


class Group(SQLModel, table=True):
    """Shared expense group."""

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=100, index=True)
    description: Optional[str] = Field(default=None, max_length=500)

    # Group settings
    approval_policy: ApprovalPolicy = Field(default=ApprovalPolicy.AUTOMATIC)

    # Ownership
    owner_id: UUID = Field(foreign_key="user.id")

    # Bumped by every membership write; compare-and-set guards concurrent joins
    membership_version: int = Field(default=0)

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
