from sqlmodel import SQLModel, Field
from uuid import UUID, uuid4
from datetime import datetime

from .types import UTCDateTime, utc_now


class User(SQLModel, table=True):
    """User profile. Accounts are created and authenticated elsewhere."""

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    display_name: str = Field(max_length=100)

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
