from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field
from uuid import UUID, uuid4
from datetime import datetime

from .types import UTCDateTime, utc_now
from typing import Optional
from enum import Enum

from membership_core import ThemeColor


class MembershipRole(str, Enum):
    """Membership roles within a group."""

    ADMIN = "admin"
    MEMBER = "member"


class MembershipStatus(str, Enum):
    """Membership status."""

    ACTIVE = "active"
    PENDING = "pending"


class GroupMembership(SQLModel, table=True):
    """Membership of one user in one group."""

    __table_args__ = (
        UniqueConstraint("user_id", "group_id", name="uq_groupmembership_user_group"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    # Foreign keys
    user_id: UUID = Field(foreign_key="user.id", index=True)
    group_id: UUID = Field(foreign_key="group.id", index=True)

    # Membership details
    role: MembershipRole = Field(default=MembershipRole.MEMBER)
    status: MembershipStatus = Field(default=MembershipStatus.PENDING)
    display_name: str = Field(max_length=100)

    # Theme color, fixed at creation
    theme_light: Optional[str] = Field(default=None, max_length=7)
    theme_dark: Optional[str] = Field(default=None, max_length=7)
    theme_name: Optional[str] = Field(default=None, max_length=50)
    theme_pattern: Optional[str] = Field(default=None, max_length=20)
    theme_color_index: Optional[int] = Field(default=None)
    theme_assigned_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)

    # Timestamps
    joined_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)

    # Creator of the share link used to join
    invited_by: Optional[UUID] = Field(default=None, foreign_key="user.id")

    @property
    def theme(self) -> Optional[ThemeColor]:
        if self.theme_color_index is None or self.theme_pattern is None:
            return None
        return ThemeColor(
            light=self.theme_light,
            dark=self.theme_dark,
            name=self.theme_name,
            pattern=self.theme_pattern,
            color_index=self.theme_color_index,
            assigned_at=self.theme_assigned_at,
        )

    def apply_theme(self, theme: ThemeColor) -> None:
        self.theme_light = theme.light
        self.theme_dark = theme.dark
        self.theme_name = theme.name
        self.theme_pattern = theme.pattern
        self.theme_color_index = theme.color_index
        self.theme_assigned_at = theme.assigned_at

    @property
    def is_active(self) -> bool:
        return self.status == MembershipStatus.ACTIVE
