from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, Field

from ..models.membership import MembershipStatus


class ShareLinkCreate(BaseModel):
    """Share link creation request."""

    expires_at: datetime | None = None


class ShareLinkResponse(BaseModel):
    """Share link response model."""

    shareable_path: str
    share_token: str
    expires_at: datetime

    class Config:
        from_attributes = True


class GroupPreviewRequest(BaseModel):
    """Group preview request."""

    share_token: str = Field(min_length=1)


class GroupPreviewResponse(BaseModel):
    """What a prospective member sees before joining."""

    group_id: UUID
    group_name: str
    group_description: str
    member_count: int
    is_already_member: bool

    class Config:
        from_attributes = True


class JoinGroupRequest(BaseModel):
    """Join-by-link request."""

    share_token: str = Field(min_length=1)
    group_display_name: str = Field(max_length=100)


class JoinGroupResponse(BaseModel):
    """Join-by-link response model."""

    group_id: UUID
    group_name: str
    success: bool
    member_status: MembershipStatus

    class Config:
        from_attributes = True
