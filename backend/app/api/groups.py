from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Depends

from ..core.deps import get_current_user, get_join_service, get_share_link_service
from ..models.user import User
from ..schemas.group import (
    GroupPreviewRequest,
    GroupPreviewResponse,
    JoinGroupRequest,
    JoinGroupResponse,
    ShareLinkCreate,
    ShareLinkResponse,
)
from ..services.joins import JoinService
from ..services.share_links import ShareLinkService

router = APIRouter()


@router.post("/share/preview", response_model=GroupPreviewResponse)
def preview_group(
    request: GroupPreviewRequest,
    current_user: User = Depends(get_current_user),
    share_links: ShareLinkService = Depends(get_share_link_service),
):
    """Show what group a share link leads to."""
    preview = share_links.preview_group_by_link(current_user.id, request.share_token)
    return GroupPreviewResponse.model_validate(preview)


@router.post("/share/join", response_model=JoinGroupResponse)
def join_group(
    request: JoinGroupRequest,
    current_user: User = Depends(get_current_user),
    joins: JoinService = Depends(get_join_service),
):
    """Join a group through a share link."""
    result = joins.join_group_by_link(
        current_user.id, request.share_token, request.group_display_name
    )
    return JoinGroupResponse.model_validate(result)


@router.post("/{group_id}/share-link", response_model=ShareLinkResponse)
def create_share_link(
    group_id: UUID,
    request: Optional[ShareLinkCreate] = None,
    current_user: User = Depends(get_current_user),
    share_links: ShareLinkService = Depends(get_share_link_service),
):
    """Create an invitation link. Only active members may do this."""
    expires_at = request.expires_at if request else None
    link = share_links.generate_shareable_link(group_id, current_user.id, expires_at=expires_at)
    return ShareLinkResponse.model_validate(link)
