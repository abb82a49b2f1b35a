from typing import List
from fastapi import APIRouter, Depends, Query

from ..core.config import settings
from ..core.deps import get_current_user, get_notification_fanout
from ..models.user import User
from ..schemas.activity import ActivityFeedItemResponse
from ..services.notifications import NotificationFanout

router = APIRouter()


@router.get("", response_model=List[ActivityFeedItemResponse])
def get_activity_feed(
    limit: int = Query(settings.ACTIVITY_FEED_PAGE_SIZE, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    fanout: NotificationFanout = Depends(get_notification_fanout),
):
    """Get the current user's activity feed, newest first."""
    items = fanout.get_activity_feed(current_user.id, limit=limit)
    return [ActivityFeedItemResponse.model_validate(item) for item in items]
