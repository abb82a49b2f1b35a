import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from .core.database import get_engine
from .services.notifications import NotificationFanout

logger = logging.getLogger(__name__)


def fan_out_member_joined(
    recipient_ids: List[str],
    target_user_id: str,
    target_name: str,
    group_id: str,
    group_name: Optional[str] = None,
    timestamp: Optional[str] = None,
) -> int:
    """
    Write MEMBER_JOINED feed items queued by a committed join.

    Args:
        recipient_ids: UUIDs of the members captured inside the join transaction
        target_user_id: UUID of the joining user
        target_name: Group display name of the joining user
        group_id: UUID of the group
        group_name: Name of the group at join time
        timestamp: ISO timestamp of the join

    Returns:
        Number of feed items written
    """
    try:
        fanout = NotificationFanout(get_engine())
        delivered = fanout.member_joined(
            [UUID(r) for r in recipient_ids],
            actor_id=UUID(target_user_id),
            actor_name=target_name,
            target_user_id=UUID(target_user_id),
            group_id=UUID(group_id),
            group_name=group_name,
            timestamp=datetime.fromisoformat(timestamp) if timestamp else None,
        )
        logger.info(f"Fan-out job for group {group_id} wrote {delivered} item(s)")
        return delivered

    except Exception as e:
        logger.error(f"Error fanning out member-joined for group {group_id}: {e}")
        return 0
