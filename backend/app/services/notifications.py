import logging
from datetime import datetime
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from ..core.config import settings
from ..core.queues import get_notification_queue
from ..models.activity import ActivityAction, ActivityEventType, ActivityFeedItem
from ..models.types import utc_now

logger = logging.getLogger(__name__)


def _unique(recipients: Iterable[UUID]) -> List[UUID]:
    seen = set()
    ordered = []
    for recipient in recipients:
        if recipient not in seen:
            seen.add(recipient)
            ordered.append(recipient)
    return ordered


class NotificationFanout:
    """Appends one activity feed entry per recipient for membership events."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def member_joined(
        self,
        recipients: Iterable[UUID],
        actor_id: UUID,
        actor_name: str,
        target_user_id: UUID,
        group_id: UUID,
        group_name: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ) -> int:
        """
        Record a MEMBER_JOINED event in every recipient's feed.

        The joining user is the actor of their own join, so ``actor_id`` is
        normally equal to ``target_user_id``. Each recipient is written in
        its own transaction; a failed write is logged and skipped.

        Returns:
            Number of feed items written.
        """
        timestamp = timestamp or utc_now()
        delivered = 0

        for recipient in _unique(recipients):
            item = ActivityFeedItem(
                user_id=recipient,
                group_id=group_id,
                group_name=group_name,
                event_type=ActivityEventType.MEMBER_JOINED,
                action=ActivityAction.JOIN,
                actor_id=actor_id,
                actor_name=actor_name,
                details={
                    "targetUserId": str(target_user_id),
                    "targetUserName": actor_name,
                },
                timestamp=timestamp,
            )
            try:
                with Session(self.engine) as session:
                    session.add(item)
                    session.commit()
                delivered += 1
            except Exception as e:
                logger.error(
                    f"Failed to record member-joined activity for {recipient} "
                    f"in group {group_id}: {e}"
                )

        logger.info(
            f"Member-joined activity for {target_user_id} in group {group_id} "
            f"delivered to {delivered} recipient(s)"
        )
        return delivered

    def dispatch_member_joined(
        self,
        recipients: Iterable[UUID],
        target_user_id: UUID,
        target_name: str,
        group_id: UUID,
        group_name: Optional[str],
        timestamp: datetime,
    ) -> None:
        """Deliver a join notification without ever failing the caller."""
        recipients = _unique(recipients)
        if not recipients:
            return

        if settings.NOTIFICATION_FANOUT_ASYNC:
            try:
                get_notification_queue().enqueue(
                    "backend.app.worker_tasks.fan_out_member_joined",
                    recipient_ids=[str(r) for r in recipients],
                    target_user_id=str(target_user_id),
                    target_name=target_name,
                    group_id=str(group_id),
                    group_name=group_name,
                    timestamp=timestamp.isoformat(),
                )
                logger.info(
                    f"Queued member-joined fan-out for {len(recipients)} recipient(s) "
                    f"in group {group_id}"
                )
            except Exception as e:
                logger.error(f"Failed to enqueue member-joined fan-out for group {group_id}: {e}")
            return

        try:
            self.member_joined(
                recipients,
                actor_id=target_user_id,
                actor_name=target_name,
                target_user_id=target_user_id,
                group_id=group_id,
                group_name=group_name,
                timestamp=timestamp,
            )
        except Exception as e:
            logger.error(f"Member-joined fan-out failed for group {group_id}: {e}")

    def get_activity_feed(self, user_id: UUID, limit: Optional[int] = None) -> List[ActivityFeedItem]:
        """Newest-first entries of one user's feed."""
        limit = limit or settings.ACTIVITY_FEED_PAGE_SIZE
        with Session(self.engine) as session:
            return list(
                session.exec(
                    select(ActivityFeedItem)
                    .where(ActivityFeedItem.user_id == user_id)
                    .order_by(ActivityFeedItem.timestamp.desc(), ActivityFeedItem.created_at.desc())
                    .limit(limit)
                ).all()
            )
