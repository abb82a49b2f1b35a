import logging
import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional
from uuid import UUID

from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from membership_core import (
    check_capacity,
    check_display_name,
    decide_member_status,
    detect_overflow,
    generate_unique_theme_color,
)
from membership_core.errors import AlreadyMemberError, InvalidDisplayNameError, NotFoundError
from membership_core.rules import normalize_display_name

from ..core.config import settings
from ..core.transactions import bump_membership_version, run_in_transaction
from ..models.group import Group
from ..models.membership import GroupMembership, MembershipRole, MembershipStatus
from ..models.types import utc_now
from .notifications import NotificationFanout
from .share_links import ShareLinkService

logger = logging.getLogger(__name__)


@dataclass
class JoinResult:
    group_id: UUID
    group_name: str
    success: bool
    member_status: MembershipStatus


@dataclass
class _JoinOutcome:
    """What a committed join transaction hands to the notification step."""

    group_id: UUID
    group_name: str
    status: MembershipStatus
    display_name: str
    joined_at: datetime
    recipients: List[UUID] = field(default_factory=list)


class JoinService:
    """Admits a user into a group through a share link."""

    def __init__(
        self,
        engine: Engine,
        share_links: Optional[ShareLinkService] = None,
        fanout: Optional[NotificationFanout] = None,
        clock: Callable[[], datetime] = utc_now,
        rng: Optional[random.Random] = None,
    ):
        self.engine = engine
        self.clock = clock
        self.share_links = share_links or ShareLinkService(engine, clock=clock)
        self.fanout = fanout or NotificationFanout(engine)
        self.rng = rng or random.Random()

    def join_group_by_link(self, user_id: UUID, token: str, display_name: str) -> JoinResult:
        """
        Join the group behind ``token`` under a group-scoped ``display_name``.

        Capacity, display-name uniqueness and the membership write are
        checked and performed in one transaction. When another writer
        changes the group's membership first, the whole transaction is
        re-run from a fresh read.

        Raises:
            NotFoundError: Unknown token, or the group is gone.
            LinkExpiredError: The link has expired.
            InvalidDisplayNameError: Empty display name.
            AlreadyMemberError: The user owns the group or already has a membership in it.
            GroupAtCapacityError: No active slot left.
            GroupTooLargeError: Stored active count already above the maximum.
            DisplayNameConflictError: An active member holds the same name.
        """
        lookup = self.share_links.require_valid_link(token)
        share_link = lookup.share_link

        candidate_name = normalize_display_name(display_name)
        if not candidate_name:
            raise InvalidDisplayNameError()

        def unit_of_work(session: Session) -> _JoinOutcome:
            group = session.get(Group, lookup.group_id)
            if not group:
                raise NotFoundError("Group not found")

            memberships = session.exec(
                select(GroupMembership).where(GroupMembership.group_id == group.id)
            ).all()

            if group.owner_id == user_id or any(m.user_id == user_id for m in memberships):
                raise AlreadyMemberError()

            active = [m for m in memberships if m.status == MembershipStatus.ACTIVE]

            detect_overflow(len(active), settings.MAX_GROUP_MEMBERS, group_id=group.id)
            check_capacity(len(active), settings.MAX_GROUP_MEMBERS)
            name = check_display_name([m.display_name for m in active], candidate_name)

            status = MembershipStatus(decide_member_status(group.approval_policy.value))

            now = self.clock()
            theme = generate_unique_theme_color(
                group.id,
                [m.theme for m in memberships],
                assigned_at=now,
                user_id=user_id,
                rng=self.rng,
            )

            bump_membership_version(session, group.id, group.membership_version)

            membership = GroupMembership(
                user_id=user_id,
                group_id=group.id,
                role=MembershipRole.MEMBER,
                status=status,
                display_name=name,
                joined_at=now,
                invited_by=share_link.created_by,
            )
            membership.apply_theme(theme)
            session.add(membership)
            session.flush()

            recipients: List[UUID] = []
            if status == MembershipStatus.ACTIVE:
                recipients = [m.user_id for m in active] + [user_id]

            return _JoinOutcome(
                group_id=group.id,
                group_name=group.name,
                status=status,
                display_name=name,
                joined_at=now,
                recipients=recipients,
            )

        outcome = run_in_transaction(self.engine, unit_of_work)

        logger.info(
            f"User {user_id} joined group {outcome.group_id} as {outcome.status.value} "
            f"via link {share_link.id}"
        )

        if outcome.status == MembershipStatus.ACTIVE:
            self.fanout.dispatch_member_joined(
                outcome.recipients,
                target_user_id=user_id,
                target_name=outcome.display_name,
                group_id=outcome.group_id,
                group_name=outcome.group_name,
                timestamp=outcome.joined_at,
            )

        return JoinResult(
            group_id=outcome.group_id,
            group_name=outcome.group_name,
            success=outcome.status == MembershipStatus.ACTIVE,
            member_status=outcome.status,
        )
