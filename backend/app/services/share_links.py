import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Optional
from uuid import UUID

from sqlalchemy import delete
from sqlalchemy.engine import Engine
from sqlmodel import Session, select, func

from membership_core.errors import (
    InvalidExpirationError,
    LinkExpiredError,
    NotFoundError,
    NotGroupMemberError,
)

from ..core.config import settings
from ..models.group import Group
from ..models.membership import GroupMembership, MembershipStatus
from ..models.share_link import ShareLink, ShareLinkToken
from ..models.types import as_utc, utc_now

logger = logging.getLogger(__name__)


class LookupStatus(str, Enum):
    VALID = "valid"
    EXPIRED = "expired"
    MISSING = "missing"


@dataclass
class ShareLinkLookup:
    status: LookupStatus
    group_id: Optional[UUID] = None
    share_link: Optional[ShareLink] = None


@dataclass
class ShareLinkResult:
    shareable_path: str
    share_token: str
    expires_at: datetime


@dataclass
class GroupPreview:
    group_id: UUID
    group_name: str
    group_description: str
    member_count: int
    is_already_member: bool


def generate_share_token() -> str:
    return secrets.token_urlsafe(settings.SHARE_TOKEN_BYTES)


def count_active_members(session: Session, group_id) -> int:
    return session.exec(
        select(func.count(GroupMembership.id)).where(
            GroupMembership.group_id == group_id,
            GroupMembership.status == MembershipStatus.ACTIVE,
        )
    ).one()


class ShareLinkService:
    """Issues, resolves and expires invitation links for groups."""

    def __init__(self, engine: Engine, clock: Callable[[], datetime] = utc_now):
        self.engine = engine
        self.clock = clock

    def resolve_expiration(self, requested: Optional[datetime] = None) -> datetime:
        """Validate a requested expiry, or return the default one."""
        now = self.clock()

        if requested is None:
            return now + timedelta(hours=settings.SHARE_LINK_DEFAULT_EXPIRY_HOURS)

        expires_at = as_utc(requested)
        if expires_at <= now:
            raise InvalidExpirationError("Share link expiration must be in the future")

        max_allowed = now + timedelta(
            days=settings.SHARE_LINK_MAX_EXPIRY_DAYS,
            minutes=settings.SHARE_LINK_EXPIRY_DRIFT_MINUTES,
        )
        if expires_at > max_allowed:
            raise InvalidExpirationError(
                "Share link expiration exceeds the maximum allowed duration"
            )
        return expires_at

    def resolve(self, token: str) -> ShareLinkLookup:
        """Look a token up through the token index. Read-only."""
        if not token:
            return ShareLinkLookup(LookupStatus.MISSING)

        with Session(self.engine) as session:
            index_entry = session.get(ShareLinkToken, token)
            if not index_entry:
                return ShareLinkLookup(LookupStatus.MISSING)

            share_link = session.get(ShareLink, index_entry.share_link_id)
            if not share_link:
                logger.warning(
                    f"Share token index points at missing link {index_entry.share_link_id} "
                    f"in group {index_entry.group_id}"
                )
                return ShareLinkLookup(LookupStatus.MISSING)

            session.expunge(share_link)

        if share_link.expires_at <= self.clock():
            return ShareLinkLookup(LookupStatus.EXPIRED, index_entry.group_id, share_link)

        return ShareLinkLookup(LookupStatus.VALID, index_entry.group_id, share_link)

    def require_valid_link(self, token: str) -> ShareLinkLookup:
        lookup = self.resolve(token)
        if lookup.status == LookupStatus.MISSING:
            raise NotFoundError()
        if lookup.status == LookupStatus.EXPIRED:
            raise LinkExpiredError()
        return lookup

    def remove_expired_links(self, group_id) -> int:
        """Delete expired links of a group together with their token index rows."""
        now = self.clock()
        try:
            with Session(self.engine) as session:
                expired = session.exec(
                    select(ShareLink).where(
                        ShareLink.group_id == group_id,
                        ShareLink.expires_at <= now,
                    )
                ).all()
                if not expired:
                    return 0

                tokens = [link.token for link in expired]
                session.exec(
                    delete(ShareLinkToken)
                    .where(ShareLinkToken.token.in_(tokens))
                    .execution_options(synchronize_session=False)
                )
                for link in expired:
                    session.delete(link)
                session.commit()
                return len(expired)
        except Exception as e:
            logger.error(f"Failed to delete expired share links for group {group_id}: {e}")
            return 0

    def generate_shareable_link(
        self,
        group_id,
        requested_by,
        expires_at: Optional[datetime] = None,
    ) -> ShareLinkResult:
        """Create a new invitation link for a group the requester belongs to."""
        resolved_expires_at = self.resolve_expiration(expires_at)

        with Session(self.engine) as session:
            group = session.get(Group, group_id)
            if not group:
                raise NotFoundError("Group not found")

            membership = session.exec(
                select(GroupMembership).where(
                    GroupMembership.group_id == group_id,
                    GroupMembership.user_id == requested_by,
                    GroupMembership.status == MembershipStatus.ACTIVE,
                )
            ).first()
            if not membership:
                raise NotGroupMemberError()

        expired_removed = self.remove_expired_links(group_id)

        now = self.clock()
        token = generate_share_token()
        with Session(self.engine) as session:
            share_link = ShareLink(
                token=token,
                group_id=group_id,
                created_by=requested_by,
                created_at=now,
                updated_at=now,
                expires_at=resolved_expires_at,
            )
            session.add(share_link)
            session.add(
                ShareLinkToken(
                    token=token, group_id=group_id, share_link_id=share_link.id
                )
            )
            session.commit()

        logger.info(
            f"Share link created for group {group_id} by {requested_by}, "
            f"expires {resolved_expires_at.isoformat()}, "
            f"removed {expired_removed} expired link(s)"
        )

        return ShareLinkResult(
            shareable_path=f"{settings.SHARE_LINK_PATH}?shareToken={token}",
            share_token=token,
            expires_at=resolved_expires_at,
        )

    def preview_group_by_link(self, user_id, token: str) -> GroupPreview:
        """Summarize the group behind a link for someone deciding whether to join."""
        lookup = self.require_valid_link(token)

        with Session(self.engine) as session:
            group = session.get(Group, lookup.group_id)
            if not group:
                raise NotFoundError("Group not found")

            existing = session.exec(
                select(GroupMembership).where(
                    GroupMembership.group_id == group.id,
                    GroupMembership.user_id == user_id,
                )
            ).first()

            return GroupPreview(
                group_id=group.id,
                group_name=group.name,
                group_description=group.description or "",
                member_count=count_active_members(session, group.id),
                is_already_member=existing is not None,
            )
