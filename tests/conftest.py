import random
from datetime import datetime, timedelta, timezone
from uuid import UUID

import pytest
from sqlmodel import Session, SQLModel, select

from backend.app.core.config import settings
from backend.app.core.database import create_database_engine
from backend.app.models import (
    ApprovalPolicy,
    Group,
    GroupMembership,
    MembershipRole,
    MembershipStatus,
    User,
)
from backend.app.services.joins import JoinService
from backend.app.services.notifications import NotificationFanout
from backend.app.services.share_links import ShareLinkService
from membership_core import build_theme


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture(autouse=True)
def quiet_settings(monkeypatch):
    """Inline fan-out and no sleeping between transaction retries."""
    monkeypatch.setattr(settings, "JOIN_RETRY_MIN_WAIT", 0)
    monkeypatch.setattr(settings, "JOIN_RETRY_MAX_WAIT", 0)
    monkeypatch.setattr(settings, "NOTIFICATION_FANOUT_ASYNC", False)


@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite so separate sessions use separate connections."""
    engine = create_database_engine(f"sqlite:///{tmp_path / 'groupledger.db'}")
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def clock():
    return FrozenClock(datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def share_links(engine, clock):
    return ShareLinkService(engine, clock=clock)


@pytest.fixture
def fanout(engine):
    return NotificationFanout(engine)


@pytest.fixture
def join_service(engine, share_links, fanout, clock):
    return JoinService(
        engine,
        share_links=share_links,
        fanout=fanout,
        clock=clock,
        rng=random.Random(1234),
    )


@pytest.fixture
def make_user(engine):
    def _make_user(display_name: str) -> User:
        email = f"{display_name.lower().replace(' ', '.')}@example.com"
        user = User(email=email, display_name=display_name)
        with Session(engine) as session:
            session.add(user)
            session.commit()
            session.refresh(user)
            session.expunge(user)
        return user

    return _make_user


@pytest.fixture
def make_group(engine):
    def _make_group(owner: User, approval_policy=ApprovalPolicy.AUTOMATIC, name="Trip") -> Group:
        group = Group(
            name=name,
            description="Shared costs",
            approval_policy=approval_policy,
            owner_id=owner.id,
        )
        with Session(engine) as session:
            session.add(group)
            session.commit()
            session.refresh(group)
            session.expunge(group)
        return group

    return _make_group


@pytest.fixture
def add_member(engine, clock):
    """Insert a membership directly, bypassing the join flow."""

    def _add_member(
        group: Group,
        user: User,
        display_name: str = None,
        status=MembershipStatus.ACTIVE,
        role=MembershipRole.MEMBER,
        color_index: int = None,
        pattern: str = "solid",
    ) -> GroupMembership:
        membership = GroupMembership(
            user_id=user.id,
            group_id=group.id,
            role=role,
            status=status,
            display_name=display_name or user.display_name,
            joined_at=clock(),
        )
        if color_index is not None:
            membership.apply_theme(build_theme(color_index, pattern, clock()))
        with Session(engine) as session:
            session.add(membership)
            session.commit()
            session.refresh(membership)
            session.expunge(membership)
        return membership

    return _add_member


@pytest.fixture
def admin(make_user):
    return make_user("Alice")


@pytest.fixture
def group(make_group, add_member, admin):
    group = make_group(admin)
    add_member(group, admin, role=MembershipRole.ADMIN, color_index=0)
    return group


@pytest.fixture
def fetch_memberships(engine):
    def _fetch(group_id: UUID):
        with Session(engine) as session:
            return session.exec(
                select(GroupMembership).where(GroupMembership.group_id == group_id)
            ).all()

    return _fetch
