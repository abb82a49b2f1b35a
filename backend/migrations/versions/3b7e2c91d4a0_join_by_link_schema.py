"""join by link schema

Revision ID: 3b7e2c91d4a0
Revises:
Create Date: 2026-10-18 10:42:11.381204

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "3b7e2c91d4a0"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # Create users table
    op.create_table(
        "user",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("display_name", sa.String(length=100), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_user_email"), "user", ["email"], unique=True)

    # Create groups table
    op.create_table(
        "group",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=True),
        sa.Column(
            "approval_policy",
            sa.Enum("AUTOMATIC", "ADMIN_REQUIRED", name="approvalpolicy"),
            nullable=False,
        ),
        sa.Column("owner_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("membership_version", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["owner_id"], ["user.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_group_name"), "group", ["name"], unique=False)

    # Create group memberships table
    op.create_table(
        "groupmembership",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("group_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("role", sa.Enum("ADMIN", "MEMBER", name="membershiprole"), nullable=False),
        sa.Column(
            "status", sa.Enum("ACTIVE", "PENDING", name="membershipstatus"), nullable=False
        ),
        sa.Column("display_name", sa.String(length=100), nullable=False),
        sa.Column("theme_light", sa.String(length=7), nullable=True),
        sa.Column("theme_dark", sa.String(length=7), nullable=True),
        sa.Column("theme_name", sa.String(length=50), nullable=True),
        sa.Column("theme_pattern", sa.String(length=20), nullable=True),
        sa.Column("theme_color_index", sa.Integer(), nullable=True),
        sa.Column("theme_assigned_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("invited_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.ForeignKeyConstraint(["group_id"], ["group.id"]),
        sa.ForeignKeyConstraint(["invited_by"], ["user.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "group_id", name="uq_groupmembership_user_group"),
    )
    op.create_index(
        op.f("ix_groupmembership_group_id"), "groupmembership", ["group_id"], unique=False
    )
    op.create_index(
        op.f("ix_groupmembership_user_id"), "groupmembership", ["user_id"], unique=False
    )

    # Create share links and their token index
    op.create_table(
        "sharelink",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("token", sa.String(length=64), nullable=False),
        sa.Column("group_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("created_by", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["created_by"], ["user.id"]),
        sa.ForeignKeyConstraint(["group_id"], ["group.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("token"),
    )
    op.create_index(op.f("ix_sharelink_group_id"), "sharelink", ["group_id"], unique=False)
    op.create_index(
        op.f("ix_sharelink_expires_at"), "sharelink", ["expires_at"], unique=False
    )

    op.create_table(
        "sharelinktoken",
        sa.Column("token", sa.String(length=64), nullable=False),
        sa.Column("group_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("share_link_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.ForeignKeyConstraint(["group_id"], ["group.id"]),
        sa.PrimaryKeyConstraint("token"),
    )
    op.create_index(
        op.f("ix_sharelinktoken_share_link_id"),
        "sharelinktoken",
        ["share_link_id"],
        unique=False,
    )

    # Create per-user activity feed
    op.create_table(
        "activityfeeditem",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("group_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("group_name", sa.String(length=100), nullable=True),
        sa.Column(
            "event_type", sa.Enum("MEMBER_JOINED", name="activityeventtype"), nullable=False
        ),
        sa.Column("action", sa.Enum("JOIN", name="activityaction"), nullable=False),
        sa.Column("actor_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("actor_name", sa.String(length=100), nullable=False),
        sa.Column("details", sa.JSON(), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["group_id"], ["group.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_activityfeeditem_user_id"), "activityfeeditem", ["user_id"], unique=False
    )
    op.create_index(
        op.f("ix_activityfeeditem_group_id"), "activityfeeditem", ["group_id"], unique=False
    )
    op.create_index(
        op.f("ix_activityfeeditem_timestamp"), "activityfeeditem", ["timestamp"], unique=False
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("activityfeeditem")
    op.drop_table("sharelinktoken")
    op.drop_table("sharelink")
    op.drop_table("groupmembership")
    op.drop_table("group")
    op.drop_table("user")
    sa.Enum(name="activityaction").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="activityeventtype").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="membershipstatus").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="membershiprole").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="approvalpolicy").drop(op.get_bind(), checkfirst=True)
