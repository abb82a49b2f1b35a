"""
SQLModel models for the Group Ledger join-by-link service.

This module exports all database models for use with Alembic migrations
and throughout the application.
"""

from .user import User
from .group import Group, ApprovalPolicy
from .membership import GroupMembership, MembershipRole, MembershipStatus
from .share_link import ShareLink, ShareLinkToken
from .activity import ActivityFeedItem, ActivityEventType, ActivityAction

# Export all models for Alembic auto-generation
__all__ = [
    "User",
    "Group",
    "ApprovalPolicy",
    "GroupMembership",
    "MembershipRole",
    "MembershipStatus",
    "ShareLink",
    "ShareLinkToken",
    "ActivityFeedItem",
    "ActivityEventType",
    "ActivityAction",
]
