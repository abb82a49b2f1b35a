import logging
from typing import Iterable, Optional

from .errors import (
    DisplayNameConflictError,
    GroupAtCapacityError,
    GroupTooLargeError,
    InvalidDisplayNameError,
)

logger = logging.getLogger(__name__)

APPROVAL_AUTOMATIC = "automatic"
APPROVAL_ADMIN_REQUIRED = "admin-required"

STATUS_ACTIVE = "active"
STATUS_PENDING = "pending"


def check_capacity(current_active_count: int, max_members: int) -> None:
    """Reject a join that would push the active count past ``max_members``."""
    if current_active_count + 1 > max_members:
        logger.info(
            f"Join rejected: group at capacity ({current_active_count}/{max_members})"
        )
        raise GroupAtCapacityError(max_members)


def detect_overflow(stored_count: int, max_members: int, group_id=None) -> None:
    """
    Flag a membership set that is already larger than allowed.

    A stored count above the maximum means a write bypassed the capacity
    check somewhere, so this raises GroupTooLargeError rather than the
    ordinary capacity rejection.
    """
    if stored_count > max_members:
        logger.error(
            f"GROUP_TOO_LARGE: group {group_id} has {stored_count} active members, "
            f"maximum is {max_members}"
        )
        raise GroupTooLargeError(stored_count, max_members)


def normalize_display_name(name: Optional[str]) -> str:
    return (name or "").strip()


def _comparison_key(name: str) -> str:
    return normalize_display_name(name).casefold()


def find_display_name_conflict(
    active_names: Iterable[Optional[str]], candidate: str
) -> Optional[str]:
    """Return the first active name equal to ``candidate`` ignoring case, if any."""
    wanted = _comparison_key(candidate)
    for name in active_names:
        if name and _comparison_key(name) == wanted:
            return name
    return None


def check_display_name(active_names: Iterable[Optional[str]], candidate: str) -> str:
    """
    Validate a group-scoped display name against the active members.

    Returns the normalized candidate. Pending members must not be passed in;
    their names do not reserve anything.
    """
    normalized = normalize_display_name(candidate)
    if not normalized:
        raise InvalidDisplayNameError()

    conflict = find_display_name_conflict(active_names, normalized)
    if conflict is not None:
        raise DisplayNameConflictError(normalized, conflict)
    return normalized


def decide_member_status(approval_policy: str) -> str:
    """Map a group's approval policy to the status of a new membership."""
    if approval_policy == APPROVAL_AUTOMATIC:
        return STATUS_ACTIVE
    if approval_policy == APPROVAL_ADMIN_REQUIRED:
        return STATUS_PENDING
    raise ValueError(f"Unknown approval policy: {approval_policy}")
