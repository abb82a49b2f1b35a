"""
Domain errors raised by the join-by-link flow.

Each error carries a stable ``code`` and a human-readable ``message``.
Mapping to transport status codes is done by the calling boundary.
"""

from typing import Optional


class MembershipError(Exception):
    """Base class for all join-by-link business errors."""

    code = "MEMBERSHIP_ERROR"
    default_message = "Membership operation failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


class NotFoundError(MembershipError):
    """Raised when a share token or group does not resolve."""

    code = "NOT_FOUND"
    default_message = "Invalid or expired share link"


class LinkExpiredError(MembershipError):
    code = "LINK_EXPIRED"
    default_message = (
        "This invitation link has expired. "
        "Please request a new one from the group admin."
    )


class InvalidExpirationError(MembershipError):
    code = "INVALID_EXPIRATION"
    default_message = "Invalid share link expiration timestamp"


class GroupAtCapacityError(MembershipError):
    """The group is legitimately full."""

    code = "GROUP_AT_CAPACITY"

    def __init__(self, max_members: int):
        self.max_members = max_members
        super().__init__(
            f"Cannot add member. Group has reached maximum size of {max_members} members"
        )


class GroupTooLargeError(MembershipError):
    """The stored member count already exceeds the maximum.

    This is never a user error: something wrote past the capacity check.
    """

    code = "GROUP_TOO_LARGE"

    def __init__(self, stored_count: int, max_members: int):
        self.stored_count = stored_count
        self.max_members = max_members
        super().__init__(
            f"Group has {stored_count} active members, exceeding the maximum of {max_members}"
        )


class DisplayNameConflictError(MembershipError):
    code = "DISPLAY_NAME_CONFLICT"

    def __init__(self, candidate_name: str, conflicting_name: str):
        self.candidate_name = candidate_name
        self.conflicting_name = conflicting_name
        super().__init__(
            f'The name "{candidate_name}" is already in use by another member. '
            "Please choose a different name."
        )


class InvalidDisplayNameError(MembershipError):
    code = "INVALID_DISPLAY_NAME"
    default_message = "Display name is required"


class AlreadyMemberError(MembershipError):
    code = "ALREADY_MEMBER"
    default_message = "You are already a member of this group"


class NotGroupMemberError(MembershipError):
    code = "NOT_GROUP_MEMBER"
    default_message = "Only group members can generate share links"
