# libs/membership_core/membership_core/__init__.py

from .themes import (
    COLOR_PATTERNS,
    USER_COLORS,
    ThemeColor,
    build_theme,
    departed_member_theme,
    generate_unique_theme_color,
)
from .rules import (
    APPROVAL_ADMIN_REQUIRED,
    APPROVAL_AUTOMATIC,
    STATUS_ACTIVE,
    STATUS_PENDING,
    check_capacity,
    check_display_name,
    decide_member_status,
    detect_overflow,
    find_display_name_conflict,
)

__all__ = [
    "COLOR_PATTERNS",
    "USER_COLORS",
    "ThemeColor",
    "build_theme",
    "departed_member_theme",
    "generate_unique_theme_color",
    "APPROVAL_ADMIN_REQUIRED",
    "APPROVAL_AUTOMATIC",
    "STATUS_ACTIVE",
    "STATUS_PENDING",
    "check_capacity",
    "check_display_name",
    "decide_member_status",
    "detect_overflow",
    "find_display_name_conflict",
]
