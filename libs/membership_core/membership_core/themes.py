import logging
import random
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Set, Tuple

logger = logging.getLogger(__name__)

COLOR_PATTERNS = ("solid", "dots", "stripes", "diagonal")

# (name, light, dark)
USER_COLORS = (
    ("Ruby", "#DC2626", "#EF4444"),
    ("Tangerine", "#EA580C", "#F97316"),
    ("Amber", "#D97706", "#F59E0B"),
    ("Lime", "#65A30D", "#84CC16"),
    ("Emerald", "#059669", "#10B981"),
    ("Teal", "#0D9488", "#14B8A6"),
    ("Cyan", "#0891B2", "#06B6D4"),
    ("Sky", "#0284C7", "#0EA5E9"),
    ("Sapphire", "#2563EB", "#3B82F6"),
    ("Indigo", "#4F46E5", "#6366F1"),
    ("Violet", "#7C3AED", "#8B5CF6"),
    ("Purple", "#9333EA", "#A855F7"),
    ("Fuchsia", "#C026D3", "#D946EF"),
    ("Pink", "#DB2777", "#EC4899"),
    ("Rose", "#E11D48", "#F43F5E"),
    ("Bronze", "#A16207", "#CA8A04"),
)

DEPARTED_COLOR_INDEX = -1
DEPARTED_COLOR = ("Departed", "#9CA3AF", "#6B7280")
DEPARTED_PATTERN = "solid"

ThemeKey = Tuple[int, str]


@dataclass(frozen=True)
class ThemeColor:
    """Visual identity assigned to a member when the membership is created."""

    light: str
    dark: str
    name: str
    pattern: str
    color_index: int
    assigned_at: datetime

    @property
    def key(self) -> ThemeKey:
        return (self.color_index, self.pattern)

    @property
    def is_placeholder(self) -> bool:
        return self.color_index == DEPARTED_COLOR_INDEX


def combination_count() -> int:
    return len(USER_COLORS) * len(COLOR_PATTERNS)


def build_theme(color_index: int, pattern: str, assigned_at: datetime) -> ThemeColor:
    if not 0 <= color_index < len(USER_COLORS):
        raise ValueError(f"color_index out of range: {color_index}")
    if pattern not in COLOR_PATTERNS:
        raise ValueError(f"Unknown pattern: {pattern}")

    name, light, dark = USER_COLORS[color_index]
    return ThemeColor(
        light=light,
        dark=dark,
        name=name,
        pattern=pattern,
        color_index=color_index,
        assigned_at=assigned_at,
    )


def departed_member_theme(assigned_at: datetime) -> ThemeColor:
    """Placeholder theme shown for members who have left the group."""
    name, light, dark = DEPARTED_COLOR
    return ThemeColor(
        light=light,
        dark=dark,
        name=name,
        pattern=DEPARTED_PATTERN,
        color_index=DEPARTED_COLOR_INDEX,
        assigned_at=assigned_at,
    )


def _used_keys(existing_themes: Iterable[Optional[ThemeColor]]) -> Set[ThemeKey]:
    used = set()
    for theme in existing_themes:
        if theme is None or theme.is_placeholder:
            continue
        used.add(theme.key)
    return used


def generate_unique_theme_color(
    group_id,
    existing_themes: Iterable[Optional[ThemeColor]],
    assigned_at: datetime,
    user_id=None,
    rng: Optional[random.Random] = None,
) -> ThemeColor:
    """
    Pick a (color, pattern) combination not held by any existing theme.

    Draws uniformly from the unused combinations. When every combination is
    already taken, falls back to a uniform draw over the whole space so a
    join never fails because of colors.

    Args:
        group_id: Group the member is joining (used for logging only).
        existing_themes: Themes already assigned in the group. ``None`` entries
            and the departed-member placeholder are ignored.
        assigned_at: Timestamp stored on the new theme.
        user_id: Joining user (used for logging only).
        rng: Random source. Defaults to a fresh ``random.Random()``.

    Returns:
        A new ThemeColor. Never the placeholder.
    """
    rng = rng or random.Random()
    used = _used_keys(existing_themes)

    available: List[ThemeKey] = [
        (color_index, pattern)
        for color_index in range(len(USER_COLORS))
        for pattern in COLOR_PATTERNS
        if (color_index, pattern) not in used
    ]

    if available:
        color_index, pattern = rng.choice(available)
        return build_theme(color_index, pattern, assigned_at)

    logger.warning(
        f"Unique theme combinations exhausted for group {group_id}; "
        f"reusing an existing combination for user {user_id} "
        f"(used={len(used)}, total={combination_count()})"
    )
    color_index = rng.randrange(len(USER_COLORS))
    pattern = rng.choice(COLOR_PATTERNS)
    return build_theme(color_index, pattern, assigned_at)
