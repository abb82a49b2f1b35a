import random
from datetime import datetime

import pytest

from membership_core import (
    COLOR_PATTERNS,
    USER_COLORS,
    build_theme,
    departed_member_theme,
    generate_unique_theme_color,
)
from membership_core.themes import DEPARTED_COLOR_INDEX, combination_count

ASSIGNED_AT = datetime(2024, 3, 1, 12, 0, 0)


def all_themes():
    return [
        build_theme(color_index, pattern, ASSIGNED_AT)
        for color_index in range(len(USER_COLORS))
        for pattern in COLOR_PATTERNS
    ]


class TestBuildTheme:
    def test_build_theme_uses_palette(self):
        theme = build_theme(0, "dots", ASSIGNED_AT)

        assert theme.name == "Ruby"
        assert theme.light == "#DC2626"
        assert theme.dark == "#EF4444"
        assert theme.pattern == "dots"
        assert theme.key == (0, "dots")
        assert theme.assigned_at == ASSIGNED_AT
        assert not theme.is_placeholder

    def test_build_theme_rejects_out_of_range(self):
        with pytest.raises(ValueError):
            build_theme(len(USER_COLORS), "solid", ASSIGNED_AT)
        with pytest.raises(ValueError):
            build_theme(DEPARTED_COLOR_INDEX, "solid", ASSIGNED_AT)
        with pytest.raises(ValueError):
            build_theme(0, "checkered", ASSIGNED_AT)

    def test_departed_placeholder(self):
        theme = departed_member_theme(ASSIGNED_AT)

        assert theme.is_placeholder
        assert theme.color_index == -1
        assert theme.pattern == "solid"

    def test_theme_is_immutable(self):
        theme = build_theme(1, "solid", ASSIGNED_AT)
        with pytest.raises(AttributeError):
            theme.pattern = "dots"


class TestGenerateUniqueThemeColor:
    def test_empty_group_gets_valid_theme(self):
        theme = generate_unique_theme_color("g1", [], ASSIGNED_AT, rng=random.Random(7))

        assert 0 <= theme.color_index < len(USER_COLORS)
        assert theme.pattern in COLOR_PATTERNS
        assert theme.assigned_at == ASSIGNED_AT

    def test_never_reuses_existing_combination(self):
        rng = random.Random(42)
        existing = []

        for _ in range(combination_count()):
            theme = generate_unique_theme_color("g1", existing, ASSIGNED_AT, rng=rng)
            assert theme.key not in {t.key for t in existing}
            existing.append(theme)

        assert len({t.key for t in existing}) == combination_count()

    def test_picks_the_only_free_combination(self):
        themes = all_themes()
        free = themes.pop(17)

        theme = generate_unique_theme_color("g1", themes, ASSIGNED_AT, rng=random.Random(3))

        assert theme.key == free.key

    def test_exhausted_space_still_returns_valid_theme(self, caplog):
        theme = generate_unique_theme_color(
            "g1", all_themes(), ASSIGNED_AT, user_id="u1", rng=random.Random(5)
        )

        assert 0 <= theme.color_index < len(USER_COLORS)
        assert theme.pattern in COLOR_PATTERNS
        assert not theme.is_placeholder
        assert "exhausted" in caplog.text

    def test_ignores_missing_and_placeholder_themes(self):
        themes = all_themes()
        free = themes.pop(0)
        themes.extend([None, departed_member_theme(ASSIGNED_AT)])

        theme = generate_unique_theme_color("g1", themes, ASSIGNED_AT, rng=random.Random(9))

        assert theme.key == free.key

    def test_same_seed_same_result(self):
        existing = all_themes()[:10]

        first = generate_unique_theme_color("g1", existing, ASSIGNED_AT, rng=random.Random(11))
        second = generate_unique_theme_color("g1", existing, ASSIGNED_AT, rng=random.Random(11))

        assert first == second
