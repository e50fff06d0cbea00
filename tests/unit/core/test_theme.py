"""Tests for CLI theme colors."""

import pytest
from logkeeper.core.theme import ThemeColors, get_rich_theme, get_theme
from logkeeper.retention.models import RetentionAction
from pydantic import ValidationError
from rich.theme import Theme


class TestThemeColors:
    """Tests for ThemeColors validation."""

    def test_defaults_valid(self) -> None:
        """Default colors pass validation."""
        colors = ThemeColors()
        assert colors.delete == "#f53263"

    def test_short_hex_accepted(self) -> None:
        """Three-digit hex codes are accepted."""
        assert ThemeColors(info="#abc").info == "#abc"

    @pytest.mark.parametrize("value", ["red", "#12", "#gggggg", 5])
    def test_invalid_colors_rejected(self, value: object) -> None:
        """Non-hex values are rejected."""
        with pytest.raises(ValidationError):
            ThemeColors(info=value)  # type: ignore[arg-type]

    def test_action_color(self) -> None:
        """Each action maps to its own color field."""
        colors = ThemeColors(compress="#123456")

        assert colors.action_color(RetentionAction.COMPRESS) == "#123456"
        assert colors.action_color(RetentionAction.KEEP) == colors.keep


class TestRichTheme:
    """Tests for Rich theme conversion."""

    def test_action_styles_present(self) -> None:
        """Each lifecycle action has a style."""
        theme = get_rich_theme()

        for name in ("action.keep", "action.compress", "action.delete", "bold_header"):
            assert name in theme.styles

    def test_get_theme_cached(self) -> None:
        """get_theme returns the same instance on every call."""
        theme = get_theme()
        assert isinstance(theme, Theme)
        assert get_theme() is theme
