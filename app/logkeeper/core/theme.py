"""Color theme for logkeeper console output."""

from functools import cache
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field
from rich.theme import Theme

from logkeeper.retention.models import RetentionAction

HexColor = Annotated[str, Field(pattern=r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")]


class ThemeColors(BaseModel):
    """Colors used by tables and status messages.

    Every value is a hex code (#RRGGBB or #RGB).
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    muted: HexColor = "#b2bec3"
    header: HexColor = "#69B9A1"
    border: HexColor = "#29526d"

    success: HexColor = "#03b971"
    warning: HexColor = "#f5b332"
    error: HexColor = "#f53263"
    info: HexColor = "#0ec1c8"

    keep: HexColor = "#69B9A1"
    compress: HexColor = "#0e8ac8"
    delete: HexColor = "#f53263"

    def action_color(self, action: RetentionAction) -> str:
        """Return the color for a lifecycle action."""
        return getattr(self, action.value)


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Build a Rich theme from a color set.

    Args:
        colors: Colors to use. Defaults to ThemeColors().

    Returns:
        Rich Theme with semantic and per-action styles.
    """
    colors = colors or ThemeColors()

    styles = {
        "muted": colors.muted,
        "border": colors.border,
        "bold_header": f"bold {colors.header}",
        "success": colors.success,
        "warning": colors.warning,
        "error": f"bold {colors.error}",
        "info": colors.info,
    }
    for action in RetentionAction:
        style = colors.action_color(action)
        if action is RetentionAction.DELETE:
            style = f"bold {style}"
        styles[f"action.{action.value}"] = style

    return Theme(styles)


@cache
def get_theme() -> Theme:
    """Return the shared Rich theme."""
    return get_rich_theme()
