"""Color palette for the reader themes and the quiz question palette."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from tutor_app.core.services.quiz_session import QuestionStatus


class Theme(str, Enum):
    """Reader color modes."""
    DEFAULT = "default"
    SEPIA = "sepia"
    DARK = "dark"


@dataclass(frozen=True)
class ThemeColors:
    """Color definitions for one role across the reader themes."""
    default: str
    sepia: str
    dark: str

    def get(self, theme: Theme) -> str:
        """Get color value for the specified theme."""
        if theme is Theme.SEPIA:
            return self.sepia
        if theme is Theme.DARK:
            return self.dark
        return self.default


class ColorPalette:
    """Centralized color definitions for the reader pages."""

    PAGE_BACKGROUND = ThemeColors(
        default="#F1F5F9",    # Slate 100
        sepia="#F4ECD8",
        dark="#121212",
    )

    TEXT_PRIMARY = ThemeColors(
        default="#030712",    # Gray 950
        sepia="#5B4636",
        dark="#E5E5E5",
    )

    TEXT_HEADING = ThemeColors(
        default="#111827",
        sepia="#433422",
        dark="#F5F5F5",
    )

    # Hindi translation lines
    TEXT_SECONDARY = ThemeColors(
        default="#1E40AF",    # Blue 800
        sepia="#6D5A4B",
        dark="#60A5FA",
    )

    HEADER_BUTTON_BG = ThemeColors(
        default="rgba(255, 255, 255, 0.2)",
        sepia="#E9E0C9",
        dark="rgba(255, 255, 255, 0.1)",
    )

    BORDER = ThemeColors(
        default="#E2E8F0",
        sepia="#E6DCC6",
        dark="#27272A",
    )


# Quiz palette badge colors, one per status.
STATUS_COLORS: dict[QuestionStatus, str] = {
    QuestionStatus.REVIEW: "#8B5CF6",       # Violet
    QuestionStatus.ANSWERED: "#10B981",     # Emerald
    QuestionStatus.CURRENT: "#3B82F6",      # Blue
    QuestionStatus.VISITED: "#F43F5E",      # Rose, seen but unanswered
    QuestionStatus.NOT_VISITED: "#E5E7EB",  # Gray
}


def theme_colors(theme: Theme) -> dict[str, str]:
    """Flatten the palette for one theme into CSS-variable style keys."""
    return {
        "page_background": ColorPalette.PAGE_BACKGROUND.get(theme),
        "text_primary": ColorPalette.TEXT_PRIMARY.get(theme),
        "text_heading": ColorPalette.TEXT_HEADING.get(theme),
        "text_secondary": ColorPalette.TEXT_SECONDARY.get(theme),
        "header_button_bg": ColorPalette.HEADER_BUTTON_BG.get(theme),
        "border": ColorPalette.BORDER.get(theme),
    }


def status_color(status: QuestionStatus) -> str:
    return STATUS_COLORS[status]
