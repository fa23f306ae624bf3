"""Color palette for ClinkerQuiz supporting light and dark themes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class Theme(Enum):
    """Application theme options."""
    LIGHT = auto()
    DARK = auto()


@dataclass(frozen=True)
class ThemeColors:
    """Color pair for one role in both themes."""
    light: str
    dark: str

    def get(self, theme: Theme) -> str:
        return self.light if theme == Theme.LIGHT else self.dark


class ColorPalette:
    """Centralized color definitions for the application."""

    TEXT_PRIMARY = ThemeColors(light="#111827", dark="#F9FAFB")
    TEXT_SECONDARY = ThemeColors(light="#4B5563", dark="#9CA3AF")

    BACKGROUND_PRIMARY = ThemeColors(light="#EEF2FF", dark="#111827")
    BACKGROUND_CARD = ThemeColors(light="#FFFFFF", dark="#1F2937")

    # Blue to purple, the brand gradient
    ACCENT_PRIMARY = ThemeColors(light="#3B82F6", dark="#60A5FA")
    ACCENT_SECONDARY = ThemeColors(light="#7C3AED", dark="#A78BFA")

    SUCCESS = ThemeColors(light="#15803D", dark="#4ADE80")
    WARNING = ThemeColors(light="#B45309", dark="#FACC15")
    ERROR = ThemeColors(light="#B91C1C", dark="#F87171")

    BORDER_PRIMARY = ThemeColors(light="#D1D5DB", dark="#374151")

    BUTTON_PRIMARY_BG = ThemeColors(light="#3B82F6", dark="#60A5FA")
    BUTTON_PRIMARY_TEXT = ThemeColors(light="#FFFFFF", dark="#111827")
    BUTTON_SECONDARY_BG = ThemeColors(light="#F3F4F6", dark="#374151")
    BUTTON_HOVER_BG = ThemeColors(light="#E5E7EB", dark="#4B5563")

    # Leaderboard podium
    RANK_GOLD = ThemeColors(light="#FFD700", dark="#B8860B")
    RANK_SILVER = ThemeColors(light="#C0C0C0", dark="#808080")
    RANK_BRONZE = ThemeColors(light="#CD7F32", dark="#8B5A2B")
