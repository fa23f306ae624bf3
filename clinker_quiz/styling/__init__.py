"""Styling module for the ClinkerQuiz desktop client."""

from .color_palette import ColorPalette, Theme

__all__ = ["ColorPalette", "Theme"]
