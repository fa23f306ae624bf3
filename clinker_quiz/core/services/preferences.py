"""Persisted UI preferences."""

from __future__ import annotations

from clinker_quiz.constants.storage_constants import THEME_KEY
from clinker_quiz.core.storage import CollectionStore
from clinker_quiz.styling.color_palette import Theme

_THEME_NAMES = {Theme.LIGHT: "light", Theme.DARK: "dark"}


class PreferenceStore:
    def __init__(self, collections: CollectionStore) -> None:
        self._collections = collections

    def get_theme(self) -> Theme:
        # Anything other than "dark" falls back to the light theme.
        raw = self._collections.read_text(THEME_KEY)
        return Theme.DARK if raw == _THEME_NAMES[Theme.DARK] else Theme.LIGHT

    def set_theme(self, theme: Theme) -> None:
        self._collections.write_text(THEME_KEY, _THEME_NAMES[theme])

    def toggle_theme(self) -> Theme:
        theme = Theme.LIGHT if self.get_theme() == Theme.DARK else Theme.DARK
        self.set_theme(theme)
        return theme
