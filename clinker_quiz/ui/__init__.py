"""Qt UI components for the ClinkerQuiz desktop client."""

from .dialog_helpers import (
    confirm_delete_quiz,
    confirm_discard_draft,
    confirm_remove_question,
    save_and_open_report,
    show_error,
    show_info,
    show_warning,
)
from .main_window import MainWindow
from .question_renderer import render_question_with_options, render_review

__all__ = [
    "MainWindow",
    "confirm_delete_quiz",
    "confirm_discard_draft",
    "confirm_remove_question",
    "save_and_open_report",
    "show_error",
    "show_info",
    "show_warning",
    "render_question_with_options",
    "render_review",
]
