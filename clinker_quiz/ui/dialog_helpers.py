"""Helper functions for common dialog patterns in the Qt client."""

from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import QUrl
from PySide6.QtGui import QDesktopServices
from PySide6.QtWidgets import QFileDialog, QMessageBox, QWidget

from clinker_quiz.constants.ui_constants import REPORT_DIALOG_TITLE, REPORT_FILE_FILTER
from clinker_quiz.core.report_exporter import save_document


def confirm_delete_quiz(parent: QWidget, quiz_title: str) -> bool:
    """Show confirmation dialog for deleting a quiz.

    Args:
        parent: Parent widget for the dialog
        quiz_title: Title of the quiz about to be deleted

    Returns:
        True if user confirmed, False otherwise
    """
    reply = QMessageBox.question(
        parent,
        "Confirm Delete",
        f"Delete '{quiz_title}'? Results already recorded for it are kept.",
        QMessageBox.Yes | QMessageBox.No,
        QMessageBox.No
    )
    return reply == QMessageBox.Yes


def confirm_remove_question(parent: QWidget, question_number: int) -> bool:
    reply = QMessageBox.question(
        parent,
        "Confirm Remove",
        f"Are you sure you want to remove question {question_number}?",
        QMessageBox.Yes | QMessageBox.No,
        QMessageBox.No
    )
    return reply == QMessageBox.Yes


def confirm_discard_draft(parent: QWidget) -> bool:
    """Ask before leaving the creator with an unsaved quiz."""
    reply = QMessageBox.question(
        parent,
        "Unsaved Quiz",
        "The quiz you are editing has not been saved. Discard it?",
        QMessageBox.Yes | QMessageBox.No,
        QMessageBox.No
    )
    return reply == QMessageBox.Yes


def show_error(parent: QWidget, title: str, message: str) -> None:
    QMessageBox.critical(parent, title, message)


def show_info(parent: QWidget, title: str, message: str) -> None:
    QMessageBox.information(parent, title, message)


def show_warning(parent: QWidget, title: str, message: str) -> None:
    QMessageBox.warning(parent, title, message)


def save_and_open_report(parent: QWidget, default_name: str, document: str) -> Path | None:
    """Ask where to save an HTML report, write it and open it in the browser.

    Returns the saved path, or None when the user cancelled or writing failed.
    """
    file_path, _ = QFileDialog.getSaveFileName(
        parent,
        REPORT_DIALOG_TITLE,
        str(Path.home() / default_name),
        REPORT_FILE_FILTER,
    )
    if not file_path:
        return None

    try:
        saved = save_document(Path(file_path), document)
    except OSError as exc:
        show_error(parent, "Export failed", str(exc))
        return None

    QDesktopServices.openUrl(QUrl.fromLocalFile(str(saved)))
    return saved
