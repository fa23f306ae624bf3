"""Component for authoring a quiz: metadata, settings and questions."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QFileDialog,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPlainTextEdit,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from clinker_quiz.constants.quiz_constants import (
    DEFAULT_QUESTION_TIME_LIMIT_SECONDS,
    OPTION_LETTERS,
)
from clinker_quiz.constants.ui_constants import (
    CREATOR_ADD_QUESTION,
    CREATOR_EXPORT,
    CREATOR_IMPORT,
    CREATOR_NEXT_QUESTION,
    CREATOR_PREV_QUESTION,
    CREATOR_REMOVE_QUESTION,
    CREATOR_SAVE_QUIZ,
    EXPORT_DIALOG_TITLE,
    EXPORT_FILE_FILTER,
    IMPORT_DIALOG_TITLE,
    IMPORT_FILE_FILTER,
    PLACEHOLDER_DESCRIPTION,
    PLACEHOLDER_QUESTION,
)
from clinker_quiz.core.errors import QuizImportError, QuizPlatformError
from clinker_quiz.core.models import Quiz, QuizSettings
from clinker_quiz.core.platform_manager import PlatformManager
from clinker_quiz.core.quiz_builder import QuestionDraft, QuizDraft
from clinker_quiz.core.quiz_exporter import save_questions_to_file
from clinker_quiz.core.quiz_importer import load_questions_from_file
from clinker_quiz.styling.color_palette import ColorPalette, Theme
from clinker_quiz.styling.styles import Styles
from clinker_quiz.ui.dialog_helpers import (
    confirm_remove_question,
    show_error,
    show_info,
    show_warning,
)
from clinker_quiz.ui.question_renderer import render_question_with_options


class CreatorPanel(QWidget):
    """Edits a ``QuizDraft`` in place; nothing is stored until Save."""

    def __init__(
        self,
        manager: PlatformManager,
        on_saved: Callable[[Quiz], None],
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.manager = manager
        self.on_saved = on_saved
        self._draft = QuizDraft()
        self._current_index = 0
        self._dirty = False
        self._loading = False
        self._theme = Theme.LIGHT
        self._last_export_path: Path | None = None

        self._build_ui()
        self.reset_state()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        # Quiz details
        details_group = QGroupBox("Quiz details", self)
        details_form = QFormLayout()
        details_group.setLayout(details_form)

        self.title_input = QLineEdit(self)
        self.title_input.setPlaceholderText("Quiz title")
        self.title_input.textChanged.connect(self._mark_dirty)
        details_form.addRow("Title:", self.title_input)

        self.description_input = QPlainTextEdit(self)
        self.description_input.setPlaceholderText(PLACEHOLDER_DESCRIPTION)
        self.description_input.setMaximumHeight(70)
        self.description_input.textChanged.connect(self._mark_dirty)
        details_form.addRow("Description:", self.description_input)

        self.quiz_time_spinbox = QSpinBox(self)
        self.quiz_time_spinbox.setRange(0, 600)
        self.quiz_time_spinbox.setSpecialValueText("No limit")
        self.quiz_time_spinbox.setSuffix(" min")
        self.quiz_time_spinbox.valueChanged.connect(lambda _: self._mark_dirty())
        details_form.addRow("Overall time limit:", self.quiz_time_spinbox)

        settings_row = QHBoxLayout()
        self.public_checkbox = QCheckBox("Public", self)
        self.show_answers_checkbox = QCheckBox("Show correct answers", self)
        self.show_comments_checkbox = QCheckBox("Show comments", self)
        self.allow_retake_checkbox = QCheckBox("Allow retake", self)
        self.randomize_checkbox = QCheckBox("Randomize questions", self)
        for checkbox in (
            self.public_checkbox,
            self.show_answers_checkbox,
            self.show_comments_checkbox,
            self.allow_retake_checkbox,
            self.randomize_checkbox,
        ):
            checkbox.toggled.connect(lambda _: self._mark_dirty())
            settings_row.addWidget(checkbox)
        details_form.addRow("Settings:", settings_row)
        layout.addWidget(details_group)

        # Question navigation
        action_row = QHBoxLayout()
        self.add_button = QPushButton(CREATOR_ADD_QUESTION, self)
        self.add_button.clicked.connect(self._handle_add_question)
        action_row.addWidget(self.add_button)

        self.remove_button = QPushButton(CREATOR_REMOVE_QUESTION, self)
        self.remove_button.clicked.connect(self._handle_remove_question)
        action_row.addWidget(self.remove_button)

        self.prev_button = QPushButton(CREATOR_PREV_QUESTION, self)
        self.prev_button.clicked.connect(lambda: self._navigate(-1))
        action_row.addWidget(self.prev_button)

        self.next_button = QPushButton(CREATOR_NEXT_QUESTION, self)
        self.next_button.clicked.connect(lambda: self._navigate(1))
        action_row.addWidget(self.next_button)

        self.position_label = QLabel("", self)
        action_row.addWidget(self.position_label)
        action_row.addStretch()

        self.import_button = QPushButton(CREATOR_IMPORT, self)
        self.import_button.clicked.connect(self._handle_import)
        action_row.addWidget(self.import_button)

        self.export_button = QPushButton(CREATOR_EXPORT, self)
        self.export_button.clicked.connect(self._handle_export)
        action_row.addWidget(self.export_button)
        layout.addLayout(action_row)

        # Question editor
        self.question_input = QPlainTextEdit(self)
        self.question_input.setPlaceholderText(PLACEHOLDER_QUESTION)
        self.question_input.setMaximumHeight(110)
        self.question_input.textChanged.connect(self._on_question_changed)
        layout.addWidget(self.question_input)

        options_row = QHBoxLayout()
        self.option_inputs: list[QLineEdit] = []
        for letter in OPTION_LETTERS:
            option_input = QLineEdit(self)
            option_input.setPlaceholderText(f"Option {letter}")
            option_input.textChanged.connect(self._on_question_changed)
            options_row.addWidget(option_input)
            self.option_inputs.append(option_input)
        layout.addLayout(options_row)

        detail_row = QHBoxLayout()
        detail_row.addWidget(QLabel("Correct option:", self))
        self.correct_option_combo = QComboBox(self)
        for index, letter in enumerate(OPTION_LETTERS):
            self.correct_option_combo.addItem(letter, userData=index)
        self.correct_option_combo.currentIndexChanged.connect(lambda _: self._on_question_changed())
        detail_row.addWidget(self.correct_option_combo)

        self.time_limit_checkbox = QCheckBox("Time limit for this question", self)
        self.time_limit_checkbox.toggled.connect(self._handle_time_limit_toggle)
        detail_row.addWidget(self.time_limit_checkbox)

        self.time_limit_spinbox = QSpinBox(self)
        self.time_limit_spinbox.setRange(5, 3600)
        self.time_limit_spinbox.setSingleStep(5)
        self.time_limit_spinbox.setSuffix(" s")
        self.time_limit_spinbox.setEnabled(False)
        self.time_limit_spinbox.setValue(DEFAULT_QUESTION_TIME_LIMIT_SECONDS)
        self.time_limit_spinbox.valueChanged.connect(lambda _: self._on_question_changed())
        detail_row.addWidget(self.time_limit_spinbox)
        detail_row.addStretch()
        layout.addLayout(detail_row)

        self.comment_input = QLineEdit(self)
        self.comment_input.setPlaceholderText("Optional comment shown after the quiz")
        self.comment_input.textChanged.connect(self._on_question_changed)
        layout.addWidget(self.comment_input)

        self.preview_view = QWebEngineView(self)
        layout.addWidget(self.preview_view, stretch=1)

        save_row = QHBoxLayout()
        self.status_label = QLabel("", self)
        save_row.addWidget(self.status_label, stretch=1)
        self.save_button = QPushButton(CREATOR_SAVE_QUIZ, self)
        self.save_button.setProperty("primary", True)
        self.save_button.clicked.connect(self._handle_save)
        save_row.addWidget(self.save_button)
        layout.addLayout(save_row)

    # --- Form <-> draft ---

    def _mark_dirty(self) -> None:
        if not self._loading:
            self._dirty = True

    def _on_question_changed(self) -> None:
        if self._loading:
            return
        self._dirty = True
        self._store_current_question()
        self._refresh_preview()

    def _handle_time_limit_toggle(self, checked: bool) -> None:
        self.time_limit_spinbox.setEnabled(checked)
        self._on_question_changed()

    def _store_current_question(self) -> None:
        question = self._draft.questions[self._current_index]
        question.text = self.question_input.toPlainText()
        question.options = [field.text() for field in self.option_inputs]
        question.correct_option_index = int(self.correct_option_combo.currentData())
        question.comment = self.comment_input.text()
        question.time_limit_seconds = (
            int(self.time_limit_spinbox.value()) if self.time_limit_checkbox.isChecked() else 0
        )

    def _show_question(self, index: int) -> None:
        self._current_index = index
        question = self._draft.questions[index]
        self._loading = True
        try:
            self.question_input.setPlainText(question.text)
            for field, text in zip(self.option_inputs, question.options):
                field.setText(text)
            self.correct_option_combo.setCurrentIndex(question.correct_option_index)
            self.comment_input.setText(question.comment)
            has_limit = bool(question.time_limit_seconds)
            self.time_limit_checkbox.setChecked(has_limit)
            self.time_limit_spinbox.setEnabled(has_limit)
            self.time_limit_spinbox.setValue(
                question.time_limit_seconds if has_limit else DEFAULT_QUESTION_TIME_LIMIT_SECONDS
            )
        finally:
            self._loading = False
        self._update_navigation()
        self._refresh_preview()

    def _collect_draft(self) -> QuizDraft:
        self._store_current_question()
        self._draft.title = self.title_input.text()
        self._draft.description = self.description_input.toPlainText()
        self._draft.time_limit_minutes = self.quiz_time_spinbox.value()
        self._draft.is_public = self.public_checkbox.isChecked()
        self._draft.settings = QuizSettings(
            show_correct_answers=self.show_answers_checkbox.isChecked(),
            show_comments=self.show_comments_checkbox.isChecked(),
            allow_retake=self.allow_retake_checkbox.isChecked(),
            randomize_questions=self.randomize_checkbox.isChecked(),
        )
        return self._draft

    def _update_navigation(self) -> None:
        count = len(self._draft.questions)
        self.position_label.setText(f"Question {self._current_index + 1} of {count}")
        self.prev_button.setEnabled(self._current_index > 0)
        self.next_button.setEnabled(self._current_index < count - 1)
        self.remove_button.setEnabled(count > 1)

    def _refresh_preview(self) -> None:
        html = render_question_with_options(
            self.question_input.toPlainText(),
            [field.text() for field in self.option_inputs],
            text_color=ColorPalette.TEXT_PRIMARY.get(self._theme),
        )
        self.preview_view.setHtml(html)

    # --- Actions ---

    def _navigate(self, step: int) -> None:
        self._store_current_question()
        target = max(0, min(len(self._draft.questions) - 1, self._current_index + step))
        self._show_question(target)

    def _handle_add_question(self) -> None:
        self._store_current_question()
        self._draft.questions.append(QuestionDraft())
        self._dirty = True
        self._show_question(len(self._draft.questions) - 1)

    def _handle_remove_question(self) -> None:
        if len(self._draft.questions) <= 1:
            return
        if not confirm_remove_question(self, self._current_index + 1):
            return
        del self._draft.questions[self._current_index]
        self._dirty = True
        self._show_question(min(self._current_index, len(self._draft.questions) - 1))

    def _handle_import(self) -> None:
        file_path, _ = QFileDialog.getOpenFileName(
            self,
            IMPORT_DIALOG_TITLE,
            str(Path.home()),
            IMPORT_FILE_FILTER,
        )
        if not file_path:
            return

        try:
            imported = load_questions_from_file(Path(file_path))
        except QuizImportError as exc:
            show_error(self, "Import failed", str(exc))
            return

        self._store_current_question()
        # An untouched blank first question is replaced rather than kept.
        existing = [question for question in self._draft.questions if question.text.strip()]
        self._draft.questions = existing + imported
        self._dirty = True
        self._show_question(len(existing))
        self.set_status_message(f"Imported {len(imported)} questions.")

    def _handle_export(self) -> None:
        self._store_current_question()
        default_path = self._last_export_path or (Path.home() / "quiz_questions.txt")
        file_path, _ = QFileDialog.getSaveFileName(
            self,
            EXPORT_DIALOG_TITLE,
            str(default_path),
            EXPORT_FILE_FILTER,
        )
        if not file_path:
            return

        try:
            save_questions_to_file(Path(file_path), self._draft.questions)
        except (OSError, ValueError) as exc:
            show_error(self, "Export failed", str(exc))
            return

        self._last_export_path = Path(file_path)
        show_info(self, "Questions saved", f"Questions exported to {file_path}.")

    def _handle_save(self) -> None:
        try:
            quiz = self.manager.create_quiz(self._collect_draft())
        except QuizPlatformError as exc:
            show_warning(self, "Quiz not saved", str(exc))
            return

        self._dirty = False
        self.on_saved(quiz)

    # --- Public API ---

    @property
    def has_unsaved_changes(self) -> bool:
        return self._dirty

    def reset_state(self) -> None:
        """Start a fresh draft with one blank question."""
        self._draft = QuizDraft()
        self._loading = True
        try:
            self.title_input.clear()
            self.description_input.clear()
            self.quiz_time_spinbox.setValue(0)
            self.public_checkbox.setChecked(self._draft.is_public)
            self.show_answers_checkbox.setChecked(self._draft.settings.show_correct_answers)
            self.show_comments_checkbox.setChecked(self._draft.settings.show_comments)
            self.allow_retake_checkbox.setChecked(self._draft.settings.allow_retake)
            self.randomize_checkbox.setChecked(self._draft.settings.randomize_questions)
        finally:
            self._loading = False
        self._show_question(0)
        self._dirty = False
        self.set_status_message("")

    def set_status_message(self, message: str, is_error: bool = False) -> None:
        self.status_label.setStyleSheet(Styles.get_status_style(is_error, self._theme))
        self.status_label.setText(message)

    def apply_theme(self, theme: Theme) -> None:
        self._theme = theme
        self._refresh_preview()
