"""Dashboard listing quizzes with their participation numbers."""

from __future__ import annotations

from typing import Callable

from PySide6.QtGui import QGuiApplication
from PySide6.QtWidgets import (
    QAbstractItemView,
    QCheckBox,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from clinker_quiz.core.errors import QuizPlatformError
from clinker_quiz.core.platform_manager import DashboardSummary, PlatformManager, QuizCard
from clinker_quiz.styling.color_palette import Theme
from clinker_quiz.styling.styles import Styles
from clinker_quiz.ui.dialog_helpers import (
    confirm_delete_quiz,
    save_and_open_report,
    show_error,
    show_warning,
)

_COLUMNS = ("Title", "Creator", "Questions", "Participants", "Average score", "Visibility")


class DashboardPanel(QWidget):
    """Quiz table plus the actions available on the selected quiz."""

    def __init__(
        self,
        manager: PlatformManager,
        on_take_quiz: Callable[[str], None],
        on_create_quiz: Callable[[], None],
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.manager = manager
        self.on_take_quiz = on_take_quiz
        self.on_create_quiz = on_create_quiz
        self._summary: DashboardSummary | None = None
        self._cards: list[QuizCard] = []
        self._theme = Theme.LIGHT

        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        self.welcome_label = QLabel("", self)
        layout.addWidget(self.welcome_label)

        stats_row = QHBoxLayout()
        self.my_quiz_count_label = QLabel("", self)
        self.my_quiz_count_label.setStyleSheet(Styles.get_large_label_style())
        stats_row.addWidget(self.my_quiz_count_label)
        self.my_result_count_label = QLabel("", self)
        self.my_result_count_label.setStyleSheet(Styles.get_large_label_style())
        stats_row.addWidget(self.my_result_count_label)
        stats_row.addStretch()
        self.create_button = QPushButton("Create New Quiz", self)
        self.create_button.setProperty("primary", True)
        self.create_button.clicked.connect(lambda: self.on_create_quiz())
        stats_row.addWidget(self.create_button)
        layout.addLayout(stats_row)

        self.mine_only_checkbox = QCheckBox("Show only my quizzes", self)
        self.mine_only_checkbox.toggled.connect(lambda _: self._populate_table())
        layout.addWidget(self.mine_only_checkbox)

        self.quiz_table = QTableWidget(0, len(_COLUMNS), self)
        self.quiz_table.setHorizontalHeaderLabels(_COLUMNS)
        self.quiz_table.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.quiz_table.setSelectionMode(QAbstractItemView.SingleSelection)
        self.quiz_table.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.quiz_table.horizontalHeader().setSectionResizeMode(0, QHeaderView.Stretch)
        self.quiz_table.itemSelectionChanged.connect(self._update_action_buttons)
        self.quiz_table.cellDoubleClicked.connect(lambda row, _column: self._handle_take())
        layout.addWidget(self.quiz_table, stretch=1)

        action_row = QHBoxLayout()
        self.take_button = QPushButton("Take Quiz", self)
        self.take_button.clicked.connect(self._handle_take)
        action_row.addWidget(self.take_button)

        self.copy_link_button = QPushButton("Copy Share Link", self)
        self.copy_link_button.clicked.connect(self._handle_copy_link)
        action_row.addWidget(self.copy_link_button)

        self.answer_key_button = QPushButton("Answer Key", self)
        self.answer_key_button.clicked.connect(self._handle_answer_key)
        action_row.addWidget(self.answer_key_button)

        self.delete_button = QPushButton("Delete Quiz", self)
        self.delete_button.clicked.connect(self._handle_delete)
        action_row.addWidget(self.delete_button)
        action_row.addStretch()
        layout.addLayout(action_row)

        self.status_label = QLabel("", self)
        layout.addWidget(self.status_label)

        self._update_action_buttons()

    def refresh(self) -> None:
        """Reload quizzes and counts from the manager."""
        try:
            self._summary = self.manager.dashboard()
        except QuizPlatformError as exc:
            show_error(self, "Dashboard unavailable", str(exc))
            return

        summary = self._summary
        self.welcome_label.setText(f"Welcome back, {summary.user.name}!")
        self.my_quiz_count_label.setText(f"{len(summary.my_quizzes)} quizzes created")
        self.my_result_count_label.setText(f"{summary.my_result_count} quizzes taken")
        self.status_label.setText("")
        self._populate_table()

    def _populate_table(self) -> None:
        if self._summary is None:
            return
        mine_only = self.mine_only_checkbox.isChecked()
        self._cards = self._summary.my_quizzes if mine_only else self._summary.all_quizzes

        self.quiz_table.setRowCount(len(self._cards))
        for row, card in enumerate(self._cards):
            quiz = card.quiz
            values = (
                quiz.title,
                quiz.creator_name,
                str(len(quiz.questions)),
                str(card.stats.participants),
                f"{card.stats.average_score:g}" if card.stats.participants else "-",
                "Public" if quiz.is_public else "Private",
            )
            for column, value in enumerate(values):
                self.quiz_table.setItem(row, column, QTableWidgetItem(value))
        self._update_action_buttons()

    def _selected_card(self) -> QuizCard | None:
        rows = self.quiz_table.selectionModel().selectedRows()
        if not rows:
            return None
        row = rows[0].row()
        if 0 <= row < len(self._cards):
            return self._cards[row]
        return None

    def _update_action_buttons(self) -> None:
        card = self._selected_card()
        has_selection = card is not None
        for button in (self.take_button, self.copy_link_button):
            button.setEnabled(has_selection)

        can_manage = False
        if card is not None and self._summary is not None:
            user = self._summary.user
            can_manage = user.is_admin or card.quiz.creator_id == user.id
        self.answer_key_button.setEnabled(can_manage)
        self.delete_button.setEnabled(can_manage)

    def _handle_take(self) -> None:
        card = self._selected_card()
        if card is None:
            return
        self.on_take_quiz(card.quiz.id)

    def _handle_copy_link(self) -> None:
        card = self._selected_card()
        if card is None:
            return
        try:
            url = self.manager.share_url(card.quiz.id)
        except QuizPlatformError as exc:
            show_error(self, "Share failed", str(exc))
            return
        QGuiApplication.clipboard().setText(url)
        self.status_label.setStyleSheet(Styles.get_status_style(False, self._theme))
        self.status_label.setText(f"Link copied: {url}")

    def _handle_answer_key(self) -> None:
        card = self._selected_card()
        if card is None:
            return
        try:
            document = self.manager.export_answer_key(card.quiz.id)
        except QuizPlatformError as exc:
            show_error(self, "Export failed", str(exc))
            return
        save_and_open_report(self, f"{card.quiz.title}-answer-key.html", document)

    def _handle_delete(self) -> None:
        card = self._selected_card()
        if card is None:
            return
        if not confirm_delete_quiz(self, card.quiz.title):
            return
        try:
            self.manager.delete_quiz(card.quiz.id)
        except QuizPlatformError as exc:
            show_warning(self, "Delete failed", str(exc))
            return
        self.refresh()
        self.status_label.setStyleSheet(Styles.get_status_style(False, self._theme))
        self.status_label.setText(f"Deleted '{card.quiz.title}'.")

    def apply_theme(self, theme: Theme) -> None:
        self._theme = theme
        self.welcome_label.setStyleSheet(Styles.get_title_style(theme))
