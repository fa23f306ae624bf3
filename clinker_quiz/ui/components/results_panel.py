"""Leaderboard view with quiz filter, summary numbers and export."""

from __future__ import annotations

import re

from PySide6.QtGui import QBrush, QColor
from PySide6.QtWidgets import (
    QAbstractItemView,
    QComboBox,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from clinker_quiz.constants.quiz_constants import ALL_QUIZZES_TITLE
from clinker_quiz.constants.ui_constants import RESULTS_COLUMNS, RESULTS_EXPORT_BUTTON
from clinker_quiz.core.errors import QuizPlatformError
from clinker_quiz.core.platform_manager import PlatformManager
from clinker_quiz.core.services.leaderboard import LeaderboardRow
from clinker_quiz.styling.color_palette import ColorPalette, Theme
from clinker_quiz.styling.styles import Styles
from clinker_quiz.ui.dialog_helpers import save_and_open_report, show_error


class ResultsPanel(QWidget):
    """Results the signed-in user may see, ranked by percentage then time."""

    def __init__(self, manager: PlatformManager, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.manager = manager
        self._theme = Theme.LIGHT
        self._rows: list[LeaderboardRow] = []
        self._heading = ALL_QUIZZES_TITLE
        self._populating_filter = False

        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        filter_row = QHBoxLayout()
        filter_row.addWidget(QLabel("Quiz:", self))
        self.quiz_filter_combo = QComboBox(self)
        self.quiz_filter_combo.currentIndexChanged.connect(self._handle_filter_changed)
        filter_row.addWidget(self.quiz_filter_combo, stretch=1)
        self.export_button = QPushButton(RESULTS_EXPORT_BUTTON, self)
        self.export_button.clicked.connect(self._handle_export)
        filter_row.addWidget(self.export_button)
        layout.addLayout(filter_row)

        stats_row = QHBoxLayout()
        self.participants_label = QLabel("", self)
        self.quiz_count_label = QLabel("", self)
        self.average_label = QLabel("", self)
        for label in (self.participants_label, self.quiz_count_label, self.average_label):
            label.setStyleSheet(Styles.get_large_label_style())
            stats_row.addWidget(label)
        stats_row.addStretch()
        layout.addLayout(stats_row)

        self.results_table = QTableWidget(0, len(RESULTS_COLUMNS), self)
        self.results_table.setHorizontalHeaderLabels(RESULTS_COLUMNS)
        self.results_table.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.results_table.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.results_table.verticalHeader().setVisible(False)
        self.results_table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeToContents)
        self.results_table.horizontalHeader().setStretchLastSection(True)
        layout.addWidget(self.results_table, stretch=1)

        self.empty_label = QLabel("No results yet.", self)
        layout.addWidget(self.empty_label)

    def refresh(self) -> None:
        """Rebuild the quiz filter and reload the leaderboard."""
        current_filter = self.quiz_filter_combo.currentData()
        try:
            view = self.manager.leaderboard(current_filter)
        except QuizPlatformError as exc:
            show_error(self, "Results unavailable", str(exc))
            return

        self._populating_filter = True
        try:
            self.quiz_filter_combo.clear()
            self.quiz_filter_combo.addItem(ALL_QUIZZES_TITLE, userData=None)
            for quiz in view.quizzes:
                self.quiz_filter_combo.addItem(quiz.title, userData=quiz.id)
            index = self.quiz_filter_combo.findData(current_filter)
            self.quiz_filter_combo.setCurrentIndex(max(0, index))
        finally:
            self._populating_filter = False

        if current_filter is not None and self.quiz_filter_combo.currentData() is None:
            self._load(None)
            return
        self._show(view.heading, view.rows, view.stats.participants, view.stats.quiz_count,
                   view.stats.average_percentage)

    def _handle_filter_changed(self, _index: int) -> None:
        if self._populating_filter:
            return
        self._load(self.quiz_filter_combo.currentData())

    def _load(self, quiz_filter: str | None) -> None:
        try:
            view = self.manager.leaderboard(quiz_filter)
        except QuizPlatformError as exc:
            show_error(self, "Results unavailable", str(exc))
            return
        self._show(view.heading, view.rows, view.stats.participants, view.stats.quiz_count,
                   view.stats.average_percentage)

    def _show(
        self,
        heading: str,
        rows: list[LeaderboardRow],
        participants: int,
        quiz_count: int,
        average_percentage: int,
    ) -> None:
        self._heading = heading
        self._rows = rows
        self.participants_label.setText(f"{participants} participants")
        self.quiz_count_label.setText(f"{quiz_count} quizzes")
        self.average_label.setText(f"{average_percentage}% average")

        rank_colors = {
            1: ColorPalette.RANK_GOLD.get(self._theme),
            2: ColorPalette.RANK_SILVER.get(self._theme),
            3: ColorPalette.RANK_BRONZE.get(self._theme),
        }
        self.results_table.setRowCount(len(rows))
        for row_index, row in enumerate(rows):
            values = (
                str(row.rank),
                row.user_name,
                row.user_email,
                row.quiz_title,
                f"{row.score}/{row.total_questions}",
                f"{row.percentage}%",
                row.time_spent_label,
                row.completed_at.astimezone().strftime("%Y-%m-%d %H:%M"),
            )
            for column, value in enumerate(values):
                item = QTableWidgetItem(value)
                if row.rank in rank_colors:
                    item.setBackground(QBrush(QColor(rank_colors[row.rank])))
                self.results_table.setItem(row_index, column, item)

        self.empty_label.setVisible(not rows)
        self.export_button.setEnabled(bool(rows))

    def _handle_export(self) -> None:
        try:
            document = self.manager.export_leaderboard(self.quiz_filter_combo.currentData())
        except QuizPlatformError as exc:
            show_error(self, "Export failed", str(exc))
            return
        slug = re.sub(r"[^A-Za-z0-9]+", "-", self._heading).strip("-").lower() or "results"
        save_and_open_report(self, f"leaderboard-{slug}.html", document)

    def apply_theme(self, theme: Theme) -> None:
        self._theme = theme
        if self._rows:
            self.refresh()
