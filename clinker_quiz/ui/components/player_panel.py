"""Component for taking a quiz: participant form, questions and results."""

from __future__ import annotations

from typing import Any, Callable

from PySide6.QtCore import Qt, QTimer
from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWidgets import (
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from clinker_quiz.constants.quiz_constants import OPTION_LETTERS, TICK_INTERVAL_MS
from clinker_quiz.constants.ui_constants import (
    PLAYER_ANSWER_KEY_BUTTON,
    PLAYER_BACK_BUTTON,
    PLAYER_FINISH_BUTTON,
    PLAYER_NEXT_BUTTON,
    PLAYER_RETAKE_BUTTON,
    PLAYER_START_BUTTON,
    QUESTION_TIMER_URGENT_SECONDS,
    QUIZ_TIMER_URGENT_SECONDS,
)
from clinker_quiz.core.errors import QuizPlatformError
from clinker_quiz.core.platform_manager import PlatformManager
from clinker_quiz.core.services.leaderboard import format_clock, format_duration
from clinker_quiz.core.services.quiz_session import SessionState
from clinker_quiz.styling.color_palette import ColorPalette, Theme
from clinker_quiz.styling.styles import Styles
from clinker_quiz.ui.dialog_helpers import save_and_open_report, show_error, show_warning
from clinker_quiz.ui.question_renderer import render_question_with_options, render_review

_TIER_LABELS = {
    "trophy": "🏆 Excellent!",
    "second_place": "🥈 Well done!",
    "study": "📚 Keep studying!",
}

_PAGE_PARTICIPANT = 0
_PAGE_QUESTION = 1
_PAGE_RESULT = 2


class PlayerPanel(QWidget):
    """Runs one quiz session and drives its clock with a one-second timer."""

    def __init__(
        self,
        manager: PlatformManager,
        on_exit: Callable[[], None],
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.manager = manager
        self.on_exit = on_exit
        self._session_id: str | None = None
        self._snapshot: dict[str, Any] = {}
        self._rendered_question_id: str | None = None
        self._theme = Theme.LIGHT
        self._game_font_size = 14

        self._build_ui()
        self._configure_tick_timer()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        self.title_label = QLabel("", self)
        self.title_label.setWordWrap(True)
        layout.addWidget(self.title_label)

        self.description_label = QLabel("", self)
        self.description_label.setWordWrap(True)
        layout.addWidget(self.description_label)

        self.page_stack = QStackedWidget(self)
        self.page_stack.addWidget(self._build_participant_page())
        self.page_stack.addWidget(self._build_question_page())
        self.page_stack.addWidget(self._build_result_page())
        layout.addWidget(self.page_stack, stretch=1)

        bottom_row = QHBoxLayout()
        self.status_label = QLabel("", self)
        bottom_row.addWidget(self.status_label, stretch=1)
        self.back_button = QPushButton(PLAYER_BACK_BUTTON, self)
        self.back_button.clicked.connect(self._handle_exit)
        bottom_row.addWidget(self.back_button)
        layout.addLayout(bottom_row)

    def _build_participant_page(self) -> QWidget:
        page = QWidget(self)
        page_layout = QVBoxLayout()
        page_layout.setAlignment(Qt.AlignCenter)
        page.setLayout(page_layout)

        prompt = QLabel("Enter your details to start the quiz.", page)
        prompt.setStyleSheet(Styles.get_large_label_style())
        page_layout.addWidget(prompt)

        self.participant_name_input = QLineEdit(page)
        self.participant_name_input.setPlaceholderText("Name")
        page_layout.addWidget(self.participant_name_input)

        self.participant_email_input = QLineEdit(page)
        self.participant_email_input.setPlaceholderText("Email")
        self.participant_email_input.returnPressed.connect(self._handle_submit_participant)
        page_layout.addWidget(self.participant_email_input)

        self.start_button = QPushButton(PLAYER_START_BUTTON, page)
        self.start_button.setProperty("primary", True)
        self.start_button.clicked.connect(self._handle_submit_participant)
        page_layout.addWidget(self.start_button)
        return page

    def _build_question_page(self) -> QWidget:
        page = QWidget(self)
        page_layout = QVBoxLayout()
        page.setLayout(page_layout)

        timer_row = QHBoxLayout()
        self.progress_label = QLabel("", page)
        timer_row.addWidget(self.progress_label)
        timer_row.addStretch()
        self.quiz_timer_label = QLabel("", page)
        timer_row.addWidget(self.quiz_timer_label)
        self.question_timer_label = QLabel("", page)
        timer_row.addWidget(self.question_timer_label)
        page_layout.addLayout(timer_row)

        self.question_view = QWebEngineView(page)
        page_layout.addWidget(self.question_view, stretch=1)

        options_grid = QGridLayout()
        self.option_buttons: list[QPushButton] = []
        for index, letter in enumerate(OPTION_LETTERS):
            button = QPushButton(letter, page)
            button.setCheckable(True)
            button.setMinimumHeight(48)
            button.clicked.connect(lambda _checked=False, option=index: self._handle_select(option))
            options_grid.addWidget(button, index // 2, index % 2)
            self.option_buttons.append(button)
        page_layout.addLayout(options_grid)

        self.next_button = QPushButton(PLAYER_NEXT_BUTTON, page)
        self.next_button.setProperty("primary", True)
        self.next_button.clicked.connect(self._handle_advance)
        page_layout.addWidget(self.next_button, alignment=Qt.AlignRight)
        return page

    def _build_result_page(self) -> QWidget:
        page = QWidget(self)
        page_layout = QVBoxLayout()
        page.setLayout(page_layout)

        self.score_label = QLabel("", page)
        self.score_label.setAlignment(Qt.AlignCenter)
        page_layout.addWidget(self.score_label)

        self.score_detail_label = QLabel("", page)
        self.score_detail_label.setAlignment(Qt.AlignCenter)
        page_layout.addWidget(self.score_detail_label)

        action_row = QHBoxLayout()
        action_row.addStretch()
        self.retake_button = QPushButton(PLAYER_RETAKE_BUTTON, page)
        self.retake_button.clicked.connect(self._handle_retake)
        action_row.addWidget(self.retake_button)
        self.answer_key_button = QPushButton(PLAYER_ANSWER_KEY_BUTTON, page)
        self.answer_key_button.clicked.connect(self._handle_answer_key)
        action_row.addWidget(self.answer_key_button)
        action_row.addStretch()
        page_layout.addLayout(action_row)

        self.review_view = QWebEngineView(page)
        page_layout.addWidget(self.review_view, stretch=1)
        return page

    def _configure_tick_timer(self) -> None:
        self.tick_timer = QTimer(self)
        self.tick_timer.setInterval(TICK_INTERVAL_MS)
        self.tick_timer.timeout.connect(self._handle_tick)

    # --- Session lifecycle ---

    def start(self, quiz_id: str, use_account: bool = True) -> bool:
        """Open ``quiz_id``; returns False when it cannot be played."""
        self.stop()
        try:
            session = self.manager.start_session(quiz_id, use_account=use_account)
            snapshot = self.manager.session_snapshot(session.id)
        except QuizPlatformError as exc:
            show_error(self, "Quiz unavailable", str(exc))
            return False

        self._session_id = session.id
        self.participant_name_input.clear()
        self.participant_email_input.clear()
        self._render(snapshot)
        return True

    def stop(self) -> None:
        """Stop the timer and drop the session; called when the panel is left."""
        self.tick_timer.stop()
        if self._session_id is not None:
            self.manager.end_session(self._session_id)
        self._session_id = None
        self._snapshot = {}
        self._rendered_question_id = None

    def _run(self, action: Callable[[str], dict[str, Any]]) -> None:
        if self._session_id is None:
            return
        try:
            snapshot = action(self._session_id)
        except QuizPlatformError as exc:
            show_warning(self, "Not possible", str(exc))
            return
        self._render(snapshot)

    def _handle_tick(self) -> None:
        self._run(self.manager.tick)

    def _handle_submit_participant(self) -> None:
        name = self.participant_name_input.text()
        email = self.participant_email_input.text()
        self._run(lambda session_id: self.manager.submit_participant(session_id, name, email))

    def _handle_select(self, option_index: int) -> None:
        self._run(lambda session_id: self.manager.select_option(session_id, option_index))

    def _handle_advance(self) -> None:
        self._run(self.manager.advance)

    def _handle_retake(self) -> None:
        self._rendered_question_id = None
        self._run(self.manager.retake)

    def _handle_answer_key(self) -> None:
        if self._session_id is None:
            return
        try:
            document = self.manager.export_session_answer_key(self._session_id)
        except QuizPlatformError as exc:
            show_error(self, "Export failed", str(exc))
            return
        save_and_open_report(self, f"{self._snapshot.get('quiz_title', 'quiz')}-answer-key.html", document)

    def _handle_exit(self) -> None:
        self.stop()
        self.on_exit()

    # --- Rendering ---

    def _render(self, snapshot: dict[str, Any]) -> None:
        self._snapshot = snapshot
        self.title_label.setText(snapshot["quiz_title"])
        self.description_label.setText(snapshot.get("quiz_description") or "")
        self.description_label.setVisible(bool(snapshot.get("quiz_description")))

        state = SessionState(snapshot["state"])
        if state == SessionState.AWAITING_PARTICIPANT:
            self.tick_timer.stop()
            self.status_label.setText(f"{snapshot['question_count']} questions")
            self.page_stack.setCurrentIndex(_PAGE_PARTICIPANT)
        elif state == SessionState.IN_PROGRESS:
            self.status_label.setText("")
            self.page_stack.setCurrentIndex(_PAGE_QUESTION)
            self._render_question(snapshot)
            if not self.tick_timer.isActive():
                self.tick_timer.start()
        else:
            self.tick_timer.stop()
            self._rendered_question_id = None
            self.status_label.setText("")
            self.page_stack.setCurrentIndex(_PAGE_RESULT)
            self._render_result(snapshot)

    def _render_question(self, snapshot: dict[str, Any]) -> None:
        question = snapshot["question"]
        self.progress_label.setText(f"Question {snapshot['position']} of {snapshot['question_count']}")

        quiz_left = snapshot["quiz_time_left"]
        self.quiz_timer_label.setVisible(quiz_left > 0)
        self.quiz_timer_label.setText(f"Quiz: {format_clock(quiz_left)}")
        self.quiz_timer_label.setStyleSheet(
            Styles.get_countdown_style(quiz_left <= QUIZ_TIMER_URGENT_SECONDS, self._theme)
        )

        question_left = snapshot["question_time_left"]
        self.question_timer_label.setVisible(question_left > 0)
        self.question_timer_label.setText(f"Question: {question_left}s")
        self.question_timer_label.setStyleSheet(
            Styles.get_countdown_style(question_left <= QUESTION_TIMER_URGENT_SECONDS, self._theme)
        )

        if question["id"] != self._rendered_question_id:
            self._rendered_question_id = question["id"]
            options = question["options"]
            self.question_view.setHtml(
                render_question_with_options(
                    question["text"],
                    [option["text"] for option in options],
                    font_size=self._game_font_size,
                    text_color=ColorPalette.TEXT_PRIMARY.get(self._theme),
                )
            )
            # Stored questions may carry fewer than four options.
            for index, button in enumerate(self.option_buttons):
                button.setVisible(index < len(options))
                if index < len(options):
                    button.setText(f"{options[index]['letter']}. {options[index]['text']}")

        selected = snapshot["selected_option_index"]
        for index, button in enumerate(self.option_buttons):
            button.setChecked(index == selected)
        self.next_button.setEnabled(bool(snapshot["can_advance"]))
        self.next_button.setText(PLAYER_FINISH_BUTTON if snapshot["is_last_question"] else PLAYER_NEXT_BUTTON)

    def _render_result(self, snapshot: dict[str, Any]) -> None:
        result = snapshot["result"]
        self.score_label.setText(f"{_TIER_LABELS[snapshot['tier']]}  {snapshot['percentage']}%")
        self.score_detail_label.setText(
            f"{result['score']} of {result['totalQuestions']} correct "
            f"in {format_duration(result['timeSpent'])}"
        )
        self.retake_button.setVisible(bool(snapshot["can_retake"]))
        self.answer_key_button.setVisible(bool(snapshot["review"]))
        self.review_view.setHtml(
            render_review(snapshot["review"], text_color=ColorPalette.TEXT_PRIMARY.get(self._theme))
        )

    def apply_theme(self, theme: Theme) -> None:
        self._theme = theme
        self.title_label.setStyleSheet(Styles.get_title_style(theme))
        self.score_label.setStyleSheet(Styles.get_title_style(theme))
        if self._snapshot:
            self._rendered_question_id = None
            self._render(self._snapshot)
