"""Qt main window switching between auth, dashboard, creator, player and results."""

from __future__ import annotations

from enum import Enum, auto

from PySide6.QtWidgets import (
    QHBoxLayout,
    QInputDialog,
    QLabel,
    QMainWindow,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from clinker_quiz.constants.about import APP_ABOUT_TEXT, APP_LICENSE, APP_NAME, APP_VERSION, HELP_TEXT
from clinker_quiz.constants.ui_constants import (
    NAV_BUTTON_CREATE,
    NAV_BUTTON_DARK_THEME,
    NAV_BUTTON_DASHBOARD,
    NAV_BUTTON_LIGHT_THEME,
    NAV_BUTTON_LOGOUT,
    NAV_BUTTON_OPEN_LINK,
    NAV_BUTTON_RESULTS,
    OPEN_LINK_DIALOG_TITLE,
    OPEN_LINK_PROMPT,
    WINDOW_TITLE,
)
from clinker_quiz.core.models import Quiz, User
from clinker_quiz.core.platform_manager import PlatformManager
from clinker_quiz.core.services.quiz_repository import QuizRepository
from clinker_quiz.styling.color_palette import Theme
from clinker_quiz.styling.styles import Styles
from clinker_quiz.ui.components.auth_panel import AuthPanel
from clinker_quiz.ui.components.creator_panel import CreatorPanel
from clinker_quiz.ui.components.dashboard_panel import DashboardPanel
from clinker_quiz.ui.components.player_panel import PlayerPanel
from clinker_quiz.ui.components.results_panel import ResultsPanel
from clinker_quiz.ui.dialog_helpers import confirm_discard_draft, show_info


class AppMode(Enum):
    """High-level UI mode of the client."""

    AUTH = auto()
    DASHBOARD = auto()
    CREATE = auto()
    PLAY = auto()
    RESULTS = auto()


class MainWindow(QMainWindow):
    """Main Qt window orchestrating the application modes."""

    def __init__(self, manager: PlatformManager, deep_link_quiz_id: str | None = None) -> None:
        super().__init__()
        self.setWindowTitle(WINDOW_TITLE)
        self.resize(1100, 760)

        self.manager = manager
        self._mode = AppMode.AUTH
        self._theme = manager.get_theme()

        self._build_ui()
        self._apply_theme()

        if deep_link_quiz_id:
            # Shared links play without an account; signed-in users play as themselves.
            self._open_quiz(deep_link_quiz_id)
        elif self.manager.current_user() is not None:
            self._set_mode(AppMode.DASHBOARD)
        else:
            self._set_mode(AppMode.AUTH)

    def _build_ui(self) -> None:
        central_widget = QWidget(self)
        self.setCentralWidget(central_widget)

        root_layout = QVBoxLayout()
        central_widget.setLayout(root_layout)

        self._build_nav_bar(root_layout)

        self.mode_stack = QStackedWidget(self)

        # Initialize components
        self.auth_panel = AuthPanel(self.manager, on_authenticated=self._handle_authenticated, parent=self)
        self.dashboard_panel = DashboardPanel(
            self.manager,
            on_take_quiz=self._open_quiz,
            on_create_quiz=lambda: self._set_mode(AppMode.CREATE),
            parent=self,
        )
        self.creator_panel = CreatorPanel(self.manager, on_saved=self._handle_quiz_saved, parent=self)
        self.player_panel = PlayerPanel(self.manager, on_exit=self._handle_player_exit, parent=self)
        self.results_panel = ResultsPanel(self.manager, parent=self)

        self._panels = {
            AppMode.AUTH: self.auth_panel,
            AppMode.DASHBOARD: self.dashboard_panel,
            AppMode.CREATE: self.creator_panel,
            AppMode.PLAY: self.player_panel,
            AppMode.RESULTS: self.results_panel,
        }
        for panel in self._panels.values():
            self.mode_stack.addWidget(panel)

        root_layout.addWidget(self.mode_stack)

    def _build_nav_bar(self, layout: QVBoxLayout) -> None:
        button_row = QHBoxLayout()

        self.brand_label = QLabel(APP_NAME, self)
        button_row.addWidget(self.brand_label)

        self.dashboard_button = QPushButton(NAV_BUTTON_DASHBOARD, self)
        self.dashboard_button.setCheckable(True)
        self.dashboard_button.clicked.connect(lambda: self._navigate(AppMode.DASHBOARD))
        button_row.addWidget(self.dashboard_button)

        self.create_button = QPushButton(NAV_BUTTON_CREATE, self)
        self.create_button.setCheckable(True)
        self.create_button.clicked.connect(lambda: self._navigate(AppMode.CREATE))
        button_row.addWidget(self.create_button)

        self.results_button = QPushButton(NAV_BUTTON_RESULTS, self)
        self.results_button.setCheckable(True)
        self.results_button.clicked.connect(lambda: self._navigate(AppMode.RESULTS))
        button_row.addWidget(self.results_button)

        self.open_link_button = QPushButton(NAV_BUTTON_OPEN_LINK, self)
        self.open_link_button.clicked.connect(self._handle_open_link)
        button_row.addWidget(self.open_link_button)

        button_row.addStretch()

        self.user_label = QLabel("", self)
        button_row.addWidget(self.user_label)

        self.theme_button = QPushButton(self)
        self.theme_button.clicked.connect(self._handle_toggle_theme)
        button_row.addWidget(self.theme_button)

        self.help_button = QPushButton("Help", self)
        self.help_button.clicked.connect(lambda: show_info(self, f"{APP_NAME} Help", HELP_TEXT))
        button_row.addWidget(self.help_button)

        self.about_button = QPushButton(f"About {APP_NAME}", self)
        self.about_button.clicked.connect(self._handle_about)
        button_row.addWidget(self.about_button)

        self.logout_button = QPushButton(NAV_BUTTON_LOGOUT, self)
        self.logout_button.clicked.connect(self._handle_logout)
        button_row.addWidget(self.logout_button)

        layout.addLayout(button_row)

    # --- Mode switching ---

    def _navigate(self, mode: AppMode) -> None:
        """Nav-bar entry point; asks before abandoning an unsaved draft."""
        if mode == self._mode:
            self._set_mode(mode)
            return
        if self._mode == AppMode.CREATE and self.creator_panel.has_unsaved_changes:
            if not confirm_discard_draft(self):
                self._set_mode(AppMode.CREATE)
                return
        self._set_mode(mode)

    def _set_mode(self, mode: AppMode) -> None:
        user = self.manager.current_user()
        if mode not in (AppMode.AUTH, AppMode.PLAY) and user is None:
            mode = AppMode.AUTH

        if self._mode == AppMode.PLAY and mode != AppMode.PLAY:
            self.player_panel.stop()
        if mode == AppMode.CREATE and self._mode != AppMode.CREATE:
            self.creator_panel.reset_state()

        self._mode = mode
        signed_in = user is not None
        for button in (self.dashboard_button, self.create_button, self.results_button, self.logout_button):
            button.setVisible(signed_in)
        self.dashboard_button.setChecked(mode == AppMode.DASHBOARD)
        self.create_button.setChecked(mode == AppMode.CREATE)
        self.results_button.setChecked(mode == AppMode.RESULTS)
        self.user_label.setText(self._describe_user(user))

        if mode == AppMode.DASHBOARD:
            self.dashboard_panel.refresh()
        elif mode == AppMode.RESULTS:
            self.results_panel.refresh()

        self.mode_stack.setCurrentWidget(self._panels[mode])

    @staticmethod
    def _describe_user(user: User | None) -> str:
        if user is None:
            return ""
        suffix = " (admin)" if user.is_admin else ""
        return f"{user.name}{suffix}"

    # --- Handlers ---

    def _handle_authenticated(self, user: User) -> None:
        self._set_mode(AppMode.DASHBOARD)

    def _handle_logout(self) -> None:
        self.player_panel.stop()
        self.manager.logout()
        self.auth_panel.reset_state()
        self._set_mode(AppMode.AUTH)

    def _handle_quiz_saved(self, quiz: Quiz) -> None:
        self._set_mode(AppMode.DASHBOARD)
        show_info(self, "Quiz saved", f"'{quiz.title}' is ready. Share link:\n{self.manager.share_url(quiz.id)}")

    def _handle_player_exit(self) -> None:
        target = AppMode.DASHBOARD if self.manager.current_user() is not None else AppMode.AUTH
        self._set_mode(target)

    def _handle_open_link(self) -> None:
        link, accepted = QInputDialog.getText(self, OPEN_LINK_DIALOG_TITLE, OPEN_LINK_PROMPT)
        if accepted and link.strip():
            self._open_quiz(QuizRepository.quiz_id_from_link(link))

    def _open_quiz(self, quiz_id: str) -> None:
        if self._mode == AppMode.CREATE and self.creator_panel.has_unsaved_changes:
            if not confirm_discard_draft(self):
                return
        if self.player_panel.start(quiz_id):
            self._set_mode(AppMode.PLAY)
        elif self._mode == AppMode.AUTH or self.manager.current_user() is None:
            self._set_mode(AppMode.AUTH)

    def _handle_toggle_theme(self) -> None:
        self._theme = self.manager.toggle_theme()
        self._apply_theme()

    def _handle_about(self) -> None:
        details = (
            f"{APP_NAME} v{APP_VERSION}\n"
            f"License: {APP_LICENSE}\n\n"
            f"{APP_ABOUT_TEXT}"
        )
        show_info(self, f"About {APP_NAME}", details)

    def _apply_theme(self) -> None:
        self.setStyleSheet(Styles.get_main_window_style(self._theme))
        self.brand_label.setStyleSheet(Styles.get_title_style(self._theme))
        self.theme_button.setText(NAV_BUTTON_LIGHT_THEME if self._theme == Theme.DARK else NAV_BUTTON_DARK_THEME)
        self.auth_panel.apply_theme(self._theme)
        self.dashboard_panel.apply_theme(self._theme)
        self.creator_panel.apply_theme(self._theme)
        self.player_panel.apply_theme(self._theme)
        self.results_panel.apply_theme(self._theme)

    def closeEvent(self, event) -> None:  # noqa: N802
        self.player_panel.stop()
        super().closeEvent(event)
