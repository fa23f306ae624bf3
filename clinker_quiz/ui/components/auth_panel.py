"""Sign-in and registration form."""

from __future__ import annotations

from typing import Callable

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QLabel,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from clinker_quiz.constants.about import APP_NAME
from clinker_quiz.constants.ui_constants import (
    AUTH_LOGIN_BUTTON,
    AUTH_LOGIN_TITLE,
    AUTH_REGISTER_BUTTON,
    AUTH_REGISTER_TITLE,
    AUTH_SWITCH_TO_LOGIN,
    AUTH_SWITCH_TO_REGISTER,
)
from clinker_quiz.core.errors import QuizPlatformError
from clinker_quiz.core.models import User
from clinker_quiz.core.platform_manager import PlatformManager
from clinker_quiz.styling.color_palette import Theme
from clinker_quiz.styling.styles import Styles


class AuthPanel(QWidget):
    """Toggles between the login and registration forms."""

    def __init__(
        self,
        manager: PlatformManager,
        on_authenticated: Callable[[User], None],
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.manager = manager
        self.on_authenticated = on_authenticated
        self._register_mode = False
        self._theme = Theme.LIGHT

        self._build_ui()
        self._apply_mode()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        layout.setAlignment(Qt.AlignCenter)
        self.setLayout(layout)

        self.brand_label = QLabel(APP_NAME, self)
        self.brand_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.brand_label)

        self.title_label = QLabel(self)
        self.title_label.setAlignment(Qt.AlignCenter)
        self.title_label.setStyleSheet(Styles.get_large_label_style())
        layout.addWidget(self.title_label)

        self.name_input = QLineEdit(self)
        self.name_input.setPlaceholderText("Full name")
        layout.addWidget(self.name_input)

        self.email_input = QLineEdit(self)
        self.email_input.setPlaceholderText("Email")
        layout.addWidget(self.email_input)

        self.password_input = QLineEdit(self)
        self.password_input.setPlaceholderText("Password")
        self.password_input.setEchoMode(QLineEdit.Password)
        self.password_input.returnPressed.connect(self._handle_submit)
        layout.addWidget(self.password_input)

        self.submit_button = QPushButton(self)
        self.submit_button.setProperty("primary", True)
        self.submit_button.clicked.connect(self._handle_submit)
        layout.addWidget(self.submit_button)

        self.switch_button = QPushButton(self)
        self.switch_button.setFlat(True)
        self.switch_button.clicked.connect(self._toggle_mode)
        layout.addWidget(self.switch_button)

        self.status_label = QLabel("", self)
        self.status_label.setWordWrap(True)
        self.status_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.status_label)

        for widget in (self.name_input, self.email_input, self.password_input,
                       self.submit_button, self.switch_button):
            widget.setMinimumWidth(320)

    def _apply_mode(self) -> None:
        self.title_label.setText(AUTH_REGISTER_TITLE if self._register_mode else AUTH_LOGIN_TITLE)
        self.submit_button.setText(AUTH_REGISTER_BUTTON if self._register_mode else AUTH_LOGIN_BUTTON)
        self.switch_button.setText(AUTH_SWITCH_TO_LOGIN if self._register_mode else AUTH_SWITCH_TO_REGISTER)
        self.name_input.setVisible(self._register_mode)
        self.status_label.setText("")

    def _toggle_mode(self) -> None:
        self._register_mode = not self._register_mode
        self._apply_mode()

    def _handle_submit(self) -> None:
        email = self.email_input.text()
        password = self.password_input.text()
        try:
            if self._register_mode:
                user = self.manager.register(self.name_input.text(), email, password)
            else:
                user = self.manager.login(email, password)
        except QuizPlatformError as exc:
            self.status_label.setStyleSheet(Styles.get_status_style(True, self._theme))
            self.status_label.setText(str(exc))
            return

        self.reset_state()
        self.on_authenticated(user)

    def reset_state(self) -> None:
        self.name_input.clear()
        self.email_input.clear()
        self.password_input.clear()
        self.status_label.setText("")

    def apply_theme(self, theme: Theme) -> None:
        self._theme = theme
        self.brand_label.setStyleSheet(Styles.get_title_style(theme))
