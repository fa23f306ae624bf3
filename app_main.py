"""Application entry point for ClinkerQuiz."""

from __future__ import annotations

import socket
import sys

from PySide6.QtWidgets import QApplication

from clinker_quiz.core.platform_manager import PlatformManager
from clinker_quiz.core.services.quiz_repository import QuizRepository
from clinker_quiz.core.settings import Settings, get_settings
from clinker_quiz.core.storage import JsonFileStore
from clinker_quiz.server.api_server import start_api_server
from clinker_quiz.ui.main_window import MainWindow
from clinker_quiz.utils.logging_config import configure_logging


def _determine_share_base_url(settings: Settings) -> str:
    """Best-effort LAN address for share links when the server listens on all interfaces."""
    if settings.PUBLIC_BASE_URL or settings.HOST not in ("0.0.0.0", ""):
        return settings.share_base_url
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect(("8.8.8.8", 80))
            ip_address = sock.getsockname()[0]
    except OSError:
        ip_address = "127.0.0.1"
    return f"http://{ip_address}:{settings.PORT}/"


def _deep_link_from_argv(argv: list[str]) -> str | None:
    """First positional argument may be a share link or quiz id."""
    for argument in argv[1:]:
        if not argument.startswith("-"):
            return QuizRepository.quiz_id_from_link(argument) or None
    return None


def main() -> None:
    """Initialize logging and storage, start the API server, and launch the Qt UI."""
    settings = get_settings()
    logger = configure_logging(settings.LOG_LEVEL)
    logger.info("Starting ClinkerQuiz…")

    store = JsonFileStore(settings.STORAGE_PATH)
    logger.info("Using storage file %s", store.path)
    share_base_url = _determine_share_base_url(settings)
    manager = PlatformManager(store, share_base_url=share_base_url)

    if settings.admin_configured:
        manager.ensure_admin_account(settings.ADMIN_NAME, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD)

    if settings.START_API_SERVER:
        start_api_server(manager, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL)
        logger.info("Quiz links open at %s", share_base_url)

    app = QApplication(sys.argv)
    window = MainWindow(manager=manager, deep_link_quiz_id=_deep_link_from_argv(sys.argv))
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
