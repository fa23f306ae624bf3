"""Business logic shared between the desktop client and the HTTP API."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
import logging
import random
from threading import Lock
from typing import Callable

from clinker_quiz.constants.quiz_constants import ALL_QUIZZES_TITLE, SESSION_IDLE_TIMEOUT_SECONDS
from clinker_quiz.core.errors import (
    InvalidTransitionError,
    NotAuthenticatedError,
    NotFoundError,
    PermissionDeniedError,
)
from clinker_quiz.core.models import Participant, Quiz, QuizResult, User, utc_now
from clinker_quiz.core.quiz_builder import QuizDraft, build_quiz
from clinker_quiz.core.report_exporter import render_answer_key, render_leaderboard
from clinker_quiz.core.services import leaderboard
from clinker_quiz.core.services.account_service import AccountService
from clinker_quiz.core.services.leaderboard import LeaderboardRow, OverallStats, QuizStats
from clinker_quiz.core.services.preferences import PreferenceStore
from clinker_quiz.core.services.quiz_repository import QuizRepository
from clinker_quiz.core.services.quiz_session import QuizSession, SessionState
from clinker_quiz.core.services.result_store import ResultStore
from clinker_quiz.core.storage import CollectionStore, KeyValueStore
from clinker_quiz.styling.color_palette import Theme

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class QuizCard:
    """A quiz plus its participation numbers, for dashboard listings."""

    quiz: Quiz
    stats: QuizStats


@dataclass(slots=True)
class DashboardSummary:
    user: User
    my_quizzes: list[QuizCard]
    all_quizzes: list[QuizCard]
    my_result_count: int


@dataclass(slots=True)
class LeaderboardView:
    heading: str
    rows: list[LeaderboardRow]
    stats: OverallStats
    quizzes: list[Quiz]


class PlatformManager:
    """Facade over accounts, quizzes, results and live quiz sessions.

    One lock guards everything: the Qt thread and the API server thread both
    call in here.
    """

    def __init__(
        self,
        store: KeyValueStore,
        share_base_url: str = "http://127.0.0.1:8000/",
        clock: Callable[[], datetime] = utc_now,
        rng: random.Random | None = None,
        session_idle_timeout: int = SESSION_IDLE_TIMEOUT_SECONDS,
    ) -> None:
        self._lock = Lock()
        self._collections = CollectionStore(store)
        self._share_base_url = share_base_url
        self._clock = clock
        self._rng = rng or random.Random()
        self._session_idle_timeout = timedelta(seconds=session_idle_timeout)

        # Services
        self._accounts = AccountService(self._collections)
        self._preferences = PreferenceStore(self._collections)
        self._quizzes = QuizRepository(self._collections)
        self._results = ResultStore(self._collections)
        self._sessions: dict[str, QuizSession] = {}
        self._session_seen: dict[str, datetime] = {}

    # --- Accounts ---

    def register(self, name: str, email: str, password: str) -> User:
        with self._lock:
            return self._accounts.register(name, email, password)

    def login(self, email: str, password: str) -> User:
        with self._lock:
            return self._accounts.login(email, password)

    def logout(self) -> None:
        with self._lock:
            self._accounts.logout()

    def current_user(self) -> User | None:
        with self._lock:
            return self._accounts.current_user()

    def ensure_admin_account(self, name: str, email: str, password: str) -> User:
        with self._lock:
            return self._accounts.ensure_admin_account(name, email, password)

    def _require_user(self) -> User:
        user = self._accounts.current_user()
        if user is None:
            raise NotAuthenticatedError("Please sign in first.")
        return user

    # --- Preferences ---

    def get_theme(self) -> Theme:
        with self._lock:
            return self._preferences.get_theme()

    def set_theme(self, theme: Theme) -> None:
        with self._lock:
            self._preferences.set_theme(theme)

    def toggle_theme(self) -> Theme:
        with self._lock:
            return self._preferences.toggle_theme()

    # --- Quizzes ---

    def create_quiz(self, draft: QuizDraft) -> Quiz:
        with self._lock:
            creator = self._require_user()
            quiz = build_quiz(draft, creator)
            return self._quizzes.add(quiz)

    def get_quiz(self, quiz_id: str) -> Quiz:
        with self._lock:
            return self._quizzes.get(quiz_id)

    def delete_quiz(self, quiz_id: str) -> None:
        with self._lock:
            self._quizzes.delete(quiz_id, self._require_user())

    def list_visible_quizzes(self) -> list[Quiz]:
        with self._lock:
            return self._quizzes.list_visible(self._accounts.current_user())

    def share_url(self, quiz_id: str) -> str:
        with self._lock:
            self._quizzes.get(quiz_id)
            return QuizRepository.share_url(quiz_id, self._share_base_url)

    def dashboard(self) -> DashboardSummary:
        with self._lock:
            user = self._require_user()
            results = self._results.list_all()
            visible = self._quizzes.list_visible(user)

            def card(quiz: Quiz) -> QuizCard:
                return QuizCard(quiz=quiz, stats=leaderboard.quiz_stats(quiz, results))

            return DashboardSummary(
                user=user,
                my_quizzes=[card(quiz) for quiz in visible if quiz.creator_id == user.id],
                all_quizzes=[card(quiz) for quiz in visible],
                my_result_count=sum(1 for result in results if result.user_id == user.id),
            )

    # --- Quiz sessions ---

    def start_session(self, quiz_id: str, use_account: bool = True) -> QuizSession:
        """Open a quiz for taking.

        With ``use_account`` and a signed-in user the quiz starts right away;
        otherwise the session waits for the guest's name and email.
        """
        with self._lock:
            self._evict_idle_sessions()
            quiz = self._quizzes.get(quiz_id)
            user = self._accounts.current_user() if use_account else None
            participant = Participant.from_user(user) if user is not None else None
            session = QuizSession(
                quiz=quiz,
                on_complete=self._results.append,
                participant=participant,
                clock=self._clock,
                rng=self._rng,
            )
            self._sessions[session.id] = session
            self._session_seen[session.id] = self._clock()
            logger.info("Opened session %s on quiz %s", session.id, quiz.id)
            return session

    def _get_session(self, session_id: str) -> QuizSession:
        self._evict_idle_sessions()
        session = self._sessions.get(session_id)
        if session is None:
            raise NotFoundError(f"Session '{session_id}' does not exist.")
        self._session_seen[session_id] = self._clock()
        return session

    def _evict_idle_sessions(self) -> None:
        cutoff = self._clock() - self._session_idle_timeout
        idle = [session_id for session_id, seen in self._session_seen.items() if seen < cutoff]
        for session_id in idle:
            self._drop_session(session_id)
        if idle:
            logger.info("Dropped %d idle session(s)", len(idle))

    def _drop_session(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
        self._session_seen.pop(session_id, None)

    def session_snapshot(self, session_id: str, sync: bool = False) -> dict[str, object]:
        with self._lock:
            session = self._get_session(session_id)
            if sync:
                session.sync(self._clock())
            return session.snapshot()

    def submit_participant(self, session_id: str, name: str, email: str) -> dict[str, object]:
        with self._lock:
            session = self._get_session(session_id)
            session.submit_participant(name, email)
            return session.snapshot()

    def select_option(self, session_id: str, option_index: int, sync: bool = False) -> dict[str, object]:
        with self._lock:
            session = self._get_session(session_id)
            if sync:
                session.sync(self._clock())
            session.select_option(option_index)
            return session.snapshot()

    def advance(self, session_id: str, sync: bool = False) -> dict[str, object]:
        with self._lock:
            session = self._get_session(session_id)
            if sync:
                session.sync(self._clock())
            session.advance()
            return session.snapshot()

    def tick(self, session_id: str) -> dict[str, object]:
        with self._lock:
            session = self._get_session(session_id)
            session.tick()
            return session.snapshot()

    def retake(self, session_id: str) -> dict[str, object]:
        with self._lock:
            session = self._get_session(session_id)
            session.retake()
            return session.snapshot()

    def end_session(self, session_id: str) -> None:
        with self._lock:
            self._drop_session(session_id)

    def active_session_count(self) -> int:
        with self._lock:
            self._evict_idle_sessions()
            return len(self._sessions)

    def get_session(self, session_id: str) -> QuizSession:
        with self._lock:
            return self._get_session(session_id)

    # --- Results & reports ---

    def list_results(self) -> list[QuizResult]:
        with self._lock:
            return self._results.list_all()

    def leaderboard(self, quiz_filter: str | None = None) -> LeaderboardView:
        with self._lock:
            viewer = self._require_user()
            all_quizzes = self._quizzes.list_all()
            offered = leaderboard.reportable_quizzes(viewer, all_quizzes)
            results = leaderboard.visible_results(
                viewer, self._results.list_all(), all_quizzes, quiz_filter
            )
            heading = leaderboard.quiz_title(quiz_filter, all_quizzes) if quiz_filter else ALL_QUIZZES_TITLE
            return LeaderboardView(
                heading=heading,
                rows=leaderboard.build_rows(results, all_quizzes),
                stats=leaderboard.overall_stats(results, len(offered), quiz_filter),
                quizzes=offered,
            )

    def export_leaderboard(self, quiz_filter: str | None = None) -> str:
        view = self.leaderboard(quiz_filter)
        return render_leaderboard(view.rows, view.heading)

    def export_answer_key(self, quiz_id: str) -> str:
        """Answer key for the quiz's creator or an administrator."""
        with self._lock:
            user = self._require_user()
            quiz = self._quizzes.get(quiz_id)
            if not user.is_admin and quiz.creator_id != user.id:
                raise PermissionDeniedError("Only the quiz creator can export its answer key.")
        return render_answer_key(quiz)

    def export_session_answer_key(self, session_id: str) -> str:
        """Answer key for a participant who finished a quiz that discloses answers."""
        with self._lock:
            session = self._get_session(session_id)
            if session.state != SessionState.COMPLETED:
                raise InvalidTransitionError("The answer key is available once the quiz is finished.")
            if not session.quiz.settings.show_correct_answers:
                raise PermissionDeniedError("This quiz does not reveal its correct answers.")
            quiz = session.quiz
        return render_answer_key(quiz)
