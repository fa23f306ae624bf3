"""FastAPI server exposing the quiz platform over HTTP."""

from __future__ import annotations

from threading import Thread
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Response
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field
import uvicorn

from clinker_quiz.constants.about import APP_NAME, APP_VERSION
from clinker_quiz.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from clinker_quiz.core.errors import (
    DuplicateAccountError,
    InvalidCredentialsError,
    InvalidTransitionError,
    NotAuthenticatedError,
    NotFoundError,
    PermissionDeniedError,
    QuizPlatformError,
    StorageError,
)
from clinker_quiz.core.markdown_math_renderer import MATHJAX_SCRIPT, renderer
from clinker_quiz.core.models import Quiz, QuizSettings
from clinker_quiz.core.platform_manager import PlatformManager
from clinker_quiz.core.quiz_builder import QuestionDraft, QuizDraft
from clinker_quiz.styling.color_palette import Theme

_PLAYER_PAGE_HTML = """<!doctype html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <title>ClinkerQuiz</title>
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <style>
      :root { font-family: 'Inter', system-ui, sans-serif; background: #eef2ff; color: #111827; }
      body { margin: 0; padding: 1.5rem; display: flex; flex-direction: column; gap: 1rem; max-width: 48rem; margin-inline: auto; }
      .card { background: #ffffff; border-radius: 0.75rem; padding: 1.5rem; box-shadow: 0 0.5rem 1.5rem rgba(59, 130, 246, 0.15); }
      .hidden { display: none; }
      .primary-button { border: none; border-radius: 0.75rem; padding: 0.85rem 1.5rem; font-size: 1rem; background: linear-gradient(90deg, #3b82f6, #7c3aed); color: #fff; cursor: pointer; }
      .primary-button:disabled { opacity: 0.5; cursor: not-allowed; }
      input { display: block; width: 100%; box-sizing: border-box; padding: 0.65rem; margin-bottom: 0.75rem; border: 1px solid #c7d2fe; border-radius: 0.5rem; font-size: 1rem; }
      #question-container { min-height: 4rem; font-size: 1.1rem; line-height: 1.6; }
      .options-grid { display: grid; grid-template-columns: repeat(auto-fit, minmax(200px, 1fr)); gap: 0.75rem; margin: 1rem 0; }
      .option-button { border: 2px solid #c7d2fe; border-radius: 0.75rem; padding: 1rem; font-size: 1rem; background: #fff; color: #111827; cursor: pointer; text-align: left; }
      .option-button.selected { border-color: #3b82f6; background: #dbeafe; }
      .timers { display: flex; gap: 1.5rem; color: #4b5563; }
      .timers .urgent { color: #b91c1c; font-weight: 600; }
      #status { min-height: 1.25rem; color: #b91c1c; }
      .review-item { border-top: 1px solid #e5e7eb; padding: 0.75rem 0; }
      .review-item .correct { color: #15803d; font-weight: 600; }
      .review-item .wrong { color: #b91c1c; }
      .score { font-size: 2.5rem; font-weight: 700; }
    </style>
    <script>
      window.MathJax = { tex: { inlineMath: [['$','$']], displayMath: [['$$','$$']] }, svg: { fontCache: 'global' } };
    </script>
    <script defer src=\"__MATHJAX__\"></script>
  </head>
  <body>
    <section class=\"card\" id=\"intro-card\">
      <h1 id=\"quiz-title\">ClinkerQuiz</h1>
      <p id=\"quiz-description\"></p>
      <p id=\"intro-status\">Open a shared quiz link to start.</p>
    </section>
    <section class=\"card hidden\" id=\"participant-card\">
      <h2>Your details</h2>
      <input id=\"participant-name\" placeholder=\"Name\" />
      <input id=\"participant-email\" placeholder=\"Email\" type=\"email\" />
      <button id=\"start-button\" class=\"primary-button\">Start quiz</button>
    </section>
    <section class=\"card hidden\" id=\"quiz-card\">
      <div class=\"timers\">
        <span id=\"progress\"></span>
        <span id=\"quiz-timer\"></span>
        <span id=\"question-timer\"></span>
      </div>
      <div id=\"question-container\"></div>
      <div id=\"options-container\" class=\"options-grid\"></div>
      <button id=\"next-button\" class=\"primary-button\" disabled>Next</button>
    </section>
    <section class=\"card hidden\" id=\"result-card\">
      <h2>Quiz complete</h2>
      <p class=\"score\" id=\"score\"></p>
      <p id=\"score-detail\"></p>
      <button id=\"retake-button\" class=\"primary-button hidden\">Retake quiz</button>
      <a id=\"answer-key-link\" class=\"hidden\" target=\"_blank\" rel=\"noopener\">Printable answer key</a>
      <div id=\"review-container\"></div>
    </section>
    <p id=\"status\"></p>
    <script>
      const params = new URLSearchParams(window.location.search);
      const quizId = params.get('quiz');
      const statusEl = document.getElementById('status');
      const cards = {
        intro: document.getElementById('intro-card'),
        participant: document.getElementById('participant-card'),
        quiz: document.getElementById('quiz-card'),
        result: document.getElementById('result-card'),
      };
      const questionContainer = document.getElementById('question-container');
      const optionsContainer = document.getElementById('options-container');
      const nextButton = document.getElementById('next-button');
      const retakeButton = document.getElementById('retake-button');
      const answerKeyLink = document.getElementById('answer-key-link');
      const tiers = { trophy: '\\u{1F3C6}', second_place: '\\u{1F948}', study: '\\u{1F4DA}' };

      let sessionId = null;
      let currentQuestionId = null;
      let pollHandle = null;

      function show(name) {
        Object.entries(cards).forEach(([key, element]) => {
          element.classList.toggle('hidden', key !== name && !(key === 'intro' && name === 'participant'));
        });
      }

      function clock(seconds) {
        const minutes = Math.floor(seconds / 60);
        const rest = seconds % 60;
        return `${String(minutes).padStart(2, '0')}:${String(rest).padStart(2, '0')}`;
      }

      async function typesetMath() {
        await new Promise(resolve => setTimeout(resolve, 100));
        for (let i = 0; i < 15; i++) {
          if (window.MathJax && window.MathJax.typesetPromise) {
            try {
              await window.MathJax.typesetPromise([questionContainer, optionsContainer]);
              return;
            } catch (err) {
              console.warn('MathJax typeset attempt', i + 1, 'error:', err);
            }
          }
          await new Promise(resolve => setTimeout(resolve, 150));
        }
      }

      async function call(method, path, body) {
        const options = { method, headers: { 'Content-Type': 'application/json' } };
        if (body !== undefined) {
          options.body = JSON.stringify(body);
        }
        const response = await fetch(path, options);
        const payload = await response.json().catch(() => ({}));
        if (!response.ok) {
          throw new Error(payload.detail || 'Request failed.');
        }
        return payload;
      }

      function renderQuestion(snapshot) {
        document.getElementById('progress').textContent = `Question ${snapshot.position} of ${snapshot.question_count}`;
        const quizTimer = document.getElementById('quiz-timer');
        quizTimer.textContent = snapshot.quiz_time_left > 0 ? `Quiz ${clock(snapshot.quiz_time_left)}` : '';
        quizTimer.classList.toggle('urgent', snapshot.quiz_time_left > 0 && snapshot.quiz_time_left <= 60);
        const questionTimer = document.getElementById('question-timer');
        questionTimer.textContent = snapshot.question_time_left > 0 ? `Question ${snapshot.question_time_left}s` : '';
        questionTimer.classList.toggle('urgent', snapshot.question_time_left > 0 && snapshot.question_time_left <= 10);

        if (snapshot.question.id !== currentQuestionId) {
          currentQuestionId = snapshot.question.id;
          questionContainer.innerHTML = snapshot.question.html;
          optionsContainer.innerHTML = '';
          snapshot.question.options.forEach((option, index) => {
            const button = document.createElement('button');
            button.className = 'option-button';
            button.innerHTML = `<strong>${option.letter}.</strong> ${option.html}`;
            button.addEventListener('click', () => selectOption(index));
            optionsContainer.appendChild(button);
          });
          typesetMath();
        }
        optionsContainer.querySelectorAll('.option-button').forEach((button, index) => {
          button.classList.toggle('selected', index === snapshot.selected_option_index);
        });
        nextButton.disabled = !snapshot.can_advance;
        nextButton.textContent = snapshot.is_last_question ? 'Finish quiz' : 'Next';
      }

      function renderResult(snapshot) {
        const result = snapshot.result;
        document.getElementById('score').textContent = `${tiers[snapshot.tier] || ''} ${snapshot.percentage}%`;
        document.getElementById('score-detail').textContent =
          `${result.score} of ${result.totalQuestions} correct in ${clock(result.timeSpent)}`;
        retakeButton.classList.toggle('hidden', !snapshot.can_retake);
        answerKeyLink.href = `/api/sessions/${sessionId}/answer-key`;
        answerKeyLink.classList.toggle('hidden', snapshot.review.length === 0);
        const review = document.getElementById('review-container');
        review.innerHTML = '';
        snapshot.review.forEach(item => {
          const block = document.createElement('div');
          block.className = 'review-item';
          const heading = document.createElement('p');
          heading.textContent = `${item.number}. ${item.text}`;
          block.appendChild(heading);
          item.options.forEach((option, index) => {
            const line = document.createElement('div');
            let marker = '';
            if (index === item.correct_option_index) {
              line.className = 'correct';
              marker = ' \\u2713';
            } else if (index === item.selected_option_index) {
              line.className = 'wrong';
              marker = ' \\u2717';
            }
            line.textContent = `${String.fromCharCode(65 + index)}. ${option}${marker}`;
            block.appendChild(line);
          });
          if (item.comment) {
            const comment = document.createElement('p');
            comment.textContent = item.comment;
            block.appendChild(comment);
          }
          review.appendChild(block);
        });
      }

      function render(snapshot) {
        document.getElementById('quiz-title').textContent = snapshot.quiz_title;
        document.getElementById('quiz-description').textContent = snapshot.quiz_description || '';
        statusEl.textContent = '';
        if (snapshot.state === 'awaiting-participant-info') {
          document.getElementById('intro-status').textContent = `${snapshot.question_count} questions`;
          show('participant');
        } else if (snapshot.state === 'in-progress') {
          show('quiz');
          renderQuestion(snapshot);
        } else {
          show('result');
          currentQuestionId = null;
          renderResult(snapshot);
          clearInterval(pollHandle);
          pollHandle = null;
        }
      }

      async function act(method, path, body) {
        try {
          const snapshot = await call(method, path, body);
          render(snapshot);
          if (snapshot.state === 'in-progress' && pollHandle === null) {
            pollHandle = setInterval(refresh, 1000);
          }
        } catch (error) {
          statusEl.textContent = error.message;
        }
      }

      async function refresh() {
        if (sessionId) {
          await act('GET', `/api/sessions/${sessionId}`);
        }
      }

      function selectOption(index) {
        act('POST', `/api/sessions/${sessionId}/answer`, { selected_option_index: index });
      }

      nextButton.addEventListener('click', () => act('POST', `/api/sessions/${sessionId}/advance`));
      retakeButton.addEventListener('click', () => act('POST', `/api/sessions/${sessionId}/retake`));
      document.getElementById('start-button').addEventListener('click', () => act(
        'POST',
        `/api/sessions/${sessionId}/participant`,
        {
          name: document.getElementById('participant-name').value,
          email: document.getElementById('participant-email').value,
        },
      ));

      async function openQuiz() {
        if (!quizId) {
          return;
        }
        try {
          const snapshot = await call('POST', '/api/sessions', { quiz_id: quizId });
          sessionId = snapshot.session_id;
          render(snapshot);
        } catch (error) {
          document.getElementById('intro-status').textContent = error.message;
        }
      }

      window.addEventListener('pagehide', () => {
        if (sessionId) {
          fetch(`/api/sessions/${sessionId}`, { method: 'DELETE', keepalive: true });
        }
      });

      openQuiz();
    </script>
  </body>
</html>
""".replace("__MATHJAX__", MATHJAX_SCRIPT)

_THEME_NAMES = {Theme.LIGHT: "light", Theme.DARK: "dark"}

_ERROR_STATUS: tuple[tuple[type[QuizPlatformError], int], ...] = (
    (NotAuthenticatedError, 401),
    (InvalidCredentialsError, 401),
    (PermissionDeniedError, 403),
    (NotFoundError, 404),
    (DuplicateAccountError, 409),
    (InvalidTransitionError, 409),
    (StorageError, 500),
)


def _http_error(exc: QuizPlatformError) -> HTTPException:
    """Translate a domain error into an HTTP error; input problems are 422."""
    for error_type, status_code in _ERROR_STATUS:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=422, detail=str(exc))


class RegisterPayload(BaseModel):
    name: str = ""
    email: str = ""
    password: str = ""


class LoginPayload(BaseModel):
    email: str = ""
    password: str = ""


class QuizSettingsPayload(BaseModel):
    show_correct_answers: bool = True
    show_comments: bool = True
    allow_retake: bool = True
    randomize_questions: bool = False


class QuestionPayload(BaseModel):
    text: str = ""
    options: list[str] = Field(default_factory=list)
    correct_option_index: int = 0
    comment: str = ""
    time_limit_seconds: int | None = None


class QuizPayload(BaseModel):
    """Payload schema for creating a quiz."""

    title: str = ""
    description: str = ""
    time_limit_minutes: int | None = None
    is_public: bool = True
    settings: QuizSettingsPayload = Field(default_factory=QuizSettingsPayload)
    questions: list[QuestionPayload] = Field(default_factory=list)

    def to_draft(self) -> QuizDraft:
        return QuizDraft(
            title=self.title,
            description=self.description,
            time_limit_minutes=self.time_limit_minutes,
            is_public=self.is_public,
            settings=QuizSettings(**self.settings.model_dump()),
            questions=[
                QuestionDraft(
                    text=question.text,
                    options=list(question.options),
                    correct_option_index=question.correct_option_index,
                    comment=question.comment,
                    time_limit_seconds=question.time_limit_seconds,
                )
                for question in self.questions
            ],
        )


class SessionPayload(BaseModel):
    quiz_id: str
    use_account: bool = False


class ParticipantPayload(BaseModel):
    name: str = ""
    email: str = ""


class AnswerPayload(BaseModel):
    """Payload schema for selecting an option on the current question."""

    selected_option_index: int


class ThemePayload(BaseModel):
    theme: str


def _quiz_summary(quiz: Quiz, share_url: str) -> dict[str, Any]:
    """Quiz metadata without the correct answers."""
    return {
        "id": quiz.id,
        "title": quiz.title,
        "description": quiz.description,
        "question_count": len(quiz.questions),
        "creator_name": quiz.creator_name,
        "is_public": quiz.is_public,
        "time_limit_minutes": quiz.time_limit_minutes,
        "created_at": quiz.created_at.isoformat(),
        "share_url": share_url,
    }


def _with_rendered_question(snapshot: dict[str, Any]) -> dict[str, Any]:
    question = snapshot.get("question")
    if isinstance(question, dict):
        question["html"] = renderer.render_fragment(question["text"])
        for option in question["options"]:
            option["html"] = renderer.render_inline(option["text"])
    return snapshot


def _get_manager_dependency(manager: PlatformManager):
    def dependency() -> PlatformManager:
        return manager

    return dependency


def create_api_app(manager: PlatformManager) -> FastAPI:
    """Create a FastAPI application wired to the provided platform manager."""
    app = FastAPI(title=f"{APP_NAME} API", version=APP_VERSION)
    manager_dep = _get_manager_dependency(manager)

    @app.get("/", response_class=HTMLResponse)
    def serve_player_page() -> str:
        return _PLAYER_PAGE_HTML

    # --- Accounts ---

    @app.post("/api/accounts/register", status_code=201)
    def register(
        payload: RegisterPayload,
        platform: PlatformManager = Depends(manager_dep),
    ) -> dict[str, Any]:
        try:
            user = platform.register(payload.name, payload.email, payload.password)
        except QuizPlatformError as exc:
            raise _http_error(exc) from exc
        return user.to_dict()

    @app.post("/api/accounts/login")
    def login(
        payload: LoginPayload,
        platform: PlatformManager = Depends(manager_dep),
    ) -> dict[str, Any]:
        try:
            user = platform.login(payload.email, payload.password)
        except QuizPlatformError as exc:
            raise _http_error(exc) from exc
        return user.to_dict()

    @app.post("/api/accounts/logout", status_code=204)
    def logout(platform: PlatformManager = Depends(manager_dep)) -> Response:
        platform.logout()
        return Response(status_code=204)

    @app.get("/api/accounts/me")
    def current_account(platform: PlatformManager = Depends(manager_dep)) -> dict[str, Any]:
        user = platform.current_user()
        if user is None:
            raise HTTPException(status_code=401, detail="Not signed in.")
        return user.to_dict()

    # --- Quizzes ---

    @app.get("/api/quizzes")
    def list_quizzes(platform: PlatformManager = Depends(manager_dep)) -> list[dict[str, Any]]:
        return [
            _quiz_summary(quiz, platform.share_url(quiz.id))
            for quiz in platform.list_visible_quizzes()
        ]

    @app.post("/api/quizzes", status_code=201)
    def create_quiz(
        payload: QuizPayload,
        platform: PlatformManager = Depends(manager_dep),
    ) -> dict[str, Any]:
        try:
            quiz = platform.create_quiz(payload.to_draft())
        except QuizPlatformError as exc:
            raise _http_error(exc) from exc
        return quiz.to_dict()

    @app.get("/api/quizzes/{quiz_id}")
    def get_quiz(quiz_id: str, platform: PlatformManager = Depends(manager_dep)) -> dict[str, Any]:
        try:
            quiz = platform.get_quiz(quiz_id)
            return _quiz_summary(quiz, platform.share_url(quiz_id))
        except QuizPlatformError as exc:
            raise _http_error(exc) from exc

    @app.delete("/api/quizzes/{quiz_id}", status_code=204)
    def delete_quiz(quiz_id: str, platform: PlatformManager = Depends(manager_dep)) -> Response:
        try:
            platform.delete_quiz(quiz_id)
        except QuizPlatformError as exc:
            raise _http_error(exc) from exc
        return Response(status_code=204)

    @app.get("/api/quizzes/{quiz_id}/answer-key", response_class=HTMLResponse)
    def answer_key(quiz_id: str, platform: PlatformManager = Depends(manager_dep)) -> str:
        try:
            return platform.export_answer_key(quiz_id)
        except QuizPlatformError as exc:
            raise _http_error(exc) from exc

    # --- Quiz sessions ---

    @app.post("/api/sessions", status_code=201)
    def start_session(
        payload: SessionPayload,
        platform: PlatformManager = Depends(manager_dep),
    ) -> dict[str, Any]:
        try:
            session = platform.start_session(payload.quiz_id, use_account=payload.use_account)
            return _with_rendered_question(platform.session_snapshot(session.id))
        except QuizPlatformError as exc:
            raise _http_error(exc) from exc

    @app.get("/api/sessions/{session_id}")
    def get_session(session_id: str, platform: PlatformManager = Depends(manager_dep)) -> dict[str, Any]:
        try:
            return _with_rendered_question(platform.session_snapshot(session_id, sync=True))
        except QuizPlatformError as exc:
            raise _http_error(exc) from exc

    @app.post("/api/sessions/{session_id}/participant")
    def submit_participant(
        session_id: str,
        payload: ParticipantPayload,
        platform: PlatformManager = Depends(manager_dep),
    ) -> dict[str, Any]:
        try:
            snapshot = platform.submit_participant(session_id, payload.name, payload.email)
        except QuizPlatformError as exc:
            raise _http_error(exc) from exc
        return _with_rendered_question(snapshot)

    @app.post("/api/sessions/{session_id}/answer")
    def select_option(
        session_id: str,
        payload: AnswerPayload,
        platform: PlatformManager = Depends(manager_dep),
    ) -> dict[str, Any]:
        try:
            snapshot = platform.select_option(session_id, payload.selected_option_index, sync=True)
        except QuizPlatformError as exc:
            raise _http_error(exc) from exc
        return _with_rendered_question(snapshot)

    @app.post("/api/sessions/{session_id}/advance")
    def advance(session_id: str, platform: PlatformManager = Depends(manager_dep)) -> dict[str, Any]:
        try:
            snapshot = platform.advance(session_id, sync=True)
        except QuizPlatformError as exc:
            raise _http_error(exc) from exc
        return _with_rendered_question(snapshot)

    @app.post("/api/sessions/{session_id}/retake")
    def retake(session_id: str, platform: PlatformManager = Depends(manager_dep)) -> dict[str, Any]:
        try:
            snapshot = platform.retake(session_id)
        except QuizPlatformError as exc:
            raise _http_error(exc) from exc
        return _with_rendered_question(snapshot)

    @app.get("/api/sessions/{session_id}/answer-key", response_class=HTMLResponse)
    def session_answer_key(session_id: str, platform: PlatformManager = Depends(manager_dep)) -> str:
        try:
            return platform.export_session_answer_key(session_id)
        except QuizPlatformError as exc:
            raise _http_error(exc) from exc

    @app.delete("/api/sessions/{session_id}", status_code=204)
    def end_session(session_id: str, platform: PlatformManager = Depends(manager_dep)) -> Response:
        platform.end_session(session_id)
        return Response(status_code=204)

    # --- Results ---

    @app.get("/api/results")
    def results(
        quiz: str | None = None,
        platform: PlatformManager = Depends(manager_dep),
    ) -> dict[str, Any]:
        try:
            view = platform.leaderboard(quiz)
        except QuizPlatformError as exc:
            raise _http_error(exc) from exc
        return {
            "heading": view.heading,
            "rows": [row.to_dict() for row in view.rows],
            "stats": {
                "participants": view.stats.participants,
                "quiz_count": view.stats.quiz_count,
                "average_percentage": view.stats.average_percentage,
            },
            "quizzes": [{"id": item.id, "title": item.title} for item in view.quizzes],
        }

    @app.get("/api/results/leaderboard", response_class=HTMLResponse)
    def leaderboard_document(
        quiz: str | None = None,
        platform: PlatformManager = Depends(manager_dep),
    ) -> str:
        try:
            return platform.export_leaderboard(quiz)
        except QuizPlatformError as exc:
            raise _http_error(exc) from exc

    # --- Preferences ---

    @app.get("/api/preferences/theme")
    def get_theme(platform: PlatformManager = Depends(manager_dep)) -> dict[str, str]:
        return {"theme": _THEME_NAMES[platform.get_theme()]}

    @app.put("/api/preferences/theme")
    def set_theme(
        payload: ThemePayload,
        platform: PlatformManager = Depends(manager_dep),
    ) -> dict[str, str]:
        names = {name: theme for theme, name in _THEME_NAMES.items()}
        theme = names.get(payload.theme.strip().lower())
        if theme is None:
            raise HTTPException(status_code=422, detail="Theme must be 'light' or 'dark'.")
        platform.set_theme(theme)
        return {"theme": _THEME_NAMES[theme]}

    @app.post("/api/preferences/theme/toggle")
    def toggle_theme(platform: PlatformManager = Depends(manager_dep)) -> dict[str, str]:
        return {"theme": _THEME_NAMES[platform.toggle_theme()]}

    return app


def start_api_server(
    manager: PlatformManager,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    log_level: str = "info",
) -> Thread:
    """Start the FastAPI server in a background daemon thread."""
    app = create_api_app(manager)
    config = uvicorn.Config(app=app, host=host, port=port, log_level=log_level.lower())
    server = uvicorn.Server(config)

    def run_server() -> None:
        server.run()

    thread = Thread(target=run_server, name="ClinkerApiServer", daemon=True)
    thread.start()
    return thread
