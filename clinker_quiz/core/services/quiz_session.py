"""State machine for one participant taking one quiz.

Every input (option selection, advancing, the one-second timer tick,
participant details, retake) is an event handled by ``handle``. The two
countdowns are not separate callbacks. A single tick decrements both, so a
tick that ends the quiz can never also advance the question.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
import random
from typing import Callable
from uuid import uuid4

from clinker_quiz.constants.quiz_constants import OPTION_LETTERS, UNANSWERED
from clinker_quiz.core.errors import (
    InvalidTransitionError,
    MissingFieldError,
    RetakeNotAllowedError,
)
from clinker_quiz.core.models import (
    AnswerOutcome,
    Participant,
    Question,
    Quiz,
    QuizResult,
    utc_now,
)
from clinker_quiz.core.services.leaderboard import percentage, tier


class SessionState(Enum):
    AWAITING_PARTICIPANT = "awaiting-participant-info"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


@dataclass(frozen=True, slots=True)
class SubmitParticipant:
    name: str
    email: str


@dataclass(frozen=True, slots=True)
class SelectOption:
    option_index: int


@dataclass(frozen=True, slots=True)
class Advance:
    pass


@dataclass(frozen=True, slots=True)
class Tick:
    at: datetime | None = None  # replayed instant during catch-up


@dataclass(frozen=True, slots=True)
class Retake:
    pass


SessionEvent = SubmitParticipant | SelectOption | Advance | Tick | Retake


@dataclass(slots=True)
class ReviewItem:
    """Post-completion disclosure for one question."""

    number: int
    question_id: str
    text: str
    options: list[str]
    selected_option_index: int
    correct_option_index: int
    is_correct: bool
    comment: str | None

    def to_dict(self) -> dict[str, object]:
        return {
            "number": self.number,
            "question_id": self.question_id,
            "text": self.text,
            "options": list(self.options),
            "selected_option_index": self.selected_option_index,
            "correct_option_index": self.correct_option_index,
            "is_correct": self.is_correct,
            "comment": self.comment,
        }


class QuizSession:
    """Runs a quiz from participant details through to a stored result."""

    def __init__(
        self,
        quiz: Quiz,
        on_complete: Callable[[QuizResult], None],
        participant: Participant | None = None,
        clock: Callable[[], datetime] = utc_now,
        rng: random.Random | None = None,
    ) -> None:
        if not quiz.questions:
            raise InvalidTransitionError("This quiz has no questions.")
        self.id: str = uuid4().hex
        self._quiz = quiz
        self._on_complete = on_complete
        self._participant = participant
        self._clock = clock
        self._rng = rng or random.Random()

        self._state = SessionState.AWAITING_PARTICIPANT
        self._order: list[int] = []
        self._position: int = 0
        self._selected: list[int] = []
        self._seconds_on_question: list[float] = []
        self._quiz_time_left: int = 0
        self._question_time_left: int = 0
        self._started_at: datetime | None = None
        self._question_entered_at: datetime | None = None
        self._last_synced_at: datetime | None = None
        self._result: QuizResult | None = None

        if participant is not None:
            self._begin()

    # --- Event entry points ---

    def submit_participant(self, name: str, email: str) -> None:
        self.handle(SubmitParticipant(name=name, email=email))

    def select_option(self, option_index: int) -> None:
        self.handle(SelectOption(option_index=option_index))

    def advance(self) -> None:
        self.handle(Advance())

    def tick(self) -> None:
        self.handle(Tick())

    def retake(self) -> None:
        self.handle(Retake())

    def sync(self, now: datetime | None = None) -> int:
        """Apply one tick per whole second elapsed since the last sync.

        Used where no timer drives the session (the HTTP surface). Returns
        the number of ticks applied.
        """
        if self._state != SessionState.IN_PROGRESS or self._last_synced_at is None:
            return 0
        now = now or self._clock()
        due = int((now - self._last_synced_at).total_seconds())
        if due <= 0:
            return 0
        applied = 0
        while applied < due and self._state == SessionState.IN_PROGRESS:
            applied += 1
            self.handle(Tick(at=self._last_synced_at + timedelta(seconds=applied)))
        self._last_synced_at += timedelta(seconds=due)
        return applied

    def handle(self, event: SessionEvent) -> None:
        """The single state-transition function."""
        if isinstance(event, SubmitParticipant):
            self._on_participant(event)
        elif isinstance(event, SelectOption):
            self._on_select(event)
        elif isinstance(event, Advance):
            self._require(SessionState.IN_PROGRESS)
            if self._selected[self._current_index] == UNANSWERED:
                raise InvalidTransitionError("Choose an answer before continuing.")
            self._move_next()
        elif isinstance(event, Tick):
            self._on_tick(event)
        elif isinstance(event, Retake):
            self._on_retake()
        else:
            raise InvalidTransitionError(f"Unsupported event {event!r}.")

    # --- Transitions ---

    def _on_participant(self, event: SubmitParticipant) -> None:
        self._require(SessionState.AWAITING_PARTICIPANT)
        name = (event.name or "").strip()
        email = (event.email or "").strip()
        if not name or not email:
            raise MissingFieldError("Please fill in your name and email.")
        self._participant = Participant.guest(name=name, email=email)
        self._begin()

    def _on_select(self, event: SelectOption) -> None:
        self._require(SessionState.IN_PROGRESS)
        option_count = len(self.current_question.options)
        if not 0 <= event.option_index < option_count:
            raise InvalidTransitionError(
                f"Option index must be between 0 and {option_count - 1}."
            )
        self._selected[self._current_index] = event.option_index

    def _on_tick(self, event: Tick) -> None:
        if self._state != SessionState.IN_PROGRESS:
            return
        now = event.at or self._clock()

        if self._quiz_time_left > 0:
            if self._quiz_time_left <= 1:
                self._quiz_time_left = 0
                self._complete(now)
                return
            self._quiz_time_left -= 1

        if self._question_time_left > 0:
            if self._question_time_left <= 1:
                self._question_time_left = 0
                self._move_next(now)
                return
            self._question_time_left -= 1

    def _on_retake(self) -> None:
        self._require(SessionState.COMPLETED)
        if not self._quiz.settings.allow_retake:
            raise RetakeNotAllowedError("Retakes are disabled for this quiz.")
        self._begin()

    def _begin(self) -> None:
        question_count = len(self._quiz.questions)
        self._order = list(range(question_count))
        if self._quiz.settings.randomize_questions:
            self._rng.shuffle(self._order)
        self._position = 0
        self._selected = [UNANSWERED] * question_count
        self._seconds_on_question = [0.0] * question_count
        self._result = None

        now = self._clock()
        self._started_at = now
        self._question_entered_at = now
        self._last_synced_at = now
        self._quiz_time_left = (self._quiz.time_limit_minutes or 0) * 60
        self._question_time_left = self.current_question.time_limit_seconds or 0
        self._state = SessionState.IN_PROGRESS

    def _move_next(self, now: datetime | None = None) -> None:
        now = now or self._clock()
        self._record_question_time(now)
        if self._position < len(self._order) - 1:
            self._position += 1
            self._question_entered_at = now
            self._question_time_left = self.current_question.time_limit_seconds or 0
        else:
            self._complete(now)

    def _complete(self, now: datetime | None = None) -> None:
        if self._state != SessionState.IN_PROGRESS:
            return
        now = now or self._clock()
        if self._question_entered_at is not None:
            self._record_question_time(now)

        answers: list[AnswerOutcome] = []
        score = 0
        for index, question in enumerate(self._quiz.questions):
            selected = self._selected[index]
            is_correct = selected == question.correct_option_index
            if is_correct:
                score += 1
            answers.append(
                AnswerOutcome(
                    question_id=question.id,
                    selected_option_index=selected,
                    is_correct=is_correct,
                    time_spent_seconds=int(self._seconds_on_question[index]),
                )
            )

        completed_at = now
        participant = self._participant
        if participant is None or self._started_at is None:
            raise InvalidTransitionError("The quiz has not started yet.")
        self._result = QuizResult(
            id=uuid4().hex,
            quiz_id=self._quiz.id,
            user_id=participant.id,
            user_name=participant.name,
            user_email=participant.email,
            score=score,
            total_questions=len(self._quiz.questions),
            answers=answers,
            completed_at=completed_at,
            time_spent_seconds=int((completed_at - self._started_at).total_seconds()),
        )
        self._state = SessionState.COMPLETED
        self._quiz_time_left = 0
        self._question_time_left = 0
        self._on_complete(self._result)

    def _record_question_time(self, now: datetime) -> None:
        if self._question_entered_at is None:
            return
        elapsed = (now - self._question_entered_at).total_seconds()
        self._seconds_on_question[self._current_index] += max(0.0, elapsed)
        self._question_entered_at = None

    def _require(self, state: SessionState) -> None:
        if self._state != state:
            raise InvalidTransitionError(
                f"Not allowed while the quiz is {self._state.value}."
            )

    # --- Queries ---

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def quiz(self) -> Quiz:
        return self._quiz

    @property
    def participant(self) -> Participant | None:
        return self._participant

    @property
    def result(self) -> QuizResult | None:
        return self._result

    @property
    def _current_index(self) -> int:
        return self._order[self._position]

    @property
    def current_question(self) -> Question:
        if not self._order:
            raise InvalidTransitionError("The quiz has not started yet.")
        return self._quiz.questions[self._current_index]

    @property
    def position(self) -> int:
        """Zero-based position of the current question in presentation order."""
        return self._position

    @property
    def question_count(self) -> int:
        return len(self._quiz.questions)

    @property
    def is_last_question(self) -> bool:
        return self._position == len(self._order) - 1

    @property
    def current_selection(self) -> int:
        if self._state != SessionState.IN_PROGRESS:
            return UNANSWERED
        return self._selected[self._current_index]

    @property
    def selections(self) -> list[int]:
        """Selected option per question, in authored order."""
        return list(self._selected)

    @property
    def quiz_time_left(self) -> int:
        return self._quiz_time_left

    @property
    def question_time_left(self) -> int:
        return self._question_time_left

    @property
    def can_advance(self) -> bool:
        return self._state == SessionState.IN_PROGRESS and self.current_selection != UNANSWERED

    @property
    def can_retake(self) -> bool:
        return self._state == SessionState.COMPLETED and self._quiz.settings.allow_retake

    def review(self) -> list[ReviewItem]:
        """Per-question breakdown; empty when the quiz hides correct answers."""
        if self._result is None or not self._quiz.settings.show_correct_answers:
            return []
        show_comments = self._quiz.settings.show_comments
        return [
            ReviewItem(
                number=number,
                question_id=question.id,
                text=question.text,
                options=list(question.options),
                selected_option_index=outcome.selected_option_index,
                correct_option_index=question.correct_option_index,
                is_correct=outcome.is_correct,
                comment=question.comment if show_comments else None,
            )
            for number, (question, outcome) in enumerate(
                zip(self._quiz.questions, self._result.answers), start=1
            )
        ]

    def snapshot(self) -> dict[str, object]:
        """Serializable view state for the desktop and web clients."""
        payload: dict[str, object] = {
            "session_id": self.id,
            "state": self._state.value,
            "quiz_id": self._quiz.id,
            "quiz_title": self._quiz.title,
            "quiz_description": self._quiz.description,
            "question_count": self.question_count,
            "participant": None,
        }
        if self._participant is not None:
            payload["participant"] = {
                "id": self._participant.id,
                "name": self._participant.name,
                "email": self._participant.email,
            }

        if self._state == SessionState.IN_PROGRESS:
            question = self.current_question
            payload.update(
                {
                    "position": self._position + 1,
                    "question": {
                        "id": question.id,
                        "text": question.text,
                        "options": [
                            {"letter": OPTION_LETTERS[index] if index < len(OPTION_LETTERS) else str(index + 1),
                             "text": option}
                            for index, option in enumerate(question.options)
                        ],
                    },
                    "selected_option_index": self.current_selection,
                    "can_advance": self.can_advance,
                    "is_last_question": self.is_last_question,
                    "quiz_time_left": self._quiz_time_left,
                    "question_time_left": self._question_time_left,
                }
            )
        elif self._state == SessionState.COMPLETED and self._result is not None:
            value = percentage(self._result.score, self._result.total_questions)
            payload.update(
                {
                    "result": self._result.to_dict(),
                    "percentage": value,
                    "tier": tier(value).value,
                    "can_retake": self.can_retake,
                    "review": [item.to_dict() for item in self.review()],
                }
            )
        return payload
