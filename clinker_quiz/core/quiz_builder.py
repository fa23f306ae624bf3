"""Authoring flow: turn free-form form input into a validated quiz.

Validation is all-or-nothing. The first problem found raises
``MissingFieldError`` and no quiz is produced, so callers never persist a
partially valid quiz.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import uuid4

from clinker_quiz.constants.quiz_constants import OPTION_COUNT
from clinker_quiz.core.errors import MissingFieldError
from clinker_quiz.core.models import Question, Quiz, QuizSettings, User, utc_now


@dataclass(slots=True)
class QuestionDraft:
    """Unvalidated question as typed into the creator form."""

    text: str = ""
    options: list[str] = field(default_factory=lambda: [""] * OPTION_COUNT)
    correct_option_index: int = 0
    comment: str = ""
    time_limit_seconds: int | None = 0


@dataclass(slots=True)
class QuizDraft:
    """Unvalidated quiz as typed into the creator form."""

    title: str = ""
    description: str = ""
    time_limit_minutes: int | None = 0
    is_public: bool = True
    settings: QuizSettings = field(default_factory=QuizSettings)
    questions: list[QuestionDraft] = field(default_factory=lambda: [QuestionDraft()])


def build_quiz(draft: QuizDraft, creator: User) -> Quiz:
    """Validate ``draft`` and return a new quiz owned by ``creator``."""
    title = (draft.title or "").strip()
    if not title:
        raise MissingFieldError("Please enter a quiz title.")
    if not draft.questions:
        raise MissingFieldError("A quiz needs at least one question.")

    questions = [
        _build_question(question_draft, position)
        for position, question_draft in enumerate(draft.questions, start=1)
    ]
    description = (draft.description or "").strip() or None

    return Quiz(
        id=uuid4().hex,
        title=title,
        description=description,
        questions=questions,
        creator_id=creator.id,
        creator_name=creator.name,
        created_at=utc_now(),
        time_limit_minutes=_normalize_limit(draft.time_limit_minutes, "Quiz time limit"),
        is_public=draft.is_public,
        settings=QuizSettings(
            show_correct_answers=draft.settings.show_correct_answers,
            show_comments=draft.settings.show_comments,
            allow_retake=draft.settings.allow_retake,
            randomize_questions=draft.settings.randomize_questions,
        ),
    )


def _build_question(draft: QuestionDraft, position: int) -> Question:
    text = (draft.text or "").strip()
    if not text:
        raise MissingFieldError(f"Question {position} has no text.")

    options = _validate_options(draft.options, position)
    if not 0 <= draft.correct_option_index < len(options):
        raise MissingFieldError(f"Question {position} must mark one of its options as correct.")

    return Question(
        id=f"q{position}",
        text=text,
        options=options,
        correct_option_index=draft.correct_option_index,
        comment=(draft.comment or "").strip() or None,
        time_limit_seconds=_normalize_limit(draft.time_limit_seconds, f"Question {position} time limit"),
    )


def _validate_options(options: list[str], position: int) -> list[str]:
    if len(options) != OPTION_COUNT:
        raise MissingFieldError(f"Question {position} must have exactly {OPTION_COUNT} options.")
    cleaned = [(option or "").strip() for option in options]
    if any(not option for option in cleaned):
        raise MissingFieldError(f"Question {position} has an empty option.")
    return cleaned


def _normalize_limit(value: int | None, label: str) -> int | None:
    """Zero or missing means no limit."""
    if value is None or value == 0:
        return None
    if not isinstance(value, int) or isinstance(value, bool):
        raise MissingFieldError(f"{label} must be a whole number.")
    if value < 0:
        raise MissingFieldError(f"{label} cannot be negative.")
    return value
