"""Domain models for the quiz platform.

Every model round-trips through a JSON-compatible dict whose keys match the
persisted collections (camelCase, ISO-8601 timestamps).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from clinker_quiz.constants.quiz_constants import GUEST_USER_ID, UNANSWERED


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def _parse_timestamp(raw: str | None) -> datetime:
    if not raw:
        return utc_now()
    parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _optional_positive_int(raw: Any) -> int | None:
    if raw in (None, "", 0):
        return None
    return int(raw)


@dataclass(slots=True)
class User:
    """Registered account. Passwords are kept in a separate store entry."""

    id: str
    name: str
    email: str
    is_admin: bool = False
    created_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "isAdmin": self.is_admin,
            "createdAt": _format_timestamp(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "User":
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            email=data.get("email", ""),
            is_admin=bool(data.get("isAdmin", False)),
            created_at=_parse_timestamp(data.get("createdAt")),
        )


@dataclass(slots=True)
class Question:
    """Multiple-choice question; ids are unique within their quiz only."""

    id: str
    text: str
    options: list[str]
    correct_option_index: int
    comment: str | None = None
    time_limit_seconds: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "options": list(self.options),
            "correctAnswer": self.correct_option_index,
            "comment": self.comment,
            "timeLimit": self.time_limit_seconds,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Question":
        return cls(
            id=str(data["id"]),
            text=data.get("text", ""),
            options=list(data.get("options", [])),
            correct_option_index=int(data.get("correctAnswer", 0)),
            comment=data.get("comment") or None,
            time_limit_seconds=_optional_positive_int(data.get("timeLimit")),
        )


@dataclass(slots=True)
class QuizSettings:
    """Post-completion disclosure, retake permission and ordering flags."""

    show_correct_answers: bool = True
    show_comments: bool = True
    allow_retake: bool = True
    randomize_questions: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "showCorrectAnswers": self.show_correct_answers,
            "showComments": self.show_comments,
            "allowRetake": self.allow_retake,
            "randomizeQuestions": self.randomize_questions,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "QuizSettings":
        data = data or {}
        return cls(
            show_correct_answers=bool(data.get("showCorrectAnswers", True)),
            show_comments=bool(data.get("showComments", True)),
            allow_retake=bool(data.get("allowRetake", True)),
            randomize_questions=bool(data.get("randomizeQuestions", False)),
        )


@dataclass(slots=True)
class Quiz:
    """An ordered list of questions with shared settings and time budget."""

    id: str
    title: str
    questions: list[Question]
    creator_id: str
    creator_name: str
    description: str | None = None
    created_at: datetime = field(default_factory=utc_now)
    time_limit_minutes: int | None = None  # whole quiz, not per question
    is_public: bool = True
    settings: QuizSettings = field(default_factory=QuizSettings)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "questions": [question.to_dict() for question in self.questions],
            "creatorId": self.creator_id,
            "creatorName": self.creator_name,
            "createdAt": _format_timestamp(self.created_at),
            "timeLimit": self.time_limit_minutes,
            "isPublic": self.is_public,
            "settings": self.settings.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Quiz":
        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            description=data.get("description") or None,
            questions=[Question.from_dict(item) for item in data.get("questions", [])],
            creator_id=str(data.get("creatorId", "")),
            creator_name=data.get("creatorName", ""),
            created_at=_parse_timestamp(data.get("createdAt")),
            time_limit_minutes=_optional_positive_int(data.get("timeLimit")),
            is_public=bool(data.get("isPublic", True)),
            settings=QuizSettings.from_dict(data.get("settings")),
        )


@dataclass(slots=True)
class AnswerOutcome:
    """Per-question outcome stored inside a result."""

    question_id: str
    selected_option_index: int = UNANSWERED
    is_correct: bool = False
    time_spent_seconds: int = 0

    @property
    def answered(self) -> bool:
        return self.selected_option_index != UNANSWERED

    def to_dict(self) -> dict[str, Any]:
        return {
            "questionId": self.question_id,
            "selectedAnswer": self.selected_option_index,
            "isCorrect": self.is_correct,
            "timeSpent": self.time_spent_seconds,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AnswerOutcome":
        return cls(
            question_id=str(data["questionId"]),
            selected_option_index=int(data.get("selectedAnswer", UNANSWERED)),
            is_correct=bool(data.get("isCorrect", False)),
            time_spent_seconds=int(data.get("timeSpent", 0)),
        )


@dataclass(slots=True)
class QuizResult:
    """One completed attempt. Participant details are denormalized."""

    id: str
    quiz_id: str
    user_id: str
    user_name: str
    user_email: str
    score: int
    total_questions: int
    answers: list[AnswerOutcome]
    completed_at: datetime = field(default_factory=utc_now)
    time_spent_seconds: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "quizId": self.quiz_id,
            "userId": self.user_id,
            "userName": self.user_name,
            "userEmail": self.user_email,
            "score": self.score,
            "totalQuestions": self.total_questions,
            "answers": [answer.to_dict() for answer in self.answers],
            "completedAt": _format_timestamp(self.completed_at),
            "timeSpent": self.time_spent_seconds,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "QuizResult":
        return cls(
            id=str(data["id"]),
            quiz_id=str(data["quizId"]),
            user_id=str(data.get("userId", GUEST_USER_ID)),
            user_name=data.get("userName", ""),
            user_email=data.get("userEmail", ""),
            score=int(data.get("score", 0)),
            total_questions=int(data.get("totalQuestions", 0)),
            answers=[AnswerOutcome.from_dict(item) for item in data.get("answers", [])],
            completed_at=_parse_timestamp(data.get("completedAt")),
            time_spent_seconds=int(data.get("timeSpent", 0)),
        )


@dataclass(slots=True)
class Participant:
    """Whoever takes a quiz: an account or an ad-hoc name/email pair."""

    id: str
    name: str
    email: str

    @classmethod
    def from_user(cls, user: User) -> "Participant":
        return cls(id=user.id, name=user.name, email=user.email)

    @classmethod
    def guest(cls, name: str, email: str) -> "Participant":
        return cls(id=GUEST_USER_ID, name=name, email=email)
