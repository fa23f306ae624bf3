"""Scoring helpers and leaderboard/report queries over stored results."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from clinker_quiz.constants.quiz_constants import (
    DELETED_QUIZ_TITLE,
    SECOND_PLACE_THRESHOLD,
    TROPHY_THRESHOLD,
)
from clinker_quiz.core.models import Quiz, QuizResult, User


class ScoreTier(Enum):
    """Display tier for a percentage; cosmetic only."""

    TROPHY = "trophy"
    SECOND_PLACE = "second_place"
    STUDY = "study"


@dataclass(slots=True)
class LeaderboardRow:
    """Immutable snapshot returned to consumers."""

    rank: int
    result_id: str
    quiz_id: str
    quiz_title: str
    user_name: str
    user_email: str
    score: int
    total_questions: int
    percentage: int
    time_spent_seconds: int
    completed_at: datetime

    @property
    def time_spent_label(self) -> str:
        return format_duration(self.time_spent_seconds)

    def to_dict(self) -> dict[str, object]:
        return {
            "rank": self.rank,
            "result_id": self.result_id,
            "quiz_id": self.quiz_id,
            "quiz_title": self.quiz_title,
            "user_name": self.user_name,
            "user_email": self.user_email,
            "score": self.score,
            "total_questions": self.total_questions,
            "percentage": self.percentage,
            "time_spent_seconds": self.time_spent_seconds,
            "time_spent": self.time_spent_label,
            "completed_at": self.completed_at.isoformat(),
        }


@dataclass(slots=True)
class OverallStats:
    participants: int
    quiz_count: int
    average_percentage: int


@dataclass(slots=True)
class QuizStats:
    participants: int
    average_score: float


def percentage(score: int, total_questions: int) -> int:
    """Rounded percentage; a quiz without questions scores 0."""
    if total_questions <= 0:
        return 0
    # Half-up; round() would send 12.5 to 12.
    return int(score * 100 / total_questions + 0.5)


def result_percentage(result: QuizResult) -> int:
    return percentage(result.score, result.total_questions)


def tier(value: int) -> ScoreTier:
    if value >= TROPHY_THRESHOLD:
        return ScoreTier.TROPHY
    if value >= SECOND_PLACE_THRESHOLD:
        return ScoreTier.SECOND_PLACE
    return ScoreTier.STUDY


def format_duration(seconds: int) -> str:
    """``m:ss`` for leaderboard cells."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60}:{seconds % 60:02d}"


def format_clock(seconds: int) -> str:
    """``mm:ss`` for countdowns."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


def sort_leaderboard(results: list[QuizResult]) -> list[QuizResult]:
    """Highest percentage first; ties go to the faster attempt."""
    return sorted(
        results,
        key=lambda result: (-(result.score / result.total_questions if result.total_questions else 0.0),
                            result.time_spent_seconds),
    )


def visible_results(
    viewer: User,
    results: list[QuizResult],
    quizzes: list[Quiz],
    quiz_filter: str | None = None,
) -> list[QuizResult]:
    """Admins see everything; others see results on their quizzes and their own attempts."""
    filtered = results
    if quiz_filter:
        filtered = [result for result in filtered if result.quiz_id == quiz_filter]
    if not viewer.is_admin:
        own_quiz_ids = {quiz.id for quiz in quizzes if quiz.creator_id == viewer.id}
        filtered = [
            result
            for result in filtered
            if result.quiz_id in own_quiz_ids or result.user_id == viewer.id
        ]
    return filtered


def reportable_quizzes(viewer: User, quizzes: list[Quiz]) -> list[Quiz]:
    """Quizzes offered in the results filter."""
    if viewer.is_admin:
        return list(quizzes)
    return [quiz for quiz in quizzes if quiz.creator_id == viewer.id]


def quiz_title(quiz_id: str, quizzes: list[Quiz]) -> str:
    quiz = next((quiz for quiz in quizzes if quiz.id == quiz_id), None)
    return quiz.title if quiz is not None else DELETED_QUIZ_TITLE


def build_rows(results: list[QuizResult], quizzes: list[Quiz]) -> list[LeaderboardRow]:
    return [
        LeaderboardRow(
            rank=rank,
            result_id=result.id,
            quiz_id=result.quiz_id,
            quiz_title=quiz_title(result.quiz_id, quizzes),
            user_name=result.user_name,
            user_email=result.user_email,
            score=result.score,
            total_questions=result.total_questions,
            percentage=result_percentage(result),
            time_spent_seconds=result.time_spent_seconds,
            completed_at=result.completed_at,
        )
        for rank, result in enumerate(sort_leaderboard(results), start=1)
    ]


def overall_stats(
    results: list[QuizResult],
    reportable_quiz_count: int,
    quiz_filter: str | None = None,
) -> OverallStats:
    participants = len(results)
    quiz_count = 1 if quiz_filter else reportable_quiz_count
    if participants == 0:
        return OverallStats(participants=0, quiz_count=quiz_count, average_percentage=0)
    mean = sum(
        result.score / result.total_questions for result in results if result.total_questions
    ) / participants
    return OverallStats(
        participants=participants,
        quiz_count=quiz_count,
        average_percentage=int(mean * 100 + 0.5),
    )


def quiz_stats(quiz: Quiz, results: list[QuizResult]) -> QuizStats:
    """Participant count and mean raw score, for dashboard cards."""
    quiz_results = [result for result in results if result.quiz_id == quiz.id]
    if not quiz_results:
        return QuizStats(participants=0, average_score=0.0)
    average = sum(result.score for result in quiz_results) / len(quiz_results)
    return QuizStats(participants=len(quiz_results), average_score=round(average, 2))
