from __future__ import annotations

from datetime import datetime, timedelta, timezone
import random

import pytest
from fastapi.testclient import TestClient

from clinker_quiz.core.models import Question, Quiz, QuizSettings, User
from clinker_quiz.core.platform_manager import PlatformManager
from clinker_quiz.core.storage import CollectionStore, InMemoryStore
from clinker_quiz.server.api_server import create_api_app


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def make_question(
    question_id: str,
    correct: int = 0,
    time_limit_seconds: int | None = None,
    comment: str | None = None,
) -> Question:
    return Question(
        id=question_id,
        text=f"Question {question_id}?",
        options=["Alpha", "Bravo", "Charlie", "Delta"],
        correct_option_index=correct,
        comment=comment,
        time_limit_seconds=time_limit_seconds,
    )


def make_quiz(
    correct: list[int],
    quiz_id: str = "quiz-1",
    creator: User | None = None,
    time_limit_minutes: int | None = None,
    question_limits: list[int | None] | None = None,
    settings: QuizSettings | None = None,
    is_public: bool = True,
) -> Quiz:
    creator = creator or User(id="creator-1", name="Ada", email="ada@example.com")
    limits = question_limits or [None] * len(correct)
    return Quiz(
        id=quiz_id,
        title="Cement chemistry",
        description="Clinker phases and kiln basics",
        questions=[
            make_question(f"q{number}", answer, limit, comment=f"Comment {number}")
            for number, (answer, limit) in enumerate(zip(correct, limits), start=1)
        ],
        creator_id=creator.id,
        creator_name=creator.name,
        time_limit_minutes=time_limit_minutes,
        is_public=is_public,
        settings=settings or QuizSettings(),
    )


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def collections(store):
    return CollectionStore(store)


@pytest.fixture
def creator():
    return User(id="creator-1", name="Ada", email="ada@example.com")


@pytest.fixture
def admin():
    return User(id="admin-1", name="Root", email="root@example.com", is_admin=True)


@pytest.fixture
def manager(store, clock):
    return PlatformManager(
        store,
        share_base_url="http://testserver/",
        clock=clock,
        rng=random.Random(7),
    )


@pytest.fixture
def client(manager):
    """FastAPI test client wired to the in-memory manager."""
    with TestClient(create_api_app(manager)) as test_client:
        yield test_client


@pytest.fixture
def sample_quiz_payload():
    return {
        "title": "Kiln basics",
        "description": "Warm-up questions",
        "time_limit_minutes": 0,
        "is_public": True,
        "settings": {
            "show_correct_answers": True,
            "show_comments": True,
            "allow_retake": True,
            "randomize_questions": False,
        },
        "questions": [
            {
                "text": "Main clinker phase?",
                "options": ["Alite", "Belite", "Ferrite", "Aluminate"],
                "correct_option_index": 0,
                "comment": "C3S makes up most of clinker.",
            },
            {
                "text": "Typical kiln temperature?",
                "options": ["450 C", "900 C", "1450 C", "2500 C"],
                "correct_option_index": 2,
                "time_limit_seconds": 20,
            },
        ],
    }
