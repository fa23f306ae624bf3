"""Service for the persisted quiz collection."""

from __future__ import annotations

import logging
from urllib.parse import parse_qs, urlencode, urlparse

from clinker_quiz.constants.network_constants import SHARE_QUERY_PARAMETER
from clinker_quiz.constants.storage_constants import QUIZZES_KEY
from clinker_quiz.core.errors import NotFoundError, PermissionDeniedError
from clinker_quiz.core.models import Quiz, User
from clinker_quiz.core.storage import CollectionStore

logger = logging.getLogger(__name__)


class QuizRepository:
    """Reads and rewrites the whole quiz collection on every change."""

    def __init__(self, collections: CollectionStore) -> None:
        self._collections = collections

    def list_all(self) -> list[Quiz]:
        return [Quiz.from_dict(item) for item in self._collections.read_collection(QUIZZES_KEY)]

    def find(self, quiz_id: str) -> Quiz | None:
        return next((quiz for quiz in self.list_all() if quiz.id == quiz_id), None)

    def get(self, quiz_id: str) -> Quiz:
        quiz = self.find(quiz_id)
        if quiz is None:
            raise NotFoundError(f"Quiz '{quiz_id}' does not exist.")
        return quiz

    def add(self, quiz: Quiz) -> Quiz:
        quizzes = self._collections.read_collection(QUIZZES_KEY)
        quizzes.append(quiz.to_dict())
        self._collections.write_collection(QUIZZES_KEY, quizzes)
        logger.info("Saved quiz %s (%d questions) by %s", quiz.id, len(quiz.questions), quiz.creator_name)
        return quiz

    def delete(self, quiz_id: str, requester: User) -> None:
        """Remove a quiz. Results that reference it are left untouched."""
        quizzes = self._collections.read_collection(QUIZZES_KEY)
        target = next((item for item in quizzes if str(item.get("id")) == quiz_id), None)
        if target is None:
            raise NotFoundError(f"Quiz '{quiz_id}' does not exist.")
        if not requester.is_admin and target.get("creatorId") != requester.id:
            raise PermissionDeniedError("Only the quiz creator can delete this quiz.")

        remaining = [item for item in quizzes if str(item.get("id")) != quiz_id]
        self._collections.write_collection(QUIZZES_KEY, remaining)
        logger.info("Deleted quiz %s", quiz_id)

    def list_by_creator(self, creator_id: str) -> list[Quiz]:
        return [quiz for quiz in self.list_all() if quiz.creator_id == creator_id]

    def list_visible(self, viewer: User | None) -> list[Quiz]:
        """Public quizzes, plus the viewer's own, plus everything for admins."""
        quizzes = self.list_all()
        if viewer is not None and viewer.is_admin:
            return quizzes
        viewer_id = viewer.id if viewer is not None else None
        return [quiz for quiz in quizzes if quiz.is_public or quiz.creator_id == viewer_id]

    @staticmethod
    def share_url(quiz_id: str, base_url: str) -> str:
        """Deep link that opens the player directly on ``quiz_id``."""
        base = base_url.split("?", 1)[0]
        return f"{base}?{urlencode({SHARE_QUERY_PARAMETER: quiz_id})}"

    @staticmethod
    def quiz_id_from_link(link: str) -> str:
        """Accept a full share link or a bare quiz id."""
        link = link.strip()
        values = parse_qs(urlparse(link).query).get(SHARE_QUERY_PARAMETER)
        if values:
            return values[0].strip()
        return link
