"""Service for the append-only result collection."""

from __future__ import annotations

import logging

from clinker_quiz.constants.storage_constants import RESULTS_KEY
from clinker_quiz.core.models import QuizResult
from clinker_quiz.core.storage import CollectionStore

logger = logging.getLogger(__name__)


class ResultStore:
    def __init__(self, collections: CollectionStore) -> None:
        self._collections = collections

    def append(self, result: QuizResult) -> QuizResult:
        results = self._collections.read_collection(RESULTS_KEY)
        results.append(result.to_dict())
        self._collections.write_collection(RESULTS_KEY, results)
        logger.info(
            "Recorded result %s for quiz %s: %d/%d by %s",
            result.id,
            result.quiz_id,
            result.score,
            result.total_questions,
            result.user_email,
        )
        return result

    def list_all(self) -> list[QuizResult]:
        return [QuizResult.from_dict(item) for item in self._collections.read_collection(RESULTS_KEY)]

    def list_for_quiz(self, quiz_id: str) -> list[QuizResult]:
        return [result for result in self.list_all() if result.quiz_id == quiz_id]

    def list_for_user(self, user_id: str) -> list[QuizResult]:
        return [result for result in self.list_all() if result.user_id == user_id]
