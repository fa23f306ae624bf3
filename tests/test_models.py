from datetime import datetime, timezone

from clinker_quiz.core.models import AnswerOutcome, Participant, Question, Quiz, QuizResult, User

from conftest import make_quiz


class TestQuizSerialization:
    def test_uses_persisted_key_names(self):
        data = make_quiz([1, 2], time_limit_minutes=5).to_dict()

        assert data["creatorId"] == "creator-1"
        assert data["timeLimit"] == 5
        assert data["isPublic"] is True
        assert data["settings"]["allowRetake"] is True
        assert data["questions"][0]["correctAnswer"] == 1
        assert data["questions"][0]["timeLimit"] is None

    def test_round_trip(self):
        quiz = make_quiz([0, 3], question_limits=[None, 15])

        restored = Quiz.from_dict(quiz.to_dict())

        assert restored == quiz

    def test_zero_time_limits_mean_unlimited(self):
        question = Question.from_dict({"id": "q1", "text": "?", "options": ["a", "b", "c", "d"],
                                       "correctAnswer": 2, "timeLimit": 0})
        quiz = Quiz.from_dict({"id": "z", "title": "Zero", "questions": [], "timeLimit": 0})

        assert question.time_limit_seconds is None
        assert quiz.time_limit_minutes is None

    def test_missing_settings_use_defaults(self):
        quiz = Quiz.from_dict({"id": "z", "title": "Plain", "questions": []})

        assert quiz.settings.show_correct_answers
        assert quiz.settings.show_comments
        assert quiz.settings.allow_retake
        assert not quiz.settings.randomize_questions

    def test_naive_timestamps_are_treated_as_utc(self):
        user = User.from_dict({"id": "u", "name": "N", "email": "n@example.com",
                               "createdAt": "2024-03-01T09:00:00"})

        assert user.created_at == datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)
        assert user.to_dict()["createdAt"] == "2024-03-01T09:00:00+00:00"


class TestResults:
    def test_unanswered_outcome(self):
        outcome = AnswerOutcome(question_id="q1")

        assert not outcome.answered
        assert outcome.to_dict()["selectedAnswer"] == -1

    def test_result_round_trip(self):
        result = QuizResult(
            id="r1",
            quiz_id="quiz-1",
            user_id="guest",
            user_name="Grace",
            user_email="grace@example.com",
            score=1,
            total_questions=2,
            answers=[
                AnswerOutcome("q1", 0, True, 4),
                AnswerOutcome("q2", -1, False, 20),
            ],
            completed_at=datetime(2024, 3, 1, 9, 5, tzinfo=timezone.utc),
            time_spent_seconds=24,
        )

        data = result.to_dict()

        assert set(data) == {
            "id", "quizId", "userId", "userName", "userEmail", "score",
            "totalQuestions", "answers", "completedAt", "timeSpent",
        }
        assert QuizResult.from_dict(data) == result

    def test_participants(self):
        user = User(id="u1", name="Ada", email="ada@example.com")

        assert Participant.from_user(user) == Participant("u1", "Ada", "ada@example.com")
        assert Participant.guest("Grace", "g@example.com").id == "guest"
