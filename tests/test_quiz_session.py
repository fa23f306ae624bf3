import random

import pytest

from clinker_quiz.constants.quiz_constants import GUEST_USER_ID, UNANSWERED
from clinker_quiz.core.errors import (
    InvalidTransitionError,
    MissingFieldError,
    RetakeNotAllowedError,
)
from clinker_quiz.core.models import Participant, Quiz, QuizSettings
from clinker_quiz.core.services.quiz_session import QuizSession, SessionState

from conftest import make_quiz


@pytest.fixture
def recorded():
    return []


@pytest.fixture
def participant():
    return Participant(id="player-1", name="Grace", email="grace@example.com")


def start(quiz, recorded, clock, participant=None, rng=None):
    return QuizSession(quiz, on_complete=recorded.append, participant=participant, clock=clock, rng=rng)


class TestScoring:
    def test_one_of_two_correct_scores_fifty_percent(self, recorded, clock, participant):
        """Selections [0, 1] against answers [0, 2] score 1 of 2."""
        session = start(make_quiz([0, 2]), recorded, clock, participant)

        session.select_option(0)
        session.advance()
        session.select_option(1)
        session.advance()

        assert session.state == SessionState.COMPLETED
        assert len(recorded) == 1
        result = recorded[0]
        assert result.score == 1
        assert result.total_questions == 2
        assert [answer.is_correct for answer in result.answers] == [True, False]
        assert session.snapshot()["percentage"] == 50

    def test_result_uses_authenticated_identity(self, recorded, clock, participant):
        session = start(make_quiz([0]), recorded, clock, participant)
        session.select_option(0)
        session.advance()

        result = recorded[0]
        assert result.user_id == "player-1"
        assert result.user_name == "Grace"
        assert result.user_email == "grace@example.com"

    def test_changing_selection_keeps_last_choice(self, recorded, clock, participant):
        session = start(make_quiz([3]), recorded, clock, participant)
        session.select_option(1)
        session.select_option(3)
        session.advance()

        assert recorded[0].answers[0].selected_option_index == 3
        assert recorded[0].score == 1

    def test_time_spent_is_measured_from_the_clock(self, recorded, clock, participant):
        session = start(make_quiz([0, 0]), recorded, clock, participant)
        clock.advance(12)
        session.select_option(0)
        session.advance()
        clock.advance(5)
        session.select_option(0)
        session.advance()

        result = recorded[0]
        assert [answer.time_spent_seconds for answer in result.answers] == [12, 5]
        assert result.time_spent_seconds == 17


class TestTransitions:
    def test_advance_requires_an_answer(self, recorded, clock, participant):
        session = start(make_quiz([0, 1]), recorded, clock, participant)

        assert not session.can_advance
        with pytest.raises(InvalidTransitionError):
            session.advance()
        assert session.position == 0

    def test_option_index_out_of_range_is_rejected(self, recorded, clock, participant):
        session = start(make_quiz([0]), recorded, clock, participant)

        with pytest.raises(InvalidTransitionError):
            session.select_option(4)
        assert session.current_selection == UNANSWERED

    def test_empty_quiz_cannot_be_started(self, recorded, clock):
        quiz = Quiz(id="empty", title="Empty", questions=[], creator_id="c", creator_name="C")

        with pytest.raises(InvalidTransitionError):
            start(quiz, recorded, clock)

    def test_guest_must_submit_name_and_email(self, recorded, clock):
        session = start(make_quiz([0]), recorded, clock)

        assert session.state == SessionState.AWAITING_PARTICIPANT
        with pytest.raises(InvalidTransitionError):
            session.select_option(0)
        with pytest.raises(MissingFieldError):
            session.submit_participant("  ", "guest@example.com")
        assert session.state == SessionState.AWAITING_PARTICIPANT

        session.submit_participant("Guest", "guest@example.com")
        session.select_option(0)
        session.advance()

        assert recorded[0].user_id == GUEST_USER_ID
        assert recorded[0].user_name == "Guest"

    def test_actions_after_completion_are_rejected(self, recorded, clock, participant):
        session = start(make_quiz([0]), recorded, clock, participant)
        session.select_option(0)
        session.advance()

        with pytest.raises(InvalidTransitionError):
            session.select_option(1)
        with pytest.raises(InvalidTransitionError):
            session.advance()
        assert len(recorded) == 1


class TestCountdowns:
    def test_quiz_time_limit_forces_completion_after_sixty_ticks(self, recorded, clock, participant):
        session = start(make_quiz([0, 1, 2], time_limit_minutes=1), recorded, clock, participant)

        for _ in range(59):
            session.tick()
        assert session.state == SessionState.IN_PROGRESS
        assert session.quiz_time_left == 1

        session.tick()

        assert session.state == SessionState.COMPLETED
        result = recorded[0]
        assert result.score == 0
        assert [answer.selected_option_index for answer in result.answers] == [UNANSWERED] * 3

    def test_question_timeout_advances_without_an_answer(self, recorded, clock, participant):
        quiz = make_quiz([0, 1], question_limits=[5, None])
        session = start(quiz, recorded, clock, participant)

        for _ in range(4):
            session.tick()
        assert session.position == 0
        assert session.question_time_left == 1

        session.tick()

        assert session.position == 1
        assert session.question_time_left == 0
        assert session.state == SessionState.IN_PROGRESS

    def test_question_timeout_on_last_question_completes(self, recorded, clock, participant):
        session = start(make_quiz([2], question_limits=[3]), recorded, clock, participant)
        session.select_option(2)

        for _ in range(3):
            session.tick()

        assert session.state == SessionState.COMPLETED
        assert recorded[0].score == 1

    def test_overall_timeout_wins_over_question_timeout(self, recorded, clock, participant):
        quiz = make_quiz([0, 0], time_limit_minutes=1, question_limits=[60, 60])
        session = start(quiz, recorded, clock, participant)

        for _ in range(60):
            session.tick()

        assert session.state == SessionState.COMPLETED
        assert len(recorded) == 1
        assert recorded[0].answers[1].selected_option_index == UNANSWERED

    def test_tick_without_limits_changes_nothing(self, recorded, clock, participant):
        session = start(make_quiz([0]), recorded, clock, participant)

        for _ in range(500):
            session.tick()

        assert session.state == SessionState.IN_PROGRESS
        assert session.quiz_time_left == 0

    def test_sync_applies_elapsed_whole_seconds(self, recorded, clock, participant):
        session = start(make_quiz([0, 1], time_limit_minutes=1), recorded, clock, participant)

        clock.advance(3.5)
        assert session.sync() == 3
        assert session.quiz_time_left == 57
        assert session.sync() == 0

        clock.advance(120)
        session.sync()
        assert session.state == SessionState.COMPLETED
        assert len(recorded) == 1

    def test_catch_up_credits_time_to_the_question_that_timed_out(self, recorded, clock, participant):
        quiz = make_quiz([0, 1], question_limits=[5, None])
        session = start(quiz, recorded, clock, participant)

        clock.advance(12)
        session.sync()
        session.select_option(1)
        session.advance()

        result = recorded[0]
        assert [answer.time_spent_seconds for answer in result.answers] == [5, 7]
        assert result.time_spent_seconds == 12

    def test_timeout_during_catch_up_completes_at_the_replayed_instant(self, recorded, clock, participant):
        started_at = clock()
        session = start(make_quiz([0], question_limits=[3]), recorded, clock, participant)

        clock.advance(10)
        session.sync()

        result = recorded[0]
        assert (result.completed_at - started_at).total_seconds() == 3
        assert result.time_spent_seconds == 3
        assert result.answers[0].time_spent_seconds == 3


class TestRetakeAndReview:
    def test_retake_starts_a_fresh_attempt(self, recorded, clock, participant):
        session = start(make_quiz([0, 1]), recorded, clock, participant)
        for _ in range(2):
            session.select_option(0)
            session.advance()

        session.retake()

        assert session.state == SessionState.IN_PROGRESS
        assert session.position == 0
        assert session.selections == [UNANSWERED, UNANSWERED]
        for option in (0, 1):
            session.select_option(option)
            session.advance()
        assert [result.score for result in recorded] == [1, 2]

    def test_retake_blocked_by_settings(self, recorded, clock, participant):
        quiz = make_quiz([0], settings=QuizSettings(allow_retake=False))
        session = start(quiz, recorded, clock, participant)
        session.select_option(0)
        session.advance()

        assert not session.can_retake
        with pytest.raises(RetakeNotAllowedError):
            session.retake()

    def test_retake_requires_completion(self, recorded, clock, participant):
        session = start(make_quiz([0]), recorded, clock, participant)

        with pytest.raises(InvalidTransitionError):
            session.retake()

    def test_review_follows_disclosure_settings(self, recorded, clock, participant):
        quiz = make_quiz([0, 1], settings=QuizSettings(show_comments=False))
        session = start(quiz, recorded, clock, participant)
        session.select_option(0)
        session.advance()
        session.select_option(0)
        session.advance()

        review = session.review()
        assert [item.is_correct for item in review] == [True, False]
        assert [item.correct_option_index for item in review] == [0, 1]
        assert all(item.comment is None for item in review)

    def test_review_hidden_when_correct_answers_are_hidden(self, recorded, clock, participant):
        quiz = make_quiz([0], settings=QuizSettings(show_correct_answers=False))
        session = start(quiz, recorded, clock, participant)
        session.select_option(0)
        session.advance()

        assert session.review() == []
        assert session.snapshot()["review"] == []


class TestRandomizedOrder:
    def test_results_stay_in_authored_order(self, recorded, clock, participant):
        quiz = make_quiz([0, 1, 2, 3, 0, 1], settings=QuizSettings(randomize_questions=True))
        session = start(quiz, recorded, clock, participant, rng=random.Random(3))

        presented = []
        while session.state == SessionState.IN_PROGRESS:
            question = session.current_question
            presented.append(question.id)
            session.select_option(question.correct_option_index)
            session.advance()

        assert sorted(presented) == sorted(question.id for question in quiz.questions)
        result = recorded[0]
        assert [answer.question_id for answer in result.answers] == [q.id for q in quiz.questions]
        assert result.score == 6


class TestSnapshot:
    def test_in_progress_snapshot(self, recorded, clock, participant):
        quiz = make_quiz([0, 1], time_limit_minutes=2, question_limits=[30, None])
        snapshot = start(quiz, recorded, clock, participant).snapshot()

        assert snapshot["state"] == "in-progress"
        assert snapshot["position"] == 1
        assert snapshot["question_count"] == 2
        assert snapshot["quiz_time_left"] == 120
        assert snapshot["question_time_left"] == 30
        assert [option["letter"] for option in snapshot["question"]["options"]] == ["A", "B", "C", "D"]
        assert "correct_option_index" not in snapshot["question"]
        assert snapshot["can_advance"] is False

    def test_snapshot_lists_only_stored_options(self, recorded, clock, participant):
        quiz = make_quiz([1])
        quiz.questions[0].options = ["Alpha", "Bravo", "Charlie"]
        session = start(quiz, recorded, clock, participant)

        options = session.snapshot()["question"]["options"]

        assert [option["letter"] for option in options] == ["A", "B", "C"]
        with pytest.raises(InvalidTransitionError):
            session.select_option(3)

    def test_completed_snapshot_reports_tier(self, recorded, clock, participant):
        session = start(make_quiz([0]), recorded, clock, participant)
        session.select_option(0)
        session.advance()

        snapshot = session.snapshot()
        assert snapshot["state"] == "completed"
        assert snapshot["percentage"] == 100
        assert snapshot["tier"] == "trophy"
        assert snapshot["result"]["score"] == 1
