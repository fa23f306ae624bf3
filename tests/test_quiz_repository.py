import pytest

from clinker_quiz.core.errors import NotFoundError, PermissionDeniedError
from clinker_quiz.core.models import User
from clinker_quiz.core.services.quiz_repository import QuizRepository

from conftest import make_quiz


@pytest.fixture
def repository(collections):
    return QuizRepository(collections)


class TestQuizRepository:
    def test_add_and_get(self, repository):
        repository.add(make_quiz([0, 1]))

        quiz = repository.get("quiz-1")

        assert quiz.title == "Cement chemistry"
        assert len(quiz.questions) == 2

    def test_get_unknown_quiz(self, repository):
        with pytest.raises(NotFoundError):
            repository.get("missing")

    def test_visibility(self, repository, creator, admin):
        other = User(id="other", name="Bob", email="bob@example.com")
        repository.add(make_quiz([0], quiz_id="public"))
        repository.add(make_quiz([0], quiz_id="private", is_public=False))

        assert [quiz.id for quiz in repository.list_visible(None)] == ["public"]
        assert [quiz.id for quiz in repository.list_visible(other)] == ["public"]
        assert [quiz.id for quiz in repository.list_visible(creator)] == ["public", "private"]
        assert [quiz.id for quiz in repository.list_visible(admin)] == ["public", "private"]

    def test_only_creator_or_admin_may_delete(self, repository, admin):
        repository.add(make_quiz([0], quiz_id="a"))
        repository.add(make_quiz([0], quiz_id="b"))
        stranger = User(id="other", name="Bob", email="bob@example.com")

        with pytest.raises(PermissionDeniedError):
            repository.delete("a", stranger)

        repository.delete("a", admin)
        assert repository.find("a") is None
        assert repository.find("b") is not None

    def test_delete_unknown(self, repository, creator):
        with pytest.raises(NotFoundError):
            repository.delete("missing", creator)

    def test_list_by_creator(self, repository, creator):
        repository.add(make_quiz([0], quiz_id="mine"))

        assert [quiz.id for quiz in repository.list_by_creator(creator.id)] == ["mine"]
        assert repository.list_by_creator("nobody") == []


class TestShareLinks:
    def test_share_url(self):
        assert QuizRepository.share_url("abc", "http://testserver/") == "http://testserver/?quiz=abc"

    def test_share_url_drops_existing_query(self):
        assert QuizRepository.share_url("abc", "http://host/?x=1") == "http://host/?quiz=abc"

    @pytest.mark.parametrize(
        "link, expected",
        [
            ("http://testserver/?quiz=abc", "abc"),
            ("  http://lan:8000/?foo=1&quiz=xyz ", "xyz"),
            ("abc-123", "abc-123"),
        ],
    )
    def test_quiz_id_from_link(self, link, expected):
        assert QuizRepository.quiz_id_from_link(link) == expected
