import pytest


def register(client, name="Ada", email="ada@example.com", password="secret1"):
    return client.post("/api/accounts/register", json={"name": name, "email": email, "password": password})


@pytest.fixture
def quiz_id(client, sample_quiz_payload):
    register(client)
    response = client.post("/api/quizzes", json=sample_quiz_payload)
    assert response.status_code == 201
    return response.json()["id"]


@pytest.fixture
def guest_session(client, quiz_id):
    response = client.post("/api/sessions", json={"quiz_id": quiz_id})
    assert response.status_code == 201
    session_id = response.json()["session_id"]
    client.post(f"/api/sessions/{session_id}/participant", json={"name": "Grace", "email": "grace@example.com"})
    return session_id


class TestPlayerPage:
    def test_serves_player(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert "ClinkerQuiz" in response.text
        assert "__MATHJAX__" not in response.text


class TestAccounts:
    def test_register_and_me(self, client):
        response = register(client)

        assert response.status_code == 201
        assert response.json()["email"] == "ada@example.com"
        assert client.get("/api/accounts/me").json()["name"] == "Ada"

    def test_duplicate_email(self, client):
        register(client)

        response = register(client, name="Other", email="ADA@example.com")

        assert response.status_code == 409

    def test_short_password(self, client):
        response = register(client, password="123")

        assert response.status_code == 422
        assert "at least 6" in response.json()["detail"]

    def test_wrong_password(self, client):
        register(client)
        client.post("/api/accounts/logout")

        response = client.post("/api/accounts/login", json={"email": "ada@example.com", "password": "nope!!"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Incorrect password."

    def test_logout(self, client):
        register(client)

        assert client.post("/api/accounts/logout").status_code == 204
        assert client.get("/api/accounts/me").status_code == 401


class TestQuizzes:
    def test_create_requires_sign_in(self, client, sample_quiz_payload):
        response = client.post("/api/quizzes", json=sample_quiz_payload)

        assert response.status_code == 401

    def test_invalid_quiz(self, client, sample_quiz_payload):
        register(client)
        sample_quiz_payload["questions"][0]["options"][2] = "  "

        response = client.post("/api/quizzes", json=sample_quiz_payload)

        assert response.status_code == 422
        assert response.json()["detail"] == "Question 1 has an empty option."

    def test_list_and_summary(self, client, quiz_id):
        listing = client.get("/api/quizzes").json()
        summary = client.get(f"/api/quizzes/{quiz_id}").json()

        assert [item["id"] for item in listing] == [quiz_id]
        assert listing[0]["share_url"] == f"http://testserver/?quiz={quiz_id}"
        assert summary["question_count"] == 2
        assert "questions" not in summary

    def test_unknown_quiz(self, client):
        assert client.get("/api/quizzes/missing").status_code == 404

    def test_creator_exports_answer_key(self, client, quiz_id):
        response = client.get(f"/api/quizzes/{quiz_id}/answer-key")

        assert response.status_code == 200
        assert "Kiln basics" in response.text
        assert "&#10003;" in response.text

    def test_answer_key_is_not_public(self, client, quiz_id):
        client.post("/api/accounts/logout")
        assert client.get(f"/api/quizzes/{quiz_id}/answer-key").status_code == 401

        register(client, name="Bob", email="bob@example.com")
        assert client.get(f"/api/quizzes/{quiz_id}/answer-key").status_code == 403

    def test_only_creator_may_delete(self, client, quiz_id):
        client.post("/api/accounts/logout")
        register(client, name="Bob", email="bob@example.com")

        assert client.delete(f"/api/quizzes/{quiz_id}").status_code == 403

        client.post("/api/accounts/login", json={"email": "ada@example.com", "password": "secret1"})
        assert client.delete(f"/api/quizzes/{quiz_id}").status_code == 204
        assert client.get(f"/api/quizzes/{quiz_id}").status_code == 404


class TestSessions:
    def test_guest_flow(self, client, quiz_id):
        started = client.post("/api/sessions", json={"quiz_id": quiz_id}).json()
        session_id = started["session_id"]
        assert started["state"] == "awaiting-participant-info"

        in_progress = client.post(
            f"/api/sessions/{session_id}/participant",
            json={"name": "Grace", "email": "grace@example.com"},
        ).json()
        assert in_progress["state"] == "in-progress"
        assert in_progress["position"] == 1
        assert "<p>Main clinker phase?</p>" in in_progress["question"]["html"]
        assert "correct_option_index" not in in_progress["question"]

        client.post(f"/api/sessions/{session_id}/answer", json={"selected_option_index": 0})
        second = client.post(f"/api/sessions/{session_id}/advance").json()
        assert second["position"] == 2
        assert second["is_last_question"] is True

        client.post(f"/api/sessions/{session_id}/answer", json={"selected_option_index": 1})
        done = client.post(f"/api/sessions/{session_id}/advance").json()

        assert done["state"] == "completed"
        assert done["result"]["score"] == 1
        assert done["percentage"] == 50
        assert done["can_retake"] is True
        assert done["review"][0]["comment"] == "C3S makes up most of clinker."

    def test_missing_participant_details(self, client, quiz_id):
        session_id = client.post("/api/sessions", json={"quiz_id": quiz_id}).json()["session_id"]

        response = client.post(f"/api/sessions/{session_id}/participant", json={"name": "Grace", "email": ""})

        assert response.status_code == 422

    def test_option_out_of_range(self, client, guest_session):
        response = client.post(f"/api/sessions/{guest_session}/answer", json={"selected_option_index": 4})

        assert response.status_code == 409

    def test_advance_without_answer(self, client, guest_session):
        response = client.post(f"/api/sessions/{guest_session}/advance")

        assert response.status_code == 409
        assert response.json()["detail"] == "Choose an answer before continuing."

    def test_polling_catches_up_with_the_clock(self, client, clock, guest_session):
        client.post(f"/api/sessions/{guest_session}/answer", json={"selected_option_index": 0})
        client.post(f"/api/sessions/{guest_session}/advance")

        clock.advance(5)
        snapshot = client.get(f"/api/sessions/{guest_session}").json()

        assert snapshot["question_time_left"] == 15

    def test_question_timeout_completes_quiz(self, client, clock, guest_session):
        client.post(f"/api/sessions/{guest_session}/answer", json={"selected_option_index": 0})
        client.post(f"/api/sessions/{guest_session}/advance")

        clock.advance(25)
        snapshot = client.get(f"/api/sessions/{guest_session}").json()

        assert snapshot["state"] == "completed"
        assert snapshot["result"]["answers"][1]["selectedAnswer"] == -1

    def test_unknown_session(self, client):
        assert client.get("/api/sessions/nope").status_code == 404

    def test_unknown_quiz(self, client):
        response = client.post("/api/sessions", json={"quiz_id": "missing"})

        assert response.status_code == 404

    def test_ended_session(self, client, guest_session):
        assert client.delete(f"/api/sessions/{guest_session}").status_code == 204
        assert client.get(f"/api/sessions/{guest_session}").status_code == 404

    def test_idle_sessions_expire(self, client, manager, clock, quiz_id):
        for _ in range(5):
            client.post("/api/sessions", json={"quiz_id": quiz_id})
        assert manager.active_session_count() == 5

        clock.advance(31 * 60)
        fresh = client.post("/api/sessions", json={"quiz_id": quiz_id}).json()["session_id"]

        assert manager.active_session_count() == 1
        assert client.get(f"/api/sessions/{fresh}").status_code == 200

    def test_answer_key_after_finishing(self, client, guest_session):
        assert client.get(f"/api/sessions/{guest_session}/answer-key").status_code == 409

        for answer in (0, 2):
            client.post(f"/api/sessions/{guest_session}/answer", json={"selected_option_index": answer})
            client.post(f"/api/sessions/{guest_session}/advance")
        response = client.get(f"/api/sessions/{guest_session}/answer-key")

        assert response.status_code == 200
        assert "&#10003;" in response.text

    def test_answer_key_withheld_when_quiz_hides_answers(self, client, sample_quiz_payload):
        register(client)
        sample_quiz_payload["settings"]["show_correct_answers"] = False
        hidden_quiz = client.post("/api/quizzes", json=sample_quiz_payload).json()["id"]
        client.post("/api/accounts/logout")
        session_id = client.post("/api/sessions", json={"quiz_id": hidden_quiz}).json()["session_id"]
        client.post(f"/api/sessions/{session_id}/participant", json={"name": "Grace", "email": "g@example.com"})
        for answer in (0, 2):
            client.post(f"/api/sessions/{session_id}/answer", json={"selected_option_index": answer})
            done = client.post(f"/api/sessions/{session_id}/advance").json()

        assert done["state"] == "completed"
        assert done["review"] == []
        assert client.get(f"/api/sessions/{session_id}/answer-key").status_code == 403
        assert client.get(f"/api/quizzes/{hidden_quiz}/answer-key").status_code == 401


class TestResults:
    def test_requires_sign_in(self, client):
        assert client.get("/api/results").status_code == 401

    def test_results_for_creator(self, client, quiz_id, guest_session):
        client.post(f"/api/sessions/{guest_session}/answer", json={"selected_option_index": 0})
        client.post(f"/api/sessions/{guest_session}/advance")
        client.post(f"/api/sessions/{guest_session}/answer", json={"selected_option_index": 2})
        client.post(f"/api/sessions/{guest_session}/advance")

        body = client.get("/api/results").json()

        assert body["heading"] == "All quizzes"
        assert body["stats"] == {"participants": 1, "quiz_count": 1, "average_percentage": 100}
        assert body["rows"][0]["user_name"] == "Grace"
        assert body["rows"][0]["rank"] == 1
        assert body["quizzes"] == [{"id": quiz_id, "title": "Kiln basics"}]

    def test_leaderboard_document(self, client, quiz_id):
        response = client.get("/api/results/leaderboard", params={"quiz": quiz_id})

        assert response.status_code == 200
        assert "No results yet." in response.text


class TestThemePreference:
    def test_get_set_toggle(self, client):
        assert client.get("/api/preferences/theme").json() == {"theme": "light"}
        assert client.put("/api/preferences/theme", json={"theme": "Dark"}).json() == {"theme": "dark"}
        assert client.post("/api/preferences/theme/toggle").json() == {"theme": "light"}

    def test_invalid_theme(self, client):
        assert client.put("/api/preferences/theme", json={"theme": "sepia"}).status_code == 422
