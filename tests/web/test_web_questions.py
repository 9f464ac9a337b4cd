"""Tests for question endpoints."""

import pytest

from staarkids.core.question_generator import QuestionGenerator
from staarkids.db.questions_repository import count_questions_by_grade_subject, insert_question
from staarkids.llm.client import LLMConnectionError
from staarkids.web.dependencies import get_generator


@pytest.fixture
def use_generator(app, mock_llm_client):
    """Route generation through the mocked LLM client."""
    app.dependency_overrides[get_generator] = lambda: QuestionGenerator(client=mock_llm_client)
    return mock_llm_client


class TestGenerateQuestions:
    """Tests for POST /api/questions/generate."""

    def test_generates_with_llm(self, client, use_generator):
        response = client.post(
            "/api/questions/generate",
            json={"grade": 4, "subject": "math", "count": 2},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["method"] == "llm"
        assert data["generated"] == 2
        question = data["questions"][0]
        assert question["correctAnswer"] == "C"
        assert question["teksStandard"].startswith("4.")
        assert "isFromRealSTAAR" in question

    def test_pinned_teks(self, client, use_generator):
        response = client.post(
            "/api/questions/generate",
            json={"grade": 4, "subject": "math", "teksStandard": "4.4H"},
        )

        assert response.json()["questions"][0]["teksStandard"] == "4.4H"

    def test_falls_back_to_bank(self, client, use_generator):
        use_generator.complete_json.side_effect = LLMConnectionError("offline")

        response = client.post(
            "/api/questions/generate",
            json={"grade": 3, "subject": "reading", "count": 3},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["method"] == "standard"
        assert data["generated"] == 3
        assert all(q["subject"] == "reading" for q in data["questions"])

    def test_save_stores_questions(self, client, use_generator):
        client.post(
            "/api/questions/generate",
            json={"grade": 4, "subject": "math", "count": 2, "save": True},
        )

        assert count_questions_by_grade_subject() == [
            {"grade": 4, "subject": "math", "total": 2}
        ]

    def test_invalid_grade(self, client, use_generator):
        response = client.post(
            "/api/questions/generate",
            json={"grade": 7, "subject": "math"},
        )

        assert response.status_code == 400
        use_generator.complete_json.assert_not_called()

    def test_invalid_teks(self, client, use_generator):
        response = client.post(
            "/api/questions/generate",
            json={"grade": 4, "subject": "math", "teksStandard": "four"},
        )

        assert response.status_code == 400

    def test_count_out_of_range(self, client, use_generator):
        response = client.post(
            "/api/questions/generate",
            json={"grade": 4, "subject": "math", "count": 50},
        )

        assert response.status_code == 422


class TestValidateQuestion:
    """Tests for POST /api/questions/validate."""

    def test_valid(self, client, math_question):
        response = client.post("/api/questions/validate", json=math_question.to_payload())

        assert response.status_code == 200
        assert response.json() == {"isValid": True, "issues": []}

    def test_reports_issues(self, client, math_question):
        payload = math_question.to_payload()
        payload["answerChoices"] = ["A. 10", "B. 12"]
        payload["correctAnswer"] = "E"

        data = client.post("/api/questions/validate", json=payload).json()

        assert data["isValid"] is False
        assert "Must have exactly 4 answer choices" in data["issues"]
        assert "Correct answer must be A, B, C, or D" in data["issues"]


class TestStoredQuestions:
    """Tests for GET /api/questions/..."""

    def test_list_by_grade_and_subject(self, client, math_question, reading_question):
        insert_question(math_question)
        insert_question(reading_question)

        data = client.get("/api/questions/4/math").json()

        assert data["count"] == 1
        assert data["questions"][0]["id"] == math_question.question_id
        assert data["questions"][0]["questionText"] == math_question.question_text

    def test_filter_by_teks(self, client, math_question):
        insert_question(math_question)

        assert client.get("/api/questions/4/math", params={"teks": "4.2A"}).json()["count"] == 0
        assert client.get("/api/questions/4/math", params={"teks": "4.4H"}).json()["count"] == 1

    def test_bad_subject(self, client):
        assert client.get("/api/questions/4/science").status_code == 400

    def test_stats(self, client, math_question, reading_question):
        insert_question(math_question)
        insert_question(reading_question)

        data = client.get("/api/questions/stats").json()

        assert data["total"] == 2
        assert {"grade": 4, "subject": "reading", "total": 1} in data["counts"]


class TestUnconfiguredProvider:
    """Generation with a provider the client cannot talk to."""

    def test_unsupported_provider_falls_back_to_bank(self, client, monkeypatch):
        monkeypatch.setenv("LLM_PROVIDER", "bogus")

        response = client.post(
            "/api/questions/generate",
            json={"grade": 4, "subject": "math", "count": 2},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["method"] == "standard"
        assert data["generated"] == 2
