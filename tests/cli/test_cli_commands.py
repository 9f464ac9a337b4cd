"""Tests for the staar CLI."""

import json
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from staarkids.cli.commands import app
from staarkids.db.questions_repository import count_questions_by_grade_subject

runner = CliRunner()


def json_output(output: str) -> dict:
    """Parse the JSON document printed after any log lines."""
    return json.loads(output[output.index("{\n"):])


@pytest.fixture
def question_file(tmp_path):
    def write(*payloads):
        path = tmp_path / "questions.json"
        data = payloads[0] if len(payloads) == 1 else list(payloads)
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return write


class TestInitDb:
    def test_creates_database(self, tmp_path):
        db_file = tmp_path / "data" / "staar.db"

        result = runner.invoke(app, ["init-db", "--db", str(db_file)])

        assert result.exit_code == 0, result.output
        assert db_file.exists()
        assert "Database ready" in result.output


class TestGenerate:
    def test_llm_questions_as_json(self, mock_llm_client):
        with patch("staarkids.cli.commands.LLMClient") as MockLLMClient:
            MockLLMClient.return_value = mock_llm_client

            result = runner.invoke(
                app, ["generate", "-g", "4", "-s", "math", "-n", "2", "--json"]
            )

        assert result.exit_code == 0, result.output
        data = json_output(result.output)
        assert data["method"] == "llm"
        assert data["generated"] == 2
        assert data["questions"][0]["correctAnswer"] == "C"

    def test_without_api_key_uses_bank(self):
        result = runner.invoke(
            app, ["generate", "-g", "3", "-s", "reading", "-n", "2", "--json"]
        )

        assert result.exit_code == 0, result.output
        data = json_output(result.output)
        assert data["method"] == "standard"
        assert data["generated"] == 2

    def test_save(self, tmp_path, monkeypatch, mock_llm_client):
        monkeypatch.setenv("STAARKIDS_DB_PATH", str(tmp_path / "saved.db"))

        with patch("staarkids.cli.commands.LLMClient") as MockLLMClient:
            MockLLMClient.return_value = mock_llm_client

            result = runner.invoke(
                app, ["generate", "-g", "4", "-s", "math", "--teks", "4.4H", "--save"]
            )

        assert result.exit_code == 0, result.output
        assert "Saved 1 question(s)" in result.output
        assert count_questions_by_grade_subject() == [
            {"grade": 4, "subject": "math", "total": 1}
        ]

    def test_bad_grade(self):
        result = runner.invoke(app, ["generate", "-g", "8", "-s", "math"])

        assert result.exit_code == 1
        assert "Grade must be one of" in result.output

    def test_bad_teks(self):
        result = runner.invoke(app, ["generate", "-g", "4", "-s", "math", "--teks", "4.x"])

        assert result.exit_code == 1
        assert "Invalid TEKS standard" in result.output

    def test_unsupported_provider_uses_bank(self, monkeypatch):
        monkeypatch.setenv("LLM_PROVIDER", "carrier-pigeon")

        result = runner.invoke(app, ["generate", "-g", "4", "-s", "math", "--json"])

        assert result.exit_code == 0, result.output
        assert json_output(result.output)["method"] == "standard"


class TestValidate:
    def test_all_valid(self, question_file, math_question, reading_question):
        path = question_file(math_question.to_payload(), reading_question.to_payload())

        result = runner.invoke(app, ["validate", str(path)])

        assert result.exit_code == 0, result.output
        assert "2/2 valid" in result.output

    def test_invalid_question_fails(self, question_file, math_question):
        payload = math_question.to_payload()
        payload["correctAnswer"] = "Z"
        path = question_file(payload)

        result = runner.invoke(app, ["validate", str(path)])

        assert result.exit_code == 1
        assert "0/1 valid" in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["validate", str(tmp_path / "nope.json")])

        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_not_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        result = runner.invoke(app, ["validate", str(path)])

        assert result.exit_code == 1
        assert "Invalid JSON" in result.output
