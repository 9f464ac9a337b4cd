"""Tests for question shape, STAAR prompt and response parsing."""

import json

import pytest

from staarkids.core.questions import (
    Question,
    QuestionParseError,
    build_staar_prompt,
    parse_question_response,
    question_from_llm_data,
)


class TestBuildStaarPrompt:
    def test_fills_placeholders(self):
        prompt = build_staar_prompt(4, "math", "4.3B", "Fractions")

        assert "grade 4" in prompt.lower()
        assert "4.3B" in prompt
        assert "Fractions" in prompt
        assert "{teks_standard}" not in prompt

    def test_default_category(self):
        prompt = build_staar_prompt(3, "reading", "3.6A")

        assert "Comprehension" in prompt

    def test_requests_json_shape(self):
        prompt = build_staar_prompt(5, "math", "5.2A")

        for field_name in ("questionText", "answerChoices", "correctAnswer", "explanation"):
            assert field_name in prompt


class TestQuestionFromLlmData:
    def test_builds_question(self, llm_question_data):
        question = question_from_llm_data(llm_question_data, 3, "math", "3.4A", "Multiplication")

        assert question.grade == 3
        assert question.subject == "math"
        assert question.teks_standard == "3.4A"
        assert question.category == "Multiplication"
        assert question.correct_answer == "C"
        assert question.difficulty == "medium"
        assert question.is_from_real_staar is False
        assert len(question.answer_choices) == 4

    def test_missing_fields(self, llm_question_data):
        del llm_question_data["correctAnswer"]

        with pytest.raises(QuestionParseError, match="correctAnswer"):
            question_from_llm_data(llm_question_data, 3, "math", "3.4A")

    def test_choices_must_be_list(self, llm_question_data):
        llm_question_data["answerChoices"] = "A. 1, B. 2"

        with pytest.raises(QuestionParseError, match="list"):
            question_from_llm_data(llm_question_data, 3, "math", "3.4A")


class TestParseQuestionResponse:
    def test_fenced_json(self, llm_question_data):
        content = f"Here is your question:\n```json\n{json.dumps(llm_question_data)}\n```"

        question = parse_question_response(content, 4, "math", "4.4B")

        assert question.question_text.startswith("Ben has 3 bags")
        assert question.category == "Problem Solving"

    def test_not_json(self):
        with pytest.raises(QuestionParseError, match="not a JSON object"):
            parse_question_response("I cannot help with that.", 4, "math", "4.4B")


class TestQuestionPayload:
    def test_payload_is_camel_case(self, math_question):
        payload = math_question.to_payload()

        assert payload["questionText"] == math_question.question_text
        assert payload["answerChoices"] == math_question.answer_choices
        assert payload["teksStandard"] == "4.4H"
        assert payload["isFromRealSTAAR"] is False
        assert payload["id"] is None

    def test_from_payload_fills_defaults(self):
        question = Question.from_payload(
            {
                "grade": 5,
                "subject": "reading",
                "teksStandard": "5.7B",
                "questionText": "What does the author want readers to learn?",
                "answerChoices": ["A", "B", "C", "D"],
                "correctAnswer": "A",
            }
        )

        assert question.category == "Comprehension"
        assert question.difficulty == "medium"
        assert question.explanation == ""
        assert question.question_id is None
