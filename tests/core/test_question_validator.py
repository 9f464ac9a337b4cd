"""Tests for the question validator."""

from dataclasses import replace

import pytest

from staarkids.core.question_validator import (
    extract_calculations,
    validate_question,
    verify_calculation,
)


class TestVerifyCalculation:
    @pytest.mark.parametrize(
        "expression",
        ["3 + 4 = 7", "10 - 4 = 6", "6 × 7 = 42", "6 * 7 = 42", "84 ÷ 12 = 7", "1 / 3 = 0.3333"],
    )
    def test_correct(self, expression):
        assert verify_calculation(expression)

    @pytest.mark.parametrize("expression", ["3 + 4 = 8", "84 ÷ 12 = 8", "1 / 3 = 0.33"])
    def test_wrong(self, expression):
        assert not verify_calculation(expression)

    def test_division_by_zero(self):
        assert not verify_calculation("5 ÷ 0 = 0")

    def test_not_an_expression(self):
        assert not verify_calculation("no math here")


class TestExtractCalculations:
    def test_finds_all(self):
        text = "First 2 + 3 = 5, then 5 × 4 = 20."

        assert extract_calculations(text) == ["2 + 3 = 5", "5 × 4 = 20"]

    def test_decimals(self):
        assert extract_calculations("1.5 + 2.25 = 3.75") == ["1.5 + 2.25 = 3.75"]


class TestValidateQuestion:
    def test_valid_math(self, math_question):
        result = validate_question(math_question)

        assert result.is_valid
        assert result.issues == []

    def test_valid_reading(self, reading_question):
        assert validate_question(reading_question).is_valid

    def test_structural_issues(self, math_question):
        """Every structural problem is reported, not just the first."""
        question = replace(
            math_question,
            question_text="Short",
            answer_choices=["A. 1", "B. 2"],
            correct_answer="E",
            explanation="",
            teks_standard="four-two",
        )

        issues = validate_question(question).issues

        assert "Question text too short or missing" in issues
        assert "Must have exactly 4 answer choices" in issues
        assert "Correct answer must be A, B, C, or D" in issues
        assert "Explanation too short or missing" in issues
        assert "Invalid TEKS standard format" in issues

    def test_wrong_calculation(self, math_question):
        question = replace(
            math_question,
            explanation="Divide the apples among the boxes: 144 ÷ 12 = 11 apples.",
        )

        result = validate_question(question)

        assert not result.is_valid
        assert result.issues == ["Invalid calculation: 144 ÷ 12 = 11"]

    def test_math_vocabulary_required(self, math_question):
        question = replace(
            math_question,
            question_text="Which animal is the tallest one at the zoo today?",
            explanation="Giraffes are the tallest animals at the zoo.",
        )

        assert validate_question(question).issues == ["Question may not be math-related"]

    def test_reading_vocabulary_required(self, reading_question):
        question = replace(
            reading_question,
            question_text="Which of these words rhymes with the word cat in English?",
        )

        assert validate_question(question).issues == ["Question may not be reading-related"]

    def test_short_reading_question(self, reading_question):
        question = replace(reading_question, question_text="What is the main idea?")

        assert validate_question(question).issues == ["Reading question may be too short"]
