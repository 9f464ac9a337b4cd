"""Tests for the built-in question bank."""

import random

import pytest

from staarkids.core.question_bank import QUESTION_BANK, pattern_questions
from staarkids.core.question_validator import validate_question
from staarkids.core.teks import get_teks_standards


@pytest.mark.parametrize("subject", ["math", "reading"])
@pytest.mark.parametrize("grade", [3, 4, 5])
def test_every_bank_question_validates(grade, subject):
    """Fallback questions must be servable without review."""
    questions = pattern_questions(
        grade, subject, count=len(QUESTION_BANK[subject][grade]), rng=random.Random(1)
    )

    for question in questions:
        result = validate_question(question)
        assert result.is_valid, (question.question_text, result.issues)


class TestPatternQuestions:
    def test_no_repeats_within_bank_size(self):
        questions = pattern_questions(4, "math", count=4, rng=random.Random(3))

        assert len({q.question_text for q in questions}) == 4

    def test_cycles_when_count_exceeds_bank(self):
        questions = pattern_questions(3, "reading", count=7, rng=random.Random(3))

        assert len(questions) == 7
        assert len({q.question_text for q in questions}) == 3

    def test_request_context_applied(self):
        questions = pattern_questions(
            5, "math", count=2, category="Decimals", teks_standard="5.3K"
        )

        assert all(q.grade == 5 for q in questions)
        assert all(q.category == "Decimals" for q in questions)
        assert all(q.teks_standard == "5.3K" for q in questions)

    def test_random_teks_from_catalogue(self):
        questions = pattern_questions(3, "math", count=3, rng=random.Random(9))

        catalogue = get_teks_standards(3, "math")
        assert all(q.teks_standard in catalogue for q in questions)

    def test_unknown_grade_uses_grade_four_bank(self):
        questions = pattern_questions(6, "math", count=1, rng=random.Random(0))

        grade_four_texts = {entry["question_text"] for entry in QUESTION_BANK["math"][4]}
        assert questions[0].question_text in grade_four_texts
