"""Tests for questions repository."""

from dataclasses import replace

from staarkids.db.questions_repository import (
    count_questions_by_grade_subject,
    get_question,
    get_questions_by_grade_and_subject,
    get_questions_by_teks,
    get_random_questions,
    insert_question,
)


class TestInsertQuestion:
    def test_assigns_id_and_round_trips(self, db_path, math_question):
        stored = insert_question(math_question)

        assert stored.question_id is not None
        loaded = get_question(stored.question_id)
        assert loaded == stored
        assert loaded.answer_choices == math_question.answer_choices

    def test_get_missing(self, db_path):
        assert get_question(999) is None


class TestQueries:
    def test_by_grade_and_subject(self, db_path, math_question, reading_question):
        insert_question(math_question)
        insert_question(replace(math_question, question_id=None, teks_standard="4.2A"))
        insert_question(reading_question)

        math = get_questions_by_grade_and_subject(4, "math")
        assert [q.teks_standard for q in math] == ["4.4H", "4.2A"]
        assert len(get_questions_by_grade_and_subject(4, "math", limit=1)) == 1
        assert get_questions_by_grade_and_subject(3, "math") == []

    def test_by_teks(self, db_path, math_question):
        insert_question(math_question)
        insert_question(replace(math_question, question_id=None, teks_standard="4.2A"))

        assert len(get_questions_by_teks(4, "math", "4.2A")) == 1

    def test_random_respects_limit(self, db_path, math_question):
        for _ in range(5):
            insert_question(replace(math_question, question_id=None))

        assert len(get_random_questions(4, "math", 3)) == 3
        assert get_random_questions(5, "math", 3) == []

    def test_counts(self, db_path, math_question, reading_question):
        insert_question(math_question)
        insert_question(replace(math_question, question_id=None))
        insert_question(reading_question)

        assert count_questions_by_grade_subject() == [
            {"grade": 4, "subject": "math", "total": 2},
            {"grade": 4, "subject": "reading", "total": 1},
        ]
