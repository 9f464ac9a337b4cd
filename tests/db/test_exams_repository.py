"""Tests for mock exams and exam attempts repository."""

import sqlite3
from dataclasses import replace

import pytest

from staarkids.db.exams_repository import (
    complete_exam_attempt,
    create_exam_attempt,
    create_mock_exam,
    get_exam_attempt,
    get_exam_history,
    get_exam_questions,
    get_mock_exam,
    list_mock_exams,
    set_exam_questions,
)
from staarkids.db.questions_repository import insert_question
from staarkids.db.users_repository import upsert_user


@pytest.fixture
def stored_questions(db_path, math_question):
    return [
        insert_question(replace(math_question, question_id=None, teks_standard=f"4.{i}A"))
        for i in range(1, 4)
    ]


class TestMockExams:
    def test_create_and_get(self, db_path):
        exam = create_mock_exam("Practice Test 1", 4, "math", 10, time_limit=60)

        loaded = get_mock_exam(exam.exam_id)
        assert loaded == exam
        assert loaded.time_limit == 60

    def test_get_missing(self, db_path):
        assert get_mock_exam(42) is None

    def test_list_by_grade(self, db_path):
        create_mock_exam("G3", 3, "math", 5)
        create_mock_exam("G4", 4, "reading", 5)

        assert [e.name for e in list_mock_exams()] == ["G3", "G4"]
        assert [e.name for e in list_mock_exams(grade=4)] == ["G4"]

    def test_questions_keep_order(self, stored_questions):
        exam = create_mock_exam("Ordered", 4, "math", 0)
        ids = [q.question_id for q in reversed(stored_questions)]

        set_exam_questions(exam.exam_id, ids)

        assert [q.question_id for q in get_exam_questions(exam.exam_id)] == ids
        assert get_mock_exam(exam.exam_id).total_questions == 3

    def test_set_questions_replaces(self, stored_questions):
        exam = create_mock_exam("Replace", 4, "math", 0)
        set_exam_questions(exam.exam_id, [q.question_id for q in stored_questions])

        set_exam_questions(exam.exam_id, [stored_questions[0].question_id])

        assert len(get_exam_questions(exam.exam_id)) == 1


class TestExamAttempts:
    def test_start_and_complete(self, db_path):
        upsert_user("usr1")
        exam = create_mock_exam("Exam", 4, "math", 3)

        attempt = create_exam_attempt("usr1", exam.exam_id, exam.total_questions)
        assert attempt.completed is False
        assert attempt.score is None

        completed = complete_exam_attempt(attempt.attempt_id, score=66.67, correct_answers=2, time_spent=600)

        assert completed.completed is True
        assert completed.score == pytest.approx(66.67)
        assert completed.correct_answers == 2
        assert completed.completed_at is not None
        assert get_exam_attempt(attempt.attempt_id) == completed

    def test_complete_missing(self, db_path):
        assert complete_exam_attempt(99, score=0, correct_answers=0) is None

    def test_unknown_user(self, db_path):
        exam = create_mock_exam("Exam", 4, "math", 3)

        with pytest.raises(sqlite3.IntegrityError):
            create_exam_attempt("ghost", exam.exam_id, 3)

    def test_history_newest_first(self, db_path):
        upsert_user("usr1")
        exam = create_mock_exam("Exam", 4, "math", 3)
        first = create_exam_attempt("usr1", exam.exam_id, 3)
        second = create_exam_attempt("usr1", exam.exam_id, 3)

        assert [a.attempt_id for a in get_exam_history("usr1")] == [
            second.attempt_id,
            first.attempt_id,
        ]
