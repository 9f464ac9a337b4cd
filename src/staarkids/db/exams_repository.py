"""Repository functions for mock exams and exam attempts."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import structlog

from staarkids.core.questions import Question
from staarkids.db.database import get_db
from staarkids.db.questions_repository import _row_to_question

logger = structlog.get_logger(__name__)


@dataclass
class MockExamRecord:
    """Mock exam record from database."""

    exam_id: int
    name: str
    grade: int
    subject: str
    total_questions: int
    time_limit: int | None
    created_at: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "exam_id": self.exam_id,
            "name": self.name,
            "grade": self.grade,
            "subject": self.subject,
            "total_questions": self.total_questions,
            "time_limit": self.time_limit,
            "created_at": self.created_at,
        }


@dataclass
class ExamAttemptRecord:
    """Exam attempt record from database."""

    attempt_id: int
    user_id: str
    exam_id: int
    score: float | None
    total_questions: int
    correct_answers: int
    time_spent: int | None
    completed: bool
    started_at: str
    completed_at: str | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "attempt_id": self.attempt_id,
            "user_id": self.user_id,
            "exam_id": self.exam_id,
            "score": self.score,
            "total_questions": self.total_questions,
            "correct_answers": self.correct_answers,
            "time_spent": self.time_spent,
            "completed": self.completed,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
        }


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _row_to_exam(row: sqlite3.Row) -> MockExamRecord:
    return MockExamRecord(
        exam_id=row["exam_id"],
        name=row["name"],
        grade=row["grade"],
        subject=row["subject"],
        total_questions=row["total_questions"],
        time_limit=row["time_limit"],
        created_at=row["created_at"],
    )


def _row_to_attempt(row: sqlite3.Row) -> ExamAttemptRecord:
    return ExamAttemptRecord(
        attempt_id=row["attempt_id"],
        user_id=row["user_id"],
        exam_id=row["exam_id"],
        score=row["score"],
        total_questions=row["total_questions"],
        correct_answers=row["correct_answers"],
        time_spent=row["time_spent"],
        completed=bool(row["completed"]),
        started_at=row["started_at"],
        completed_at=row["completed_at"],
    )


def create_mock_exam(
    name: str,
    grade: int,
    subject: str,
    total_questions: int,
    time_limit: int | None = None,
) -> MockExamRecord:
    """Create a mock exam. Questions are attached with set_exam_questions."""
    with get_db() as conn:
        cursor = conn.execute(
            """
            INSERT INTO mock_exams (name, grade, subject, total_questions, time_limit, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (name, grade, subject, total_questions, time_limit, _now()),
        )
        row = conn.execute(
            "SELECT * FROM mock_exams WHERE exam_id = ?", (cursor.lastrowid,)
        ).fetchone()

    logger.info("exams.created", exam_id=row["exam_id"], grade=grade, subject=subject)
    return _row_to_exam(row)


def get_mock_exam(exam_id: int) -> MockExamRecord | None:
    """Get mock exam by ID."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM mock_exams WHERE exam_id = ?", (exam_id,)
        ).fetchone()

    return _row_to_exam(row) if row else None


def list_mock_exams(grade: int | None = None) -> list[MockExamRecord]:
    """List mock exams, optionally for a single grade."""
    with get_db() as conn:
        if grade is not None:
            rows = conn.execute(
                "SELECT * FROM mock_exams WHERE grade = ? ORDER BY exam_id", (grade,)
            ).fetchall()
        else:
            rows = conn.execute("SELECT * FROM mock_exams ORDER BY exam_id").fetchall()

    return [_row_to_exam(row) for row in rows]


def set_exam_questions(exam_id: int, question_ids: list[int]) -> None:
    """Replace the ordered question list of an exam.

    total_questions is kept in step with the number of linked questions.
    """
    with get_db() as conn:
        conn.execute("DELETE FROM mock_exam_questions WHERE exam_id = ?", (exam_id,))
        conn.executemany(
            "INSERT INTO mock_exam_questions (exam_id, question_id, position) VALUES (?, ?, ?)",
            [(exam_id, qid, position) for position, qid in enumerate(question_ids)],
        )
        conn.execute(
            "UPDATE mock_exams SET total_questions = ? WHERE exam_id = ?",
            (len(question_ids), exam_id),
        )

    logger.debug("exams.questions_set", exam_id=exam_id, count=len(question_ids))


def get_exam_questions(exam_id: int) -> list[Question]:
    """Questions of an exam in their exam order."""
    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT q.* FROM mock_exam_questions meq
            JOIN questions q ON q.question_id = meq.question_id
            WHERE meq.exam_id = ?
            ORDER BY meq.position
            """,
            (exam_id,),
        ).fetchall()

    return [_row_to_question(row) for row in rows]


def create_exam_attempt(user_id: str, exam_id: int, total_questions: int) -> ExamAttemptRecord:
    """Start an exam attempt.

    Raises:
        sqlite3.IntegrityError: If user or exam doesn't exist
    """
    with get_db() as conn:
        cursor = conn.execute(
            """
            INSERT INTO exam_attempts (user_id, exam_id, total_questions, started_at)
            VALUES (?, ?, ?, ?)
            """,
            (user_id, exam_id, total_questions, _now()),
        )
        row = conn.execute(
            "SELECT * FROM exam_attempts WHERE attempt_id = ?", (cursor.lastrowid,)
        ).fetchone()

    logger.info("exams.attempt_started", attempt_id=row["attempt_id"], exam_id=exam_id)
    return _row_to_attempt(row)


def complete_exam_attempt(
    attempt_id: int,
    score: float,
    correct_answers: int,
    time_spent: int | None = None,
) -> ExamAttemptRecord | None:
    """Mark an attempt completed with its graded result.

    Returns:
        Updated record, or None if the attempt doesn't exist
    """
    with get_db() as conn:
        cursor = conn.execute(
            """
            UPDATE exam_attempts
            SET score = ?, correct_answers = ?, time_spent = ?,
                completed = 1, completed_at = ?
            WHERE attempt_id = ?
            """,
            (score, correct_answers, time_spent, _now(), attempt_id),
        )
        if cursor.rowcount == 0:
            return None
        row = conn.execute(
            "SELECT * FROM exam_attempts WHERE attempt_id = ?", (attempt_id,)
        ).fetchone()

    logger.info("exams.attempt_completed", attempt_id=attempt_id, score=score)
    return _row_to_attempt(row)


def get_exam_attempt(attempt_id: int) -> ExamAttemptRecord | None:
    """Get exam attempt by ID."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM exam_attempts WHERE attempt_id = ?", (attempt_id,)
        ).fetchone()

    return _row_to_attempt(row) if row else None


def get_exam_history(user_id: str) -> list[ExamAttemptRecord]:
    """All exam attempts of a user, newest first."""
    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT * FROM exam_attempts
            WHERE user_id = ?
            ORDER BY started_at DESC, attempt_id DESC
            """,
            (user_id,),
        ).fetchall()

    return [_row_to_attempt(row) for row in rows]
