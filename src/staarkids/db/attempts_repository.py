"""Repository functions for practice attempts and per-TEKS progress.

Recording an attempt also rolls it into user_progress for the
question's grade, subject and TEKS standard, in the same transaction.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import structlog

from staarkids.core.scoring import (
    RECENT_WINDOW,
    accuracy_percent,
    blended_average_score,
)
from staarkids.db.database import get_db

logger = structlog.get_logger(__name__)


@dataclass
class PracticeAttemptRecord:
    """Practice attempt record from database."""

    attempt_id: int
    user_id: str
    question_id: int
    selected_answer: str | None
    is_correct: bool
    hints_used: int
    time_spent: int | None
    skipped: bool
    created_at: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "attempt_id": self.attempt_id,
            "user_id": self.user_id,
            "question_id": self.question_id,
            "selected_answer": self.selected_answer,
            "is_correct": self.is_correct,
            "hints_used": self.hints_used,
            "time_spent": self.time_spent,
            "skipped": self.skipped,
            "created_at": self.created_at,
        }


@dataclass
class ProgressRecord:
    """Per-TEKS progress row."""

    user_id: str
    grade: int
    subject: str
    teks_standard: str
    total_attempts: int
    correct_attempts: int
    average_score: float
    last_practiced: str | None


@dataclass
class CategoryStat:
    """Accuracy for one TEKS standard."""

    category: str
    total_questions: int
    correct_answers: int
    accuracy: int
    last_attempted: str | None


@dataclass
class UserStats:
    """Practice statistics for one grade and subject."""

    total_attempts: int
    correct_attempts: int
    average_score: float
    category_stats: list[CategoryStat] = field(default_factory=list)


@dataclass
class GradeAccuracy:
    grade: int
    attempts: int
    correct: int
    accuracy: int


@dataclass
class OverallAccuracy:
    """Accuracy across every practice attempt of a user."""

    total_attempts: int
    correct_attempts: int
    overall_accuracy: int
    math_accuracy: int
    reading_accuracy: int
    grade_breakdown: list[GradeAccuracy] = field(default_factory=list)


def _row_to_attempt(row: sqlite3.Row) -> PracticeAttemptRecord:
    return PracticeAttemptRecord(
        attempt_id=row["attempt_id"],
        user_id=row["user_id"],
        question_id=row["question_id"],
        selected_answer=row["selected_answer"],
        is_correct=bool(row["is_correct"]),
        hints_used=row["hints_used"],
        time_spent=row["time_spent"],
        skipped=bool(row["skipped"]),
        created_at=row["created_at"],
    )


def _update_progress(
    conn: sqlite3.Connection,
    user_id: str,
    question_id: int,
    is_correct: bool,
    now: str,
) -> None:
    question = conn.execute(
        "SELECT grade, subject, teks_standard FROM questions WHERE question_id = ?",
        (question_id,),
    ).fetchone()
    if question is None:
        return

    correct_increment = 1 if is_correct else 0
    conn.execute(
        """
        INSERT INTO user_progress (
            user_id, grade, subject, teks_standard,
            total_attempts, correct_attempts, average_score,
            last_practiced, updated_at
        ) VALUES (?, ?, ?, ?, 1, ?, ?, ?, ?)
        ON CONFLICT(user_id, grade, subject, teks_standard) DO UPDATE SET
            total_attempts = total_attempts + 1,
            correct_attempts = correct_attempts + excluded.correct_attempts,
            average_score = ROUND(
                (correct_attempts + excluded.correct_attempts) * 100.0
                / (total_attempts + 1), 2
            ),
            last_practiced = excluded.last_practiced,
            updated_at = excluded.updated_at
        """,
        (
            user_id,
            question["grade"],
            question["subject"],
            question["teks_standard"],
            correct_increment,
            100.0 * correct_increment,
            now,
            now,
        ),
    )


def create_practice_attempt(
    user_id: str,
    question_id: int,
    is_correct: bool,
    selected_answer: str | None = None,
    hints_used: int = 0,
    time_spent: int | None = None,
    skipped: bool = False,
) -> PracticeAttemptRecord:
    """Record a practice attempt and update the user's TEKS progress.

    Raises:
        sqlite3.IntegrityError: If user or question doesn't exist
    """
    now = datetime.now(timezone.utc).isoformat()

    with get_db() as conn:
        cursor = conn.execute(
            """
            INSERT INTO practice_attempts (
                user_id, question_id, selected_answer, is_correct,
                hints_used, time_spent, skipped, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                user_id,
                question_id,
                selected_answer,
                int(is_correct),
                hints_used,
                time_spent,
                int(skipped),
                now,
            ),
        )
        attempt_id = cursor.lastrowid
        _update_progress(conn, user_id, question_id, is_correct, now)
        row = conn.execute(
            "SELECT * FROM practice_attempts WHERE attempt_id = ?", (attempt_id,)
        ).fetchone()

    logger.info(
        "practice.attempt_recorded",
        user_id=user_id,
        question_id=question_id,
        is_correct=is_correct,
    )
    return _row_to_attempt(row)


def get_practice_history(user_id: str, limit: int = 10) -> list[PracticeAttemptRecord]:
    """Most recent practice attempts of a user, newest first."""
    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT * FROM practice_attempts
            WHERE user_id = ?
            ORDER BY created_at DESC, attempt_id DESC
            LIMIT ?
            """,
            (user_id, limit),
        ).fetchall()

    return [_row_to_attempt(row) for row in rows]


def get_user_progress(user_id: str, grade: int) -> list[ProgressRecord]:
    """Per-TEKS progress rows of a user for one grade."""
    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT * FROM user_progress
            WHERE user_id = ? AND grade = ?
            ORDER BY subject, teks_standard
            """,
            (user_id, grade),
        ).fetchall()

    return [
        ProgressRecord(
            user_id=row["user_id"],
            grade=row["grade"],
            subject=row["subject"],
            teks_standard=row["teks_standard"],
            total_attempts=row["total_attempts"],
            correct_attempts=row["correct_attempts"],
            average_score=row["average_score"],
            last_practiced=row["last_practiced"],
        )
        for row in rows
    ]


def get_user_stats(user_id: str, grade: int, subject: str) -> UserStats:
    """Practice statistics for a grade and subject.

    average_score blends recent form with the overall average
    (see core.scoring.blended_average_score).
    """
    with get_db() as conn:
        totals = conn.execute(
            """
            SELECT
                COUNT(*) AS total,
                COALESCE(SUM(pa.is_correct), 0) AS correct,
                COALESCE(ROUND(AVG(pa.is_correct * 100.0), 2), 0) AS average
            FROM practice_attempts pa
            JOIN questions q ON q.question_id = pa.question_id
            WHERE pa.user_id = ? AND q.grade = ? AND q.subject = ?
            """,
            (user_id, grade, subject),
        ).fetchone()

        recent_rows = conn.execute(
            """
            SELECT pa.is_correct
            FROM practice_attempts pa
            JOIN questions q ON q.question_id = pa.question_id
            WHERE pa.user_id = ? AND q.grade = ? AND q.subject = ?
            ORDER BY pa.created_at DESC, pa.attempt_id DESC
            LIMIT ?
            """,
            (user_id, grade, subject, RECENT_WINDOW),
        ).fetchall()

        category_rows = conn.execute(
            """
            SELECT
                q.teks_standard AS teks_standard,
                COUNT(*) AS total,
                COALESCE(SUM(pa.is_correct), 0) AS correct,
                MAX(pa.created_at) AS last_attempted
            FROM practice_attempts pa
            JOIN questions q ON q.question_id = pa.question_id
            WHERE pa.user_id = ? AND q.grade = ? AND q.subject = ?
            GROUP BY q.teks_standard
            ORDER BY q.teks_standard
            """,
            (user_id, grade, subject),
        ).fetchall()

    recent = [bool(row["is_correct"]) for row in recent_rows]
    average_score = blended_average_score(float(totals["average"]), recent)

    return UserStats(
        total_attempts=totals["total"],
        correct_attempts=totals["correct"],
        average_score=round(average_score, 2),
        category_stats=[
            CategoryStat(
                category=row["teks_standard"],
                total_questions=row["total"],
                correct_answers=row["correct"],
                accuracy=accuracy_percent(row["correct"], row["total"]),
                last_attempted=row["last_attempted"],
            )
            for row in category_rows
        ],
    )


def get_overall_accuracy(user_id: str) -> OverallAccuracy:
    """Accuracy across all practice, split by subject and grade."""
    with get_db() as conn:
        overall = conn.execute(
            """
            SELECT COUNT(*) AS total, COALESCE(SUM(is_correct), 0) AS correct
            FROM practice_attempts
            WHERE user_id = ?
            """,
            (user_id,),
        ).fetchone()

        subject_rows = conn.execute(
            """
            SELECT q.subject AS subject, COUNT(*) AS total,
                   COALESCE(SUM(pa.is_correct), 0) AS correct
            FROM practice_attempts pa
            JOIN questions q ON q.question_id = pa.question_id
            WHERE pa.user_id = ?
            GROUP BY q.subject
            """,
            (user_id,),
        ).fetchall()

        grade_rows = conn.execute(
            """
            SELECT q.grade AS grade, COUNT(*) AS total,
                   COALESCE(SUM(pa.is_correct), 0) AS correct
            FROM practice_attempts pa
            JOIN questions q ON q.question_id = pa.question_id
            WHERE pa.user_id = ?
            GROUP BY q.grade
            ORDER BY q.grade
            """,
            (user_id,),
        ).fetchall()

    by_subject = {row["subject"]: row for row in subject_rows}

    def _subject_accuracy(subject: str) -> int:
        row = by_subject.get(subject)
        return accuracy_percent(row["correct"], row["total"]) if row else 0

    return OverallAccuracy(
        total_attempts=overall["total"],
        correct_attempts=overall["correct"],
        overall_accuracy=accuracy_percent(overall["correct"], overall["total"]),
        math_accuracy=_subject_accuracy("math"),
        reading_accuracy=_subject_accuracy("reading"),
        grade_breakdown=[
            GradeAccuracy(
                grade=row["grade"],
                attempts=row["total"],
                correct=row["correct"],
                accuracy=accuracy_percent(row["correct"], row["total"]),
            )
            for row in grade_rows
        ],
    )
