"""Repository functions for questions table.

Questions are stored and returned as core Question objects; answer
choices are kept as a JSON array column.
"""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone

import structlog

from staarkids.core.questions import Question
from staarkids.db.database import get_db

logger = structlog.get_logger(__name__)


def _row_to_question(row: sqlite3.Row) -> Question:
    return Question(
        question_id=row["question_id"],
        grade=row["grade"],
        subject=row["subject"],
        teks_standard=row["teks_standard"],
        question_text=row["question_text"],
        answer_choices=json.loads(row["answer_choices"]),
        correct_answer=row["correct_answer"],
        explanation=row["explanation"] or "",
        category=row["category"] or "",
        difficulty=row["difficulty"],
        is_from_real_staar=bool(row["is_from_real_staar"]),
        year=row["year"],
        has_image=bool(row["has_image"]),
        image_description=row["image_description"],
    )


def insert_question(question: Question) -> Question:
    """Insert a question and return it with its new question_id.

    The passed object is updated in place as well.
    """
    with get_db() as conn:
        cursor = conn.execute(
            """
            INSERT INTO questions (
                grade, subject, teks_standard, question_text, answer_choices,
                correct_answer, explanation, category, difficulty,
                is_from_real_staar, year, has_image, image_description, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                question.grade,
                question.subject,
                question.teks_standard,
                question.question_text,
                json.dumps(question.answer_choices, ensure_ascii=False),
                question.correct_answer,
                question.explanation,
                question.category,
                question.difficulty,
                int(question.is_from_real_staar),
                question.year,
                int(question.has_image),
                question.image_description,
                datetime.now(timezone.utc).isoformat(),
            ),
        )
        question.question_id = cursor.lastrowid

    logger.debug(
        "questions.inserted",
        question_id=question.question_id,
        teks_standard=question.teks_standard,
    )
    return question


def get_question(question_id: int) -> Question | None:
    """Get question by ID."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM questions WHERE question_id = ?", (question_id,)
        ).fetchone()

    return _row_to_question(row) if row else None


def get_questions_by_grade_and_subject(
    grade: int, subject: str, limit: int | None = None
) -> list[Question]:
    """List stored questions for a grade and subject, oldest first."""
    query = "SELECT * FROM questions WHERE grade = ? AND subject = ? ORDER BY question_id"
    params: tuple = (grade, subject)
    if limit is not None:
        query += " LIMIT ?"
        params = (grade, subject, limit)

    with get_db() as conn:
        rows = conn.execute(query, params).fetchall()

    return [_row_to_question(row) for row in rows]


def get_questions_by_teks(grade: int, subject: str, teks_standard: str) -> list[Question]:
    """List stored questions tagged with one TEKS standard."""
    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT * FROM questions
            WHERE grade = ? AND subject = ? AND teks_standard = ?
            ORDER BY question_id
            """,
            (grade, subject, teks_standard),
        ).fetchall()

    return [_row_to_question(row) for row in rows]


def get_random_questions(grade: int, subject: str, limit: int) -> list[Question]:
    """Sample up to limit stored questions for a grade and subject."""
    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT * FROM questions
            WHERE grade = ? AND subject = ?
            ORDER BY RANDOM()
            LIMIT ?
            """,
            (grade, subject, limit),
        ).fetchall()

    return [_row_to_question(row) for row in rows]


def count_questions_by_grade_subject() -> list[dict[str, int | str]]:
    """Count stored questions per grade and subject."""
    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT grade, subject, COUNT(*) AS total
            FROM questions
            GROUP BY grade, subject
            ORDER BY grade, subject
            """
        ).fetchall()

    return [
        {"grade": row["grade"], "subject": row["subject"], "total": row["total"]}
        for row in rows
    ]
