"""SQLite database connection and schema management.

Provides connection management and schema initialization for STAAR Kids.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import structlog

logger = structlog.get_logger(__name__)

# Default database location
DEFAULT_DB_PATH = Path("db/staarkids.db")

# Current database path (module-level, set by init_db)
_db_path: Path | None = None


def init_db(db_path: Path | None = None) -> None:
    """Initialize database with schema.

    Creates the database file and all required tables if they don't exist.

    Args:
        db_path: Path to database file. Defaults to db/staarkids.db
    """
    global _db_path
    _db_path = db_path or DEFAULT_DB_PATH

    _db_path.parent.mkdir(parents=True, exist_ok=True)

    with get_db() as conn:
        _create_schema(conn)

    logger.info("database.initialized", path=str(_db_path))


def get_db_path() -> Path:
    return _db_path or DEFAULT_DB_PATH


@contextmanager
def get_db() -> Generator[sqlite3.Connection, None, None]:
    """Get database connection as context manager.

    Commits on success, rolls back on any exception.

    Example:
        with get_db() as conn:
            rows = conn.execute("SELECT * FROM questions").fetchall()
    """
    db_path = get_db_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")

    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def _create_schema(conn: sqlite3.Connection) -> None:
    """Create database schema.

    Uses IF NOT EXISTS for idempotency. Timestamps are ISO-8601 UTC text.
    """
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS users (
            user_id TEXT PRIMARY KEY,
            email TEXT UNIQUE,
            first_name TEXT,
            last_name TEXT,
            current_grade INTEGER NOT NULL DEFAULT 4 CHECK(current_grade IN (3, 4, 5)),
            role TEXT NOT NULL DEFAULT 'student' CHECK(role IN ('student', 'parent', 'teacher')),
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS questions (
            question_id INTEGER PRIMARY KEY AUTOINCREMENT,
            grade INTEGER NOT NULL,
            subject TEXT NOT NULL CHECK(subject IN ('math', 'reading')),
            teks_standard TEXT NOT NULL,
            question_text TEXT NOT NULL,
            answer_choices TEXT NOT NULL,
            correct_answer TEXT NOT NULL,
            explanation TEXT,
            category TEXT,
            difficulty TEXT NOT NULL DEFAULT 'medium',
            is_from_real_staar INTEGER NOT NULL DEFAULT 0,
            year INTEGER,
            has_image INTEGER NOT NULL DEFAULT 0,
            image_description TEXT,
            created_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS practice_attempts (
            attempt_id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id TEXT NOT NULL REFERENCES users(user_id) ON DELETE CASCADE,
            question_id INTEGER NOT NULL REFERENCES questions(question_id) ON DELETE CASCADE,
            selected_answer TEXT,
            is_correct INTEGER NOT NULL,
            hints_used INTEGER NOT NULL DEFAULT 0,
            time_spent INTEGER,
            skipped INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS mock_exams (
            exam_id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            grade INTEGER NOT NULL,
            subject TEXT NOT NULL CHECK(subject IN ('math', 'reading')),
            total_questions INTEGER NOT NULL,
            time_limit INTEGER,
            created_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS mock_exam_questions (
            exam_id INTEGER NOT NULL REFERENCES mock_exams(exam_id) ON DELETE CASCADE,
            question_id INTEGER NOT NULL REFERENCES questions(question_id) ON DELETE CASCADE,
            position INTEGER NOT NULL,
            PRIMARY KEY (exam_id, question_id)
        );

        CREATE TABLE IF NOT EXISTS exam_attempts (
            attempt_id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id TEXT NOT NULL REFERENCES users(user_id) ON DELETE CASCADE,
            exam_id INTEGER NOT NULL REFERENCES mock_exams(exam_id) ON DELETE CASCADE,
            score REAL,
            total_questions INTEGER NOT NULL,
            correct_answers INTEGER NOT NULL DEFAULT 0,
            time_spent INTEGER,
            completed INTEGER NOT NULL DEFAULT 0,
            started_at TEXT NOT NULL,
            completed_at TEXT
        );

        CREATE TABLE IF NOT EXISTS user_progress (
            progress_id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id TEXT NOT NULL REFERENCES users(user_id) ON DELETE CASCADE,
            grade INTEGER NOT NULL,
            subject TEXT NOT NULL,
            teks_standard TEXT NOT NULL,
            total_attempts INTEGER NOT NULL DEFAULT 0,
            correct_attempts INTEGER NOT NULL DEFAULT 0,
            average_score REAL NOT NULL DEFAULT 0,
            last_practiced TEXT,
            updated_at TEXT NOT NULL,
            UNIQUE (user_id, grade, subject, teks_standard)
        );

        CREATE TABLE IF NOT EXISTS classrooms (
            classroom_id INTEGER PRIMARY KEY AUTOINCREMENT,
            code TEXT NOT NULL UNIQUE CHECK(length(code) = 8),
            teacher_id TEXT NOT NULL REFERENCES users(user_id) ON DELETE CASCADE,
            class_name TEXT NOT NULL,
            grade INTEGER NOT NULL,
            subject TEXT NOT NULL DEFAULT 'both' CHECK(subject IN ('math', 'reading', 'both')),
            is_active INTEGER NOT NULL DEFAULT 1,
            max_students INTEGER NOT NULL DEFAULT 30,
            created_at TEXT NOT NULL,
            expires_at TEXT
        );

        CREATE TABLE IF NOT EXISTS classroom_enrollments (
            enrollment_id INTEGER PRIMARY KEY AUTOINCREMENT,
            student_id TEXT NOT NULL REFERENCES users(user_id) ON DELETE CASCADE,
            classroom_id INTEGER NOT NULL REFERENCES classrooms(classroom_id) ON DELETE CASCADE,
            enrolled_at TEXT NOT NULL,
            is_active INTEGER NOT NULL DEFAULT 1
        );

        CREATE TABLE IF NOT EXISTS student_parent_relations (
            relation_id INTEGER PRIMARY KEY AUTOINCREMENT,
            student_id TEXT NOT NULL REFERENCES users(user_id) ON DELETE CASCADE,
            parent_id TEXT NOT NULL REFERENCES users(user_id) ON DELETE CASCADE,
            relationship_type TEXT NOT NULL DEFAULT 'parent',
            is_active INTEGER NOT NULL DEFAULT 1,
            created_at TEXT NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_questions_grade_subject ON questions(grade, subject);
        CREATE INDEX IF NOT EXISTS idx_questions_teks ON questions(teks_standard);
        CREATE INDEX IF NOT EXISTS idx_attempts_user ON practice_attempts(user_id, created_at);
        CREATE INDEX IF NOT EXISTS idx_exam_attempts_user ON exam_attempts(user_id);
        CREATE INDEX IF NOT EXISTS idx_enrollments_student ON classroom_enrollments(student_id, classroom_id);
        CREATE INDEX IF NOT EXISTS idx_parent_relations_parent ON student_parent_relations(parent_id);
        """
    )
