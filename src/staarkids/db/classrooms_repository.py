"""Repository functions for classrooms and enrollments.

Teachers create classrooms identified by a short join code; students
enroll by entering that code.
"""

from __future__ import annotations

import secrets
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import structlog

from staarkids.db.database import get_db
from staarkids.db.users_repository import UserRecord, _row_to_record as _row_to_user

logger = structlog.get_logger(__name__)

# No I/O/0/1, they are easy to misread on a projector
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_LENGTH = 8
MAX_CODE_ATTEMPTS = 10


class ClassroomError(Exception):
    """Base error for classroom operations."""


class ClassroomNotFoundError(ClassroomError):
    """No active classroom has the given code."""


class AlreadyEnrolledError(ClassroomError):
    """Student already has an active enrollment in the classroom."""


class ClassroomFullError(ClassroomError):
    """Classroom reached its max_students limit."""


class ClassroomCodeExhaustedError(ClassroomError):
    """Could not find an unused join code."""


@dataclass
class ClassroomRecord:
    """Classroom record from database."""

    classroom_id: int
    code: str
    teacher_id: str
    class_name: str
    grade: int
    subject: str
    is_active: bool
    max_students: int
    created_at: str
    expires_at: str | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "classroom_id": self.classroom_id,
            "code": self.code,
            "teacher_id": self.teacher_id,
            "class_name": self.class_name,
            "grade": self.grade,
            "subject": self.subject,
            "is_active": self.is_active,
            "max_students": self.max_students,
            "created_at": self.created_at,
            "expires_at": self.expires_at,
        }


@dataclass
class EnrollmentRecord:
    enrollment_id: int
    student_id: str
    classroom_id: int
    enrolled_at: str
    is_active: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "enrollment_id": self.enrollment_id,
            "student_id": self.student_id,
            "classroom_id": self.classroom_id,
            "enrolled_at": self.enrolled_at,
            "is_active": self.is_active,
        }


def _row_to_classroom(row: sqlite3.Row) -> ClassroomRecord:
    return ClassroomRecord(
        classroom_id=row["classroom_id"],
        code=row["code"],
        teacher_id=row["teacher_id"],
        class_name=row["class_name"],
        grade=row["grade"],
        subject=row["subject"],
        is_active=bool(row["is_active"]),
        max_students=row["max_students"],
        created_at=row["created_at"],
        expires_at=row["expires_at"],
    )


def _row_to_enrollment(row: sqlite3.Row) -> EnrollmentRecord:
    return EnrollmentRecord(
        enrollment_id=row["enrollment_id"],
        student_id=row["student_id"],
        classroom_id=row["classroom_id"],
        enrolled_at=row["enrolled_at"],
        is_active=bool(row["is_active"]),
    )


def generate_classroom_code() -> str:
    """Random 8-character join code."""
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


def _code_exists(conn: sqlite3.Connection, code: str) -> bool:
    row = conn.execute("SELECT 1 FROM classrooms WHERE code = ?", (code,)).fetchone()
    return row is not None


def create_classroom(
    teacher_id: str,
    class_name: str,
    grade: int,
    subject: str = "both",
    max_students: int = 30,
    expires_at: str | None = None,
) -> ClassroomRecord:
    """Create a classroom with a fresh join code.

    Raises:
        ClassroomCodeExhaustedError: If no unused code was found
        sqlite3.IntegrityError: If teacher doesn't exist
    """
    with get_db() as conn:
        for _ in range(MAX_CODE_ATTEMPTS):
            code = generate_classroom_code()
            if not _code_exists(conn, code):
                break
        else:
            raise ClassroomCodeExhaustedError(
                f"No free classroom code after {MAX_CODE_ATTEMPTS} attempts"
            )

        cursor = conn.execute(
            """
            INSERT INTO classrooms (
                code, teacher_id, class_name, grade, subject,
                max_students, created_at, expires_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                code,
                teacher_id,
                class_name,
                grade,
                subject,
                max_students,
                datetime.now(timezone.utc).isoformat(),
                expires_at,
            ),
        )
        row = conn.execute(
            "SELECT * FROM classrooms WHERE classroom_id = ?", (cursor.lastrowid,)
        ).fetchone()

    logger.info("classrooms.created", classroom_id=row["classroom_id"], teacher_id=teacher_id)
    return _row_to_classroom(row)


def get_classroom_by_code(code: str) -> ClassroomRecord | None:
    """Get an active classroom by its join code (case-insensitive)."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM classrooms WHERE code = ? AND is_active = 1",
            (code.strip().upper(),),
        ).fetchone()

    return _row_to_classroom(row) if row else None


def list_classrooms_by_teacher(teacher_id: str) -> list[ClassroomRecord]:
    """Active classrooms of a teacher, newest first."""
    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT * FROM classrooms
            WHERE teacher_id = ? AND is_active = 1
            ORDER BY created_at DESC, classroom_id DESC
            """,
            (teacher_id,),
        ).fetchall()

    return [_row_to_classroom(row) for row in rows]


def join_classroom(student_id: str, code: str) -> EnrollmentRecord:
    """Enroll a student in the classroom with the given code.

    Raises:
        ClassroomNotFoundError: If no active classroom has this code
        AlreadyEnrolledError: If the student is already enrolled
        ClassroomFullError: If the classroom has max_students active enrollments
    """
    classroom = get_classroom_by_code(code)
    if classroom is None:
        raise ClassroomNotFoundError("Classroom code not found")

    with get_db() as conn:
        existing = conn.execute(
            """
            SELECT 1 FROM classroom_enrollments
            WHERE student_id = ? AND classroom_id = ? AND is_active = 1
            """,
            (student_id, classroom.classroom_id),
        ).fetchone()
        if existing:
            raise AlreadyEnrolledError("Already enrolled in this classroom")

        enrolled = conn.execute(
            """
            SELECT COUNT(*) AS n FROM classroom_enrollments
            WHERE classroom_id = ? AND is_active = 1
            """,
            (classroom.classroom_id,),
        ).fetchone()["n"]
        if enrolled >= classroom.max_students:
            raise ClassroomFullError("Classroom is full")

        cursor = conn.execute(
            """
            INSERT INTO classroom_enrollments (student_id, classroom_id, enrolled_at)
            VALUES (?, ?, ?)
            """,
            (student_id, classroom.classroom_id, datetime.now(timezone.utc).isoformat()),
        )
        row = conn.execute(
            "SELECT * FROM classroom_enrollments WHERE enrollment_id = ?",
            (cursor.lastrowid,),
        ).fetchone()

    logger.info(
        "classrooms.joined",
        student_id=student_id,
        classroom_id=classroom.classroom_id,
    )
    return _row_to_enrollment(row)


def list_student_classrooms(student_id: str) -> list[ClassroomRecord]:
    """Active classrooms a student is enrolled in, most recent first."""
    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT c.* FROM classrooms c
            JOIN classroom_enrollments e ON e.classroom_id = c.classroom_id
            WHERE e.student_id = ? AND e.is_active = 1 AND c.is_active = 1
            ORDER BY e.enrolled_at DESC, e.enrollment_id DESC
            """,
            (student_id,),
        ).fetchall()

    return [_row_to_classroom(row) for row in rows]


def list_classroom_students(classroom_id: int) -> list[UserRecord]:
    """Students actively enrolled in a classroom."""
    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT u.* FROM users u
            JOIN classroom_enrollments e ON e.student_id = u.user_id
            WHERE e.classroom_id = ? AND e.is_active = 1
            ORDER BY e.enrolled_at, e.enrollment_id
            """,
            (classroom_id,),
        ).fetchall()

    return [_row_to_user(row) for row in rows]


def list_students_by_teacher(teacher_id: str) -> list[UserRecord]:
    """Distinct students enrolled in any active classroom of a teacher."""
    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT u.* FROM users u
            WHERE u.user_id IN (
                SELECT e.student_id FROM classroom_enrollments e
                JOIN classrooms c ON c.classroom_id = e.classroom_id
                WHERE c.teacher_id = ? AND c.is_active = 1 AND e.is_active = 1
            )
            ORDER BY u.last_name, u.first_name, u.user_id
            """,
            (teacher_id,),
        ).fetchall()

    return [_row_to_user(row) for row in rows]
