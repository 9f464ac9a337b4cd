"""Repository functions for parent-child links.

A parent account links a student account by the student's email and can
then list its linked children.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import structlog

from staarkids.db.database import get_db
from staarkids.db.users_repository import UserRecord, _row_to_record as _row_to_user

logger = structlog.get_logger(__name__)


class ParentLinkError(Exception):
    """Base error for parent-child linking."""


class ChildNotFoundError(ParentLinkError):
    """No account has the given email."""


class NotAStudentError(ParentLinkError):
    """The account found by email is not a student."""


class AlreadyLinkedError(ParentLinkError):
    """The child is already linked to this parent."""


@dataclass
class ParentRelationRecord:
    relation_id: int
    student_id: str
    parent_id: str
    relationship_type: str
    is_active: bool
    created_at: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "relation_id": self.relation_id,
            "student_id": self.student_id,
            "parent_id": self.parent_id,
            "relationship_type": self.relationship_type,
            "is_active": self.is_active,
            "created_at": self.created_at,
        }


def _row_to_relation(row: sqlite3.Row) -> ParentRelationRecord:
    return ParentRelationRecord(
        relation_id=row["relation_id"],
        student_id=row["student_id"],
        parent_id=row["parent_id"],
        relationship_type=row["relationship_type"],
        is_active=bool(row["is_active"]),
        created_at=row["created_at"],
    )


def link_child_to_parent(parent_id: str, child_email: str) -> ParentRelationRecord:
    """Link the student with child_email to a parent.

    Raises:
        ChildNotFoundError: If no account has this email
        NotAStudentError: If the account is not a student
        AlreadyLinkedError: If an active link already exists
    """
    with get_db() as conn:
        child = conn.execute(
            "SELECT user_id, role FROM users WHERE email = ?",
            (child_email.strip(),),
        ).fetchone()
        if child is None:
            raise ChildNotFoundError("Child account not found with this email")
        if child["role"] != "student":
            raise NotAStudentError("Account is not a student account")

        existing = conn.execute(
            """
            SELECT 1 FROM student_parent_relations
            WHERE student_id = ? AND parent_id = ? AND is_active = 1
            """,
            (child["user_id"], parent_id),
        ).fetchone()
        if existing:
            raise AlreadyLinkedError("Child is already linked to this parent account")

        cursor = conn.execute(
            """
            INSERT INTO student_parent_relations (student_id, parent_id, created_at)
            VALUES (?, ?, ?)
            """,
            (child["user_id"], parent_id, datetime.now(timezone.utc).isoformat()),
        )
        row = conn.execute(
            "SELECT * FROM student_parent_relations WHERE relation_id = ?",
            (cursor.lastrowid,),
        ).fetchone()

    logger.info("parents.child_linked", parent_id=parent_id, student_id=row["student_id"])
    return _row_to_relation(row)


def list_children(parent_id: str) -> list[UserRecord]:
    """Students actively linked to a parent, in link order."""
    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT u.* FROM users u
            JOIN student_parent_relations r ON r.student_id = u.user_id
            WHERE r.parent_id = ? AND r.is_active = 1
            ORDER BY r.created_at, r.relation_id
            """,
            (parent_id,),
        ).fetchall()

    return [_row_to_user(row) for row in rows]
