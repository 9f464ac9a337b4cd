"""Repository functions for users table."""

from __future__ import annotations

import sqlite3
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import structlog

from staarkids.db.database import get_db

logger = structlog.get_logger(__name__)

ROLES = ("student", "parent", "teacher")


@dataclass
class UserRecord:
    """User record from database."""

    user_id: str
    email: str | None
    first_name: str | None
    last_name: str | None
    current_grade: int
    role: str
    created_at: str
    updated_at: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "current_grade": self.current_grade,
            "role": self.role,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _row_to_record(row: sqlite3.Row) -> UserRecord:
    return UserRecord(
        user_id=row["user_id"],
        email=row["email"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        current_grade=row["current_grade"],
        role=row["role"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def generate_user_id() -> str:
    """Short random user id, e.g. "usr3f9a1c2b"."""
    return f"usr{uuid.uuid4().hex[:8]}"


def upsert_user(
    user_id: str,
    email: str | None = None,
    first_name: str | None = None,
    last_name: str | None = None,
    current_grade: int = 4,
    role: str = "student",
) -> UserRecord:
    """Insert a user or update the existing row with the same id.

    Raises:
        sqlite3.IntegrityError: If email belongs to another user or
            grade/role violate table constraints
    """
    now = _now()
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO users (
                user_id, email, first_name, last_name,
                current_grade, role, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                email = excluded.email,
                first_name = excluded.first_name,
                last_name = excluded.last_name,
                current_grade = excluded.current_grade,
                role = excluded.role,
                updated_at = excluded.updated_at
            """,
            (user_id, email, first_name, last_name, current_grade, role, now, now),
        )
        row = conn.execute(
            "SELECT * FROM users WHERE user_id = ?", (user_id,)
        ).fetchone()

    logger.debug("users.upserted", user_id=user_id, role=role)
    return _row_to_record(row)


def get_user(user_id: str) -> UserRecord | None:
    """Get user by ID."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM users WHERE user_id = ?", (user_id,)
        ).fetchone()

    return _row_to_record(row) if row else None


def get_user_by_email(email: str) -> UserRecord | None:
    """Get user by email address."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM users WHERE email = ?", (email,)
        ).fetchone()

    return _row_to_record(row) if row else None


def update_user_profile(
    user_id: str,
    current_grade: int | None = None,
    role: str | None = None,
    first_name: str | None = None,
    last_name: str | None = None,
) -> UserRecord | None:
    """Update the given profile fields, leaving None fields unchanged.

    Returns:
        Updated record, or None if the user doesn't exist
    """
    updates: dict[str, Any] = {
        "current_grade": current_grade,
        "role": role,
        "first_name": first_name,
        "last_name": last_name,
    }
    updates = {k: v for k, v in updates.items() if v is not None}

    if get_user(user_id) is None:
        return None

    if updates:
        updates["updated_at"] = _now()
        assignments = ", ".join(f"{column} = ?" for column in updates)
        with get_db() as conn:
            conn.execute(
                f"UPDATE users SET {assignments} WHERE user_id = ?",
                (*updates.values(), user_id),
            )
        logger.debug("users.updated", user_id=user_id, fields=sorted(updates))

    return get_user(user_id)


def list_users(role: str | None = None) -> list[UserRecord]:
    """List users, optionally filtered by role."""
    with get_db() as conn:
        if role:
            rows = conn.execute(
                "SELECT * FROM users WHERE role = ? ORDER BY created_at", (role,)
            ).fetchall()
        else:
            rows = conn.execute("SELECT * FROM users ORDER BY created_at").fetchall()

    return [_row_to_record(row) for row in rows]
