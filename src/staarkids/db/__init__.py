"""Database module for SQLite persistence.

Provides:
- Database connection management
- Schema initialization
- Repository functions per table group (users, questions, attempts,
  exams, classrooms)
"""

from staarkids.db.database import get_db, init_db

__all__ = ["get_db", "init_db"]
