"""Database module for SQLite persistence.

Provides:
- Database connection management
- Schema initialization
- Repository functions for users, students, progress and teaching_plans
"""

from preprimary.db.database import get_db, init_db

__all__ = ["get_db", "init_db"]
