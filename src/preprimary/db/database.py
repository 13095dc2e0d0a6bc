"""SQLite database connection and schema management.

Provides connection management and schema initialization for the record
system.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import structlog

logger = structlog.get_logger(__name__)

# Default database location
DEFAULT_DB_PATH = Path("db/preprimary.db")

# Current database path (module-level, set by init_db)
_db_path: Path | None = None


def init_db(db_path: Path | None = None) -> None:
    """Initialize database with schema.

    Creates the database file and all required tables if they don't exist.

    Args:
        db_path: Path to database file. Defaults to db/preprimary.db
    """
    global _db_path
    _db_path = db_path or DEFAULT_DB_PATH

    _db_path.parent.mkdir(parents=True, exist_ok=True)

    with get_db() as conn:
        _create_schema(conn)

    logger.info("database.initialized", path=str(_db_path))


def get_db_path() -> Path:
    """Return the database path currently in use."""
    return _db_path or DEFAULT_DB_PATH


@contextmanager
def get_db() -> Generator[sqlite3.Connection, None, None]:
    """Get database connection as context manager.

    Yields:
        SQLite connection with row factory set to sqlite3.Row

    Example:
        with get_db() as conn:
            rows = conn.execute("SELECT * FROM students").fetchall()
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

    Uses IF NOT EXISTS for idempotency.
    """
    conn.executescript(
        """
        -- Users: admins and teachers
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            email TEXT NOT NULL UNIQUE COLLATE NOCASE,
            password_hash TEXT NOT NULL,
            role TEXT NOT NULL DEFAULT 'teacher' CHECK(role IN ('admin', 'teacher')),
            name TEXT NOT NULL,
            assigned_classes TEXT NOT NULL DEFAULT '[]',
            created_at TEXT NOT NULL DEFAULT (datetime('now'))
        );

        -- Students: every student belongs to exactly one teacher
        CREATE TABLE IF NOT EXISTS students (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            age INTEGER NOT NULL,
            class_level TEXT NOT NULL CHECK(class_level IN ('Nursery', 'LKG', 'UKG')),
            parent_contact TEXT,
            learning_ability TEXT NOT NULL,
            writing_speed TEXT,
            notes TEXT,
            photo_url TEXT,
            photo_public_id TEXT,
            teacher_id INTEGER NOT NULL REFERENCES users(id),
            created_at TEXT NOT NULL DEFAULT (datetime('now')),
            updated_at TEXT NOT NULL DEFAULT (datetime('now'))
        );

        -- Progress: dated ratings across five skill dimensions
        CREATE TABLE IF NOT EXISTS progress (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            student_id INTEGER NOT NULL REFERENCES students(id) ON DELETE CASCADE,
            date TEXT NOT NULL DEFAULT (date('now')),
            social_skills TEXT NOT NULL,
            pre_literacy TEXT NOT NULL,
            pre_numeracy TEXT NOT NULL,
            motor_skills TEXT NOT NULL,
            emotional_development TEXT NOT NULL,
            comments TEXT,
            created_at TEXT NOT NULL DEFAULT (datetime('now'))
        );

        -- Teaching plans authored by a teacher or admin
        CREATE TABLE IF NOT EXISTS teaching_plans (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            type TEXT NOT NULL CHECK(type IN ('Annual', 'Monthly', 'Weekly')),
            class_level TEXT NOT NULL CHECK(class_level IN ('Nursery', 'LKG', 'UKG')),
            title TEXT NOT NULL,
            description TEXT NOT NULL,
            activities TEXT NOT NULL,
            goals TEXT NOT NULL,
            start_date TEXT NOT NULL,
            end_date TEXT NOT NULL,
            created_by INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            created_at TEXT NOT NULL DEFAULT (datetime('now'))
        );

        CREATE INDEX IF NOT EXISTS idx_students_teacher ON students(teacher_id);
        CREATE INDEX IF NOT EXISTS idx_students_class ON students(class_level);
        CREATE INDEX IF NOT EXISTS idx_progress_student ON progress(student_id, date);
        CREATE INDEX IF NOT EXISTS idx_plans_author ON teaching_plans(created_by);
        """
    )
