"""Repository functions for users table.

Users are admins and teachers. Passwords arrive here already hashed;
see preprimary.core.auth.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

import structlog

from preprimary.db.database import get_db

logger = structlog.get_logger(__name__)

# Columns callers may change through update_user
UPDATABLE_FIELDS = ("email", "password_hash", "role", "name", "assigned_classes")


@dataclass
class UserRecord:
    """User record from database."""

    id: int
    email: str
    password_hash: str
    role: str
    name: str
    assigned_classes: list[str] = field(default_factory=list)
    created_at: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def is_teacher(self) -> bool:
        return self.role == "teacher"


def create_user(
    email: str,
    password_hash: str,
    name: str,
    role: str = "teacher",
    assigned_classes: list[str] | None = None,
) -> UserRecord:
    """Insert a new user.

    Raises:
        sqlite3.IntegrityError: If the email is already registered
    """
    with get_db() as conn:
        cursor = conn.execute(
            """
            INSERT INTO users (email, password_hash, role, name, assigned_classes)
            VALUES (?, ?, ?, ?, ?)
            """,
            (email, password_hash, role, name, json.dumps(assigned_classes or [])),
        )
        user_id = cursor.lastrowid

    logger.debug("users.inserted", user_id=user_id, role=role)

    user = get_user(user_id)
    assert user is not None
    return user


def get_user(user_id: int) -> UserRecord | None:
    """Get user by ID."""
    with get_db() as conn:
        row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()

    if row is None:
        return None

    return _row_to_record(row)


def get_user_by_email(email: str) -> UserRecord | None:
    """Get user by email (case-insensitive)."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM users WHERE email = ? COLLATE NOCASE", (email.strip(),)
        ).fetchone()

    if row is None:
        return None

    return _row_to_record(row)


def list_teachers() -> list[UserRecord]:
    """Get all users with the teacher role, ordered by name."""
    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM users WHERE role = 'teacher' ORDER BY name"
        ).fetchall()

    return [_row_to_record(row) for row in rows]


def get_teacher_names() -> dict[int, str]:
    """Map user id -> name for every user (authors may be admins)."""
    with get_db() as conn:
        rows = conn.execute("SELECT id, name FROM users").fetchall()

    return {row["id"]: row["name"] for row in rows}


def update_user(user_id: int, changes: dict[str, Any]) -> UserRecord | None:
    """Apply a partial update.

    Args:
        user_id: User to update
        changes: Column -> value; unknown keys are ignored

    Returns:
        Updated record, or None if the user doesn't exist

    Raises:
        sqlite3.IntegrityError: If the new email is taken
    """
    values = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}
    if "assigned_classes" in values:
        values["assigned_classes"] = json.dumps(values["assigned_classes"] or [])

    if values:
        assignments = ", ".join(f"{column} = ?" for column in values)
        with get_db() as conn:
            cursor = conn.execute(
                f"UPDATE users SET {assignments} WHERE id = ?",
                (*values.values(), user_id),
            )
        if cursor.rowcount == 0:
            return None
        logger.debug("users.updated", user_id=user_id, fields=sorted(values))

    return get_user(user_id)


def delete_user(user_id: int) -> bool:
    """Delete user by ID.

    Returns:
        True if deleted, False if not found

    Raises:
        sqlite3.IntegrityError: If students still reference the user
    """
    with get_db() as conn:
        cursor = conn.execute("DELETE FROM users WHERE id = ?", (user_id,))

    deleted = cursor.rowcount > 0
    if deleted:
        logger.debug("users.deleted", user_id=user_id)

    return deleted


def count_users(role: str | None = None) -> int:
    """Count users, optionally restricted to one role."""
    with get_db() as conn:
        if role is None:
            row = conn.execute("SELECT COUNT(*) AS n FROM users").fetchone()
        else:
            row = conn.execute(
                "SELECT COUNT(*) AS n FROM users WHERE role = ?", (role,)
            ).fetchone()

    return row["n"]


def _row_to_record(row) -> UserRecord:
    """Convert database row to UserRecord."""
    return UserRecord(
        id=row["id"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=row["role"],
        name=row["name"],
        assigned_classes=json.loads(row["assigned_classes"]) if row["assigned_classes"] else [],
        created_at=row["created_at"],
    )
