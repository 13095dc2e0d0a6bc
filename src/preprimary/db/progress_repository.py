"""Repository functions for progress table.

Dates are stored as ISO strings (YYYY-MM-DD), so string comparison
orders them chronologically.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any

import structlog

from preprimary.db.database import get_db

logger = structlog.get_logger(__name__)

RATING_FIELDS = (
    "social_skills",
    "pre_literacy",
    "pre_numeracy",
    "motor_skills",
    "emotional_development",
)

UPDATABLE_FIELDS = ("date", *RATING_FIELDS, "comments")


@dataclass
class ProgressRecord:
    """Progress entry from database."""

    id: int
    student_id: int
    date: str
    social_skills: str
    pre_literacy: str
    pre_numeracy: str
    motor_skills: str
    emotional_development: str
    comments: str | None = None
    created_at: str = ""

    def ratings(self) -> dict[str, str]:
        """Rating per skill field, in display order."""
        return {name: getattr(self, name) for name in RATING_FIELDS}


def create_progress(
    student_id: int,
    ratings: dict[str, str],
    entry_date: date | str | None = None,
    comments: str | None = None,
) -> ProgressRecord:
    """Insert a progress entry.

    Args:
        student_id: Student being assessed
        ratings: Value for each of RATING_FIELDS
        entry_date: Assessment date (default: today)
        comments: Free-text observations

    Raises:
        KeyError: If a rating field is missing
        sqlite3.IntegrityError: If student_id doesn't exist
    """
    entry_date = _as_iso(entry_date) or date.today().isoformat()

    with get_db() as conn:
        cursor = conn.execute(
            """
            INSERT INTO progress (
                student_id, date, social_skills, pre_literacy, pre_numeracy,
                motor_skills, emotional_development, comments
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                student_id,
                entry_date,
                *(ratings[name] for name in RATING_FIELDS),
                comments,
            ),
        )
        progress_id = cursor.lastrowid

    logger.debug("progress.inserted", progress_id=progress_id, student_id=student_id)

    record = get_progress(progress_id)
    assert record is not None
    return record


def get_progress(progress_id: int) -> ProgressRecord | None:
    """Get progress entry by ID."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM progress WHERE id = ?", (progress_id,)
        ).fetchone()

    if row is None:
        return None

    return _row_to_record(row)


def list_progress_for_student(
    student_id: int,
    start_date: date | str | None = None,
    end_date: date | str | None = None,
) -> list[ProgressRecord]:
    """Progress entries for a student, newest first.

    Args:
        student_id: Student ID
        start_date: Inclusive lower bound on entry date
        end_date: Inclusive upper bound on entry date
    """
    query = "SELECT * FROM progress WHERE student_id = ?"
    params: list[Any] = [student_id]

    if start_date:
        query += " AND date >= ?"
        params.append(_as_iso(start_date))
    if end_date:
        query += " AND date <= ?"
        params.append(_as_iso(end_date))

    query += " ORDER BY date DESC, id DESC"

    with get_db() as conn:
        rows = conn.execute(query, params).fetchall()

    return [_row_to_record(row) for row in rows]


def latest_progress_for_student(student_id: int) -> ProgressRecord | None:
    """Most recent progress entry for a student."""
    entries = list_progress_for_student(student_id)
    return entries[0] if entries else None


def update_progress(progress_id: int, changes: dict[str, Any]) -> ProgressRecord | None:
    """Apply a partial update.

    Returns:
        Updated record, or None if the entry doesn't exist
    """
    values = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}
    if "date" in values:
        values["date"] = _as_iso(values["date"])

    if values:
        assignments = ", ".join(f"{column} = ?" for column in values)
        with get_db() as conn:
            cursor = conn.execute(
                f"UPDATE progress SET {assignments} WHERE id = ?",
                (*values.values(), progress_id),
            )
        if cursor.rowcount == 0:
            return None
        logger.debug("progress.updated", progress_id=progress_id, fields=sorted(values))

    return get_progress(progress_id)


def delete_progress(progress_id: int) -> bool:
    """Delete progress entry by ID.

    Returns:
        True if deleted, False if not found
    """
    with get_db() as conn:
        cursor = conn.execute("DELETE FROM progress WHERE id = ?", (progress_id,))

    deleted = cursor.rowcount > 0
    if deleted:
        logger.debug("progress.deleted", progress_id=progress_id)

    return deleted


def count_progress(teacher_id: int | None = None) -> int:
    """Count progress entries, optionally only for one teacher's students."""
    with get_db() as conn:
        if teacher_id is None:
            row = conn.execute("SELECT COUNT(*) AS n FROM progress").fetchone()
        else:
            row = conn.execute(
                """
                SELECT COUNT(*) AS n FROM progress p
                JOIN students s ON s.id = p.student_id
                WHERE s.teacher_id = ?
                """,
                (teacher_id,),
            ).fetchone()

    return row["n"]


def recent_progress(
    limit: int = 10, teacher_id: int | None = None
) -> list[tuple[ProgressRecord, str]]:
    """Most recently recorded entries with the student's name."""
    query = """
        SELECT p.*, s.name AS student_name FROM progress p
        JOIN students s ON s.id = p.student_id
    """
    params: list[Any] = []
    if teacher_id is not None:
        query += " WHERE s.teacher_id = ?"
        params.append(teacher_id)
    query += " ORDER BY p.created_at DESC, p.id DESC LIMIT ?"
    params.append(limit)

    with get_db() as conn:
        rows = conn.execute(query, params).fetchall()

    return [(_row_to_record(row), row["student_name"]) for row in rows]


def _as_iso(value: date | str | None) -> str | None:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _row_to_record(row) -> ProgressRecord:
    """Convert database row to ProgressRecord."""
    return ProgressRecord(
        id=row["id"],
        student_id=row["student_id"],
        date=row["date"],
        social_skills=row["social_skills"],
        pre_literacy=row["pre_literacy"],
        pre_numeracy=row["pre_numeracy"],
        motor_skills=row["motor_skills"],
        emotional_development=row["emotional_development"],
        comments=row["comments"],
        created_at=row["created_at"],
    )
