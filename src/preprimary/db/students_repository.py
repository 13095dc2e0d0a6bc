"""Repository functions for students table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog

from preprimary.db.database import get_db

logger = structlog.get_logger(__name__)

UPDATABLE_FIELDS = (
    "name",
    "age",
    "class_level",
    "parent_contact",
    "learning_ability",
    "writing_speed",
    "notes",
    "photo_url",
    "photo_public_id",
    "teacher_id",
)


@dataclass
class StudentRecord:
    """Student record from database."""

    id: int
    name: str
    age: int
    class_level: str
    learning_ability: str
    teacher_id: int
    parent_contact: str | None = None
    writing_speed: str | None = None
    notes: str | None = None
    photo_url: str | None = None
    photo_public_id: str | None = None
    created_at: str = ""
    updated_at: str = ""


def create_student(
    name: str,
    age: int,
    class_level: str,
    learning_ability: str,
    teacher_id: int,
    parent_contact: str | None = None,
    writing_speed: str | None = None,
    notes: str | None = None,
    photo_url: str | None = None,
) -> StudentRecord:
    """Insert a new student.

    Raises:
        sqlite3.IntegrityError: If teacher_id doesn't reference a user
    """
    with get_db() as conn:
        cursor = conn.execute(
            """
            INSERT INTO students (
                name, age, class_level, parent_contact, learning_ability,
                writing_speed, notes, photo_url, teacher_id
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                name,
                age,
                class_level,
                parent_contact,
                learning_ability,
                writing_speed,
                notes,
                photo_url,
                teacher_id,
            ),
        )
        student_id = cursor.lastrowid

    logger.debug("students.inserted", student_id=student_id, teacher_id=teacher_id)

    student = get_student(student_id)
    assert student is not None
    return student


def get_student(student_id: int) -> StudentRecord | None:
    """Get student by ID."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM students WHERE id = ?", (student_id,)
        ).fetchone()

    if row is None:
        return None

    return _row_to_record(row)


def list_students(
    class_level: str | None = None,
    teacher_id: int | None = None,
    learning_ability: str | None = None,
    search: str | None = None,
) -> list[StudentRecord]:
    """List students, narrowed by any filters given.

    Args:
        class_level: Only this class
        teacher_id: Only students assigned to this teacher
        learning_ability: Only this learning ability
        search: Case-insensitive substring of the student's name

    Returns:
        Matching students ordered by class then name
    """
    clauses: list[str] = []
    params: list[Any] = []

    if class_level:
        clauses.append("class_level = ?")
        params.append(class_level)
    if teacher_id is not None:
        clauses.append("teacher_id = ?")
        params.append(teacher_id)
    if learning_ability:
        clauses.append("learning_ability = ?")
        params.append(learning_ability)
    if search:
        clauses.append("name LIKE ? ESCAPE '\\'")
        params.append(f"%{_escape_like(search.strip())}%")

    query = "SELECT * FROM students"
    if clauses:
        query += " WHERE " + " AND ".join(clauses)
    query += " ORDER BY class_level, name COLLATE NOCASE"

    with get_db() as conn:
        rows = conn.execute(query, params).fetchall()

    return [_row_to_record(row) for row in rows]


def update_student(student_id: int, changes: dict[str, Any]) -> StudentRecord | None:
    """Apply a partial update.

    Returns:
        Updated record, or None if the student doesn't exist
    """
    values = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}

    if values:
        assignments = ", ".join(f"{column} = ?" for column in values)
        with get_db() as conn:
            cursor = conn.execute(
                f"UPDATE students SET {assignments}, updated_at = datetime('now') WHERE id = ?",
                (*values.values(), student_id),
            )
        if cursor.rowcount == 0:
            return None
        logger.debug("students.updated", student_id=student_id, fields=sorted(values))

    return get_student(student_id)


def delete_student(student_id: int) -> bool:
    """Delete student by ID. Progress entries are removed with it.

    Returns:
        True if deleted, False if not found
    """
    with get_db() as conn:
        cursor = conn.execute("DELETE FROM students WHERE id = ?", (student_id,))

    deleted = cursor.rowcount > 0
    if deleted:
        logger.debug("students.deleted", student_id=student_id)

    return deleted


def assign_student_to_teacher(student_id: int, teacher_id: int) -> bool:
    """Move a student to another teacher.

    Returns:
        False if the student is missing or teacher_id is not a teacher
    """
    with get_db() as conn:
        teacher = conn.execute(
            "SELECT id FROM users WHERE id = ? AND role = 'teacher'", (teacher_id,)
        ).fetchone()
        if teacher is None:
            return False

        cursor = conn.execute(
            "UPDATE students SET teacher_id = ?, updated_at = datetime('now') WHERE id = ?",
            (teacher_id, student_id),
        )

    assigned = cursor.rowcount > 0
    if assigned:
        logger.info("students.assigned", student_id=student_id, teacher_id=teacher_id)

    return assigned


def count_students_by_class(teacher_id: int | None = None) -> dict[str, int]:
    """Count students per class, optionally for one teacher."""
    query = "SELECT class_level, COUNT(*) AS n FROM students"
    params: tuple[Any, ...] = ()
    if teacher_id is not None:
        query += " WHERE teacher_id = ?"
        params = (teacher_id,)
    query += " GROUP BY class_level"

    with get_db() as conn:
        rows = conn.execute(query, params).fetchall()

    return {row["class_level"]: row["n"] for row in rows}


def count_students_for_teacher(teacher_id: int) -> int:
    """Number of students assigned to a teacher."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT COUNT(*) AS n FROM students WHERE teacher_id = ?", (teacher_id,)
        ).fetchone()

    return row["n"]


def recent_students(limit: int = 10, teacher_id: int | None = None) -> list[StudentRecord]:
    """Most recently added students."""
    query = "SELECT * FROM students"
    params: list[Any] = []
    if teacher_id is not None:
        query += " WHERE teacher_id = ?"
        params.append(teacher_id)
    query += " ORDER BY created_at DESC, id DESC LIMIT ?"
    params.append(limit)

    with get_db() as conn:
        rows = conn.execute(query, params).fetchall()

    return [_row_to_record(row) for row in rows]


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _row_to_record(row) -> StudentRecord:
    """Convert database row to StudentRecord."""
    return StudentRecord(
        id=row["id"],
        name=row["name"],
        age=row["age"],
        class_level=row["class_level"],
        learning_ability=row["learning_ability"],
        teacher_id=row["teacher_id"],
        parent_contact=row["parent_contact"],
        writing_speed=row["writing_speed"],
        notes=row["notes"],
        photo_url=row["photo_url"],
        photo_public_id=row["photo_public_id"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )
