"""Repository functions for teaching_plans table."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any

import structlog

from preprimary.db.database import get_db

logger = structlog.get_logger(__name__)

UPDATABLE_FIELDS = (
    "type",
    "class_level",
    "title",
    "description",
    "activities",
    "goals",
    "start_date",
    "end_date",
)


@dataclass
class PlanRecord:
    """Teaching plan record from database."""

    id: int
    type: str
    class_level: str
    title: str
    description: str
    activities: str
    goals: str
    start_date: str
    end_date: str
    created_by: int
    created_at: str = ""


def create_plan(
    plan_type: str,
    class_level: str,
    title: str,
    description: str,
    activities: str,
    goals: str,
    start_date: date | str,
    end_date: date | str,
    created_by: int,
) -> PlanRecord:
    """Insert a teaching plan.

    Raises:
        sqlite3.IntegrityError: If created_by doesn't reference a user
    """
    with get_db() as conn:
        cursor = conn.execute(
            """
            INSERT INTO teaching_plans (
                type, class_level, title, description, activities, goals,
                start_date, end_date, created_by
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                plan_type,
                class_level,
                title,
                description,
                activities,
                goals,
                _as_iso(start_date),
                _as_iso(end_date),
                created_by,
            ),
        )
        plan_id = cursor.lastrowid

    logger.debug("plans.inserted", plan_id=plan_id, created_by=created_by)

    plan = get_plan(plan_id)
    assert plan is not None
    return plan


def get_plan(plan_id: int) -> PlanRecord | None:
    """Get teaching plan by ID."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM teaching_plans WHERE id = ?", (plan_id,)
        ).fetchone()

    if row is None:
        return None

    return _row_to_record(row)


def list_plans(
    plan_type: str | None = None,
    class_level: str | None = None,
    teacher_id: int | None = None,
    start_date: date | str | None = None,
    end_date: date | str | None = None,
) -> list[PlanRecord]:
    """List teaching plans, narrowed by any filters given.

    A date window keeps plans whose period overlaps it: a plan running
    from March to May is kept for a window of April.

    Returns:
        Matching plans, latest start date first
    """
    clauses: list[str] = []
    params: list[Any] = []

    if plan_type:
        clauses.append("type = ?")
        params.append(plan_type)
    if class_level:
        clauses.append("class_level = ?")
        params.append(class_level)
    if teacher_id is not None:
        clauses.append("created_by = ?")
        params.append(teacher_id)
    if start_date:
        clauses.append("end_date >= ?")
        params.append(_as_iso(start_date))
    if end_date:
        clauses.append("start_date <= ?")
        params.append(_as_iso(end_date))

    query = "SELECT * FROM teaching_plans"
    if clauses:
        query += " WHERE " + " AND ".join(clauses)
    query += " ORDER BY start_date DESC, id DESC"

    with get_db() as conn:
        rows = conn.execute(query, params).fetchall()

    return [_row_to_record(row) for row in rows]


def update_plan(plan_id: int, changes: dict[str, Any]) -> PlanRecord | None:
    """Apply a partial update.

    Returns:
        Updated record, or None if the plan doesn't exist
    """
    values = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}
    for key in ("start_date", "end_date"):
        if key in values:
            values[key] = _as_iso(values[key])

    if values:
        assignments = ", ".join(f"{column} = ?" for column in values)
        with get_db() as conn:
            cursor = conn.execute(
                f"UPDATE teaching_plans SET {assignments} WHERE id = ?",
                (*values.values(), plan_id),
            )
        if cursor.rowcount == 0:
            return None
        logger.debug("plans.updated", plan_id=plan_id, fields=sorted(values))

    return get_plan(plan_id)


def delete_plan(plan_id: int) -> bool:
    """Delete teaching plan by ID.

    Returns:
        True if deleted, False if not found
    """
    with get_db() as conn:
        cursor = conn.execute("DELETE FROM teaching_plans WHERE id = ?", (plan_id,))

    deleted = cursor.rowcount > 0
    if deleted:
        logger.debug("plans.deleted", plan_id=plan_id)

    return deleted


def count_plans(teacher_id: int | None = None) -> int:
    """Count plans, optionally for one author."""
    with get_db() as conn:
        if teacher_id is None:
            row = conn.execute("SELECT COUNT(*) AS n FROM teaching_plans").fetchone()
        else:
            row = conn.execute(
                "SELECT COUNT(*) AS n FROM teaching_plans WHERE created_by = ?",
                (teacher_id,),
            ).fetchone()

    return row["n"]


def recent_plans(limit: int = 10, teacher_id: int | None = None) -> list[PlanRecord]:
    """Most recently created plans."""
    query = "SELECT * FROM teaching_plans"
    params: list[Any] = []
    if teacher_id is not None:
        query += " WHERE created_by = ?"
        params.append(teacher_id)
    query += " ORDER BY created_at DESC, id DESC LIMIT ?"
    params.append(limit)

    with get_db() as conn:
        rows = conn.execute(query, params).fetchall()

    return [_row_to_record(row) for row in rows]


def _as_iso(value: date | str | None) -> str | None:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _row_to_record(row) -> PlanRecord:
    """Convert database row to PlanRecord."""
    return PlanRecord(
        id=row["id"],
        type=row["type"],
        class_level=row["class_level"],
        title=row["title"],
        description=row["description"],
        activities=row["activities"],
        goals=row["goals"],
        start_date=row["start_date"],
        end_date=row["end_date"],
        created_by=row["created_by"],
        created_at=row["created_at"],
    )
