"""Role-based access rules.

Admins see and change everything. Teachers only see their own students,
the progress of those students, and the teaching plans they authored.
"""

from __future__ import annotations

from preprimary.db.plans_repository import PlanRecord
from preprimary.db.students_repository import StudentRecord
from preprimary.db.users_repository import UserRecord


class AccessDenied(Exception):
    """User lacks the role or ownership required."""

    pass


def require_role(user: UserRecord, *roles: str) -> None:
    """Raise AccessDenied unless user has one of roles."""
    if user.role not in roles:
        raise AccessDenied("Unauthorized access")


def can_access_student(user: UserRecord, student: StudentRecord) -> bool:
    """Admins, or the teacher the student is assigned to."""
    return user.is_admin or student.teacher_id == user.id


def can_access_plan(user: UserRecord, plan: PlanRecord) -> bool:
    """Admins, or the plan's author."""
    return user.is_admin or plan.created_by == user.id


def scoped_teacher_id(user: UserRecord, requested: int | None) -> int | None:
    """Teacher filter to apply to a list query.

    Teachers are always restricted to themselves, whatever they asked for;
    an admin's requested filter (possibly None = everyone) is kept.
    """
    if user.is_admin:
        return requested
    return user.id
