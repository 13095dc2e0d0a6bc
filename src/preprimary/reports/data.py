"""Collect the rows that reports are built from.

Both collectors apply the same access scoping as the list endpoints, so a
teacher's report only ever contains that teacher's students or plans.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from preprimary.core.access import scoped_teacher_id
from preprimary.db import plans_repository, progress_repository, students_repository
from preprimary.db.plans_repository import PlanRecord
from preprimary.db.progress_repository import ProgressRecord
from preprimary.db.students_repository import StudentRecord
from preprimary.db.users_repository import UserRecord, get_teacher_names

UNKNOWN_TEACHER = "Unknown"


@dataclass
class StudentReportRow:
    """A student with teacher name and progress entries (newest first)."""

    student: StudentRecord
    teacher_name: str
    entries: list[ProgressRecord] = field(default_factory=list)

    @property
    def latest(self) -> ProgressRecord | None:
        return self.entries[0] if self.entries else None


@dataclass
class PlanReportRow:
    """A teaching plan with its author's name."""

    plan: PlanRecord
    teacher_name: str


@dataclass
class ReportOptions:
    """Filters and presentation switches shared by PDF and Excel output."""

    class_level: str | None = None
    plan_type: str | None = None
    teacher_id: int | None = None
    start_date: date | None = None
    end_date: date | None = None
    include_photos: bool = False


def collect_student_report(user: UserRecord, options: ReportOptions) -> list[StudentReportRow]:
    """Students visible to user, each with progress inside the date window."""
    teacher_id = scoped_teacher_id(user, options.teacher_id)
    students = students_repository.list_students(
        class_level=options.class_level, teacher_id=teacher_id
    )
    names = get_teacher_names()

    return [
        StudentReportRow(
            student=student,
            teacher_name=names.get(student.teacher_id, UNKNOWN_TEACHER),
            entries=progress_repository.list_progress_for_student(
                student.id, options.start_date, options.end_date
            ),
        )
        for student in students
    ]


def collect_plan_report(user: UserRecord, options: ReportOptions) -> list[PlanReportRow]:
    """Plans visible to user, narrowed by type, class and date window."""
    teacher_id = scoped_teacher_id(user, options.teacher_id)
    plans = plans_repository.list_plans(
        plan_type=options.plan_type,
        class_level=options.class_level,
        teacher_id=teacher_id,
        start_date=options.start_date,
        end_date=options.end_date,
    )
    names = get_teacher_names()

    return [
        PlanReportRow(plan=plan, teacher_name=names.get(plan.created_by, UNKNOWN_TEACHER))
        for plan in plans
    ]


def report_filename(
    kind: str,
    fmt: str,
    class_level: str | None = None,
    plan_type: str | None = None,
    today: date | None = None,
) -> str:
    """Download name, e.g. ``teaching-plans-Weekly-LKG-2024-05-01.xlsx``.

    Args:
        kind: "students" or "plans"
        fmt: "pdf" or "excel"
    """
    today = today or date.today()
    base = "student-progress" if kind == "students" else "teaching-plans"
    parts = [base]
    if kind == "plans" and plan_type:
        parts.append(plan_type)
    if class_level:
        parts.append(class_level)
    parts.append(today.isoformat())
    extension = "pdf" if fmt == "pdf" else "xlsx"
    return f"{'-'.join(parts)}.{extension}"
