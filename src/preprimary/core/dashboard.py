"""Dashboard figures: headline counts and a recent activity feed."""

from __future__ import annotations

from dataclasses import dataclass, field

from preprimary.core.access import scoped_teacher_id
from preprimary.core.domain import ClassLevel
from preprimary.db import plans_repository, progress_repository, students_repository
from preprimary.db.users_repository import UserRecord, count_users


@dataclass
class DashboardStats:
    """Headline counts, already restricted to what the user may see."""

    total_students: int
    class_count: dict[str, int] = field(default_factory=dict)
    teacher_count: int = 0
    plan_count: int = 0
    progress_count: int = 0


@dataclass
class ActivityItem:
    """One line of the activity feed."""

    kind: str  # student_added | progress_recorded | plan_created
    description: str
    timestamp: str
    entity_id: int


def get_stats(user: UserRecord) -> DashboardStats:
    """Counts for the dashboard cards."""
    teacher_id = scoped_teacher_id(user, None)

    per_class = students_repository.count_students_by_class(teacher_id)
    class_count = {level.value: per_class.get(level.value, 0) for level in ClassLevel}

    return DashboardStats(
        total_students=sum(class_count.values()),
        class_count=class_count,
        teacher_count=count_users("teacher") if user.is_admin else 0,
        plan_count=plans_repository.count_plans(teacher_id),
        progress_count=progress_repository.count_progress(teacher_id),
    )


def get_recent_activity(user: UserRecord, limit: int = 10) -> list[ActivityItem]:
    """Newest students, progress entries and plans merged into one feed."""
    teacher_id = scoped_teacher_id(user, None)
    items: list[ActivityItem] = []

    for student in students_repository.recent_students(limit, teacher_id):
        items.append(
            ActivityItem(
                kind="student_added",
                description=f"{student.name} was added to {student.class_level}",
                timestamp=student.created_at,
                entity_id=student.id,
            )
        )

    for entry, student_name in progress_repository.recent_progress(limit, teacher_id):
        items.append(
            ActivityItem(
                kind="progress_recorded",
                description=f"Progress recorded for {student_name} ({entry.date})",
                timestamp=entry.created_at,
                entity_id=entry.id,
            )
        )

    for plan in plans_repository.recent_plans(limit, teacher_id):
        items.append(
            ActivityItem(
                kind="plan_created",
                description=f"{plan.type} plan '{plan.title}' created for {plan.class_level}",
                timestamp=plan.created_at,
                entity_id=plan.id,
            )
        )

    # created_at has one-second resolution; newer ids win ties
    items.sort(key=lambda item: (item.timestamp, item.entity_id), reverse=True)
    return items[:limit]
