"""Fixtures for F4 tests - Reports."""

from datetime import date

import pytest

from preprimary.config.app_config import SchoolConfig
from preprimary.db.plans_repository import create_plan
from preprimary.db.progress_repository import create_progress
from preprimary.db.students_repository import create_student
from preprimary.db.users_repository import create_user


def _ratings(value: str) -> dict[str, str]:
    return {
        "social_skills": value,
        "pre_literacy": value,
        "pre_numeracy": value,
        "motor_skills": value,
        "emotional_development": value,
    }


@pytest.fixture
def school() -> SchoolConfig:
    return SchoolConfig(name="Test School", address="Kathmandu", subtitle="Records")


@pytest.fixture
def records(db):
    """Two teachers, three students with progress, and three plans."""
    admin = create_user("admin@test.com", "x", "Admin User", role="admin")
    sita = create_user("sita@test.com", "x", "Sita Sharma", assigned_classes=["LKG"])
    hari = create_user("hari@test.com", "x", "Hari Thapa", assigned_classes=["UKG"])

    ram = create_student("Ram", 4, "LKG", "Average", sita.id, writing_speed="Slow Writing")
    gita = create_student("Gita", 4, "LKG", "Talented", sita.id)
    maya = create_student("Maya", 5, "UKG", "Slow Learner", hari.id, parent_contact="9800000000")

    create_progress(ram.id, _ratings("Good"), entry_date=date(2024, 1, 15))
    create_progress(ram.id, _ratings("Excellent"), entry_date=date(2024, 3, 15), comments="Big jump")
    create_progress(maya.id, _ratings("Needs Improvement"), entry_date=date(2024, 2, 1))

    plan_text = dict(
        description="A description long enough.",
        activities="Songs, stories and games.",
        goals="Count to ten confidently.",
    )
    weekly = create_plan(
        "Weekly", "LKG", "Numbers week", start_date=date(2024, 4, 1),
        end_date=date(2024, 4, 5), created_by=sita.id, **plan_text,
    )
    monthly = create_plan(
        "Monthly", "LKG", "March themes", start_date=date(2024, 3, 1),
        end_date=date(2024, 3, 31), created_by=sita.id, **plan_text,
    )
    annual = create_plan(
        "Annual", "UKG", "UKG year", start_date=date(2024, 1, 1),
        end_date=date(2024, 12, 31), created_by=hari.id, **plan_text,
    )

    return {
        "admin": admin,
        "sita": sita,
        "hari": hari,
        "ram": ram,
        "gita": gita,
        "maya": maya,
        "weekly": weekly,
        "monthly": monthly,
        "annual": annual,
    }
