"""Fixtures for F1 tests - Domain, config and storage."""

import pytest

from preprimary.db.users_repository import create_user


@pytest.fixture
def teacher(db):
    """A teacher account (password hash is not checked in F1)."""
    return create_user(
        email="teacher@school.com",
        password_hash="x",
        name="Sita Sharma",
        assigned_classes=["LKG"],
    )


@pytest.fixture
def admin(db):
    return create_user(
        email="head@school.com",
        password_hash="x",
        name="Head Teacher",
        role="admin",
    )


@pytest.fixture
def ratings() -> dict[str, str]:
    """One rating per skill field."""
    return {
        "social_skills": "Good",
        "pre_literacy": "Good",
        "pre_numeracy": "Excellent",
        "motor_skills": "Good",
        "emotional_development": "Needs Improvement",
    }
