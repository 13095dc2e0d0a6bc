"""Fixtures for F3 tests - Web API records.

Seeded ids: admin 1, teacher1 (Nursery) 2, teacher2 (LKG) 3, teacher3 (UKG) 4.
"""

import pytest


@pytest.fixture
def ratings() -> dict[str, str]:
    return {
        "social_skills": "Good",
        "pre_literacy": "Excellent",
        "pre_numeracy": "Good",
        "motor_skills": "Needs Improvement",
        "emotional_development": "Good",
    }


@pytest.fixture
def student_payload():
    """Factory for a valid student body."""

    def make(**overrides):
        payload = {
            "name": "Aarav Karki",
            "age": 3,
            "class_level": "Nursery",
            "learning_ability": "Average",
            "parent_contact": "9841000000",
        }
        payload.update(overrides)
        return payload

    return make


@pytest.fixture
def plan_payload():
    """Factory for a valid teaching plan body."""

    def make(**overrides):
        payload = {
            "type": "Weekly",
            "class_level": "Nursery",
            "title": "Colours week",
            "description": "Recognising and naming primary colours.",
            "activities": "Colour sorting, finger painting, colour hunt.",
            "goals": "Name red, blue and yellow without help.",
            "start_date": "2024-04-01",
            "end_date": "2024-04-05",
        }
        payload.update(overrides)
        return payload

    return make


@pytest.fixture
def own_student(client, teacher_headers, student_payload):
    """A Nursery student created by teacher1."""
    response = client.post("/api/students", json=student_payload(), headers=teacher_headers)
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def other_student(client, admin_headers, student_payload):
    """An LKG student belonging to teacher2."""
    response = client.post(
        "/api/students",
        json=student_payload(
            name="Bina Tamang",
            age=4,
            class_level="LKG",
            learning_ability="Talented",
            writing_speed="Speed Writing",
            teacher_id=3,
        ),
        headers=admin_headers,
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def own_plan(client, teacher_headers, plan_payload):
    response = client.post("/api/plans", json=plan_payload(), headers=teacher_headers)
    assert response.status_code == 201
    return response.json()
