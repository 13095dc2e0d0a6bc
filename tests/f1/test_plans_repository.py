"""Tests for teaching plans repository (F1)."""

import pytest

from preprimary.db.plans_repository import (
    count_plans,
    create_plan,
    delete_plan,
    get_plan,
    list_plans,
    recent_plans,
    update_plan,
)
from preprimary.db.users_repository import delete_user


def _plan(author_id, plan_type="Weekly", class_level="LKG", start="2024-04-01", end="2024-04-07", title="Colours week"):
    return create_plan(
        plan_type=plan_type,
        class_level=class_level,
        title=title,
        description="Learning primary colours through play",
        activities="Colour sorting, painting, colour hunt",
        goals="Name red, blue and yellow",
        start_date=start,
        end_date=end,
        created_by=author_id,
    )


@pytest.fixture
def plans(teacher, admin):
    return [
        _plan(teacher.id),
        _plan(teacher.id, "Monthly", "LKG", "2024-03-01", "2024-03-31", "March themes"),
        _plan(admin.id, "Annual", "UKG", "2024-01-01", "2024-12-31", "UKG year plan"),
    ]


class TestCreatePlan:
    def test_create_and_get(self, teacher):
        plan = _plan(teacher.id)
        fetched = get_plan(plan.id)
        assert fetched == plan
        assert fetched.type == "Weekly"
        assert fetched.start_date == "2024-04-01"
        assert fetched.created_by == teacher.id

    def test_get_missing(self, db):
        assert get_plan(1) is None


class TestListPlans:
    def test_latest_start_first(self, plans):
        assert [p.title for p in list_plans()] == ["Colours week", "March themes", "UKG year plan"]

    def test_filter_by_type(self, plans):
        assert [p.title for p in list_plans(plan_type="Monthly")] == ["March themes"]

    def test_filter_by_class(self, plans):
        assert {p.title for p in list_plans(class_level="LKG")} == {"Colours week", "March themes"}

    def test_filter_by_author(self, plans, admin):
        assert [p.title for p in list_plans(teacher_id=admin.id)] == ["UKG year plan"]

    def test_window_keeps_overlapping_plans(self, plans):
        titles = {p.title for p in list_plans(start_date="2024-03-15", end_date="2024-03-20")}
        assert titles == {"March themes", "UKG year plan"}

    def test_window_start_only(self, plans):
        titles = {p.title for p in list_plans(start_date="2024-04-05")}
        assert titles == {"Colours week", "UKG year plan"}


class TestUpdateDeletePlan:
    def test_update(self, plans):
        updated = update_plan(plans[0].id, {"title": "Colours and shapes", "end_date": "2024-04-10"})
        assert updated.title == "Colours and shapes"
        assert updated.end_date == "2024-04-10"
        assert updated.start_date == "2024-04-01"

    def test_update_missing(self, db):
        assert update_plan(5, {"title": "Nope"}) is None

    def test_delete(self, plans):
        assert delete_plan(plans[0].id) is True
        assert get_plan(plans[0].id) is None
        assert delete_plan(plans[0].id) is False

    def test_deleting_author_removes_plans(self, plans, teacher):
        delete_user(teacher.id)
        assert [p.title for p in list_plans()] == ["UKG year plan"]


class TestCountsAndRecent:
    def test_counts(self, plans, teacher):
        assert count_plans() == 3
        assert count_plans(teacher.id) == 2

    def test_recent(self, plans):
        assert [p.title for p in recent_plans(1)] == ["UKG year plan"]
