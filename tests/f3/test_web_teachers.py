"""Tests for teacher account endpoints (F3)."""

from preprimary.core.auth import verify_password
from preprimary.db.users_repository import get_user

LKG_TEACHER_ID = 3
UKG_TEACHER_ID = 4


class TestListTeachers:
    def test_admin_lists_seeded_teachers(self, client, admin_headers):
        response = client.get("/api/teachers", headers=admin_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 3
        names = [t["name"] for t in data["teachers"]]
        assert names == ["Anita Gurung", "Binay Shrestha", "Champa Devi"]
        assert all(t["role"] == "teacher" for t in data["teachers"])

    def test_student_count(self, client, admin_headers, other_student):
        data = client.get("/api/teachers", headers=admin_headers).json()
        counts = {t["id"]: t["student_count"] for t in data["teachers"]}
        assert counts[LKG_TEACHER_ID] == 1
        assert counts[UKG_TEACHER_ID] == 0

    def test_teacher_forbidden(self, client, teacher_headers):
        assert client.get("/api/teachers", headers=teacher_headers).status_code == 403


class TestCreateTeacher:
    def test_create(self, client, admin_headers):
        response = client.post(
            "/api/teachers",
            json={
                "name": "Deepa Rai",
                "email": "Deepa@School.com ",
                "password": "secret1",
                "assigned_classes": ["LKG", "UKG"],
            },
            headers=admin_headers,
        )
        assert response.status_code == 201
        data = response.json()
        assert data["email"] == "deepa@school.com"
        assert data["assigned_classes"] == ["LKG", "UKG"]
        assert data["student_count"] == 0
        assert "password" not in data and "password_hash" not in data

        stored = get_user(data["id"])
        assert verify_password("secret1", stored.password_hash)

    def test_duplicate_email(self, client, admin_headers):
        response = client.post(
            "/api/teachers",
            json={"name": "Copy", "email": "teacher1@school.com", "password": "secret1"},
            headers=admin_headers,
        )
        assert response.status_code == 409

    def test_validation(self, client, admin_headers):
        bad = [
            {"name": "D", "email": "d@school.com", "password": "secret1"},
            {"name": "Deepa", "email": "not-an-email", "password": "secret1"},
            {"name": "Deepa", "email": "d@school.com", "password": "123"},
            {"name": "Deepa", "email": "d@school.com", "password": "secret1", "assigned_classes": ["Grade 1"]},
        ]
        for body in bad:
            response = client.post("/api/teachers", json=body, headers=admin_headers)
            assert response.status_code == 422, body


class TestGetUpdateTeacher:
    def test_get(self, client, admin_headers):
        response = client.get(f"/api/teachers/{LKG_TEACHER_ID}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["name"] == "Binay Shrestha"

    def test_admin_is_not_a_teacher(self, client, admin_headers):
        assert client.get("/api/teachers/1", headers=admin_headers).status_code == 404

    def test_missing(self, client, admin_headers):
        assert client.get("/api/teachers/999", headers=admin_headers).status_code == 404

    def test_update_fields_and_password(self, client, admin_headers):
        response = client.put(
            f"/api/teachers/{UKG_TEACHER_ID}",
            json={"name": "Champa Devi Shah", "password": "newpass1", "assigned_classes": ["UKG", "LKG"]},
            headers=admin_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Champa Devi Shah"
        assert data["assigned_classes"] == ["UKG", "LKG"]
        assert data["email"] == "teacher3@school.com"
        assert verify_password("newpass1", get_user(UKG_TEACHER_ID).password_hash)

    def test_update_to_taken_email(self, client, admin_headers):
        response = client.put(
            f"/api/teachers/{UKG_TEACHER_ID}",
            json={"email": "teacher2@school.com"},
            headers=admin_headers,
        )
        assert response.status_code == 409

    def test_keeping_own_email_is_fine(self, client, admin_headers):
        response = client.put(
            f"/api/teachers/{UKG_TEACHER_ID}",
            json={"email": "teacher3@school.com"},
            headers=admin_headers,
        )
        assert response.status_code == 200


class TestDeleteTeacher:
    def test_delete_without_students(self, client, admin_headers):
        response = client.delete(f"/api/teachers/{UKG_TEACHER_ID}", headers=admin_headers)
        assert response.status_code == 204
        assert get_user(UKG_TEACHER_ID) is None

    def test_delete_with_students_conflicts(self, client, admin_headers, other_student):
        response = client.delete(f"/api/teachers/{LKG_TEACHER_ID}", headers=admin_headers)
        assert response.status_code == 409
        assert "1 assigned student" in response.json()["detail"]
        assert get_user(LKG_TEACHER_ID) is not None
