"""HTTP tests for enrollment endpoints."""

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def user_id(client: TestClient) -> int:
    response = client.post(
        "/api/users",
        json={"username": "ana", "email": "ana@example.com", "name": "Ana"},
    )
    return response.json()["id"]


@pytest.fixture
def enrollment(client: TestClient, user_id: int) -> dict:
    response = client.post(
        "/api/enrollments", json={"userId": user_id, "enrolled": True}
    )
    assert response.status_code == 201
    return response.json()


class TestCreateEnrollment:
    """Tests for POST /api/enrollments."""

    def test_create(self, enrollment: dict, user_id: int) -> None:
        assert enrollment["userId"] == user_id
        assert enrollment["progress"] == 0
        assert enrollment["completedAt"] is None

    def test_unknown_user(self, client: TestClient) -> None:
        response = client.post("/api/enrollments", json={"userId": 999})

        assert response.status_code == 404
        assert response.json()["message"] == "User not found"

    def test_progress_out_of_range(self, client: TestClient, user_id: int) -> None:
        response = client.post(
            "/api/enrollments", json={"userId": user_id, "progress": 150}
        )
        assert response.status_code == 400


class TestUpdateProgress:
    """Tests for PATCH /api/enrollments/{id}."""

    def test_complete_sets_completed_at(
        self, client: TestClient, enrollment: dict
    ) -> None:
        response = client.patch(
            f"/api/enrollments/{enrollment['id']}", json={"progress": 100}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["progress"] == 100
        assert data["completedAt"] is not None

    def test_lower_progress_clears_completed_at(
        self, client: TestClient, enrollment: dict
    ) -> None:
        client.patch(f"/api/enrollments/{enrollment['id']}", json={"progress": 100})

        response = client.patch(
            f"/api/enrollments/{enrollment['id']}", json={"progress": 40}
        )

        assert response.status_code == 200
        assert response.json()["completedAt"] is None

    @pytest.mark.parametrize("progress", [-1, 101])
    def test_out_of_range(
        self, client: TestClient, enrollment: dict, progress: int
    ) -> None:
        response = client.patch(
            f"/api/enrollments/{enrollment['id']}", json={"progress": progress}
        )
        assert response.status_code == 400

    def test_missing_progress(self, client: TestClient, enrollment: dict) -> None:
        response = client.patch(f"/api/enrollments/{enrollment['id']}", json={})
        assert response.status_code == 400

    def test_unknown(self, client: TestClient) -> None:
        response = client.patch("/api/enrollments/999", json={"progress": 10})

        assert response.status_code == 404
        assert response.json()["message"] == "Enrollment not found"


class TestListEnrollments:
    """Tests for enrollment listings."""

    def test_user_enrollments(
        self, client: TestClient, enrollment: dict, user_id: int
    ) -> None:
        response = client.get(f"/api/user/{user_id}/enrollments")

        assert response.status_code == 200
        assert [e["id"] for e in response.json()] == [enrollment["id"]]

    def test_unknown_user(self, client: TestClient) -> None:
        assert client.get("/api/user/999/enrollments").status_code == 404

    def test_admin_listing_requires_admin(self, client: TestClient) -> None:
        assert client.get("/api/admin/enrollments").status_code == 401

    def test_admin_listing(self, admin_client: TestClient) -> None:
        user = admin_client.post(
            "/api/users",
            json={"username": "bia", "email": "bia@example.com", "name": "Bia"},
        ).json()
        admin_client.post("/api/enrollments", json={"userId": user["id"]})

        response = admin_client.get("/api/admin/enrollments")

        assert response.status_code == 200
        assert len(response.json()) == 1
