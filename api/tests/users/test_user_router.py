"""HTTP tests for user endpoints."""

from fastapi.testclient import TestClient


USER_BODY = {
    "username": "ana",
    "email": "Ana@Example.com",
    "name": "Ana Souza",
    "password": "secret123",
}


class TestCreateUser:
    """Tests for POST /api/users."""

    def test_create(self, client: TestClient) -> None:
        """The password is never stored or returned."""
        response = client.post("/api/users", json=USER_BODY)

        assert response.status_code == 201
        data = response.json()
        assert data["username"] == "ana"
        assert data["email"] == "ana@example.com"
        assert "password" not in data
        assert "createdAt" in data

    def test_duplicate_username(self, client: TestClient) -> None:
        client.post("/api/users", json=USER_BODY)

        response = client.post(
            "/api/users", json={**USER_BODY, "email": "other@example.com"}
        )

        assert response.status_code == 409
        assert response.json()["message"] == "Username already taken"

    def test_duplicate_email(self, client: TestClient) -> None:
        """Emails are compared case-insensitively."""
        client.post("/api/users", json=USER_BODY)

        response = client.post(
            "/api/users",
            json={**USER_BODY, "username": "ana2", "email": "ANA@example.com"},
        )

        assert response.status_code == 409
        assert response.json()["message"] == "Email already registered"

    def test_invalid_email(self, client: TestClient) -> None:
        response = client.post("/api/users", json={**USER_BODY, "email": "nope"})
        assert response.status_code == 400

    def test_blank_name(self, client: TestClient) -> None:
        response = client.post("/api/users", json={**USER_BODY, "name": "   "})
        assert response.status_code == 400


class TestGetUser:
    """Tests for GET /api/user/{id}."""

    def test_get(self, client: TestClient) -> None:
        created = client.post("/api/users", json=USER_BODY).json()

        response = client.get(f"/api/user/{created['id']}")

        assert response.status_code == 200
        assert response.json() == created

    def test_unknown(self, client: TestClient) -> None:
        response = client.get("/api/user/999")

        assert response.status_code == 404
        assert response.json()["message"] == "User not found"


class TestAdminUsers:
    """Tests for GET /api/admin/users."""

    def test_list(self, admin_client: TestClient) -> None:
        admin_client.post("/api/users", json=USER_BODY)
        admin_client.post(
            "/api/users",
            json={**USER_BODY, "username": "bruno", "email": "bruno@example.com"},
        )

        response = admin_client.get("/api/admin/users")

        assert response.status_code == 200
        usernames = {user["username"] for user in response.json()}
        assert usernames == {"ana", "bruno"}
        assert all("password" not in user for user in response.json())

    def test_requires_admin(self, client: TestClient) -> None:
        assert client.get("/api/admin/users").status_code == 401
