"""Tests for the global error handling and request plumbing."""

from fastapi import FastAPI
from fastapi.testclient import TestClient


class TestErrorResponses:
    """Error body shape and status mapping."""

    def test_not_found_body(self, client: TestClient) -> None:
        """Unknown ids return the standard error body."""
        response = client.get("/api/user/999")
        assert response.status_code == 404
        data = response.json()
        assert data["error"] is True
        assert data["message"] == "User not found"
        assert data["status_code"] == 404
        assert data["request_id"]

    def test_unknown_path_is_404(self, client: TestClient) -> None:
        """Paths without a route are 404, not 405."""
        response = client.get("/api/does-not-exist")
        assert response.status_code == 404

    def test_method_not_allowed(self, client: TestClient) -> None:
        """Unsupported methods on a known path return 405."""
        response = client.delete("/api/modules")
        assert response.status_code == 405

    def test_validation_error_is_400(self, client: TestClient) -> None:
        """Invalid bodies return 400 with field details."""
        response = client.post("/api/users", json={"username": "ana"})
        assert response.status_code == 400
        data = response.json()
        assert data["message"] == "Validation error"
        fields = {detail["field"] for detail in data["details"]}
        assert "body.email" in fields
        assert "body.name" in fields

    def test_path_parameter_validation_is_400(self, client: TestClient) -> None:
        """Non-integer ids are rejected as bad requests."""
        response = client.get("/api/user/abc")
        assert response.status_code == 400

    def test_unhandled_exception_is_generic_500(self, app: FastAPI) -> None:
        """Unexpected errors never leak internal details."""

        @app.get("/api/explode")
        async def explode() -> None:
            raise RuntimeError("connection string postgres://secret")

        with TestClient(app, raise_server_exceptions=False) as test_client:
            response = test_client.get("/api/explode")

        assert response.status_code == 500
        data = response.json()
        assert data["error"] is True
        assert "secret" not in data["message"]
        assert data["message"].startswith("An unexpected error occurred")


class TestRequestPlumbing:
    """Request id, CORS and OPTIONS handling."""

    def test_request_id_generated(self, client: TestClient) -> None:
        """Every response carries an X-Request-ID header."""
        response = client.get("/api/modules")
        assert response.headers["X-Request-ID"]

    def test_request_id_propagated(self, client: TestClient) -> None:
        """A caller-supplied request id is echoed back."""
        response = client.get("/api/modules", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"

    def test_bare_options_is_200(self, client: TestClient) -> None:
        """OPTIONS on any /api path answers 200 with cross-origin headers."""
        response = client.options("/api/admin/modules/42")
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert "DELETE" in response.headers["access-control-allow-methods"]
        assert "X-Request-ID" in response.headers["access-control-allow-headers"]

    def test_cors_preflight(self, client: TestClient) -> None:
        """Browser pre-flights get CORS headers."""
        response = client.options(
            "/api/admin/modules",
            headers={
                "Origin": "https://app.example.com",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Authorization, X-Request-ID",
            },
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert "POST" in response.headers["access-control-allow-methods"]
        allowed = response.headers["access-control-allow-headers"].lower()
        assert "authorization" in allowed
        assert "x-request-id" in allowed

    def test_request_id_exposed_cross_origin(self, client: TestClient) -> None:
        """Browser scripts may read the request id back."""
        response = client.get(
            "/api/modules", headers={"Origin": "https://app.example.com"}
        )
        assert response.status_code == 200
        exposed = response.headers["access-control-expose-headers"].lower()
        assert "x-request-id" in exposed
