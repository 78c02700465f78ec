"""Tests for Firebase token verification and the admin guard."""

import time
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from firebase_admin import auth as firebase_auth

from src.auth.dependencies import get_token_from_header, handle_auth_error
from src.auth.schemas import AuthenticatedUser
from src.auth.service import (
    AuthNotConfiguredError,
    AuthUnavailableError,
    FirebaseTokenVerifier,
    InvalidTokenError,
    NotAdminError,
)
from src.config.settings import Settings


@pytest.fixture
def firebase_settings(settings: Settings) -> Settings:
    settings.firebase_enabled = True
    settings.firebase_credentials_path = "/secrets/firebase.json"
    settings.admin_emails = ["Boss@Example.com"]
    return settings


@pytest.fixture
def verifier(firebase_settings: Settings) -> FirebaseTokenVerifier:
    """Verifier with the Firebase app initialization stubbed out."""
    token_verifier = FirebaseTokenVerifier(firebase_settings)
    token_verifier._app = MagicMock()
    return token_verifier


def claims(**overrides) -> dict:
    data = {
        "uid": "user-1",
        "sub": "user-1",
        "email": "someone@example.com",
        "email_verified": True,
    }
    data.update(overrides)
    return data


class TestAuthenticatedUser:
    """Tests for AuthenticatedUser.from_claims."""

    def test_from_claims(self) -> None:
        user = AuthenticatedUser.from_claims(claims(admin=True))

        assert user.uid == "user-1"
        assert user.email == "someone@example.com"
        assert user.email_verified is True
        assert user.claims["admin"] is True

    def test_falls_back_to_sub(self) -> None:
        user = AuthenticatedUser.from_claims({"sub": "abc"})
        assert user.uid == "abc"


class TestFirebaseTokenVerifier:
    """Tests for FirebaseTokenVerifier."""

    @pytest.mark.asyncio
    async def test_not_configured(self, settings: Settings) -> None:
        token_verifier = FirebaseTokenVerifier(settings)

        with pytest.raises(AuthNotConfiguredError):
            await token_verifier.verify("token")

    @pytest.mark.asyncio
    async def test_missing_credentials_file(
        self, firebase_settings: Settings
    ) -> None:
        token_verifier = FirebaseTokenVerifier(firebase_settings)

        with pytest.raises(AuthNotConfiguredError):
            await token_verifier.verify("token")

    def test_concurrent_first_use_initializes_once(
        self, firebase_settings: Settings
    ) -> None:
        """Parallel first requests share one Firebase app."""
        token_verifier = FirebaseTokenVerifier(firebase_settings)
        firebase_app = MagicMock()

        def slow_init() -> MagicMock:
            time.sleep(0.05)
            return firebase_app

        with (
            patch.object(
                token_verifier, "_initialize_app", side_effect=slow_init
            ) as init,
            ThreadPoolExecutor(max_workers=4) as pool,
        ):
            apps = list(pool.map(lambda _: token_verifier._get_app(), range(4)))

        assert init.call_count == 1
        assert all(app is firebase_app for app in apps)

    @pytest.mark.asyncio
    async def test_admin_claim(self, verifier: FirebaseTokenVerifier) -> None:
        with patch.object(
            firebase_auth, "verify_id_token", return_value=claims(admin=True)
        ) as verify:
            user = await verifier.authorize_admin("good-token")

        assert user.uid == "user-1"
        verify.assert_called_once()
        assert verify.call_args.kwargs["check_revoked"] is True

    @pytest.mark.asyncio
    async def test_admin_email_case_insensitive(
        self, verifier: FirebaseTokenVerifier
    ) -> None:
        with patch.object(
            firebase_auth,
            "verify_id_token",
            return_value=claims(email="boss@example.com"),
        ):
            user = await verifier.authorize_admin("good-token")

        assert user.email == "boss@example.com"

    @pytest.mark.asyncio
    async def test_not_admin(self, verifier: FirebaseTokenVerifier) -> None:
        with (
            patch.object(firebase_auth, "verify_id_token", return_value=claims()),
            pytest.raises(NotAdminError),
        ):
            await verifier.authorize_admin("good-token")

    @pytest.mark.asyncio
    async def test_invalid_token(self, verifier: FirebaseTokenVerifier) -> None:
        error = firebase_auth.InvalidIdTokenError("bad token")
        with (
            patch.object(firebase_auth, "verify_id_token", side_effect=error),
            pytest.raises(InvalidTokenError),
        ):
            await verifier.verify("bad-token")

    @pytest.mark.asyncio
    async def test_malformed_token(self, verifier: FirebaseTokenVerifier) -> None:
        with (
            patch.object(
                firebase_auth, "verify_id_token", side_effect=ValueError("empty")
            ),
            pytest.raises(InvalidTokenError),
        ):
            await verifier.verify("")

    @pytest.mark.asyncio
    async def test_certificate_fetch_failure(
        self, verifier: FirebaseTokenVerifier
    ) -> None:
        error = firebase_auth.CertificateFetchError("unreachable", cause=None)
        with (
            patch.object(firebase_auth, "verify_id_token", side_effect=error),
            pytest.raises(AuthUnavailableError),
        ):
            await verifier.verify("token")


class TestDependencies:
    """Tests for header parsing and error mapping."""

    @pytest.mark.parametrize(
        ("header", "expected"),
        [
            ("Bearer abc", "abc"),
            ("bearer abc", "abc"),
            ("Basic abc", None),
            ("Bearer", None),
            ("Bearer a b", None),
        ],
    )
    def test_get_token_from_header(self, header: str, expected: str | None) -> None:
        request = MagicMock()
        request.headers = {"Authorization": header}
        assert get_token_from_header(request) == expected

    @pytest.mark.parametrize(
        ("error", "status_code"),
        [
            (AuthNotConfiguredError(), 503),
            (AuthUnavailableError(), 503),
            (InvalidTokenError(), 401),
            (NotAdminError(), 403),
        ],
    )
    def test_handle_auth_error(self, error, status_code: int) -> None:
        exc = handle_auth_error(error)
        assert exc.status_code == status_code
        if status_code == 401:
            assert exc.headers == {"WWW-Authenticate": "Bearer"}


class TestAdminGuard:
    """require_admin wired into the app."""

    def test_valid_admin_token(self, client: TestClient) -> None:
        admin = AuthenticatedUser.from_claims(claims(admin=True))
        client.app.state.token_verifier.authorize_admin = AsyncMock(
            return_value=admin
        )

        response = client.get(
            "/api/admin/users", headers={"Authorization": "Bearer good"}
        )

        assert response.status_code == 200

    def test_non_admin_token(self, client: TestClient) -> None:
        client.app.state.token_verifier.authorize_admin = AsyncMock(
            side_effect=NotAdminError()
        )

        response = client.get(
            "/api/admin/users", headers={"Authorization": "Bearer user"}
        )

        assert response.status_code == 403
        assert response.json()["message"] == "Administrator access required"

    def test_rejected_token(self, client: TestClient) -> None:
        client.app.state.token_verifier.authorize_admin = AsyncMock(
            side_effect=InvalidTokenError()
        )

        response = client.get(
            "/api/admin/users", headers={"Authorization": "Bearer expired"}
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid or expired token"
