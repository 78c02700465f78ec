"""Firebase ID token verification and admin authorization.

Users sign in with Firebase on the client. Admin requests carry the Firebase
ID token as a Bearer token; the API verifies it with the Firebase Admin SDK
and grants admin access when either:
- the ``admin_claim`` custom claim is truthy, or
- the token email is in ``admin_emails``.
"""

import threading
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog
from starlette.concurrency import run_in_threadpool

from src.auth.schemas import AuthenticatedUser
from src.config.settings import Settings


if TYPE_CHECKING:
    from firebase_admin import App


logger = structlog.get_logger(__name__)


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class AuthError(Exception):
    """Base error for authentication and authorization."""

    def __init__(self, message: str, code: str = "auth_error") -> None:
        self.message = message
        self.code = code
        super().__init__(message)


class AuthNotConfiguredError(AuthError):
    """Firebase Authentication is not configured."""

    def __init__(
        self, message: str = "Authentication service is not configured"
    ) -> None:
        super().__init__(message, "auth_not_configured")


class AuthUnavailableError(AuthError):
    """Token verification could not reach Firebase."""

    def __init__(
        self, message: str = "Authentication service is unavailable"
    ) -> None:
        super().__init__(message, "auth_unavailable")


class InvalidTokenError(AuthError):
    """Token is malformed, expired, revoked or belongs to a disabled user."""

    def __init__(self, message: str = "Invalid or expired token") -> None:
        super().__init__(message, "invalid_token")


class NotAdminError(AuthError):
    """Authenticated user is not an administrator."""

    def __init__(self, message: str = "Administrator access required") -> None:
        super().__init__(message, "not_admin")


# ==============================================================================
# Token Verifier
# ==============================================================================


class FirebaseTokenVerifier:
    """Verify Firebase ID tokens and decide admin access."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._app: App | None = None
        self._app_lock = threading.Lock()
        self._admin_emails = {email.lower() for email in settings.admin_emails}

    @property
    def is_configured(self) -> bool:
        return self.settings.firebase_configured

    def _get_app(self) -> "App":
        """Initialize the Firebase Admin app on first use.

        Runs in worker threads; the lock keeps concurrent first requests from
        initializing the same named app twice.
        """
        if self._app is not None:
            return self._app

        with self._app_lock:
            if self._app is None:
                self._app = self._initialize_app()
        return self._app

    def _initialize_app(self) -> "App":
        if not self.is_configured:
            raise AuthNotConfiguredError

        # Lazy import to avoid loading the Firebase SDK unless needed
        import firebase_admin  # noqa: PLC0415
        from firebase_admin import credentials  # noqa: PLC0415

        creds_path = Path(self.settings.firebase_credentials_path or "")
        if not creds_path.is_file():
            raise AuthNotConfiguredError(
                f"Firebase credentials file not found: {creds_path}"
            )

        app_name = self.settings.app_name
        try:
            app = firebase_admin.get_app(app_name)
        except ValueError:
            options: dict[str, Any] = {}
            if self.settings.firebase_project_id:
                options["projectId"] = self.settings.firebase_project_id
            app = firebase_admin.initialize_app(
                credentials.Certificate(str(creds_path)), options, name=app_name
            )
            logger.info(
                "firebase_initialized",
                project_id=self.settings.firebase_project_id,
            )
        return app

    def _verify_sync(self, token: str) -> dict[str, Any]:
        from firebase_admin import auth  # noqa: PLC0415

        app = self._get_app()
        try:
            return auth.verify_id_token(token, app=app, check_revoked=True)
        except auth.CertificateFetchError as e:
            logger.exception("firebase_certificate_fetch_failed")
            raise AuthUnavailableError from e
        except (
            auth.InvalidIdTokenError,
            auth.UserDisabledError,
            auth.UserNotFoundError,
            ValueError,
        ) as e:
            logger.warning(
                "firebase_token_rejected",
                error_type=type(e).__name__,
            )
            raise InvalidTokenError from e

    async def verify(self, token: str) -> AuthenticatedUser:
        """Verify an ID token.

        Raises:
            AuthNotConfiguredError: Firebase is not configured.
            AuthUnavailableError: Public keys could not be fetched.
            InvalidTokenError: Token rejected by Firebase.
        """
        claims = await run_in_threadpool(self._verify_sync, token)
        return AuthenticatedUser.from_claims(claims)

    def is_admin(self, user: AuthenticatedUser) -> bool:
        if user.claims.get(self.settings.admin_claim):
            return True
        return bool(user.email and user.email.lower() in self._admin_emails)

    async def authorize_admin(self, token: str) -> AuthenticatedUser:
        """Verify a token and require admin access.

        Raises:
            NotAdminError: Token is valid but the user is not an admin.
        """
        user = await self.verify(token)
        if not self.is_admin(user):
            logger.warning("admin_access_denied", uid=user.uid)
            raise NotAdminError
        return user
