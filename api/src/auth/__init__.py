"""Admin authorization with Firebase ID tokens."""

from src.auth.dependencies import require_admin
from src.auth.schemas import AuthenticatedUser
from src.auth.service import FirebaseTokenVerifier


__all__ = ["AuthenticatedUser", "FirebaseTokenVerifier", "require_admin"]
