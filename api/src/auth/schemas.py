"""Pydantic schemas for authentication."""

from typing import Any

from pydantic import BaseModel, Field


class AuthenticatedUser(BaseModel):
    """Identity extracted from a verified Firebase ID token."""

    uid: str = Field(..., description="Firebase user id")
    email: str | None = None
    email_verified: bool = False
    claims: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> "AuthenticatedUser":
        """Create from a decoded ID token."""
        return cls(
            uid=claims.get("uid") or claims.get("sub", ""),
            email=claims.get("email"),
            email_verified=bool(claims.get("email_verified", False)),
            claims=claims,
        )
