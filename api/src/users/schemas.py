"""Pydantic schemas for users.

Identity lives in Firebase; these records only mirror the profile so
enrollments can reference a local user id.
"""

from datetime import datetime

from pydantic import EmailStr, Field, field_validator

from src.core.schemas import ApiModel


class CreateUserRequest(ApiModel):
    """User creation request.

    ``password`` is accepted for compatibility with older clients but never
    stored: the column always holds an empty placeholder.
    """

    username: str = Field(..., min_length=1, max_length=100, description="Username")
    email: EmailStr = Field(..., description="Email address")
    name: str = Field(..., min_length=1, max_length=200, description="Display name")
    password: str | None = Field(None, description="Ignored")

    @field_validator("username", "name")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Must not be blank")
        return v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class UserResponse(ApiModel):
    """Public user fields (never the password column)."""

    id: int
    username: str
    email: str
    name: str
    created_at: datetime
