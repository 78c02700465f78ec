"""Pydantic schemas for enrollments."""

from datetime import datetime

from pydantic import Field

from src.core.schemas import ApiModel


COMPLETE_PROGRESS = 100


class CreateEnrollmentRequest(ApiModel):
    """Enrollment creation request."""

    user_id: int = Field(..., description="Enrolled user id")
    enrolled: bool = Field(False, description="Whether access is active")
    progress: int = Field(0, ge=0, le=COMPLETE_PROGRESS, description="0-100 percent")


class UpdateEnrollmentProgressRequest(ApiModel):
    """Progress update. 100 marks the enrollment complete."""

    progress: int = Field(..., ge=0, le=COMPLETE_PROGRESS, description="0-100 percent")


class EnrollmentResponse(ApiModel):
    """Enrollment response."""

    id: int
    user_id: int
    enrolled: bool
    progress: int
    completed_at: datetime | None = None
    updated_at: datetime
    created_at: datetime
