"""Pydantic schemas for course content.

Request and response models for:
- Modules: CRUD
- Lessons: CRUD, with optional YouTube video and PDF references
"""

from datetime import datetime
from typing import ClassVar, Self

from pydantic import Field, model_validator

from src.core.schemas import ApiModel


class PartialUpdate(ApiModel):
    """Partial update: omitted fields are left alone.

    Fields listed in ``required_fields`` map to NOT NULL columns and may be
    omitted but not sent as null.
    """

    required_fields: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def reject_null_required_fields(self) -> Self:
        nulls = sorted(
            name
            for name in self.model_fields_set & self.required_fields
            if getattr(self, name) is None
        )
        if nulls:
            raise ValueError(f"Fields cannot be null: {', '.join(nulls)}")
        return self

    def changes(self) -> dict:
        """Fields present in the request body."""
        return self.model_dump(exclude_unset=True)


# ==============================================================================
# Module Schemas
# ==============================================================================


class CreateModuleRequest(ApiModel):
    """Module creation request."""

    title: str = Field(..., min_length=1, max_length=200, description="Module title")
    description: str = Field(..., max_length=5000, description="Module description")
    lessons: int = Field(0, ge=0, description="Lesson count shown in the UI")
    duration: str = Field(..., max_length=50, description='Label, e.g. "2 hours"')
    order: int = Field(..., description="Display order")
    is_published: bool = Field(False, description="Visible to students")


class UpdateModuleRequest(PartialUpdate):
    """Module partial update request."""

    required_fields: ClassVar[frozenset[str]] = frozenset(
        {"title", "description", "lessons", "duration", "order", "is_published"}
    )

    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    lessons: int | None = Field(None, ge=0)
    duration: str | None = Field(None, max_length=50)
    order: int | None = None
    is_published: bool | None = None


class ModuleResponse(ApiModel):
    """Module response."""

    id: int
    title: str
    description: str
    lessons: int
    duration: str
    order: int
    is_published: bool
    created_at: datetime
    updated_at: datetime


# ==============================================================================
# Lesson Schemas
# ==============================================================================


class CreateLessonRequest(ApiModel):
    """Lesson creation request.

    When ``youtube_url`` is given without ``youtube_video_id`` the video id
    and thumbnail are derived from the URL.
    """

    module_id: int = Field(..., description="Parent module id")
    title: str = Field(..., min_length=1, max_length=200, description="Lesson title")
    description: str = Field(..., max_length=5000, description="Lesson description")
    youtube_url: str | None = Field(None, max_length=2000)
    youtube_video_id: str | None = Field(None, max_length=50)
    video_thumbnail: str | None = Field(None, max_length=2000)
    pdf_url: str | None = Field(None, max_length=2000)
    pdf_file_name: str | None = Field(None, max_length=500)
    order: int = Field(..., description="Display order within the module")
    duration: str = Field(..., max_length=50)
    is_published: bool = False


class UpdateLessonRequest(PartialUpdate):
    """Lesson partial update request.

    Sending ``youtubeUrl: null`` clears the derived video fields as well.
    """

    required_fields: ClassVar[frozenset[str]] = frozenset(
        {"module_id", "title", "description", "order", "duration", "is_published"}
    )

    module_id: int | None = None
    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    youtube_url: str | None = Field(None, max_length=2000)
    youtube_video_id: str | None = Field(None, max_length=50)
    video_thumbnail: str | None = Field(None, max_length=2000)
    pdf_url: str | None = Field(None, max_length=2000)
    pdf_file_name: str | None = Field(None, max_length=500)
    order: int | None = None
    duration: str | None = Field(None, max_length=50)
    is_published: bool | None = None


class LessonResponse(ApiModel):
    """Lesson response."""

    id: int
    module_id: int
    title: str
    description: str
    youtube_url: str | None = None
    youtube_video_id: str | None = None
    video_thumbnail: str | None = None
    pdf_url: str | None = None
    pdf_file_name: str | None = None
    order: int
    duration: str
    is_published: bool
    created_at: datetime
    updated_at: datetime
