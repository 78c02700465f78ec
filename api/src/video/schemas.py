"""Pydantic schemas for the YouTube validation API."""

from pydantic import Field

from src.core.schemas import ApiModel


class ValidateYouTubeRequest(ApiModel):
    """Request to validate a YouTube URL."""

    url: str | None = Field(
        default=None,
        max_length=2000,
        description="YouTube watch, short, embed or /v/ URL",
    )


class ValidateYouTubeResponse(ApiModel):
    """Normalized video information."""

    message: str = "Valid YouTube URL"
    video_id: str = Field(..., description="11-character YouTube video id")
    thumbnail_url: str
    embed_url: str
    original_url: str
