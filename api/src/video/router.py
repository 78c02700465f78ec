"""YouTube URL validation endpoint (admin)."""

from fastapi import APIRouter, Depends, HTTPException, status

from src.auth.dependencies import require_admin
from src.video.schemas import ValidateYouTubeRequest, ValidateYouTubeResponse
from src.video.service import YouTubeUrlError, parse_youtube_url


router = APIRouter(
    prefix="/api/admin",
    tags=["video"],
    dependencies=[Depends(require_admin)],
)


@router.post(
    "/validate-youtube",
    response_model=ValidateYouTubeResponse,
    summary="Validate and normalize a YouTube URL",
)
async def validate_youtube(data: ValidateYouTubeRequest) -> ValidateYouTubeResponse:
    """Return the video id, thumbnail and embed URLs for a YouTube URL."""
    if not data.url:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="YouTube URL is required",
        )

    result = parse_youtube_url(data.url)
    if isinstance(result, YouTubeUrlError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=result.message,
        )

    return ValidateYouTubeResponse(
        video_id=result.video_id,
        thumbnail_url=result.thumbnail_url,
        embed_url=result.embed_url,
        original_url=result.original_url,
    )
