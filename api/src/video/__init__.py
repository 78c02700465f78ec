"""YouTube URL normalization."""

from src.video.service import (
    YouTubeUrlError,
    YouTubeVideo,
    extract_video_id,
    generate_embed_html,
    parse_youtube_url,
)


__all__ = [
    "YouTubeUrlError",
    "YouTubeVideo",
    "extract_video_id",
    "generate_embed_html",
    "parse_youtube_url",
]
