"""YouTube URL parsing and normalization.

``parse_youtube_url`` never raises: it returns either a ``YouTubeVideo`` with
the canonical id, thumbnail and embed URLs, or a ``YouTubeUrlError`` carrying
a message that can be shown to the user as-is.

Supported forms:
- https://www.youtube.com/watch?v=VIDEO_ID (extra query params allowed)
- https://www.youtube.com/watch?feature=share&v=VIDEO_ID
- https://youtu.be/VIDEO_ID
- https://www.youtube.com/embed/VIDEO_ID
- https://www.youtube.com/v/VIDEO_ID
"""

import re
from dataclasses import dataclass
from html import escape


VIDEO_ID_LENGTH = 11

THUMBNAIL_URL_TEMPLATE = "https://img.youtube.com/vi/{video_id}/maxresdefault.jpg"
EMBED_URL_TEMPLATE = "https://www.youtube.com/embed/{video_id}"

URL_REQUIRED_MESSAGE = "URL is required"
INVALID_URL_MESSAGE = (
    "Invalid YouTube URL. Please use formats like: "
    "https://www.youtube.com/watch?v=VIDEO_ID or https://youtu.be/VIDEO_ID"
)

# Tried in order, first capture wins. The id stops at &, ?, # or newline.
URL_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(
        r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/|youtube\.com/v/)"
        r"([^&\n?#]+)"
    ),
    re.compile(r"youtube\.com/watch\?.*v=([^&\n?#]+)"),
)


@dataclass(frozen=True)
class YouTubeVideo:
    """A recognised YouTube video."""

    video_id: str
    thumbnail_url: str
    embed_url: str
    original_url: str

    @property
    def is_valid(self) -> bool:
        return True


@dataclass(frozen=True)
class YouTubeUrlError:
    """Result for a string that is not a usable YouTube URL."""

    message: str
    original_url: str = ""

    @property
    def is_valid(self) -> bool:
        return False


def extract_video_id(url: str) -> str | None:
    """Return the 11-character video id in ``url``, or None."""
    for pattern in URL_PATTERNS:
        match = pattern.search(url)
        if match:
            video_id = match.group(1)
            return video_id if len(video_id) == VIDEO_ID_LENGTH else None
    return None


def build_thumbnail_url(video_id: str) -> str:
    return THUMBNAIL_URL_TEMPLATE.format(video_id=video_id)


def build_embed_url(video_id: str) -> str:
    return EMBED_URL_TEMPLATE.format(video_id=video_id)


def parse_youtube_url(url: str | None) -> YouTubeVideo | YouTubeUrlError:
    """Normalize a YouTube URL.

    Args:
        url: Any string (None and blank strings are reported as missing).

    Returns:
        YouTubeVideo on success, YouTubeUrlError otherwise.
    """
    if url is None or not url.strip():
        return YouTubeUrlError(message=URL_REQUIRED_MESSAGE, original_url=url or "")

    video_id = extract_video_id(url)
    if video_id is None:
        return YouTubeUrlError(message=INVALID_URL_MESSAGE, original_url=url)

    return YouTubeVideo(
        video_id=video_id,
        thumbnail_url=build_thumbnail_url(video_id),
        embed_url=build_embed_url(video_id),
        original_url=url,
    )


def generate_embed_html(
    video_id: str,
    title: str = "YouTube video",
    width: int = 560,
    height: int = 315,
) -> str:
    """Build an ``<iframe>`` snippet for a video id."""
    return (
        f'<iframe width="{width}" height="{height}" '
        f'src="{escape(build_embed_url(video_id), quote=True)}" '
        f'title="{escape(title, quote=True)}" frameborder="0" '
        'allow="accelerometer; autoplay; clipboard-write; encrypted-media; '
        'gyroscope; picture-in-picture; web-share" '
        'referrerpolicy="strict-origin-when-cross-origin" allowfullscreen></iframe>'
    )
