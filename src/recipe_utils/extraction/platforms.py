"""Video platform detection for recipe URLs."""

import enum
from typing import Optional
from urllib.parse import parse_qs, urlparse


class VideoPlatform(enum.Enum):
    YOUTUBE = "youtube"
    TIKTOK = "tiktok"
    INSTAGRAM = "instagram"
    UNKNOWN = "unknown"

    @property
    def display_name(self) -> str:
        return {
            VideoPlatform.YOUTUBE: "YouTube",
            VideoPlatform.TIKTOK: "TikTok",
            VideoPlatform.INSTAGRAM: "Instagram",
        }.get(self, "Unknown")


def detect_platform(url: str) -> VideoPlatform:
    """Detect the video platform a URL points at.

    Examples:
        >>> detect_platform("https://youtu.be/abc123")
        <VideoPlatform.YOUTUBE: 'youtube'>
        >>> detect_platform("https://example.com/recipe")
        <VideoPlatform.UNKNOWN: 'unknown'>
    """
    host = (urlparse(url).hostname or "").lower()

    if "youtube.com" in host or "youtu.be" in host:
        return VideoPlatform.YOUTUBE
    if "tiktok.com" in host:
        return VideoPlatform.TIKTOK
    if "instagram.com" in host:
        return VideoPlatform.INSTAGRAM
    return VideoPlatform.UNKNOWN


def is_video_url(url: str) -> bool:
    return detect_platform(url) is not VideoPlatform.UNKNOWN


def extract_youtube_video_id(url: str) -> Optional[str]:
    """Extract the video id from watch, short-link, shorts and embed URLs."""
    parsed = urlparse(url)
    host = (parsed.hostname or "").lower()
    path_parts = [part for part in parsed.path.split("/") if part]

    # youtu.be/VIDEO_ID
    if "youtu.be" in host:
        return path_parts[0] if path_parts else None

    # youtube.com/watch?v=VIDEO_ID
    video_ids = parse_qs(parsed.query).get("v")
    if video_ids and video_ids[0]:
        return video_ids[0]

    # youtube.com/shorts/VIDEO_ID or youtube.com/embed/VIDEO_ID
    if len(path_parts) >= 2 and path_parts[0] in ("shorts", "embed"):
        return path_parts[-1]

    return None
