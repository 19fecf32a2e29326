"""Video transcript providers.

YouTube transcripts are scraped from the caption tracks linked from the watch
page. TikTok and Instagram transcripts come from the Supadata transcript API,
which needs a user-supplied API key.
"""

import json
import logging
import random
import re
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Tuple

import requests
from bs4 import BeautifulSoup

from .config import ExtractionConfig, USER_AGENT
from .keys import SUPADATA_API_KEY, KeyStore, MemoryKeyStore, validate_api_key
from .platforms import VideoPlatform, detect_platform, extract_youtube_video_id
from .retry import retry_with_backoff

logger = logging.getLogger(__name__)

CAPTION_TRACKS_PATTERN = re.compile(r'"captionTracks":\s*(\[.*?\])')


def calculate_transcript_delay(
    attempt: int, initial_delay: float, rng: Optional[Callable[[], float]] = None
) -> float:
    """Backoff delay for transcript requests.

    Exponential in the attempt with up to one base delay of jitter, and no
    upper bound.

    Example:
        >>> calculate_transcript_delay(1, 1.0, rng=lambda: 0.5)
        2.5
    """
    return initial_delay * (2**attempt) + (rng or random.random)() * initial_delay


class TranscriptError(Exception):
    """A transcript could not be obtained.

    Attributes:
        platform: Platform the video is hosted on
        retryable: Whether retrying the request could succeed
        recovery_suggestion: What the user can do about it
    """

    def __init__(
        self,
        message: str,
        platform: VideoPlatform,
        retryable: bool = False,
        recovery_suggestion: Optional[str] = None,
    ):
        super().__init__(message)
        self.platform = platform
        self.retryable = retryable
        if recovery_suggestion:
            self.recovery_suggestion = recovery_suggestion
        elif platform is VideoPlatform.YOUTUBE:
            self.recovery_suggestion = (
                "Try a different video or check if captions are available."
            )
        elif platform in (VideoPlatform.TIKTOK, VideoPlatform.INSTAGRAM):
            self.recovery_suggestion = (
                "Check your Supadata API key in Settings, or try again later."
            )
        else:
            self.recovery_suggestion = (
                "Try using a supported video platform (YouTube, TikTok, Instagram)."
            )


def _transcript_error_classifier(platform: VideoPlatform) -> Callable[[Exception], Exception]:
    """Build the retry classifier for one platform's transcript requests."""
    name = platform.display_name

    def classify(error: Exception) -> Exception:
        if isinstance(error, TranscriptError):
            return error
        if isinstance(error, requests.exceptions.Timeout):
            return TranscriptError(
                f"Request timed out while fetching {name} transcript",
                platform,
                retryable=True,
                recovery_suggestion="Check your internet connection and try again.",
            )
        if isinstance(error, requests.exceptions.ConnectionError):
            return TranscriptError(
                f"Network request failed while fetching {name} transcript: {error}",
                platform,
                retryable=True,
                recovery_suggestion="Check your internet connection and try again.",
            )
        return TranscriptError(f"Failed to extract transcript: {error}", platform)

    return classify


def supadata_status_error(
    platform: VideoPlatform, status_code: int, error_message: Optional[str] = None
) -> TranscriptError:
    """Map a transcript API error status to a TranscriptError."""
    name = platform.display_name

    if status_code == 401:
        return TranscriptError(
            "Invalid Supadata API key",
            platform,
            retryable=False,
            recovery_suggestion=(
                "Check your API key in Settings > Video Platforms and ensure it is correct."
            ),
        )
    if status_code == 403:
        return TranscriptError(
            "Access forbidden. Your API key may not have permission for this content.",
            platform,
            retryable=False,
            recovery_suggestion="Verify your Supadata plan includes access to this platform.",
        )
    if status_code == 404:
        return TranscriptError(
            f"No transcript available for this {name} video",
            platform,
            retryable=False,
            recovery_suggestion=(
                f"This {name} video may not have speech or captions. Try a different video."
            ),
        )
    if status_code == 429:
        return TranscriptError(
            "Rate limit exceeded",
            platform,
            retryable=True,
            recovery_suggestion=(
                "You have exceeded your API rate limit. "
                "Please wait a few minutes and try again."
            ),
        )
    if status_code in (500, 502, 503, 504):
        return TranscriptError(
            f"Supadata service temporarily unavailable ({status_code})",
            platform,
            retryable=True,
            recovery_suggestion=(
                "The transcript service is experiencing issues. "
                "Please try again in a few minutes."
            ),
        )
    return TranscriptError(
        error_message or f"Unexpected error (HTTP {status_code})",
        platform,
        retryable=status_code >= 500,
        recovery_suggestion=(
            "An unexpected error occurred. "
            "Please try again or contact support if the issue persists."
        ),
    )


def _response_error_message(response: requests.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("error") or body.get("message")
    return None


class TranscriptProvider(ABC):
    """Abstract base class for transcript providers."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        config: Optional[ExtractionConfig] = None,
        sleep: Callable[[float], Any] = time.sleep,
        rng: Optional[Callable[[], float]] = None,
    ):
        self.session = session or requests.Session()
        self.config = config or ExtractionConfig()
        self.sleep = sleep
        self.rng = rng

    @property
    @abstractmethod
    def platform(self) -> VideoPlatform:
        """Return the platform this provider handles."""
        pass

    @abstractmethod
    def fetch_transcript(self, url: str) -> str:
        """Make a single attempt at fetching the transcript.

        Raises:
            TranscriptError: With ``retryable`` set for transient failures
        """
        pass

    def validate(self, url: str) -> None:
        """Check preconditions that make retrying pointless. Raises TranscriptError."""

    def get_transcript(self, url: str) -> str:
        """Fetch the transcript of a video, retrying transient failures.

        Args:
            url: Video URL

        Returns:
            Plain transcript text

        Raises:
            TranscriptError: If no transcript could be obtained
        """
        self.validate(url)
        initial_delay = self.config.initial_delay
        fetch = retry_with_backoff(
            max_retries=self.config.max_retries,
            classify=_transcript_error_classifier(self.platform),
            sleep=self.sleep,
            backoff=lambda attempt: calculate_transcript_delay(
                attempt, initial_delay, self.rng
            ),
        )(self.fetch_transcript)
        return fetch(url)


class YouTubeTranscriptProvider(TranscriptProvider):
    """Scrapes YouTube caption tracks, preferring English."""

    @property
    def platform(self) -> VideoPlatform:
        return VideoPlatform.YOUTUBE

    def validate(self, url: str) -> None:
        if not extract_youtube_video_id(url):
            raise TranscriptError(
                "Could not extract video ID from URL",
                self.platform,
                recovery_suggestion="Please check the URL format is correct.",
            )

    def _get(self, url: str) -> requests.Response:
        response = self.session.get(
            url,
            headers={"User-Agent": USER_AGENT},
            timeout=self.config.youtube_timeout,
        )
        if response.status_code == 429 or response.status_code >= 500:
            raise TranscriptError(
                f"YouTube request failed (HTTP {response.status_code})",
                self.platform,
                retryable=True,
            )
        if response.status_code >= 400:
            raise TranscriptError(
                f"YouTube request failed (HTTP {response.status_code})",
                self.platform,
            )
        return response

    def fetch_transcript(self, url: str) -> str:
        video_id = extract_youtube_video_id(url)
        page = self._get(f"https://www.youtube.com/watch?v={video_id}")

        track = self._select_caption_track(page.text)
        captions = self._get(track["baseUrl"])

        transcript = parse_caption_xml(captions.text)
        if not transcript:
            raise TranscriptError(
                "No transcript content found",
                self.platform,
                recovery_suggestion="The captions appear to be empty. Try a different video.",
            )
        return transcript

    def _select_caption_track(self, html: str) -> Dict[str, Any]:
        no_captions = TranscriptError(
            "No captions available for this video",
            self.platform,
            recovery_suggestion=(
                "This video does not have captions enabled. Try a different video."
            ),
        )

        match = CAPTION_TRACKS_PATTERN.search(html)
        if not match:
            raise no_captions
        try:
            tracks = json.loads(match.group(1))
        except ValueError:
            raise no_captions
        if not tracks:
            raise no_captions

        english = [
            track
            for track in tracks
            if str(track.get("languageCode", "")).startswith("en")
            or ".en" in str(track.get("vssId", ""))
        ]
        track = english[0] if english else tracks[0]

        if not track.get("baseUrl"):
            raise TranscriptError(
                "No caption URL found",
                self.platform,
                recovery_suggestion="Could not locate the captions for this video.",
            )
        return track


def parse_caption_xml(xml: str) -> str:
    """Join the text segments of a YouTube caption document."""
    soup = BeautifulSoup(xml, "lxml")
    segments = []
    for node in soup.find_all("text"):
        text = node.get_text().replace("\n", " ").strip()
        if text:
            segments.append(text)
    return " ".join(segments)


class SupadataTranscriptProvider(TranscriptProvider):
    """Fetches TikTok and Instagram transcripts from the Supadata API."""

    def __init__(
        self,
        platform: VideoPlatform,
        key_store: Optional[KeyStore] = None,
        session: Optional[requests.Session] = None,
        config: Optional[ExtractionConfig] = None,
        sleep: Callable[[float], Any] = time.sleep,
        rng: Optional[Callable[[], float]] = None,
    ):
        if platform not in (VideoPlatform.TIKTOK, VideoPlatform.INSTAGRAM):
            raise ValueError(f"Supadata does not handle {platform.value} videos")
        super().__init__(session=session, config=config, sleep=sleep, rng=rng)
        self._platform = platform
        self.key_store = key_store or MemoryKeyStore()

    @property
    def platform(self) -> VideoPlatform:
        return self._platform

    def _api_key(self) -> Optional[str]:
        api_key = self.key_store.get(SUPADATA_API_KEY)
        return api_key.strip() if api_key else None

    def validate(self, url: str) -> None:
        if not validate_api_key(self._api_key()):
            raise TranscriptError(
                f"Supadata API key required for {self.platform.display_name} videos",
                self.platform,
                recovery_suggestion=(
                    "Configure your Supadata API key in Settings > Video Platforms."
                ),
            )

    def _post(self, url: str, api_key: str, timeout: float) -> requests.Response:
        return self.session.post(
            self.config.supadata_url,
            headers={"Authorization": f"Bearer {api_key}"},
            json={"url": url},
            timeout=timeout,
        )

    def fetch_transcript(self, url: str) -> str:
        response = self._post(url, self._api_key(), self.config.supadata_timeout)
        if response.status_code >= 400:
            raise supadata_status_error(
                self.platform, response.status_code, _response_error_message(response)
            )

        try:
            data = response.json()
        except ValueError:
            data = None
        return self._transcript_from_body(data)

    def _transcript_from_body(self, data: Any) -> str:
        name = self.platform.display_name
        empty = TranscriptError(
            f"No transcript content found for this {name} video",
            self.platform,
            recovery_suggestion=f"This {name} video may not have spoken content.",
        )

        if isinstance(data, dict) and isinstance(data.get("transcript"), list):
            transcript = " ".join(
                str(segment.get("text", ""))
                for segment in data["transcript"]
                if isinstance(segment, dict)
            )
            if not transcript.strip():
                raise empty
            return transcript

        if isinstance(data, dict) and isinstance(data.get("text"), str):
            if not data["text"].strip():
                raise empty
            return data["text"]

        raise TranscriptError(
            "Failed to parse transcript response",
            self.platform,
            recovery_suggestion="The transcript service returned an unexpected format.",
        )

    def test_api_key(self, api_key: str) -> Tuple[bool, Optional[str]]:
        """Check an API key against the transcript API.

        Returns:
            A tuple of (valid, error message). Any response other than 401
            means the key was accepted.
        """
        if not validate_api_key(api_key):
            return False, "API key is too short or invalid format."

        try:
            response = self._post(
                "https://www.tiktok.com/@test/video/1234567890", api_key.strip(), 10
            )
        except requests.exceptions.Timeout:
            return False, "Connection timed out. Please check your internet connection."
        except requests.exceptions.RequestException:
            return False, "Could not validate API key. Please check your internet connection."

        if response.status_code == 401:
            return False, "Invalid API key."
        return True, None


def get_transcript_provider(
    platform: VideoPlatform,
    key_store: Optional[KeyStore] = None,
    session: Optional[requests.Session] = None,
    config: Optional[ExtractionConfig] = None,
    sleep: Callable[[float], Any] = time.sleep,
    rng: Optional[Callable[[], float]] = None,
) -> TranscriptProvider:
    """Create the transcript provider for a platform.

    Raises:
        TranscriptError: If the platform has no transcript provider
    """
    if platform is VideoPlatform.YOUTUBE:
        return YouTubeTranscriptProvider(
            session=session, config=config, sleep=sleep, rng=rng
        )
    if platform in (VideoPlatform.TIKTOK, VideoPlatform.INSTAGRAM):
        return SupadataTranscriptProvider(
            platform,
            key_store=key_store,
            session=session,
            config=config,
            sleep=sleep,
            rng=rng,
        )
    raise TranscriptError(
        "Unsupported video platform",
        platform,
        recovery_suggestion="Please use a YouTube, TikTok, or Instagram video URL.",
    )


class VideoTranscriptService:
    """Dispatches transcript requests to the provider for each platform."""

    def __init__(
        self,
        key_store: Optional[KeyStore] = None,
        session: Optional[requests.Session] = None,
        config: Optional[ExtractionConfig] = None,
        sleep: Callable[[float], Any] = time.sleep,
        rng: Optional[Callable[[], float]] = None,
    ):
        self.key_store = key_store
        self.session = session
        self.config = config
        self.sleep = sleep
        self.rng = rng

    def get_transcript(self, url: str, platform: Optional[VideoPlatform] = None) -> str:
        """Fetch a transcript from the provider for the video's platform.

        Args:
            url: Video URL
            platform: Platform already detected by the caller; detected from
                the URL when None
        """
        if platform is None:
            platform = detect_platform(url)
        provider = get_transcript_provider(
            platform,
            key_store=self.key_store,
            session=self.session,
            config=self.config,
            sleep=self.sleep,
            rng=self.rng,
        )
        logger.info(f"Fetching {platform.display_name} transcript for {url}")
        return provider.get_transcript(url)
