"""Recipe extraction client.

Sends recipe URLs, or video transcripts, to the remote extraction endpoint
and turns every failure into a single classified ExtractionError.
"""

import logging
import time
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlparse

import requests

from recipe_utils.recipes.models import ExtractedRecipe

from .config import ExtractionConfig
from .errors import ExtractionError, ExtractionErrorType, classify_error
from .keys import KeyStore
from .platforms import VideoPlatform, detect_platform
from .retry import retry_with_backoff
from .transcripts import VideoTranscriptService

logger = logging.getLogger(__name__)

# Platforms whose pages are worth extracting when there is no transcript
HTML_FALLBACK_PLATFORMS = (VideoPlatform.TIKTOK, VideoPlatform.INSTAGRAM)


def _transcript_failure(error: Exception) -> ExtractionError:
    """Classify a transcript failure that is being passed to the caller."""
    if "timed out" in str(error).lower():
        return ExtractionError(
            str(error),
            ExtractionErrorType.TIMEOUT,
            "Request timed out. Please try again.",
            retryable=True,
        )
    return classify_error(error)


class RecipeExtractionClient:
    """Extracts structured recipes from web pages and cooking videos.

    Attributes:
        config: Endpoint, timeout and retry settings
        session: HTTP session used for extraction requests
        transcript_provider: Object with a ``get_transcript(url, platform)`` method
        platform_detector: Maps a URL to a VideoPlatform
    """

    def __init__(
        self,
        config: Optional[ExtractionConfig] = None,
        session: Optional[requests.Session] = None,
        transcript_provider: Optional[Any] = None,
        platform_detector: Callable[[str], VideoPlatform] = detect_platform,
        sleep: Callable[[float], Any] = time.sleep,
        rng: Optional[Callable[[], float]] = None,
        key_store: Optional[KeyStore] = None,
    ):
        self.config = config or ExtractionConfig()
        self.session = session or requests.Session()
        self.transcript_provider = transcript_provider or VideoTranscriptService(
            key_store=key_store,
            session=self.session,
            config=self.config,
            sleep=sleep,
            rng=rng,
        )
        self.platform_detector = platform_detector
        self.sleep = sleep
        self.rng = rng

    def extract_recipe(self, url: str) -> Optional[ExtractedRecipe]:
        """Extract a recipe from a URL.

        Video URLs are transcribed first. TikTok and Instagram fall back to
        page extraction when no transcript can be obtained.

        Args:
            url: Recipe page or video URL

        Returns:
            The extracted recipe, or None if the endpoint found no recipe

        Raises:
            ExtractionError: If extraction failed, after any retries
        """
        parsed = urlparse(url)
        if not parsed.scheme or not parsed.netloc:
            raise ExtractionError(
                f"Invalid URL: {url}",
                ExtractionErrorType.UNKNOWN,
                "Please enter a valid recipe URL.",
                retryable=False,
            )

        platform = self.platform_detector(url)
        if platform is VideoPlatform.UNKNOWN:
            return self._extract_from_webpage(url)
        return self._extract_from_video(url, platform)

    def _extract_from_video(self, url: str, platform: VideoPlatform) -> Optional[ExtractedRecipe]:
        try:
            transcript = self.transcript_provider.get_transcript(url, platform)
        except Exception as e:
            if platform in HTML_FALLBACK_PLATFORMS:
                logger.info(
                    f"No transcript for {url} ({e}); falling back to page extraction"
                )
                return self._extract_from_webpage(url)
            raise _transcript_failure(e) from e

        return self._request_extraction(
            {"url": url, "isTranscript": True, "transcript": transcript}
        )

    def _extract_from_webpage(self, url: str) -> Optional[ExtractedRecipe]:
        return self._request_extraction({"url": url})

    def _request_extraction(self, payload: Dict[str, Any]) -> Optional[ExtractedRecipe]:
        post = retry_with_backoff(
            max_retries=self.config.max_retries,
            initial_delay=self.config.initial_delay,
            max_delay=self.config.max_delay,
            classify=classify_error,
            sleep=self.sleep,
            rng=self.rng,
        )(self._post_extract)
        data = post(payload)

        if isinstance(data, dict) and data.get("error") and not data.get("title"):
            logger.info(f"No recipe found at {payload['url']}: {data['error']}")
            return None
        if not isinstance(data, dict):
            raise ExtractionError(
                "Extraction response is not a JSON object",
                ExtractionErrorType.UNKNOWN,
                "Received an invalid response. Please try again.",
                retryable=False,
            )
        return ExtractedRecipe.from_dict(data, fallback_url=payload["url"])

    def _post_extract(self, payload: Dict[str, Any]) -> Any:
        """Make one extraction request, raising a classified error on failure."""
        response = self.session.post(
            self.config.extract_url,
            json=payload,
            timeout=self.config.request_timeout,
        )

        if not response.ok:
            message = f"HTTP {response.status_code}"
            try:
                body = response.json()
                if isinstance(body, dict) and body.get("error"):
                    message = str(body["error"])
            except ValueError:
                pass
            raise classify_error(
                requests.exceptions.HTTPError(message, response=response),
                response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ExtractionError(
                f"Invalid JSON from extraction endpoint: {e}",
                ExtractionErrorType.UNKNOWN,
                "Received an invalid response. Please try again.",
                retryable=False,
            ) from e
