"""Runtime settings for the extraction client."""

import dataclasses
import os
from typing import Dict, Optional

from .retry import INITIAL_DELAY, MAX_DELAY, MAX_RETRIES

DEFAULT_API_BASE = ""
REQUEST_TIMEOUT = 30.0
YOUTUBE_TIMEOUT = 15.0
SUPADATA_TIMEOUT = 20.0
SUPADATA_API_URL = "https://api.supadata.ai/v1/transcript"

USER_AGENT = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15"
)


@dataclasses.dataclass
class ExtractionConfig:
    """Settings for RecipeExtractionClient and the transcript providers.

    Attributes:
        api_base: Base URL of the extraction API; the endpoint is
            ``{api_base}/api/extract``
        request_timeout: Timeout for each extraction request, in seconds
        max_retries: Retries after the first failed attempt
        initial_delay: Backoff delay after the first failure, in seconds
        max_delay: Cap on any backoff delay, in seconds
        youtube_timeout: Timeout for YouTube page and caption requests
        supadata_timeout: Timeout for transcript API requests
        supadata_url: Transcript API endpoint for TikTok and Instagram
    """

    api_base: str = DEFAULT_API_BASE
    request_timeout: float = REQUEST_TIMEOUT
    max_retries: int = MAX_RETRIES
    initial_delay: float = INITIAL_DELAY
    max_delay: float = MAX_DELAY
    youtube_timeout: float = YOUTUBE_TIMEOUT
    supadata_timeout: float = SUPADATA_TIMEOUT
    supadata_url: str = SUPADATA_API_URL

    @property
    def extract_url(self) -> str:
        return f"{self.api_base.rstrip('/')}/api/extract"

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "ExtractionConfig":
        """Build a config from RECIPE_API_URL, RECIPE_REQUEST_TIMEOUT and RECIPE_MAX_RETRIES."""
        environ = os.environ if environ is None else environ
        return cls(
            api_base=environ.get("RECIPE_API_URL", DEFAULT_API_BASE),
            request_timeout=float(environ.get("RECIPE_REQUEST_TIMEOUT", REQUEST_TIMEOUT)),
            max_retries=int(environ.get("RECIPE_MAX_RETRIES", MAX_RETRIES)),
        )
