"""Recipe extraction from web pages and cooking videos."""

from .client import RecipeExtractionClient
from .config import ExtractionConfig
from .errors import ExtractionError, ExtractionErrorType, classify_error
from .keys import ApiKeyManager, EnvironmentKeyStore, KeyStore, MemoryKeyStore, validate_api_key
from .platforms import VideoPlatform, detect_platform, is_video_url
from .retry import calculate_backoff_delay, retry_with_backoff
from .transcripts import (
    SupadataTranscriptProvider,
    TranscriptError,
    TranscriptProvider,
    VideoTranscriptService,
    YouTubeTranscriptProvider,
    get_transcript_provider,
)

__all__ = [
    "RecipeExtractionClient",
    "ExtractionConfig",
    "ExtractionError",
    "ExtractionErrorType",
    "classify_error",
    "calculate_backoff_delay",
    "retry_with_backoff",
    "VideoPlatform",
    "detect_platform",
    "is_video_url",
    "KeyStore",
    "MemoryKeyStore",
    "EnvironmentKeyStore",
    "ApiKeyManager",
    "validate_api_key",
    "TranscriptError",
    "TranscriptProvider",
    "YouTubeTranscriptProvider",
    "SupadataTranscriptProvider",
    "VideoTranscriptService",
    "get_transcript_provider",
]
