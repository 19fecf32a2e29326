"""Error taxonomy for recipe extraction."""

import enum
from typing import Optional

import requests


class ExtractionErrorType(enum.Enum):
    NETWORK = "NETWORK"
    RATE_LIMIT = "RATE_LIMIT"
    TIMEOUT = "TIMEOUT"
    SERVER = "SERVER"
    UNKNOWN = "UNKNOWN"


class ExtractionError(Exception):
    """A classified extraction failure.

    Attributes:
        error_type: Category of the failure
        user_message: Short message suitable for showing to a user
        retryable: Whether the retry loop may attempt the call again
    """

    def __init__(
        self,
        message: str,
        error_type: ExtractionErrorType,
        user_message: str,
        retryable: bool = False,
    ):
        super().__init__(message)
        self.error_type = error_type
        self.user_message = user_message
        self.retryable = retryable

    def __repr__(self) -> str:
        return (
            f"ExtractionError({str(self)!r}, {self.error_type.value}, "
            f"retryable={self.retryable})"
        )


NETWORK_PHRASES = (
    "network",
    "failed to fetch",
    "network request failed",
    "internet",
    "offline",
)

CREDENTIAL_PHRASES = (
    "api key",
    "apikey",
    "invalid key",
    "unauthorized",
    "authentication",
    "server configuration",
)

RATE_LIMIT_PHRASES = (
    "rate limit",
    "too many requests",
    "quota exceeded",
)


def _contains_any(text: str, phrases) -> bool:
    return any(phrase in text for phrase in phrases)


def classify_error(
    error: BaseException, status_code: Optional[int] = None
) -> ExtractionError:
    """Classify a failure into an ExtractionError.

    Checks run in priority order: timeout, connectivity, credentials, rate
    limiting, server errors. Anything else is UNKNOWN and not retryable.
    HTTP 401/403 are deliberately classified as retryable SERVER errors.

    Args:
        error: The exception raised by the request, or one built from an
            error response body.
        status_code: HTTP status of the failed response, if there was one.

    Returns:
        The classified error. An ExtractionError passed in is returned as-is.
    """
    if isinstance(error, ExtractionError):
        return error

    message = str(error)
    lower_message = message.lower()

    if isinstance(error, (requests.exceptions.Timeout, TimeoutError)):
        return ExtractionError(
            message or "Request timed out",
            ExtractionErrorType.TIMEOUT,
            "Request timed out. Please try again.",
            retryable=True,
        )

    if isinstance(
        error, (requests.exceptions.ConnectionError, ConnectionError)
    ) or _contains_any(lower_message, NETWORK_PHRASES):
        return ExtractionError(
            message,
            ExtractionErrorType.NETWORK,
            "Unable to connect. Please check your internet connection and try again.",
            retryable=True,
        )

    if status_code in (401, 403) or _contains_any(lower_message, CREDENTIAL_PHRASES):
        return ExtractionError(
            message,
            ExtractionErrorType.SERVER,
            "Service temporarily unavailable. Please try again later.",
            retryable=True,
        )

    if status_code == 429 or _contains_any(lower_message, RATE_LIMIT_PHRASES):
        return ExtractionError(
            message,
            ExtractionErrorType.RATE_LIMIT,
            "Too many requests. Please wait a moment and try again.",
            retryable=True,
        )

    if status_code is not None and status_code >= 500:
        return ExtractionError(
            message,
            ExtractionErrorType.SERVER,
            "Server error. Please try again later.",
            retryable=True,
        )

    return ExtractionError(
        message,
        ExtractionErrorType.UNKNOWN,
        message or "An unexpected error occurred. Please try again.",
        retryable=False,
    )
