"""Retry decorator with exponential backoff and jitter."""

import logging
import random
import time
from functools import wraps
from typing import Any, Callable, Optional

from .errors import classify_error

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
INITIAL_DELAY = 1.0
MAX_DELAY = 8.0
JITTER_RATIO = 0.25


def calculate_backoff_delay(
    attempt: int,
    initial_delay: float = INITIAL_DELAY,
    max_delay: Optional[float] = MAX_DELAY,
    jitter_ratio: float = JITTER_RATIO,
    rng: Optional[Callable[[], float]] = None,
) -> float:
    """Compute the delay before the retry following a failed attempt.

    Args:
        attempt: Zero-based index of the attempt that just failed
        initial_delay: Delay after the first failure, in seconds
        max_delay: Upper bound on the delay, or None for no bound
        jitter_ratio: Largest jitter as a fraction of the exponential delay
        rng: Source of uniform random numbers in [0, 1), random.random when None

    Returns:
        Delay in seconds

    Example:
        >>> calculate_backoff_delay(2, rng=lambda: 0.0)
        4.0
    """
    delay = initial_delay * (2**attempt)
    delay += delay * jitter_ratio * (rng or random.random)()
    if max_delay is not None:
        delay = min(delay, max_delay)
    return delay


def retry_with_backoff(
    max_retries: int = MAX_RETRIES,
    initial_delay: float = INITIAL_DELAY,
    max_delay: Optional[float] = MAX_DELAY,
    jitter_ratio: float = JITTER_RATIO,
    classify: Callable[[Exception], Exception] = classify_error,
    sleep: Callable[[float], Any] = time.sleep,
    rng: Optional[Callable[[], float]] = None,
    backoff: Optional[Callable[[int], float]] = None,
) -> Callable:
    """Decorator that retries a function on retryable errors with exponential backoff.

    Every exception raised by the wrapped function is passed through
    ``classify``, which must return an exception carrying a ``retryable``
    flag. Non-retryable errors are raised immediately; retryable ones are
    retried up to ``max_retries`` times, sleeping between attempts. When the
    retries run out the last classified error is raised.

    Args:
        max_retries: Maximum number of retries after the first attempt
        initial_delay: Initial delay between retries in seconds
        max_delay: Cap on any single delay, or None
        jitter_ratio: Random jitter added to each delay, as a fraction of it
        classify: Maps a raw exception to a classified one
        sleep: Function used to wait between attempts
        rng: Source of uniform random numbers for the jitter, random.random
            when None
        backoff: Maps a zero-based attempt index to a delay, replacing the
            default exponential formula

    Returns:
        Decorated function that retries on retryable errors

    Example:
        @retry_with_backoff(max_retries=3, initial_delay=1.0)
        def post_recipe(payload):
            return session.post(url, json=payload, timeout=30)
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            last_error = None

            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    error = classify(e)
                    if not getattr(error, "retryable", False):
                        if error is e:
                            raise
                        raise error from e

                    last_error = error
                    if attempt < max_retries:
                        if backoff is not None:
                            delay = backoff(attempt)
                        else:
                            delay = calculate_backoff_delay(
                                attempt,
                                initial_delay,
                                max_delay,
                                jitter_ratio,
                                rng,
                            )
                        logger.warning(
                            f"{func.__name__} failed on attempt {attempt + 1}/"
                            f"{max_retries + 1}: {error}. Retrying in {delay:.2f}s..."
                        )
                        sleep(delay)
                    else:
                        logger.error(
                            f"{func.__name__} failed after {max_retries + 1} attempts: {error}"
                        )

            raise last_error

        return wrapper

    return decorator
