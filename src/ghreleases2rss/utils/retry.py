"""Error classification and retry utilities for Miniflux API calls.

Implements exponential backoff with jitter for transient failures.
"""

import logging
from collections.abc import Callable
from functools import wraps

from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from ghreleases2rss.utils.errors import (
    ConnectionError,
    MinifluxAuthenticationError,
    MinifluxError,
    MinifluxRequestError,
    RateLimitError,
    RetryableError,
    ServerError,
    TimeoutError,
)

logger = logging.getLogger(__name__)


class RetryConfig:
    """Configuration for retry behavior."""

    def __init__(
        self,
        max_attempts: int = 3,
        max_wait_seconds: float = 30,
        min_wait_seconds: float = 1,
        jitter: bool = True,
    ):
        """Initialize retry configuration.

        Args:
            max_attempts: Maximum number of attempts (including initial)
            max_wait_seconds: Maximum wait time between retries
            min_wait_seconds: Minimum wait time between retries
            jitter: Whether to add jitter to wait times
        """
        self.max_attempts = max_attempts
        self.max_wait_seconds = max_wait_seconds
        self.min_wait_seconds = min_wait_seconds
        self.jitter = jitter


DEFAULT_RETRY_CONFIG = RetryConfig(
    max_attempts=3,
    max_wait_seconds=30,
    min_wait_seconds=1,
    jitter=True,
)

# Fast configuration for testing (minimal delays)
TEST_RETRY_CONFIG = RetryConfig(
    max_attempts=3,
    max_wait_seconds=0.1,
    min_wait_seconds=0.01,
    jitter=False,
)


def log_retry_attempt(retry_state: RetryCallState) -> None:
    """Log retry attempts for debugging.

    Args:
        retry_state: Tenacity retry state
    """
    if retry_state.outcome and retry_state.outcome.failed:
        exception = retry_state.outcome.exception()
        attempt_number = retry_state.attempt_number

        logger.warning(
            f"Retry attempt {attempt_number} failed: {type(exception).__name__}: {exception}"
        )


def with_retry(
    config: RetryConfig | None = None,
    retry_on: tuple[type[Exception], ...] = (RetryableError,),
) -> Callable:
    """Decorator for adding retry logic with exponential backoff.

    Usage:
        @with_retry()
        def api_call():
            ...

        @with_retry(config=RetryConfig(max_attempts=5), retry_on=(RateLimitError,))
        def rate_limited_call():
            ...

    Args:
        config: Retry configuration (uses DEFAULT_RETRY_CONFIG if None)
        retry_on: Exception types to retry on (all RetryableError subclasses by default)

    Returns:
        Decorated function with retry logic
    """
    config = config or DEFAULT_RETRY_CONFIG

    def decorator(func: Callable) -> Callable:
        retry_decorator = retry(
            stop=stop_after_attempt(config.max_attempts),
            wait=wait_exponential_jitter(
                initial=config.min_wait_seconds,
                max=config.max_wait_seconds,
                jitter=config.max_wait_seconds if config.jitter else 0,
            ),
            retry=retry_if_exception_type(retry_on),
            before_sleep=log_retry_attempt,
            reraise=True,
        )

        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return retry_decorator(func)(*args, **kwargs)
            except retry_on as e:
                logger.error(
                    f"{func.__name__} failed after {config.max_attempts} attempts: "
                    f"{type(e).__name__}: {e}"
                )
                raise

        return wrapper

    return decorator


def classify_http_error(status_code: int, error_message: str = "") -> MinifluxError:
    """Classify HTTP error into retryable or non-retryable.

    Args:
        status_code: HTTP status code
        error_message: Error message from API

    Returns:
        Appropriate exception instance

    Example:
        if response.status_code >= 400:
            raise classify_http_error(response.status_code, response.text)
    """
    if status_code == 429:
        return RateLimitError(f"Rate limit exceeded: {error_message}", status_code)

    if 500 <= status_code < 600:
        return ServerError(f"Server error (HTTP {status_code}): {error_message}", status_code)

    if status_code == 408:
        return TimeoutError(f"Request timeout: {error_message}", status_code)

    if status_code in (401, 403):
        return MinifluxAuthenticationError(
            f"Authentication failed (HTTP {status_code}): {error_message}", status_code
        )

    if 400 <= status_code < 500:
        return MinifluxRequestError(
            f"Invalid request (HTTP {status_code}): {error_message}", status_code
        )

    return MinifluxError(f"HTTP error {status_code}: {error_message}", status_code)
