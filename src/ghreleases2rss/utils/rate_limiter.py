"""Rate limiting for Miniflux API calls using token bucket algorithm."""

import threading
import time
from collections.abc import Callable


class RateLimiter:
    """Token bucket rate limiter for API calls.

    Limits the rate of operations using the token bucket algorithm:
    - Tokens are added at a constant rate (rate)
    - Each operation consumes one token
    - Operations block if no tokens available
    - Allows bursts up to bucket capacity (burst)

    Example:
        >>> limiter = RateLimiter(rate=1.0, burst=5)
        >>> limiter.acquire()  # Blocks if rate limit exceeded
        >>> # ... make API call ...
    """

    def __init__(
        self,
        rate: float,
        burst: int,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize rate limiter.

        Args:
            rate: Tokens added per second
            burst: Bucket capacity (maximum calls allowed back to back)
            clock: Monotonic time source
            sleep: Function used to wait for tokens

        Example:
            >>> # One request per second, bursts of five
            >>> limiter = RateLimiter(rate=1.0, burst=5)
        """
        if rate <= 0:
            raise ValueError(f"rate must be positive, got {rate}")
        if burst < 1:
            raise ValueError(f"burst must be at least 1, got {burst}")

        self.rate = rate
        self.burst = burst
        self._clock = clock
        self._sleep = sleep
        self.tokens = float(burst)  # Start with full bucket
        self.last_update = clock()
        self.lock = threading.Lock()

    def _refill_tokens(self) -> None:
        """Refill tokens based on time elapsed."""
        now = self._clock()
        elapsed = now - self.last_update

        # Add tokens (cap at burst)
        self.tokens = min(self.burst, self.tokens + elapsed * self.rate)
        self.last_update = now

    def acquire(self, blocking: bool = True, timeout: float | None = None) -> bool:
        """Acquire a token, blocking if necessary.

        Args:
            blocking: If True, block until token available
            timeout: Maximum time to wait (None = wait forever)

        Returns:
            True if token acquired, False if non-blocking or timed out

        Example:
            >>> limiter.acquire()  # Block until token available
            >>> limiter.acquire(blocking=False)  # Return immediately
            >>> limiter.acquire(timeout=5.0)  # Wait max 5 seconds
        """
        start_time = self._clock()

        while True:
            with self.lock:
                self._refill_tokens()

                if self.tokens >= 1:
                    self.tokens -= 1
                    return True

                if not blocking:
                    return False

                # Time until one full token is available
                wait_time = (1 - self.tokens) / self.rate

            if timeout is not None:
                remaining = timeout - (self._clock() - start_time)
                if remaining <= 0:
                    return False
                wait_time = min(wait_time, remaining)

            self._sleep(wait_time)

    def reset(self) -> None:
        """Reset the rate limiter (refill all tokens)."""
        with self.lock:
            self.tokens = float(self.burst)
            self.last_update = self._clock()
