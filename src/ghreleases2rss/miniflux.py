"""Miniflux API client.

Covers the handful of endpoints needed to manage release feeds:
listing categories and feeds, subscribing and deleting. Write calls
(subscribe, delete) go through a token bucket so bulk imports don't
hammer the server.
"""

import logging
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict

from ghreleases2rss.utils.errors import (
    CategoryNotFoundError,
    ConnectionError,
    MinifluxError,
    TimeoutError,
)
from ghreleases2rss.utils.rate_limiter import RateLimiter
from ghreleases2rss.utils.retry import RetryConfig, classify_http_error, with_retry

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_RATE = 1.0  # requests per second
DEFAULT_BURST = 5
WRITE_METHODS = frozenset({"POST", "PUT", "DELETE"})


class Category(BaseModel):
    """A Miniflux category."""

    model_config = ConfigDict(extra="ignore")

    id: int
    title: str


class Feed(BaseModel):
    """A Miniflux feed subscription."""

    model_config = ConfigDict(extra="ignore")

    id: int
    feed_url: str = ""
    title: str = ""
    category: Category | None = None


class MinifluxClient:
    """Authenticated client for the Miniflux v1 API.

    Example:
        >>> with MinifluxClient("https://rss.example.com", "token") as client:
        ...     category_id = client.get_category_id("github")
        ...     client.subscribe("https://github.com/a/b/releases.atom", category_id)
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        rate_limiter: RateLimiter | None = None,
        retry_config: RetryConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Miniflux root URL (without ``/v1``)
            api_key: Miniflux API token, sent as ``X-Auth-Token``
            timeout: Per-request timeout in seconds
            rate_limiter: Limiter for write calls (1 req/s, burst 5 by default)
            retry_config: Retry behaviour for transient failures
            transport: Custom httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.rate_limiter = rate_limiter or RateLimiter(rate=DEFAULT_RATE, burst=DEFAULT_BURST)
        self.retry_config = retry_config
        self._client = httpx.Client(
            base_url=self.base_url,
            headers={
                "X-Auth-Token": api_key,
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self) -> "MinifluxClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        # Every write attempt, retries included, takes a token
        if method in WRITE_METHODS:
            self.rate_limiter.acquire()

        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise TimeoutError(f"{method} {path} timed out: {e}") from e
        except httpx.TransportError as e:
            raise ConnectionError(f"{method} {path} failed: {e}") from e

        if response.status_code >= 400:
            logger.debug(
                f"Got response {response.reason_phrase} with response code "
                f"{response.status_code} for {method} {path}"
            )
            raise classify_http_error(response.status_code, _error_message(response))

        return response

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        return with_retry(self.retry_config)(self._send)(method, path, **kwargs)

    def get_categories(self) -> list[Category]:
        """List all categories."""
        response = self._request("GET", "/v1/categories")
        return [Category.model_validate(item) for item in _json(response)]

    def get_category_id(self, title: str) -> int:
        """Find a category ID by title (case-insensitive).

        Raises:
            CategoryNotFoundError: If no category has this title
        """
        for category in self.get_categories():
            if category.title.casefold() == title.casefold():
                logger.debug(f"Found RSS reader category {title} which has ID {category.id}")
                return category.id

        raise CategoryNotFoundError(f"category {title} not found")

    def get_category_feeds(self, category_id: int) -> list[int]:
        """List the IDs of all feeds in a category."""
        response = self._request("GET", f"/v1/categories/{category_id}/feeds")
        feed_ids = [Feed.model_validate(item).id for item in _json(response)]

        logger.info(f"Found {len(feed_ids)} feeds for category ID {category_id}")
        return feed_ids

    def get_feeds(self) -> list[Feed]:
        """List all feed subscriptions."""
        response = self._request("GET", "/v1/feeds")
        return [Feed.model_validate(item) for item in _json(response)]

    def subscribe(self, feed_url: str, category_id: int | None = None) -> int | None:
        """Subscribe to a feed, optionally inside a category.

        Args:
            feed_url: Feed to subscribe to
            category_id: Target category; Miniflux picks its default when None

        Returns:
            ID of the new feed, if Miniflux reports one
        """
        payload: dict[str, Any] = {"feed_url": feed_url}
        if category_id is not None:
            payload["category_id"] = category_id

        response = self._request("POST", "/v1/feeds", json=payload)

        logger.info(f"Subscribed to RSS feed: {feed_url}")
        if not response.content:
            return None

        body = _json(response)
        if not isinstance(body, dict):
            raise MinifluxError(
                f"Unexpected response to subscribe: {body!r}", response.status_code
            )
        return body.get("feed_id")

    def delete_feed(self, feed_id: int) -> None:
        """Delete a feed subscription."""
        response = self._request("DELETE", f"/v1/feeds/{feed_id}")

        if response.status_code == httpx.codes.NO_CONTENT:
            logger.info(f"Successfully deleted feed with ID {feed_id}")


def _json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as e:
        raise MinifluxError(
            f"Invalid JSON in response to {response.request.method} {response.request.url.path}",
            response.status_code,
        ) from e


def _error_message(response: httpx.Response) -> str:
    # Miniflux reports failures as {"error_message": "..."}
    try:
        body = response.json()
    except ValueError:
        return response.text.strip()
    if isinstance(body, dict) and body.get("error_message"):
        return str(body["error_message"])
    return response.text.strip()
