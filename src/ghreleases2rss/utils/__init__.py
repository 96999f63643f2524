"""Utility functions and helpers for ghreleases2rss."""

from ghreleases2rss.utils.errors import (
    CategoryNotFoundError,
    ConfigError,
    ConnectionError,
    FileAccessError,
    Ghreleases2rssError,
    InvalidConfigError,
    InvalidFormatError,
    InvalidURLError,
    MinifluxAuthenticationError,
    MinifluxError,
    MinifluxRequestError,
    RateLimitError,
    RetryableError,
    ServerError,
    TimeoutError,
)
from ghreleases2rss.utils.rate_limiter import RateLimiter

__all__ = [
    # Errors
    "Ghreleases2rssError",
    "ConfigError",
    "InvalidConfigError",
    "InvalidFormatError",
    "InvalidURLError",
    "FileAccessError",
    "MinifluxError",
    "CategoryNotFoundError",
    "MinifluxAuthenticationError",
    "MinifluxRequestError",
    "RetryableError",
    "RateLimitError",
    "ServerError",
    "TimeoutError",
    "ConnectionError",
    # Rate limiting
    "RateLimiter",
]
