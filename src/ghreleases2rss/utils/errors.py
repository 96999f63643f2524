"""Custom exceptions for ghreleases2rss."""


class Ghreleases2rssError(Exception):
    """Base exception for all ghreleases2rss errors."""

    pass


class ConfigError(Ghreleases2rssError):
    """Configuration-related errors."""

    pass


class InvalidConfigError(ConfigError):
    """Invalid configuration data."""

    pass


class InvalidFormatError(Ghreleases2rssError, ValueError):
    """Repository identifier does not match any recognized shape."""

    pass


class InvalidURLError(InvalidFormatError):
    """Repository URL could not be parsed or is not hosted on github.com."""

    pass


class FileAccessError(Ghreleases2rssError):
    """Input file could not be opened or lies outside the working directory."""

    pass


class MinifluxError(Ghreleases2rssError):
    """Miniflux API errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CategoryNotFoundError(MinifluxError):
    """Category title not found in Miniflux."""

    pass


class MinifluxAuthenticationError(MinifluxError):
    """Invalid API key or authentication failed (non-retryable)."""

    pass


class MinifluxRequestError(MinifluxError):
    """Request rejected by Miniflux (4xx, non-retryable)."""

    pass


class RetryableError(MinifluxError):
    """Base class for errors that should trigger retries."""

    pass


class RateLimitError(RetryableError):
    """API rate limit exceeded."""

    pass


class ServerError(RetryableError):
    """Server-side error (5xx)."""

    pass


class TimeoutError(RetryableError):
    """Request timeout."""

    pass


class ConnectionError(RetryableError):
    """Network connection error."""

    pass
