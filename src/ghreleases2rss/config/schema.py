"""Configuration schema models using Pydantic."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class RateLimitConfig(BaseModel):
    """Token bucket settings for write calls to Miniflux."""

    requests_per_second: float = Field(default=1.0, gt=0)
    burst: int = Field(default=5, ge=1)


class GlobalConfig(BaseModel):
    """Global ghreleases2rss configuration."""

    version: str = "1"
    miniflux_url: str | None = None
    miniflux_api_key: str | None = None
    log_level: LogLevel = "INFO"
    request_timeout_seconds: float = Field(default=30.0, gt=0)
    retry_attempts: int = Field(default=3, ge=1)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)

    @field_validator("miniflux_url")
    @classmethod
    def strip_trailing_slash(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip().rstrip("/") or None
