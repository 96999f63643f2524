"""Configuration management for ghreleases2rss."""

from ghreleases2rss.config.manager import ConfigManager, validate_required
from ghreleases2rss.config.schema import GlobalConfig, RateLimitConfig

__all__ = ["ConfigManager", "GlobalConfig", "RateLimitConfig", "validate_required"]
