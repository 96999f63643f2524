"""Configuration manager for loading ghreleases2rss settings.

Settings are merged from four sources, lowest precedence first:

1. Built-in defaults (``GlobalConfig``)
2. ``config.yaml`` in the config directory
3. ``.env`` in the current working directory
4. Process environment
"""

import logging
import os
from pathlib import Path

import yaml
from dotenv import dotenv_values
from pydantic import ValidationError

from ghreleases2rss.config.schema import GlobalConfig
from ghreleases2rss.utils.api_keys import APIKeyError, validate_api_key
from ghreleases2rss.utils.errors import ConfigError, InvalidConfigError
from ghreleases2rss.utils.paths import get_config_dir, get_config_file

logger = logging.getLogger(__name__)

# Environment variable -> config field
ENV_VARS = {
    "MINIFLUX_URL": "miniflux_url",
    "MINIFLUX_API_KEY": "miniflux_api_key",
    "GHRELEASES2RSS_LOG_LEVEL": "log_level",
}

MISSING_SETTINGS_MESSAGE = "miniflux API key or URL not set in environment variables"


class ConfigManager:
    """Loads ghreleases2rss configuration."""

    def __init__(self, config_dir: Path | None = None, env_file: Path | None = None) -> None:
        """Initialize the config manager.

        Args:
            config_dir: Optional custom config directory. Defaults to XDG config dir.
            env_file: Optional dotenv file. Defaults to ``.env`` in the working directory.
        """
        if config_dir is None:
            self.config_dir = get_config_dir()
            self.config_file = get_config_file()
        else:
            self.config_dir = config_dir
            self.config_file = config_dir / "config.yaml"

        self.env_file = env_file if env_file is not None else Path(".env")

    def load_config(self) -> GlobalConfig:
        """Load and validate configuration from all sources.

        Returns:
            Validated GlobalConfig instance

        Raises:
            InvalidConfigError: If config.yaml or the merged settings are invalid
        """
        data = self._read_config_file()
        data.update(self._read_env(self._read_dotenv()))
        data.update(self._read_env(os.environ))

        try:
            return GlobalConfig(**data)
        except ValidationError as e:
            raise InvalidConfigError(f"Invalid configuration: {e}") from e

    def _read_config_file(self) -> dict:
        if not self.config_file.exists():
            logger.debug(f"No config file at {self.config_file}, using defaults")
            return {}

        try:
            with open(self.config_file) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise InvalidConfigError(
                f"Invalid configuration in {self.config_file}: {e}"
            ) from e

        if not isinstance(data, dict):
            raise InvalidConfigError(
                f"Invalid configuration in {self.config_file}: expected a mapping"
            )
        return data

    def _read_dotenv(self) -> dict[str, str | None]:
        if not self.env_file.is_file():
            return {}
        logger.debug(f"Loading environment from {self.env_file}")
        return dotenv_values(self.env_file)

    @staticmethod
    def _read_env(source) -> dict[str, str]:
        # Empty values count as unset
        return {
            field: source[name]
            for name, field in ENV_VARS.items()
            if source.get(name)
        }


def validate_required(config: GlobalConfig) -> GlobalConfig:
    """Check that Miniflux connection settings are present.

    Args:
        config: Loaded configuration

    Returns:
        Configuration with a cleaned API key

    Raises:
        ConfigError: If the Miniflux URL or API key is missing
        InvalidConfigError: If the API key is malformed
    """
    if not config.miniflux_api_key or not config.miniflux_url:
        raise ConfigError(MISSING_SETTINGS_MESSAGE)

    try:
        api_key = validate_api_key(config.miniflux_api_key)
    except APIKeyError as e:
        raise InvalidConfigError(str(e)) from e

    return config.model_copy(update={"miniflux_api_key": api_key})
