"""Filesystem locations used by ghreleases2rss."""

from pathlib import Path

import platformdirs

APP_NAME = "ghreleases2rss"


def get_config_dir() -> Path:
    """Get the user configuration directory (XDG-aware)."""
    return Path(platformdirs.user_config_dir(APP_NAME))


def get_config_file() -> Path:
    """Get the path of the global config.yaml."""
    return get_config_dir() / "config.yaml"
