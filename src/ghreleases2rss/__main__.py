"""Allow ``python -m ghreleases2rss``."""

from ghreleases2rss.cli import app

app()
