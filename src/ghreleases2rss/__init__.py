"""ghreleases2rss - Subscribe to GitHub release feeds in Miniflux."""

__version__ = "0.1.0"
