"""Batch subscription of GitHub release feeds.

Reads one repository identifier per line, resolves each to its release
feed and subscribes to it in Miniflux. A bad line never stops the batch:
it is logged, counted and skipped.
"""

import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import TextIO

from pydantic import BaseModel, Field

from ghreleases2rss.github import get_release_feed_url
from ghreleases2rss.miniflux import MinifluxClient
from ghreleases2rss.utils.errors import (
    ConfigError,
    FileAccessError,
    InvalidFormatError,
    MinifluxError,
)

logger = logging.getLogger(__name__)


class FailedEntry(BaseModel):
    """An identifier or feed that could not be processed."""

    identifier: str
    error: str


class RunSummary(BaseModel):
    """Outcome of a subscription run."""

    subscribed: int = 0
    skipped: int = 0
    invalid: int = 0
    failed: int = 0
    deleted: int = 0
    errors: list[FailedEntry] = Field(default_factory=list)

    @property
    def processed(self) -> int:
        return self.subscribed + self.skipped + self.invalid + self.failed


def open_file_securely(file_path: Path | str, base_dir: Path | None = None) -> TextIO:
    """Open a file for reading, refusing paths outside ``base_dir``.

    Args:
        file_path: File to open
        base_dir: Allowed root directory (defaults to the working directory)

    Returns:
        Open text file handle

    Raises:
        FileAccessError: If the file is outside ``base_dir`` or cannot be opened
    """
    root = (base_dir or Path.cwd()).resolve()
    resolved = Path(file_path).resolve()

    if not resolved.is_relative_to(root):
        raise FileAccessError(
            "file path traversal detected or file outside allowed directory"
        )

    try:
        # Undecodable bytes become U+FFFD so the line is rejected, not the file
        return open(resolved, encoding="utf-8", errors="replace")
    except OSError as e:
        raise FileAccessError(f"error opening file: {e}") from e


def read_identifiers(lines: Iterable[str]) -> Iterator[str]:
    """Yield identifiers, skipping blank lines and ``#`` comments."""
    for line in lines:
        identifier = line.strip()
        if not identifier or identifier.startswith("#"):
            continue
        yield identifier


class SubscriptionRunner:
    """Subscribes Miniflux to the release feeds listed in a file."""

    def __init__(self, client: MinifluxClient, dry_run: bool = False) -> None:
        """Initialize the runner.

        Args:
            client: Miniflux API client
            dry_run: Resolve feeds and log them without subscribing
        """
        self.client = client
        self.dry_run = dry_run

    def run(
        self,
        file_path: Path | str,
        category: str | None = None,
        clear_category_feeds: bool = False,
    ) -> RunSummary:
        """Process every identifier in ``file_path``.

        Args:
            file_path: Newline-delimited repository identifiers
            category: Miniflux category title to subscribe into
            clear_category_feeds: Delete the category's feeds first

        Returns:
            Summary of what was subscribed, skipped and rejected

        Raises:
            ConfigError: If clearing is requested without a category
            CategoryNotFoundError: If the category does not exist
            FileAccessError: If the input file cannot be opened
            MinifluxError: If listing categories or feeds fails
        """
        if clear_category_feeds and not category:
            raise ConfigError("clearing category feeds requires a category")

        summary = RunSummary()

        # Open before touching Miniflux so a bad path changes nothing
        with open_file_securely(file_path) as f:
            category_id = self.client.get_category_id(category) if category else None

            if clear_category_feeds and category_id is not None:
                self._clear_category(category_id, summary)

            existing = self._existing_feed_urls()

            for identifier in read_identifiers(f):
                self._process(identifier, category_id, existing, summary)

        return summary

    def _clear_category(self, category_id: int, summary: RunSummary) -> None:
        feed_ids = self.client.get_category_feeds(category_id)
        logger.info(f"Deleting feeds from categoryId: {category_id}")

        for feed_id in feed_ids:
            if self.dry_run:
                logger.info(f"Pretending to delete feedId {feed_id}")
                continue

            logger.debug(f"Deleting feedId {feed_id}")
            try:
                self.client.delete_feed(feed_id)
            except MinifluxError as e:
                logger.error(f"Error deleting feedId {feed_id}: {e}")
                summary.failed += 1
                summary.errors.append(FailedEntry(identifier=f"feed {feed_id}", error=str(e)))
            else:
                summary.deleted += 1

    def _existing_feed_urls(self) -> set[str]:
        # Cleared feeds are already gone, so this runs after clearing
        if self.dry_run:
            return set()
        return {feed.feed_url for feed in self.client.get_feeds()}

    def _process(
        self,
        identifier: str,
        category_id: int | None,
        existing: set[str],
        summary: RunSummary,
    ) -> None:
        try:
            feed_url = get_release_feed_url(identifier)
        except InvalidFormatError as e:
            logger.warning(f"Error processing repo '{identifier}': {e}")
            summary.invalid += 1
            summary.errors.append(FailedEntry(identifier=identifier, error=str(e)))
            return

        if feed_url in existing:
            logger.info(f"Already subscribed to feed: {feed_url}")
            summary.skipped += 1
            return

        if self.dry_run:
            logger.info(f"Pretending to subscribe to feed: {feed_url}")
            summary.subscribed += 1
            existing.add(feed_url)
            return

        try:
            self.client.subscribe(feed_url, category_id)
        except MinifluxError as e:
            logger.error(f"Failed to subscribe to feed {feed_url}: {e}")
            summary.failed += 1
            summary.errors.append(FailedEntry(identifier=identifier, error=str(e)))
            return

        summary.subscribed += 1
        existing.add(feed_url)
