"""GitHub repository identifier normalization.

Turns the identifiers users put in their repo lists into the Atom feed
GitHub publishes for each repository's releases. Four shapes are
recognized, checked in this order (first match wins):

- GHCR container images: ``ghcr.io/owner/name`` or ``ghcr.io/owner/name:tag``
- Full GitHub URLs: ``https://github.com/owner/name``
- Shorthand: ``owner/name``
- Anything else, which is rejected
"""

import logging
from collections.abc import Callable
from urllib.parse import unquote, urlsplit

from ghreleases2rss.utils.errors import InvalidFormatError, InvalidURLError

logger = logging.getLogger(__name__)

GITHUB_HOST = "github.com"
GHCR_HOST = "ghcr.io"
RELEASE_FEED_TEMPLATE = "https://github.com/{repo}/releases.atom"


def _host_port(netloc: str) -> str:
    """Strip userinfo from a netloc, keeping any port."""
    return netloc.rpartition("@")[2]


def _from_ghcr_image(identifier: str) -> str:
    """Resolve ``ghcr.io/owner/name[:tag]`` to ``owner/name``."""
    parts = identifier.split("/")
    if len(parts) < 3:
        raise InvalidFormatError("invalid GHCR URL format")

    owner = parts[1]
    name = parts[2].split(":")[0]  # drop image tag
    if not owner or not name:
        raise InvalidFormatError("invalid GHCR URL format")

    return f"{owner}/{name}"


def _from_github_url(identifier: str) -> str:
    """Resolve a github.com URL to its path.

    The path is kept as-is, so extra segments after owner/name survive.
    """
    try:
        parsed = urlsplit(identifier)
    except ValueError as e:
        raise InvalidURLError("invalid GitHub URL") from e

    # Host and port must be exactly github.com; userinfo is ignored
    if _host_port(parsed.netloc) != GITHUB_HOST:
        raise InvalidURLError("invalid GitHub URL")

    return unquote(parsed.path).removeprefix("/")


def _from_shorthand(identifier: str) -> str:
    """Resolve ``owner/name`` shorthand."""
    parts = identifier.split("/")
    if len(parts) != 2 or not all(parts):
        raise InvalidFormatError("invalid username/reponame format")

    owner, name = parts
    return f"{owner}/{name}"


def _fallback(identifier: str) -> str:
    """Reject identifiers that matched no other shape."""
    try:
        host = _host_port(urlsplit(identifier).netloc)
    except ValueError:
        host = None

    if "/" not in identifier or host != "":
        raise InvalidFormatError(
            "invalid GitHub repo format, expected username/repoName"
        )

    return identifier


# Ordered (predicate, resolver) table; the order is part of the contract
# because an identifier can match several predicates.
_RESOLVERS: list[tuple[Callable[[str], bool], Callable[[str], str]]] = [
    (lambda identifier: GHCR_HOST in identifier, _from_ghcr_image),
    (lambda identifier: GITHUB_HOST in identifier, _from_github_url),
    (lambda identifier: "/" in identifier, _from_shorthand),
    (lambda identifier: True, _fallback),
]


def resolve_repository(identifier: str) -> str:
    """Resolve a repository identifier to its ``owner/name`` path.

    Args:
        identifier: GitHub URL, ``owner/name`` shorthand or GHCR image reference

    Returns:
        Repository path on github.com

    Raises:
        InvalidURLError: If a github.com URL cannot be parsed or has another host
        InvalidFormatError: If the identifier matches no recognized shape
    """
    for matches, resolve in _RESOLVERS:
        if matches(identifier):
            return resolve(identifier)

    # The fallback predicate always matches
    raise AssertionError("unreachable")


def get_release_feed_url(identifier: str) -> str:
    """Get the releases Atom feed URL for a repository identifier.

    Example:
        >>> get_release_feed_url("ghcr.io/username/repo:latest")
        'https://github.com/username/repo/releases.atom'

    Args:
        identifier: GitHub URL, ``owner/name`` shorthand or GHCR image reference

    Returns:
        ``https://github.com/{owner}/{name}/releases.atom``

    Raises:
        InvalidFormatError: If the identifier cannot be resolved
    """
    repo = resolve_repository(identifier)
    logger.info(f"Repo is set to: {repo}")
    return RELEASE_FEED_TEMPLATE.format(repo=repo)
