"""Shared fixtures for ghreleases2rss tests."""

import json
from pathlib import Path

import httpx
import pytest

from ghreleases2rss.miniflux import MinifluxClient
from ghreleases2rss.utils.rate_limiter import RateLimiter
from ghreleases2rss.utils.retry import TEST_RETRY_CONFIG

API_KEY = "test-api-key-0123456789"
BASE_URL = "https://miniflux.example.com"


class FakeMiniflux:
    """In-memory stand-in for the Miniflux v1 API."""

    def __init__(self) -> None:
        self.categories = [
            {"id": 1, "title": "All", "user_id": 1},
            {"id": 7, "title": "GitHub", "user_id": 1},
        ]
        self.feeds: dict[int, dict] = {}
        self.requests: list[httpx.Request] = []
        self.next_feed_id = 100
        self.fail_subscribe: dict[str, int] = {}  # feed_url -> status code
        self.fail_delete: set[int] = set()

    def add_feed(self, feed_url: str, category_id: int = 1) -> int:
        feed_id = self.next_feed_id
        self.next_feed_id += 1
        category = next(c for c in self.categories if c["id"] == category_id)
        self.feeds[feed_id] = {
            "id": feed_id,
            "feed_url": feed_url,
            "title": feed_url,
            "category": category,
        }
        return feed_id

    def writes(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method in ("POST", "DELETE")]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.headers.get("X-Auth-Token") != API_KEY:
            return httpx.Response(401, json={"error_message": "Access Unauthorized"})

        path = request.url.path
        parts = path.strip("/").split("/")

        if request.method == "GET" and path == "/v1/categories":
            return httpx.Response(200, json=self.categories)

        if request.method == "GET" and path == "/v1/feeds":
            return httpx.Response(200, json=list(self.feeds.values()))

        if request.method == "GET" and parts[:2] == ["v1", "categories"] and parts[-1] == "feeds":
            category_id = int(parts[2])
            feeds = [f for f in self.feeds.values() if f["category"]["id"] == category_id]
            return httpx.Response(200, json=feeds)

        if request.method == "POST" and path == "/v1/feeds":
            body = json.loads(request.content)
            feed_url = body["feed_url"]
            if feed_url in self.fail_subscribe:
                return httpx.Response(
                    self.fail_subscribe[feed_url],
                    json={"error_message": "unable to fetch feed"},
                )
            if any(f["feed_url"] == feed_url for f in self.feeds.values()):
                return httpx.Response(400, json={"error_message": "This feed already exists."})
            feed_id = self.add_feed(feed_url, body.get("category_id", 1))
            return httpx.Response(201, json={"feed_id": feed_id})

        if request.method == "DELETE" and parts[:2] == ["v1", "feeds"]:
            feed_id = int(parts[2])
            if feed_id in self.fail_delete:
                return httpx.Response(500, json={"error_message": "database error"})
            if self.feeds.pop(feed_id, None) is None:
                return httpx.Response(404, json={"error_message": "Not Found"})
            return httpx.Response(204)

        raise AssertionError(f"unexpected request: {request.method} {request.url!s}")


@pytest.fixture(autouse=True)
def fast_retry_config(monkeypatch):
    """Use fast retry configuration for all tests to avoid long delays."""
    monkeypatch.setattr("ghreleases2rss.utils.retry.DEFAULT_RETRY_CONFIG", TEST_RETRY_CONFIG)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's Miniflux settings out of tests."""
    for name in ("MINIFLUX_URL", "MINIFLUX_API_KEY", "GHRELEASES2RSS_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_miniflux() -> FakeMiniflux:
    return FakeMiniflux()


@pytest.fixture
def miniflux_client(fake_miniflux: FakeMiniflux):
    client = MinifluxClient(
        BASE_URL,
        API_KEY,
        rate_limiter=RateLimiter(rate=1000.0, burst=1000),
        transport=httpx.MockTransport(fake_miniflux.handler),
    )
    yield client
    client.close()


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch) -> Path:
    """Run the test from inside tmp_path."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def repos_file(workdir: Path) -> Path:
    path = workdir / "repos.txt"
    path.write_text(
        "\n".join(
            [
                "https://github.com/username/repo",
                "",
                "# container images",
                "ghcr.io/owner/image:latest",
                "  other/project  ",
                "username",
                "a/b/c",
            ]
        )
        + "\n"
    )
    return path
