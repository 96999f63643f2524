"""Integration tests for CLI commands."""

from pathlib import Path

import httpx
import pytest
from typer.testing import CliRunner

from ghreleases2rss.cli import app
from ghreleases2rss.miniflux import MinifluxClient
from ghreleases2rss.utils.rate_limiter import RateLimiter

from tests.conftest import API_KEY, BASE_URL, FakeMiniflux

runner = CliRunner()


@pytest.fixture
def configured(monkeypatch, fake_miniflux: FakeMiniflux) -> FakeMiniflux:
    """Point the CLI at the fake Miniflux server."""
    monkeypatch.setenv("MINIFLUX_URL", BASE_URL)
    monkeypatch.setenv("MINIFLUX_API_KEY", API_KEY)

    def build_client(config) -> MinifluxClient:
        return MinifluxClient(
            config.miniflux_url,
            config.miniflux_api_key,
            rate_limiter=RateLimiter(rate=1000.0, burst=1000),
            transport=httpx.MockTransport(fake_miniflux.handler),
        )

    monkeypatch.setattr("ghreleases2rss.cli._build_client", build_client)
    return fake_miniflux


def _config_args(workdir: Path) -> list[str]:
    return ["--config-dir", str(workdir / "conf")]


class TestCLIVersion:
    """Tests for version command."""

    def test_version_command(self) -> None:
        """Test version command displays version."""
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "ghreleases2rss" in result.stdout
        assert "0.1.0" in result.stdout


class TestCLIResolve:
    """Tests for resolve command."""

    def test_resolve_identifiers(self) -> None:
        """Test each identifier prints its feed URL."""
        result = runner.invoke(
            app, ["resolve", "username/repo", "ghcr.io/owner/image:latest"]
        )

        assert result.exit_code == 0
        assert "https://github.com/username/repo/releases.atom" in result.stdout
        assert "https://github.com/owner/image/releases.atom" in result.stdout

    def test_resolve_invalid_identifier(self) -> None:
        """Test invalid identifiers are reported and fail the command."""
        result = runner.invoke(app, ["resolve", "username/repo", "username"])

        assert result.exit_code == 1
        assert "https://github.com/username/repo/releases.atom" in result.stdout
        assert "expected username/repoName" in result.stdout

    def test_resolve_with_debug_flag(self) -> None:
        """Test the global --debug flag is accepted."""
        result = runner.invoke(app, ["-d", "resolve", "username/repo"])

        assert result.exit_code == 0

    def test_resolve_writes_log_file(self, tmp_path: Path) -> None:
        """Test --log-file captures log records."""
        log_file = tmp_path / "logs" / "run.log"

        result = runner.invoke(app, ["--log-file", str(log_file), "resolve", "username/repo"])

        assert result.exit_code == 0
        assert "Repo is set to: username/repo" in log_file.read_text()


class TestCLISubscribe:
    """Tests for subscribe command."""

    def test_missing_configuration(self, workdir: Path, repos_file: Path) -> None:
        """Test subscribe fails without Miniflux settings."""
        result = runner.invoke(app, ["subscribe", "-f", "repos.txt", *_config_args(workdir)])

        assert result.exit_code == 1
        assert "miniflux API key or URL not set in environment variables" in result.stdout

    def test_missing_file_option(self) -> None:
        """Test --file is required."""
        result = runner.invoke(app, ["subscribe"])

        assert result.exit_code != 0

    def test_subscribe(
        self, workdir: Path, repos_file: Path, configured: FakeMiniflux
    ) -> None:
        """Test valid lines are subscribed and invalid ones reported."""
        result = runner.invoke(app, ["subscribe", "-f", "repos.txt", *_config_args(workdir)])

        assert result.exit_code == 0
        assert "Subscribed: 3" in result.stdout
        assert "Invalid: 2, failed: 0" in result.stdout
        assert len(configured.feeds) == 3

    def test_subscribe_into_category_with_clear(
        self, workdir: Path, repos_file: Path, configured: FakeMiniflux
    ) -> None:
        """Test -c and -r clear the category then subscribe into it."""
        old = configured.add_feed("https://github.com/old/project/releases.atom", 7)

        result = runner.invoke(
            app, ["subscribe", "-f", "repos.txt", "-c", "github", "-r", *_config_args(workdir)]
        )

        assert result.exit_code == 0
        assert "Deleted 1 feed(s)" in result.stdout
        assert old not in configured.feeds
        assert {feed["category"]["id"] for feed in configured.feeds.values()} == {7}

    def test_clear_requires_category(self, workdir: Path, repos_file: Path) -> None:
        """Test -r without -c is refused."""
        result = runner.invoke(app, ["subscribe", "-f", "repos.txt", "-r"])

        assert result.exit_code == 1
        assert "requires --category" in result.stdout

    def test_unknown_category(
        self, workdir: Path, repos_file: Path, configured: FakeMiniflux
    ) -> None:
        """Test an unknown category fails the command."""
        result = runner.invoke(
            app, ["subscribe", "-f", "repos.txt", "-c", "nope", *_config_args(workdir)]
        )

        assert result.exit_code == 1
        assert "category nope not found" in result.stdout
        assert configured.writes() == []

    def test_file_outside_working_directory(
        self, workdir: Path, configured: FakeMiniflux
    ) -> None:
        """Test path traversal is refused."""
        (workdir.parent / "elsewhere.txt").write_text("username/repo\n")

        result = runner.invoke(
            app, ["subscribe", "-f", "../elsewhere.txt", *_config_args(workdir)]
        )

        assert result.exit_code == 1
        assert "Error opening file" in result.stdout

    def test_wrong_api_key(
        self, workdir: Path, repos_file: Path, configured: FakeMiniflux, monkeypatch
    ) -> None:
        """Test authentication failures fail the command."""
        monkeypatch.setenv("MINIFLUX_API_KEY", "wrong-key")

        result = runner.invoke(app, ["subscribe", "-f", "repos.txt", *_config_args(workdir)])

        assert result.exit_code == 1
        assert "MINIFLUX_API_KEY" in result.stdout

    def test_dry_run(self, workdir: Path, repos_file: Path, configured: FakeMiniflux) -> None:
        """Test --dry-run leaves Miniflux untouched."""
        result = runner.invoke(
            app, ["subscribe", "-f", "repos.txt", "--dry-run", *_config_args(workdir)]
        )

        assert result.exit_code == 0
        assert "Would subscribe: 3" in result.stdout
        assert configured.writes() == []

    def test_reads_dotenv(self, workdir: Path, repos_file: Path, configured: FakeMiniflux, monkeypatch) -> None:
        """Test settings can come from .env in the working directory."""
        monkeypatch.delenv("MINIFLUX_URL")
        monkeypatch.delenv("MINIFLUX_API_KEY")
        (workdir / ".env").write_text(f"MINIFLUX_URL={BASE_URL}\nMINIFLUX_API_KEY={API_KEY}\n")

        result = runner.invoke(app, ["subscribe", "-f", "repos.txt", *_config_args(workdir)])

        assert result.exit_code == 0
        assert len(configured.feeds) == 3


class TestCLICategories:
    """Tests for categories command."""

    def test_list_categories(self, workdir: Path, configured: FakeMiniflux) -> None:
        """Test categories are shown in a table."""
        result = runner.invoke(app, ["categories", *_config_args(workdir)])

        assert result.exit_code == 0
        assert "GitHub" in result.stdout
        assert "All" in result.stdout

    def test_no_categories(self, workdir: Path, configured: FakeMiniflux) -> None:
        """Test an empty category list is reported."""
        configured.categories = []

        result = runner.invoke(app, ["categories", *_config_args(workdir)])

        assert result.exit_code == 0
        assert "No categories found" in result.stdout
