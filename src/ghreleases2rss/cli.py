"""CLI entry point for ghreleases2rss."""

import logging
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from ghreleases2rss.config.logging import LOGGER_NAME, setup_logging
from ghreleases2rss.config.manager import ConfigManager, validate_required
from ghreleases2rss.config.schema import GlobalConfig
from ghreleases2rss.github import get_release_feed_url
from ghreleases2rss.miniflux import MinifluxClient
from ghreleases2rss.runner import RunSummary, SubscriptionRunner
from ghreleases2rss.utils.errors import (
    CategoryNotFoundError,
    ConfigError,
    FileAccessError,
    Ghreleases2rssError,
    InvalidFormatError,
    MinifluxAuthenticationError,
)
from ghreleases2rss.utils.rate_limiter import RateLimiter
from ghreleases2rss.utils.retry import RetryConfig

app = typer.Typer(
    name="ghreleases2rss",
    help="Subscribe to GitHub projects' releases in your RSS reader",
    no_args_is_help=True,
)
console = Console()

CONFIG_DIR_OPTION = typer.Option(
    None, "--config-dir", help="Directory holding config.yaml"
)


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False, "--debug", "-d", help="Enable debug-level logging"
    ),
    log_file: Path | None = typer.Option(
        None, "--log-file", help="Write logs to file"
    ),
) -> None:
    """ghreleases2rss - Subscribe to GitHub repo release feeds in Miniflux."""
    setup_logging(verbose=debug, log_file=log_file)
    ctx.obj = {"debug": debug}


@app.command("version")
def show_version() -> None:
    """Show version information."""
    from ghreleases2rss import __version__

    console.print(f"[bold cyan]ghreleases2rss[/bold cyan] v{__version__}")


@app.command("resolve")
def resolve(
    identifiers: list[str] = typer.Argument(
        ..., help="GitHub URLs, owner/name pairs or ghcr.io image references"
    ),
) -> None:
    """Print the release feed URL for each repository identifier.

    Examples:
        ghreleases2rss resolve toozej/ghreleases2rss

        ghreleases2rss resolve ghcr.io/owner/image:latest https://github.com/owner/repo
    """
    failed = False
    for identifier in identifiers:
        try:
            console.print(get_release_feed_url(identifier), highlight=False, soft_wrap=True)
        except InvalidFormatError as e:
            console.print(f"[red]✗[/red] {identifier}: {e}", highlight=False)
            failed = True

    if failed:
        sys.exit(1)


@app.command("subscribe")
def subscribe(
    ctx: typer.Context,
    file: Path = typer.Option(
        ..., "--file", "-f", help="Input file with GitHub repo URLs or names"
    ),
    category: str | None = typer.Option(
        None, "--category", "-c", help="RSS feed category name"
    ),
    clear_category_feeds: bool = typer.Option(
        False,
        "--clear-category-feeds",
        "-r",
        help="Delete all feeds within category before subscribing to new feeds",
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Resolve feeds without changing Miniflux"
    ),
    config_dir: Path | None = CONFIG_DIR_OPTION,
) -> None:
    """Subscribe to the release feeds of every repository listed in a file.

    Examples:
        ghreleases2rss subscribe -f repos.txt

        ghreleases2rss subscribe -f repos.txt -c github -r
    """
    if clear_category_feeds and not category:
        console.print("[red]✗[/red] --clear-category-feeds requires --category")
        sys.exit(1)

    config = _load_config(ctx, config_dir)

    try:
        with _build_client(config) as client:
            runner = SubscriptionRunner(client, dry_run=dry_run)
            summary = runner.run(
                file,
                category=category,
                clear_category_feeds=clear_category_feeds,
            )
    except CategoryNotFoundError as e:
        console.print(f"[red]✗[/red] Error validating category: {e}")
        sys.exit(1)
    except FileAccessError as e:
        console.print(f"[red]✗[/red] Error opening file: {e}")
        sys.exit(1)
    except MinifluxAuthenticationError as e:
        console.print(f"[red]✗[/red] {e}")
        console.print("[dim]  Check your MINIFLUX_API_KEY[/dim]")
        sys.exit(1)
    except Ghreleases2rssError as e:
        console.print(f"[red]✗[/red] Error: {e}")
        sys.exit(1)

    _print_summary(summary, dry_run)


@app.command("categories")
def list_categories(
    ctx: typer.Context,
    config_dir: Path | None = CONFIG_DIR_OPTION,
) -> None:
    """List the categories configured in Miniflux."""
    config = _load_config(ctx, config_dir)

    try:
        with _build_client(config) as client:
            categories = client.get_categories()
    except Ghreleases2rssError as e:
        console.print(f"[red]✗[/red] Error: {e}")
        sys.exit(1)

    if not categories:
        console.print("[yellow]No categories found.[/yellow]")
        return

    table = Table(title="[bold]Miniflux Categories[/bold]")
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Title", style="green")

    for item in sorted(categories, key=lambda c: c.title.casefold()):
        table.add_row(str(item.id), item.title)

    console.print(table)


def _load_config(ctx: typer.Context, config_dir: Path | None) -> GlobalConfig:
    try:
        config = validate_required(ConfigManager(config_dir=config_dir).load_config())
    except ConfigError as e:
        console.print(f"[red]✗[/red] Error: {e}")
        sys.exit(1)

    # --debug wins over the configured level
    if not (ctx.obj or {}).get("debug"):
        logging.getLogger(LOGGER_NAME).setLevel(config.log_level)

    return config


def _build_client(config: GlobalConfig) -> MinifluxClient:
    return MinifluxClient(
        base_url=config.miniflux_url,
        api_key=config.miniflux_api_key,
        timeout=config.request_timeout_seconds,
        rate_limiter=RateLimiter(
            rate=config.rate_limit.requests_per_second,
            burst=config.rate_limit.burst,
        ),
        retry_config=RetryConfig(max_attempts=config.retry_attempts),
    )


def _print_summary(summary: RunSummary, dry_run: bool) -> None:
    verb = "Would subscribe" if dry_run else "Subscribed"

    if summary.deleted:
        console.print(f"[green]✓[/green] Deleted {summary.deleted} feed(s) from category")
    console.print(f"[green]✓[/green] {verb}: {summary.subscribed}")
    if summary.skipped:
        console.print(f"[dim]  Already subscribed: {summary.skipped}[/dim]")

    if summary.errors:
        table = Table(title="[bold]Failed entries[/bold]")
        table.add_column("Entry", style="cyan")
        table.add_column("Error", style="red")
        for entry in summary.errors:
            table.add_row(entry.identifier, entry.error)
        console.print(table)
        console.print(
            f"\n[dim]Invalid: {summary.invalid}, failed: {summary.failed}[/dim]"
        )


if __name__ == "__main__":
    app()
