"""
NewsHarvest CLI
===============

Command line interface for configuration checks, feed previews and
ingestion runs.

Usage:
    newsharvest --help                     # Show all commands
    newsharvest check-config               # Validate configuration
    newsharvest init-db                    # Initialize database
    newsharvest preview-feeds --limit 2    # Show raw items per feed
    newsharvest preview-normalized         # Show normalized articles per feed
    newsharvest ingest                     # Fetch, normalize and store all feeds
"""

import sys
import asyncio
from pathlib import Path
from typing import Any, Callable, Dict

import click
from rich.console import Console
from rich.table import Table

from .config.settings import get_settings
from .database.connection import DatabaseConnection
from .database.models import Article
from .database.schema import DatabaseSchema
from .normalization.normalizer import Normalizer
from .processing.feed_fetcher import FeedDocument, FeedFetcher
from .processing.ingestion_runner import IngestionRunner, RunSummary
from .storage.article_repository import SQLiteArticleRepository
from .utils.exceptions import ConfigurationError, FeedError
from .utils.logging import configure_application_logging

console = Console()

PREVIEW_HTML_LENGTH = 120


@click.group(invoke_without_command=True)
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, debug):
    """NewsHarvest - RSS ingestion and normalization pipeline."""
    ctx.ensure_object(dict)
    ctx.obj['debug'] = debug

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        return

    try:
        settings = get_settings()
    except ConfigurationError as e:
        console.print(f"[bold red]❌ {e.user_message}[/bold red]")
        sys.exit(1)

    configure_application_logging(
        log_level="DEBUG" if debug else settings.get_effective_log_level(),
        log_file=settings.logging.file_path,
        enable_console=settings.logging.console_logging,
        structured_logging=settings.logging.structured_logging,
        max_file_size_mb=settings.logging.max_file_size_mb,
        backup_count=settings.logging.backup_count,
    )


@cli.command()
def check_config():
    """Show resolved settings and configured feed sources."""
    console.print("[bold blue]🔧 Checking NewsHarvest Configuration[/bold blue]")

    settings = get_settings()

    table = Table(title="Configuration Status")
    table.add_column("Component", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Details")

    checks = [
        ("Feeds", _check_feed_config),
        ("Fetching", _check_fetch_config),
        ("Database", _check_database_config),
        ("Logging", _check_logging_config),
    ]

    all_passed = True
    for name, check_func in checks:
        status, details = check_func(settings)
        table.add_row(name, "✅ Valid" if status else "❌ Invalid", details)
        all_passed = all_passed and status

    console.print(table)

    feeds = settings.get_feed_urls()
    if feeds:
        feeds_table = Table(title="Feed Sources")
        feeds_table.add_column("#", style="cyan", justify="right")
        feeds_table.add_column("URL")
        for index, url in enumerate(feeds, start=1):
            feeds_table.add_row(str(index), url)
        console.print(feeds_table)

    if all_passed:
        console.print("[bold green]✅ All configuration checks passed![/bold green]")
    else:
        console.print("[bold red]❌ Configuration validation failed[/bold red]")
        sys.exit(1)


@cli.command()
def init_db():
    """Create the article store schema."""
    console.print("[bold blue]🗄️ Initializing NewsHarvest Database[/bold blue]")

    settings = get_settings()
    try:
        schema = DatabaseSchema(settings.database.path)
        schema.create_tables()
    except Exception as e:
        console.print(f"[bold red]❌ Database initialization error: {e}[/bold red]")
        sys.exit(1)

    if not schema.verify_schema():
        console.print("[bold red]❌ Database schema verification failed[/bold red]")
        sys.exit(1)

    console.print("[bold green]✅ Database initialized successfully![/bold green]")
    console.print(f"Database path: {settings.database.path}")


@cli.command()
@click.option('--limit', type=int, default=None, help='Items to show per feed (default from config)')
def preview_feeds(limit):
    """Fetch every feed and show its raw items."""
    limit = limit or get_settings().processing.preview_items

    def show(document: FeedDocument) -> None:
        if document.items:
            console.print(f"   Keys: {', '.join(sorted(document.items[0].keys()))}")
        for item in document.items[:limit]:
            console.print(_compact(item))

    asyncio.run(_preview(show))


@cli.command()
@click.option('--limit', type=int, default=None, help='Articles to show per feed (default from config)')
def preview_normalized(limit):
    """Fetch every feed and show the normalized articles without storing them."""
    settings = get_settings()
    limit = limit or settings.processing.preview_items
    normalizer = Normalizer(excerpt_max_length=settings.normalization.excerpt_max_length)

    def show(document: FeedDocument) -> None:
        for item in document.items[:limit]:
            console.print(_article_preview(normalizer.normalize(item)))

    asyncio.run(_preview(show))


@cli.command()
def ingest():
    """Fetch, normalize and store every configured feed."""
    console.print("[bold blue]🔄 Running NewsHarvest ingestion[/bold blue]")

    settings = get_settings()
    schema = DatabaseSchema(settings.database.path)
    schema.create_tables()

    db = DatabaseConnection(settings.database.path, settings.database.pool_size)
    runner = IngestionRunner(store=SQLiteArticleRepository(db))

    try:
        summary = asyncio.run(runner.run())
    except ConfigurationError as e:
        console.print(f"[bold red]❌ {e.user_message}[/bold red]")
        sys.exit(1)
    finally:
        db.close_all_connections()

    _print_summary(summary)


async def _preview(show: Callable[[FeedDocument], None]) -> None:
    feeds = get_settings().get_feed_urls()
    if not feeds:
        console.print("[bold red]❌ No feed sources configured[/bold red]")
        sys.exit(1)

    fetcher = FeedFetcher()
    async with fetcher.get_session() as session:
        for url in feeds:
            console.print(f"\n[bold blue]📡 {url}[/bold blue]")
            try:
                document = await fetcher.fetch(url, session)
            except FeedError as e:
                console.print(f"[bold red]❌ {e}[/bold red]")
                continue

            console.print(f"   Title: {document.title or 'Untitled'}")
            console.print(f"   Items: {document.item_count}")
            show(document)


def _compact(item: Dict[str, Any]) -> Dict[str, Any]:
    return {key: item.get(key) for key in ("title", "link", "guid", "iso_date", "pub_date")}


def _article_preview(article: Article) -> Dict[str, Any]:
    data = article.model_dump()
    html = data.get("content_html")
    if html and len(html) > PREVIEW_HTML_LENGTH:
        data["content_html"] = html[:PREVIEW_HTML_LENGTH] + "…"
    return data


def _print_summary(summary: RunSummary) -> None:
    table = Table(title="Ingestion Results")
    table.add_column("Feed", style="cyan")
    table.add_column("Inserted", justify="right", style="green")
    table.add_column("Duplicated", justify="right")
    table.add_column("Skipped", justify="right", style="yellow")
    table.add_column("Status")

    for outcome in summary.outcomes:
        status = f"❌ {outcome.error}" if outcome.failed else "✅ Done"
        table.add_row(
            outcome.feed_url,
            str(outcome.inserted),
            str(outcome.duplicated),
            str(outcome.skipped),
            status,
        )

    console.print(table)
    console.print(
        f"\n[bold blue]📊 Total: {summary.inserted} inserted, {summary.duplicated} duplicated, "
        f"{summary.skipped} skipped, {len(summary.failed_feeds)} failed feed(s)[/bold blue]"
    )


# Helper functions for configuration checks
def _check_feed_config(settings) -> tuple:
    feeds = settings.get_feed_urls()
    if not feeds:
        return False, "No feeds set (NEWSHARVEST_FEEDS__URLS or FEED_1, FEED_2, ...)"
    return True, f"{len(feeds)} feed(s)"


def _check_fetch_config(settings) -> tuple:
    fetch = settings.fetch
    return True, (
        f"Attempts: {fetch.max_attempts}, Backoff: {fetch.backoff_base_seconds}s, "
        f"Timeout: {fetch.request_timeout}s"
    )


def _check_database_config(settings) -> tuple:
    try:
        Path(settings.database.path).parent.mkdir(parents=True, exist_ok=True)
        return True, f"Path: {settings.database.path}"
    except OSError as e:
        return False, str(e)


def _check_logging_config(settings) -> tuple:
    try:
        if settings.logging.file_path:
            Path(settings.logging.file_path).parent.mkdir(parents=True, exist_ok=True)
        return True, f"Level: {settings.logging.level.value}, Console: {settings.logging.console_logging}"
    except OSError as e:
        return False, str(e)


def main() -> None:
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]👋 NewsHarvest interrupted by user[/yellow]")
        sys.exit(130)
