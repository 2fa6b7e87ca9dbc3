"""
Command-line interface for Article Authoring.

Runs the engine's pieces outside the editor: SEO reports for a stored
content tree, slug formatting and availability checks, and inspection of
a file-backed draft store.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import AuthoringConfig
from .draft_sync import DraftSyncManager
from .models import CheckStatus, SeoReport, SlugStatus, normalize_content_document
from .seo_analyzer import analyze_seo
from .slug_client import HttpSlugChecker
from .slug_utils import format_as_slug, validate_slug_format
from .slug_validator import SlugAvailabilityValidator
from .storage import JsonFileStore, StorageError

console = Console()

STATUS_STYLES = {
    CheckStatus.PASS: "green",
    CheckStatus.WARNING: "yellow",
    CheckStatus.FAIL: "red",
}


@click.group()
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable verbose output.",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """Article authoring tools."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )


@main.command("seo-report")
@click.argument("content_json", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--title", "-t", type=str, default="", help="Article title.")
@click.option("--description", "-d", type=str, default="", help="Meta (small) description.")
@click.option("--keywords", "-k", type=str, default="", help="Comma-separated keywords.")
@click.option(
    "--extended",
    is_flag=True,
    default=False,
    help="Add heading-quality and explicit-keyword checks.",
)
@click.option(
    "--as-json",
    is_flag=True,
    default=False,
    help="Print the report as JSON instead of a table.",
)
def seo_report(
    content_json: Path,
    title: str,
    description: str,
    keywords: str,
    extended: bool,
    as_json: bool,
) -> None:
    """Score a content tree stored as JSON."""
    try:
        content = normalize_content_document(content_json.read_text(encoding="utf-8"))
    except OSError as e:
        console.print(f"[red]Error reading content:[/red] {e}")
        sys.exit(1)

    config = AuthoringConfig(extended_seo_checks=extended)
    report = analyze_seo(title, description, keywords=keywords, content=content, config=config)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        return

    _display_report(report)


@main.command()
@click.argument("text")
def slugify(text: str) -> None:
    """Format TEXT as a slug and check its format."""
    slug = format_as_slug(text)
    click.echo(slug)

    error = validate_slug_format(slug)
    if error:
        console.print(f"[red]Invalid slug:[/red] {error}")
        sys.exit(1)


@main.command("check-slug")
@click.argument("slug")
@click.option("--site-id", "-s", type=str, required=True, help="Site the slug belongs to.")
@click.option(
    "--api-url",
    type=str,
    envvar="ARTICLE_AUTHORING_API_BASE_URL",
    help="Base URL of the platform API.",
)
def check_slug(slug: str, site_id: str, api_url: Optional[str]) -> None:
    """Check whether SLUG is available within a site."""
    overrides = {"api_base_url": api_url} if api_url else {}
    config = AuthoringConfig(**overrides)

    with console.status("[bold green]Checking slug..."):
        state = asyncio.run(_check_slug(slug, site_id, config))

    if state.status == SlugStatus.AVAILABLE:
        console.print(f"[green]Available:[/green] {state.candidate}")
        return

    console.print(f"[red]{state.status.value.capitalize()}:[/red] {state.candidate} ({state.error_message})")
    sys.exit(1)


async def _check_slug(slug: str, site_id: str, config: AuthoringConfig):
    async with HttpSlugChecker(config) as checker:
        validator = SlugAvailabilityValidator(checker, site_id, config)
        return await validator.check_now(slug)


@main.group()
def draft() -> None:
    """Inspect or clear a file-backed draft store."""


@draft.command("show")
@click.option("--site-id", "-s", type=str, required=True, help="Site to load the draft for.")
@click.option("--store", type=click.Path(dir_okay=False, path_type=Path), required=True, help="Draft store file.")
def draft_show(site_id: str, store: Path) -> None:
    """Print the stored draft for a site."""
    manager = DraftSyncManager(JsonFileStore(store), site_id)
    record = manager.load()
    if record is None:
        console.print(f"[yellow]No draft stored for site '{site_id}'[/yellow]")
        sys.exit(1)

    click.echo(json.dumps(record.to_storage_dict(), indent=2, ensure_ascii=False))


@draft.command("clear")
@click.option("--store", type=click.Path(dir_okay=False, path_type=Path), required=True, help="Draft store file.")
@click.option("--site-id", "-s", type=str, default="", help="Site label used in log messages.")
def draft_clear(store: Path, site_id: str) -> None:
    """Remove the draft and the editor's cached content."""
    file_store = JsonFileStore(store)
    try:
        file_store.keys()
    except StorageError as e:
        console.print(f"[red]Storage error:[/red] {e}")
        sys.exit(1)

    DraftSyncManager(file_store, site_id).clear()
    console.print("[green]Draft cleared[/green]")


def _display_report(report: SeoReport) -> None:
    """Display an SEO report as a table."""
    table = Table(title="SEO Checks", show_header=True)
    table.add_column("Check", style="cyan")
    table.add_column("Status")
    table.add_column("Details")
    table.add_column("Recommendation", style="dim")

    for check in report.checks:
        style = STATUS_STYLES[check.status]
        table.add_row(
            check.title,
            f"[{style}]{check.status.value}[/{style}]",
            check.description,
            check.recommendation,
        )

    console.print(table)

    style = STATUS_STYLES[report.status]
    console.print(
        f"\n[bold]Overall:[/bold] [{style}]{report.status.value.upper()}[/{style}] "
        f"({report.pass_count} passed, {report.warning_count} warnings, {report.fail_count} failed)"
    )


def run_cli() -> None:
    """Entry point for the CLI."""
    main()


if __name__ == "__main__":
    run_cli()
