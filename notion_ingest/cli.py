"""
Bookmarks2Notion - Import CLI

Command-line interface for importing Google Bookmarks into Notion.

Usage:
    python -m notion_ingest.cli import --file GoogleBookmarks.html
    python -m notion_ingest.cli stats --file GoogleBookmarks.html
    python -m notion_ingest.cli status
"""

import logging
import sys
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from config import Config, load_env

from . import __version__
from .checkpoint import CheckpointMismatchError, CheckpointStore
from .google_parser import Bookmark, BookmarkParseError, GoogleBookmarksParser
from .notion_api import NotionClient
from .uploader import Uploader

console = Console()


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def parse_file(file: Path, config: Config) -> list[Bookmark]:
    """Parse the bookmarks file, exiting with status 1 on failure"""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Parsing bookmarks file...", total=None)

        try:
            parser = GoogleBookmarksParser(file, config.importer.no_label_tag)
            bookmarks = parser.parse()
        except (OSError, BookmarkParseError) as e:
            console.print(f"[red]Error parsing file:[/red] {e}")
            sys.exit(1)

        progress.update(task, completed=True)

    return bookmarks


def print_dispatch(index: int, bookmark: Bookmark) -> None:
    # Verbatim "<index> <title>", never wrapped or emoji-rendered
    click.echo(f"{index} {bookmark.title}")


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--env-file",
    default=".env",
    show_default=True,
    help="Environment file with NOTION_TOKEN and NOTION_DATABASE_ID",
)
@click.pass_context
def cli(ctx: click.Context, env_file: str):
    """Bookmarks2Notion - Google Bookmarks to Notion importer"""
    load_env(env_file)
    config = Config()
    configure_logging(config.importer.log_level)
    ctx.obj = config


@cli.command("import")
@click.option(
    "--file", "-f",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to Google Bookmarks HTML export (default: BOOKMARKS_FILE)"
)
@click.option(
    "--resume-from", "-r",
    type=click.IntRange(min=0),
    default=None,
    help="Index of the first bookmark to import (default: from checkpoint)"
)
@click.option(
    "--delay", "-d",
    type=click.FloatRange(min=0),
    default=None,
    help="Seconds to wait between requests (default: REQUEST_DELAY)"
)
@click.option(
    "--dry-run", "-n",
    is_flag=True,
    help="Parse and show what would be imported without calling Notion"
)
@click.pass_obj
def import_bookmarks(config: Config, file: Path | None, resume_from: int | None, delay: float | None, dry_run: bool):
    """
    Import bookmarks into the Notion database.

    Bookmarks are imported oldest first. Progress is checkpointed after
    every page, so rerunning continues after the last imported bookmark.
    """
    file = file or config.importer.bookmarks_file
    delay = config.importer.request_delay if delay is None else delay

    console.print(f"\n[bold blue]Bookmarks2Notion Import[/bold blue]")
    console.print(f"File: {file}")

    bookmarks = parse_file(file, config)
    console.print(f"[green]Parsed {len(bookmarks)} unique bookmarks[/green]")

    if not bookmarks:
        console.print("[yellow]No bookmarks found.[/yellow]")
        return

    store = CheckpointStore(config.importer.checkpoint_file)
    if resume_from is None:
        try:
            resume_from = store.resume_index(bookmarks)
        except CheckpointMismatchError as e:
            console.print(f"[red]Checkpoint does not match the bookmarks file:[/red] {escape(str(e))}")
            console.print("Run 'reset' to start over, or pass --resume-from to choose the index.")
            sys.exit(1)
    if resume_from:
        console.print(f"Resuming from index {resume_from}")

    remaining = max(len(bookmarks) - resume_from, 0)
    if not remaining:
        console.print("[yellow]All bookmarks already imported.[/yellow]")
        return

    if dry_run:
        console.print(f"[yellow]Dry run mode - {remaining} bookmarks would be imported[/yellow]")
        return

    try:
        notion_settings = config.notion
    except ValidationError:
        console.print("[red]Configuration error:[/red] NOTION_TOKEN and NOTION_DATABASE_ID must be set")
        sys.exit(1)

    console.print()
    try:
        with NotionClient(notion_settings) as notion:
            uploader = Uploader(notion, delay=delay, checkpoint=store, on_dispatch=print_dispatch)
            result = uploader.upload(bookmarks, resume_from)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/yellow] Rerun to resume from the checkpoint.")
        sys.exit(130)

    console.print()
    results_table = Table(title="Results")
    results_table.add_column("Metric", style="cyan")
    results_table.add_column("Count", justify="right", style="green")

    results_table.add_row("Total bookmarks", str(result.total))
    results_table.add_row("Skipped (before resume index)", str(result.skipped))
    results_table.add_row("Pages created", str(result.created))

    console.print(results_table)

    if not result.ok:
        console.print(f"[red]Import stopped at index {result.failed_index}:[/red] {result.error_message}")
        console.print("Rerun to retry from that bookmark.")
        sys.exit(1)

    console.print("[bold green]Import Complete![/bold green]")


@cli.command()
@click.option(
    "--file", "-f",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to Google Bookmarks HTML export (default: BOOKMARKS_FILE)"
)
@click.pass_obj
def stats(config: Config, file: Path | None):
    """
    Show statistics about a bookmarks file without importing.

    Useful for previewing what would be imported.
    """
    file = file or config.importer.bookmarks_file

    console.print(f"\n[bold blue]Bookmarks File Statistics[/bold blue]")
    console.print(f"File: {file}")
    console.print()

    try:
        parser = GoogleBookmarksParser(file, config.importer.no_label_tag)
        file_stats = parser.get_stats()
    except (OSError, BookmarkParseError) as e:
        console.print(f"[red]Error parsing file:[/red] {e}")
        sys.exit(1)

    console.print(f"Total links: {file_stats['total_links']}")
    console.print(f"Unique URLs: {file_stats['unique_urls']}")
    console.print(f"Duplicate links: {file_stats['duplicates']}")
    console.print(f"Untagged bookmarks: {file_stats['untagged']}")
    console.print()

    if file_stats['tags']:
        table = Table(title="Tags Breakdown")
        table.add_column("Tag", style="cyan")
        table.add_column("Links", justify="right", style="green")

        for tag in file_stats['tags']:
            table.add_row(tag['label'], str(tag['count']))

        console.print(table)
    else:
        console.print("[yellow]No labeled folders found in the bookmarks file.[/yellow]")


@cli.command()
@click.pass_obj
def status(config: Config):
    """
    Show the import checkpoint.
    """
    checkpoint = CheckpointStore(config.importer.checkpoint_file).load()

    console.print(f"\n[bold blue]Import Status[/bold blue]")
    console.print(f"Checkpoint file: {config.importer.checkpoint_file}")

    if checkpoint is None:
        console.print("[yellow]No checkpoint; the next import starts at index 0.[/yellow]")
        return

    console.print(f"Last imported index: {checkpoint.last_index}")
    console.print(f"Last imported URL: {checkpoint.url}", markup=False)
    console.print(f"Updated at: {checkpoint.updated_at.isoformat()}")
    console.print(f"Next import starts at index {checkpoint.next_index}")


@cli.command()
@click.pass_obj
def reset(config: Config):
    """
    Delete the import checkpoint so the next import starts from the beginning.
    """
    if CheckpointStore(config.importer.checkpoint_file).clear():
        console.print("[green]Checkpoint removed.[/green]")
    else:
        console.print("[yellow]No checkpoint to remove.[/yellow]")


def main():
    """Entry point for the CLI"""
    cli()


if __name__ == "__main__":
    main()
