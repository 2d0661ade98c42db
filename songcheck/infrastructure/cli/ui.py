"""UI helpers for CLI interaction.

This module provides reusable UI components and helpers for the CLI,
keeping the presentation logic separate from business logic.
"""

from collections.abc import Callable
import functools
import json
from typing import ParamSpec, TypeVar

from rich.console import Console
from rich.markup import escape
from rich.table import Table
import typer

from songcheck.config import get_logger
from songcheck.domain.entities import (
    CatalogTrack,
    ComparisonReport,
    ComparisonStatus,
    format_duration,
)
from songcheck.infrastructure.cache import CacheStats

P = ParamSpec("P")
R = TypeVar("R")

# Initialize console and logger
console = Console()
logger = get_logger(__name__)

STATUS_STYLES = {
    ComparisonStatus.OK: "green",
    ComparisonStatus.WARNING: "yellow",
    ComparisonStatus.ERROR: "red",
    ComparisonStatus.NOT_FOUND: "magenta",
}


def command_error_handler(func: Callable[P, R]) -> Callable[P, R]:
    """Decorator to standardize error handling for CLI commands.

    This decorator wraps a command function to:
    1. Provide consistent error handling using Typer's Exit mechanism
    2. Log errors using Loguru with proper context
    3. Display user-friendly error messages with Rich
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        operation = func.__name__.strip("_").replace("_", " ")

        with logger.contextualize(operation=operation):
            try:
                logger.debug(f"Executing {operation}")
                return func(*args, **kwargs)

            except typer.Exit:
                raise

            except typer.Abort:
                logger.info(f"Operation {operation} aborted by user")
                raise

            except Exception as e:
                logger.exception(f"Error during {operation}")
                console.print(f"\n[bold red]✗ Error during {operation}:[/bold red] {escape(str(e))}")
                raise typer.Exit(code=1) from e

    return wrapper


def display_comparison_report(
    report: ComparisonReport, issues_only: bool = False, output_format: str = "table"
) -> None:
    """Render comparison results as a rich table or JSON."""
    results = [r for r in report.results if r.has_issue] if issues_only else report.results

    if output_format == "json":
        console.print_json(
            json.dumps(
                {
                    "total": len(report.results),
                    "issues": report.issues,
                    "cache_only": report.cache_only,
                    "cancelled": report.cancelled,
                    "results": [result.as_dict() for result in results],
                },
                ensure_ascii=False,
            )
        )
        return

    table = Table(title="Track Duration Comparison")
    table.add_column("File", style="cyan", overflow="fold")
    table.add_column("Title")
    table.add_column("Artist")
    table.add_column("Local", justify="right")
    table.add_column("Spotify", justify="right")
    table.add_column("Diff", justify="right")
    table.add_column("Status", style="bold")
    table.add_column("Details", style="dim", overflow="fold")

    for result in results:
        style = STATUS_STYLES[result.status]
        title = escape(result.title)
        if result.title_modified:
            title = f"{title} [dim](was: {escape(result.original_title)})[/dim]"
        details = result.not_found_reason or result.error_details or ""
        if result.error:
            details = f"{result.error}. {details}".strip()
        table.add_row(
            escape(result.local.file_name),
            title,
            escape(result.local.artist),
            result.local.formatted_duration,
            format_duration(result.catalog_duration_ms),
            format_duration(result.difference_ms),
            f"[{style}]{result.status}[/{style}]",
            escape(details),
        )

    console.print(table)

    summary = f"{len(report.results)} tracks compared, {report.issues} with issues"
    if report.cache_only:
        summary += " [dim](Using cached data)[/dim]"
    if report.cancelled:
        summary += " [yellow](cancelled)[/yellow]"
    console.print(f"\n[bold]{summary}[/bold]")


def display_track(track: CatalogTrack) -> None:
    """Show one catalog track."""
    table = Table(title="Spotify Track", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("ID", track.id)
    table.add_row("Name", escape(track.name))
    table.add_row("Artists", escape(", ".join(track.artist_names)))
    table.add_row("Album", escape(track.album_name or "Unknown"))
    table.add_row("Duration", format_duration(track.duration_ms))
    console.print(table)


def display_cache_stats(stats: CacheStats) -> None:
    table = Table(title="Cache Status")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Enabled", "[green]yes[/green]" if stats.enabled else "[red]no[/red]")
    table.add_row("Searches", str(stats.search_count))
    table.add_row("Tracks", str(stats.track_count))
    table.add_row("Size", f"{stats.approx_size_kb:.2f} KB")
    console.print(table)
