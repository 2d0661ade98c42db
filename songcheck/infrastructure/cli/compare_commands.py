"""Track comparison and lookup commands for songcheck CLI."""

import asyncio
from enum import StrEnum
from pathlib import Path
import signal
from typing import Annotated

from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn
import typer

from songcheck.domain.entities import ComparisonReport, ComparisonResult
from songcheck.infrastructure.cli.async_helpers import async_operation
from songcheck.infrastructure.cli.runtime import open_runtime
from songcheck.infrastructure.cli.ui import (
    console,
    display_comparison_report,
    display_track,
)
from songcheck.infrastructure.connectors import TRACK_ID_PATTERN
from songcheck.infrastructure.sources import load_local_tracks


class OutputFormat(StrEnum):
    TABLE = "table"
    JSON = "json"


def register_compare_commands(app: typer.Typer) -> None:
    """Register compare and lookup commands with the Typer app."""
    app.command(
        name="compare",
        help="Compare local track durations with Spotify",
        rich_help_panel="🎵 Comparison",
    )(compare)
    app.command(
        name="lookup",
        help="Show a Spotify track by URL or ID",
        rich_help_panel="🎵 Comparison",
    )(lookup)


def compare(
    manifest: Annotated[
        Path,
        typer.Argument(help="JSON manifest of local tracks", exists=True, dir_okay=False),
    ],
    cache_only: Annotated[
        bool, typer.Option("--cache-only", help="Use cached data only, never the network")
    ] = False,
    issues_only: Annotated[
        bool, typer.Option("--issues-only", help="Show only tracks with issues")
    ] = False,
    output_format: Annotated[
        OutputFormat, typer.Option("--format", "-f", help="Output format")
    ] = OutputFormat.TABLE,
) -> None:
    """Compare local track durations with their Spotify matches."""
    report = _run_compare(manifest, cache_only, output_format is OutputFormat.TABLE)
    display_comparison_report(report, issues_only=issues_only, output_format=output_format)


@async_operation()
async def _run_compare(manifest: Path, cache_only: bool, show_progress: bool) -> ComparisonReport:
    tracks = load_local_tracks(manifest)
    cancel_event = _cancel_on_interrupt()

    async with open_runtime(cache_only=cache_only) as runtime:
        if not show_progress:
            return await runtime.service.compare_tracks(
                tracks, cache_only=runtime.cache_only, cancel_event=cancel_event
            )

        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("Comparing tracks...", total=len(tracks))

            def advance(position: int, total: int, result: ComparisonResult) -> None:
                progress.update(task, completed=position, description=result.local.file_name)

            return await runtime.service.compare_tracks(
                tracks,
                cache_only=runtime.cache_only,
                cancel_event=cancel_event,
                progress_callback=advance,
            )


def _cancel_on_interrupt() -> asyncio.Event:
    """Event set by Ctrl+C, so the comparison stops after the current track."""
    cancel_event = asyncio.Event()
    try:
        asyncio.get_running_loop().add_signal_handler(signal.SIGINT, cancel_event.set)
    except NotImplementedError:
        # Signal handlers are unavailable on Windows event loops
        pass
    return cancel_event


def lookup(
    reference: Annotated[str, typer.Argument(help="open.spotify.com track URL or track ID")],
    cache_only: Annotated[
        bool, typer.Option("--cache-only", help="Use cached data only, never the network")
    ] = False,
) -> None:
    """Show a single Spotify track."""
    _run_lookup(reference, cache_only)


@async_operation("Looking up track...")
async def _run_lookup(reference: str, cache_only: bool) -> None:
    async with open_runtime(cache_only=cache_only) as runtime:
        catalog, use_cache_only = runtime.catalog, runtime.cache_only
        if TRACK_ID_PATTERN.match(reference):
            track = await catalog.get_track(reference, cache_only=use_cache_only)
        else:
            track = await catalog.get_track_from_url(reference, cache_only=use_cache_only)

    if track is None:
        console.print("[yellow]Track not found in the local cache.[/yellow]")
        raise typer.Exit(code=1)
    display_track(track)
