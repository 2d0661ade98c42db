"""Local cache management commands for songcheck CLI."""

from typing import Annotated

import typer

from songcheck.infrastructure.cli.async_helpers import async_operation
from songcheck.infrastructure.cli.runtime import open_cache, save_cache_preference
from songcheck.infrastructure.cli.ui import console, display_cache_stats

app = typer.Typer(help="Inspect and manage the local Spotify cache", no_args_is_help=True)


@app.command(name="stats")
def stats() -> None:
    """Show cache size and entry counts."""
    _run_stats()


@async_operation()
async def _run_stats() -> None:
    async with open_cache() as cache:
        display_cache_stats(cache.stats())


@app.command(name="clear")
def clear(
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
) -> None:
    """Delete all cached searches and tracks."""
    if not yes:
        typer.confirm("Clear the entire cache?", abort=True)
    _run_clear()


@async_operation()
async def _run_clear() -> None:
    async with open_cache() as cache:
        await cache.clear()
    console.print("[green]✓ Cache cleared[/green]")


@app.command(name="cleanup")
def cleanup() -> None:
    """Remove entries older than the maximum cache age."""
    _run_cleanup()


@async_operation()
async def _run_cleanup() -> None:
    async with open_cache() as cache:
        counts = cache.cleanup_expired()
    console.print(
        f"[green]✓ Removed {counts.searches_removed} expired searches "
        f"and {counts.tracks_removed} expired tracks[/green]"
    )


@app.command(name="enable")
def enable() -> None:
    """Use cached results for lookups."""
    _run_set_enabled(True)


@app.command(name="disable")
def disable() -> None:
    """Always query Spotify and store nothing new."""
    _run_set_enabled(False)


@async_operation()
async def _run_set_enabled(enabled: bool) -> None:
    async with open_cache() as cache:
        cache.set_enabled(enabled)
        await save_cache_preference(cache.storage, cache.config, enabled)
    console.print(f"[green]✓ Cache {'enabled' if enabled else 'disabled'}[/green]")
