"""Service status commands for songcheck CLI."""

from rich.table import Table
import typer

from songcheck.config import get_logger, resilient_operation, settings
from songcheck.infrastructure.cli.async_helpers import async_operation
from songcheck.infrastructure.cli.runtime import open_cache
from songcheck.infrastructure.cli.ui import console
from songcheck.infrastructure.connectors import ClientCredentialsAuth

logger = get_logger(__name__)


def register_status_commands(app: typer.Typer) -> None:
    """Register status commands with the Typer app."""
    app.command(
        name="status",
        help="Check Spotify connection status and cache availability",
        rich_help_panel="⚙️ System",
    )(status)


@resilient_operation("spotify_check")
async def _check_spotify() -> tuple[bool, str]:
    """Check that the configured client credentials are accepted."""
    credentials = settings.credentials
    auth = ClientCredentialsAuth(
        client_id=credentials.spotify_client_id,
        client_secret=credentials.spotify_client_secret,
        token_url=settings.api.auth_endpoint,
    )
    if not auth.has_credentials:
        return False, "Not configured - set SPOTIFY_CLIENT_ID and SPOTIFY_CLIENT_SECRET"
    if await auth.authenticate():
        return True, "Authenticated with client credentials"
    return False, "Authentication failed - check client ID and secret"


async def _check_cache() -> tuple[bool, str]:
    async with open_cache() as cache:
        stats = cache.stats()
    if not stats.enabled:
        return False, "Disabled"
    return (
        stats.search_count + stats.track_count > 0,
        f"{stats.search_count} searches, {stats.track_count} tracks "
        f"({stats.approx_size_kb:.2f} KB)",
    )


def status() -> None:
    """Check Spotify connection status and cache availability."""
    _run_status_check()


@async_operation("Checking connection status...")
async def _run_status_check() -> None:
    results = [
        ("Spotify", *await _check_spotify()),
        ("Cache", *await _check_cache()),
    ]

    table = Table(title="songcheck Status")
    table.add_column("Service", style="cyan")
    table.add_column("Status", style="bold")
    table.add_column("Details", style="dim")
    for service, ok, details in results:
        status_text = "[green]✓ Ready[/green]" if ok else "[red]✗ Unavailable[/red]"
        table.add_row(service, status_text, details)
    console.print(table)

    spotify_ok = results[0][1]
    if not spotify_ok:
        console.print(
            "\n[yellow]Spotify is not available. "
            "Use [bold]--cache-only[/bold] to compare against cached data.[/yellow]"
        )
    logger.success(
        "Status check completed",
        spotify=spotify_ok,
        cache=results[1][1],
    )
