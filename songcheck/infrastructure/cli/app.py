"""songcheck CLI - Main application entry point and app structure."""

from typing import Annotated

from rich.console import Console
import typer

from songcheck import __version__
from songcheck.config import get_logger, log_startup_info, settings, setup_loguru_logger
from songcheck.infrastructure.cli import cache_commands
from songcheck.infrastructure.cli.compare_commands import register_compare_commands
from songcheck.infrastructure.cli.status_commands import register_status_commands

VERSION = __version__

# Initialize console and logger with reasonable width
console = Console(width=80)
logger = get_logger(__name__)

app = typer.Typer(
    help=f"🎵 songcheck v{VERSION} - Check local track durations against Spotify",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
    pretty_exceptions_enable=True,
    pretty_exceptions_short=True,
    pretty_exceptions_show_locals=False,
)

register_compare_commands(app)
register_status_commands(app)

app.add_typer(
    cache_commands.app,
    name="cache",
    help="Inspect and manage the local Spotify cache",
    rich_help_panel="🗄️ Cache",
)


@app.command(name="version", rich_help_panel="⚙️ System")
def version_command() -> None:
    """Show version information."""
    console.print(f"[bold bright_blue]🎵 songcheck[/bold bright_blue] [dim]v{VERSION}[/dim]")


@app.callback()
def init_cli(
    ctx: typer.Context,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose output"),
    ] = False,
) -> None:
    """Initialize songcheck CLI."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    setup_loguru_logger(verbose)
    log_startup_info()

    settings.data_dir.mkdir(parents=True, exist_ok=True)


def main() -> int:
    """Application entry point."""
    try:
        return app() or 0
    except Exception:
        logger.exception("Unhandled exception")
        return 1
