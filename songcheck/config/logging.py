"""Logging configuration and utilities using Loguru.

This module provides centralized logging setup for songcheck, including
structured logging with Loguru and an error handling decorator for
external API calls.

Public API:
----------
setup_loguru_logger(verbose: bool = False) -> None
    Configure Loguru logger for the application

get_logger(name: str) -> Logger
    Get a context-aware logger for your module
    Usage: logger = get_logger(__name__)

@resilient_operation(operation_name: str)
    Decorator for logging errors raised by external API calls
    Usage: @resilient_operation("spotify_get_track")

log_startup_info() -> None
    Log the effective configuration at debug level
"""

from collections.abc import Awaitable, Callable
import functools
from pathlib import Path
import sys
from typing import Any, ParamSpec, TypeVar

from loguru import logger

from .settings import Settings, settings as default_settings

P = ParamSpec("P")
R = TypeVar("R")


def setup_loguru_logger(verbose: bool = False, app_settings: Settings | None = None) -> None:
    """Configure Loguru logger for the application.

    Args:
        verbose: Enable verbose logging with debug level and detailed tracebacks
        app_settings: Settings to read log levels and file from

    Note:
        - Removes default logger and sets up console and file handlers
        - Console format is colorized and simplified
        - File format is JSON serialized with rotation and retention
    """
    config = (app_settings or default_settings).logging

    logger.remove()

    log_file_path = Path(config.log_file)
    log_file_path.parent.mkdir(parents=True, exist_ok=True)

    logger.configure(extra={"service": "songcheck", "module": "root"})

    # Console handler - adjust level based on verbose flag
    console_level = "DEBUG" if verbose else config.console_level
    logger.add(
        sink=sys.stderr,
        level=console_level,
        format=(
            "<green>{time:HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:"
            "<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        colorize=True,
        backtrace=verbose,
        diagnose=verbose,
    )

    # File handler - detailed structured output
    logger.add(
        sink=str(log_file_path),
        level=config.file_level,
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {extra[service]} | {extra[module]} | {name}:{function}:{line} | {message}",
        rotation="10 MB",
        retention="1 week",
        compression="zip",
        backtrace=True,
        diagnose=True,
        enqueue=not config.real_time_debug,
        catch=True,
        serialize=True,
    )


def get_logger(name: str) -> Any:  # Use Any for Loguru logger type
    """Get a pre-configured logger instance for the given module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Loguru logger bound with module and service context

    Example:
        ```python
        logger = get_logger(__name__)
        logger.info("Cache loaded", searches=12)
        ```
    """
    return logger.bind(module=name, service="songcheck")


def log_startup_info(app_settings: Settings | None = None) -> None:
    """Log application configuration at debug level."""
    local_logger = get_logger(__name__)
    config_dict = (app_settings or default_settings).model_dump()

    local_logger.debug("Configuration:")
    for section_name, section_values in config_dict.items():
        if isinstance(section_values, dict):
            local_logger.debug("  {}:", section_name.upper())
            for key, value in section_values.items():
                if "secret" in key:
                    value = "***" if value else ""
                local_logger.debug("    {}: {}", key.upper(), value)
        else:
            local_logger.debug("  {}: {}", section_name.upper(), section_values)


def resilient_operation(operation_name: str | None = None):
    """Decorator for service boundary operations with standardized error logging.

    Use on external API calls so failures are logged with their operation
    name before they propagate.

    Example:
        >>> @resilient_operation("spotify_get_track")
        >>> async def get_track(track_id):
        >>>     return await client.get(track_id)
    """

    def decorator(
        func: Callable[P, Awaitable[R]],
    ) -> Callable[P, Awaitable[R]]:
        op_name = operation_name or func.__name__

        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                logger.opt(exception=e).error(f"Error in {op_name}: {e!s}")
                raise

        return wrapper

    return decorator
