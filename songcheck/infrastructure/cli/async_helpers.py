"""Async helpers for CLI commands to eliminate duplication."""

import asyncio
from collections.abc import Awaitable, Callable, Coroutine
from functools import wraps
from typing import Any, cast

from songcheck.infrastructure.cli.ui import command_error_handler, console


def async_operation(
    progress_text: str | None = None,
) -> Callable[[Callable[..., Awaitable[Any]]], Callable[..., Any]]:
    """Run an async command function under ``asyncio.run``.

    Args:
        progress_text: Optional spinner text shown while the command runs
    """

    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Any]:
        @command_error_handler
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            coro = cast("Coroutine[Any, Any, Any]", func(*args, **kwargs))
            if progress_text is None:
                return asyncio.run(coro)
            with console.status(progress_text):
                return asyncio.run(coro)

        return wrapper

    return decorator
