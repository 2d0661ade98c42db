"""Debounced persistence: collapse bursts of writes into a single flush."""

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from songcheck.config import get_logger

logger = get_logger(__name__)


class DebouncedFlush:
    """Dirty flag plus a restartable timer on the running event loop.

    ``schedule()`` marks the state dirty and (re)starts the quiet-period
    timer, so only the last of several rapid calls leads to a flush.
    Without a running loop the flush stays pending until ``flush_now()``.
    Flushes are serialized by a lock and never overlap.
    """

    def __init__(self, flush: Callable[[], Awaitable[None]], delay_seconds: float) -> None:
        self._flush = flush
        self.delay_seconds = delay_seconds
        self._dirty = False
        self._timer: asyncio.Task[None] | None = None
        self._lock = asyncio.Lock()

    @property
    def pending(self) -> bool:
        """True when changes have not been flushed yet."""
        return self._dirty

    @property
    def timer_active(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def schedule(self) -> None:
        self._dirty = True
        self._cancel_timer()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._timer = loop.create_task(self._flush_after_delay())

    @asynccontextmanager
    async def suspended(self) -> AsyncIterator[None]:
        """Drop pending changes and hold off flushes while the body runs.

        Waits for a flush that is already writing to finish first.
        """
        self._cancel_timer()
        async with self._lock:
            self._dirty = False
            yield

    async def flush_now(self) -> None:
        """Flush immediately if dirty, cancelling any running timer."""
        self._cancel_timer()
        await self._flush_if_dirty()

    async def _flush_after_delay(self) -> None:
        await asyncio.sleep(self.delay_seconds)
        # Detach so a reschedule during the write does not cancel it
        self._timer = None
        try:
            await self._flush_if_dirty()
        except Exception as e:
            logger.opt(exception=e).error(f"Debounced flush failed: {e}")

    async def _flush_if_dirty(self) -> None:
        async with self._lock:
            if not self._dirty:
                return
            self._dirty = False
            try:
                await self._flush()
            except Exception:
                self._dirty = True
                raise

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None
