"""One-shot deferred execution for channel_feed.

This module provides the in-process timer used to debounce media group
flushes. Timers do not survive a restart.
"""

import asyncio
from collections.abc import Awaitable, Callable, Hashable

from channel_feed.logging import get_logger

__all__ = [
    "FlushScheduler",
]

logger = get_logger(__name__)

FlushCallback = Callable[[], Awaitable[object]]


class FlushScheduler:
    """Keeps at most one pending one-shot timer per key.

    A timer fires once after its delay and is then forgotten, so a later
    schedule for the same key starts a new timer. Scheduling while a timer
    is pending does not extend it.

    Example:
        scheduler = FlushScheduler()
        scheduler.schedule(("mg1", "c1"), 5.0, lambda: aggregator.flush(...))
    """

    def __init__(self) -> None:
        self._pending: dict[Hashable, asyncio.Task[None]] = {}
        self._tasks: set[asyncio.Task[None]] = set()

    def schedule(self, key: Hashable, delay: float, callback: FlushCallback) -> bool:
        """Schedule a callback to run once after ``delay`` seconds.

        Args:
            key: Aggregation key
            delay: Delay in seconds
            callback: Coroutine function to run

        Returns:
            True if a new timer was started, False if one is already pending
        """
        if key in self._pending:
            return False
        task = asyncio.create_task(self._run(key, delay, callback))
        self._pending[key] = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.debug("timer_scheduled", key=str(key), delay=delay)
        return True

    def _forget(self, key: Hashable) -> None:
        if self._pending.get(key) is asyncio.current_task():
            del self._pending[key]

    async def _run(self, key: Hashable, delay: float, callback: FlushCallback) -> None:
        try:
            await asyncio.sleep(delay)
        finally:
            self._forget(key)
        try:
            await callback()
        except Exception:
            logger.exception("timer_callback_failed", key=str(key))

    def cancel(self, key: Hashable) -> bool:
        """Cancel a pending timer.

        Returns:
            True if a pending timer was cancelled, False if none was pending
        """
        task = self._pending.pop(key, None)
        if task is None:
            return False
        task.cancel()
        return True

    def is_pending(self, key: Hashable) -> bool:
        return key in self._pending

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def wait_idle(self) -> None:
        """Wait until every scheduled timer has fired and its callback finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel pending timers and wait for running callbacks to finish."""
        for key in list(self._pending):
            self.cancel(key)
        await self.wait_idle()
