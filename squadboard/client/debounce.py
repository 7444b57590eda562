# squadboard/client/debounce.py
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Union

logger = logging.getLogger("squadboard.client")

Callback = Callable[[], Union[Awaitable[Any], Any]]


class DebounceTimer:
    """Single-slot cancellable timer.

    Scheduling replaces whatever was pending, so at most one callback is ever
    waiting. Coroutines returned by a fired callback are tracked until they
    finish; ``wait()`` joins them.
    """

    def __init__(self):
        self._handle: Optional[asyncio.TimerHandle] = None
        self._callback: Optional[Callback] = None
        self._running: set[asyncio.Future] = set()

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self, callback: Callback, delay: float) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._callback = callback
        self._handle = loop.call_later(delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._callback = None

    async def flush(self) -> Any:
        """Run the pending callback now instead of at its deadline."""
        callback = self._callback
        self.cancel()
        if callback is None:
            return None
        result = callback()
        if asyncio.iscoroutine(result) or isinstance(result, asyncio.Future):
            return await result
        return result

    async def wait(self) -> None:
        if self._running:
            await asyncio.gather(*list(self._running), return_exceptions=True)

    def _fire(self) -> None:
        callback = self._callback
        self._handle = None
        self._callback = None
        if callback is None:
            return
        result = callback()
        if asyncio.iscoroutine(result) or isinstance(result, asyncio.Future):
            future = asyncio.ensure_future(result)
            self._running.add(future)
            future.add_done_callback(self._finished)

    def _finished(self, future: asyncio.Future) -> None:
        self._running.discard(future)
        if not future.cancelled() and future.exception() is not None:
            logger.error("debounced_callback_failed", exc_info=future.exception())
