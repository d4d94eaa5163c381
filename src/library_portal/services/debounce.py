"""Debounced event producer for keystroke-rate input."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass
class Debouncer(Generic[T]):
    """Fires ``callback`` once input has been quiet for ``delay_seconds``.

    Each ``push`` restarts the quiet window with the newest value. Once the
    window elapses the callback runs to completion; later pushes never
    cancel a running callback, only a pending one.
    """

    delay_seconds: float
    callback: Callable[[T], Awaitable[None]]
    _pending: asyncio.Task[None] | None = field(default=None, init=False)
    _running: set[asyncio.Task[None]] = field(default_factory=set, init=False)

    def push(self, value: T) -> None:
        """Schedule ``value``; must be called from a running event loop."""
        self.cancel()
        self._pending = asyncio.get_running_loop().create_task(self._fire(value))

    def cancel(self) -> None:
        """Drop a pending value that has not fired yet."""
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    @property
    def is_pending(self) -> bool:
        return self._pending is not None

    async def drain(self) -> None:
        """Wait for the pending value to fire and every callback to finish."""
        while self._pending is not None or self._running:
            tasks = set(self._running)
            if self._pending is not None:
                tasks.add(self._pending)
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _fire(self, value: T) -> None:
        await asyncio.sleep(self.delay_seconds)
        task = asyncio.current_task()
        self._pending = None
        if task is not None:
            self._running.add(task)
        try:
            await self.callback(value)
        finally:
            if task is not None:
                self._running.discard(task)
