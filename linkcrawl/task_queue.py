"""Bounded-concurrency task queue for asyncio handlers."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Awaitable, Callable, Deque, Generic, Set, TypeVar

from .errors import ConfigurationError

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

TaskHandler = Callable[[T], Awaitable[None]]


class TaskQueueError(ConfigurationError):
    """Raised when the queue is constructed with invalid limits."""


class TaskQueue(Generic[T]):
    """Run at most ``max_concurrency`` handler calls at a time.

    Handlers may enqueue more items while they run. ``drain()`` waits until
    the queue is empty and nothing is in flight, including work added along
    the way. A failing handler only loses its own item: the slot is released
    and the failure is logged, never re-raised.

    Example usage:

        async def handle(url: str) -> None:
            ...

        queue = TaskQueue(handle, max_concurrency=4)
        queue.enqueue("https://example.com/")
        await queue.drain()
    """

    def __init__(self, handler: TaskHandler[T], max_concurrency: int = 1):
        if max_concurrency <= 0:
            raise TaskQueueError(
                f"max_concurrency must be > 0 (got {max_concurrency})"
            )

        self._handler = handler
        self._max_concurrency = max_concurrency
        self._queued: Deque[T] = deque()
        self._running: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        """Number of items waiting for a free slot."""
        return len(self._queued)

    @property
    def in_flight(self) -> int:
        """Number of handler calls currently running."""
        return len(self._running)

    def enqueue(self, item: T) -> None:
        """Queue *item*, starting it right away if a slot is free.

        Must be called while an event loop is running.
        """
        self._queued.append(item)
        self._try_pop()

    async def drain(self) -> None:
        """Wait until all queued and transitively enqueued work is done."""
        while self._queued or self._running:
            if not self._try_pop():
                done, _ = await asyncio.wait(
                    self._running, return_when=asyncio.FIRST_COMPLETED
                )
                self._running.difference_update(done)

    def cancel(self) -> None:
        """Drop pending items and cancel in-flight tasks.

        The calling task (when it is one of ours) is left alone so it can
        finish on its own. Call ``drain()`` afterwards to let the cancelled
        tasks settle.
        """
        self._queued.clear()
        current = asyncio.current_task()
        for task in list(self._running):
            if task is not current:
                task.cancel()

    def _try_pop(self) -> bool:
        if len(self._running) >= self._max_concurrency or not self._queued:
            return False

        item = self._queued.popleft()
        task = asyncio.get_running_loop().create_task(self._handler(item))
        self._running.add(task)
        task.add_done_callback(self._on_done)
        return True

    def _on_done(self, task: asyncio.Task) -> None:
        self._running.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            LOGGER.debug("Task handler failed: %s", exc)
