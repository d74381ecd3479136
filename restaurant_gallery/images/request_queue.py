"""
Request queue for staggered provider calls.

Provider calls go through the queue so bursts never exceed a fixed number of
in-flight requests, and successive requests start at least ``delay_seconds``
apart. The queue does not decide whether a call may happen at all; that is the
rate governor's job.
"""
from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class QueueTask:
    run: Callable[[], Awaitable[Any]]
    future: asyncio.Future
    enqueued_at: float = field(default_factory=time.monotonic)


class RequestQueue:
    """Strict FIFO dispatcher with fixed concurrency and minimum start spacing.

    A failing task only fails its own ``enqueue`` call; siblings keep their
    place in line. Tasks are never retried here.
    """

    def __init__(self, concurrency: int = 2, delay_seconds: float = 1.0) -> None:
        if concurrency <= 0:
            raise ValueError(f"concurrency must be positive, got: {concurrency}")
        if delay_seconds < 0:
            raise ValueError(f"delay_seconds must not be negative, got: {delay_seconds}")

        self.concurrency = concurrency
        self.delay_seconds = delay_seconds
        self._pending: deque[QueueTask] = deque()
        self._in_flight = 0
        self._last_start: float | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._slots: asyncio.Semaphore | None = None
        self._dispatcher: asyncio.Task | None = None
        self._running: set[asyncio.Task] = set()

    def pending(self) -> int:
        return len(self._pending)

    def in_flight(self) -> int:
        return self._in_flight

    def stats(self) -> dict:
        return {
            "concurrency": self.concurrency,
            "delay_seconds": self.delay_seconds,
            "pending": self.pending(),
            "in_flight": self.in_flight(),
        }

    def _bind_loop(self) -> asyncio.AbstractEventLoop:
        loop = asyncio.get_running_loop()
        if loop is not self._loop:
            # Primitives from a previous loop cannot be awaited here
            if self._pending:
                logger.warning("Request queue moved to a new event loop, dropping %d stale tasks", len(self._pending))
            self._loop = loop
            self._slots = asyncio.Semaphore(self.concurrency)
            self._pending.clear()
            self._in_flight = 0
            self._dispatcher = None
            self._running = set()
        return loop

    async def enqueue(self, run: Callable[[], Awaitable[T]]) -> T:
        """Schedule ``run`` and wait for its result (or its exception)."""
        loop = self._bind_loop()
        task = QueueTask(run=run, future=loop.create_future())
        self._pending.append(task)
        if self._dispatcher is None or self._dispatcher.done():
            self._dispatcher = loop.create_task(self._dispatch())
        return await task.future

    async def _dispatch(self) -> None:
        assert self._slots is not None
        while self._pending:
            await self._slots.acquire()

            if self._last_start is not None and self.delay_seconds > 0:
                wait = self._last_start + self.delay_seconds - time.monotonic()
                if wait > 0:
                    await asyncio.sleep(wait)

            if not self._pending:
                self._slots.release()
                break

            task = self._pending.popleft()
            if task.future.cancelled():
                self._slots.release()
                continue

            self._last_start = time.monotonic()
            self._in_flight += 1
            # The loop only keeps weak references to tasks
            runner = asyncio.get_running_loop().create_task(self._run(task))
            self._running.add(runner)
            runner.add_done_callback(self._running.discard)

    async def _run(self, task: QueueTask) -> None:
        try:
            result = await task.run()
        except Exception as exc:
            logger.warning("Queued request failed after %.0fms: %r",
                           (time.monotonic() - task.enqueued_at) * 1000, exc)
            if not task.future.done():
                task.future.set_exception(exc)
        else:
            if not task.future.done():
                task.future.set_result(result)
        finally:
            self._in_flight -= 1
            assert self._slots is not None
            self._slots.release()


async def batch_process(
    items: Iterable[T],
    process: Callable[[T], Awaitable[R]],
    queue: RequestQueue,
) -> list[R]:
    """Run ``process(item)`` for each item through ``queue``; results keep input order."""
    return list(await asyncio.gather(*(queue.enqueue(lambda item=item: process(item)) for item in items)))
