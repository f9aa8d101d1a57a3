"""
Request Scheduler - Serialized, rate-limited access to the inference endpoint.

At most one request is in flight. Requests run strictly FIFO, and after
each one (success or failure) the scheduler waits the configured delay
before starting the next. A failing request resolves only its own future;
queued work keeps going. The worker stops when the queue is empty and is
restarted by the next submit(). close() waits for outstanding requests
but not for the delay after the last one.
"""

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar


logger = logging.getLogger(__name__)


P = TypeVar("P")
R = TypeVar("R")


@dataclass
class ScheduledRequest(Generic[P, R]):
    """An enqueued payload and the future its outcome is delivered to."""
    payload: P
    future: "asyncio.Future[R]"


class RequestScheduler(Generic[P, R]):
    """
    Single-concurrency FIFO queue in front of an async handler.

    Usage:
        scheduler = RequestScheduler(client.analyze, delay_seconds=2.0)
        analysis = await scheduler.submit("great movie")
    """

    DEFAULT_DELAY_SECONDS = 2.0

    def __init__(
        self,
        handler: Callable[[P], Awaitable[R]],
        delay_seconds: Optional[float] = None,
    ) -> None:
        self._handler = handler
        self.delay_seconds = (
            self.DEFAULT_DELAY_SECONDS if delay_seconds is None else delay_seconds
        )
        self._queue: deque[ScheduledRequest[P, R]] = deque()
        self._worker: Optional[asyncio.Task] = None
        self._current: Optional[ScheduledRequest[P, R]] = None
        self._drained: Optional[asyncio.Event] = None

        self._stats = {
            "submitted": 0,
            "succeeded": 0,
            "failed": 0,
        }

    @property
    def pending(self) -> int:
        """Requests waiting to start (the in-flight one excluded)."""
        return len(self._queue)

    @property
    def is_processing(self) -> bool:
        return self._worker is not None and not self._worker.done()

    @property
    def in_flight(self) -> bool:
        return self._current is not None

    def get_stats(self) -> dict[str, Any]:
        return {
            **self._stats,
            "pending": self.pending,
            "delay_seconds": self.delay_seconds,
        }

    def submit(self, payload: P) -> "asyncio.Future[R]":
        """
        Enqueue a payload. Await the returned future for its outcome.

        Must be called from within a running event loop.
        """
        loop = asyncio.get_running_loop()
        request = ScheduledRequest(payload=payload, future=loop.create_future())
        self._queue.append(request)
        if self._drained is None:
            self._drained = asyncio.Event()
        self._drained.clear()
        self._stats["submitted"] += 1

        if not self.is_processing:
            self._worker = loop.create_task(self._process_queue())

        return request.future

    async def join(self) -> None:
        """Wait until the queue has drained and the worker is idle."""
        while self._worker is not None and not self._worker.done():
            await asyncio.shield(self._worker)

    async def close(self) -> None:
        """
        Wait for every outstanding request, then stop the worker.

        The spacing delay after the last request is not waited out;
        nothing is left to space it from.
        """
        while self.is_processing:
            await self._drained.wait()
            if self._drained.is_set():
                break

        worker = self._worker
        if worker is not None and not worker.done():
            worker.cancel()
            try:
                await worker
            except asyncio.CancelledError:
                pass
        self._worker = None

    async def _process_queue(self) -> None:
        try:
            while self._queue:
                request = self._queue.popleft()
                if request.future.cancelled():
                    continue

                self._current = request
                try:
                    result = await self._handler(request.payload)
                except Exception as e:
                    self._stats["failed"] += 1
                    logger.warning(f"Scheduled request failed: {e}")
                    if not request.future.done():
                        request.future.set_exception(e)
                else:
                    self._stats["succeeded"] += 1
                    if not request.future.done():
                        request.future.set_result(result)
                finally:
                    self._current = None

                if not self._queue:
                    self._drained.set()
                await asyncio.sleep(self.delay_seconds)
        finally:
            self._drained.set()
