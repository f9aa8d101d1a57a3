"""
Request Scheduler Tests.

============================================================
PURPOSE
============================================================
TEST CATEGORIES:
- FIFO ordering and single concurrency
- Spacing between consecutive requests
- Failure isolation
- Worker restart after idle

============================================================
"""

import asyncio

import pytest

from sentiment_analysis.scheduler import RequestScheduler


class RecordingHandler:
    """Async handler that records start/end times and concurrency."""

    def __init__(self, duration: float = 0.0, fail_on=()) -> None:
        self.duration = duration
        self.fail_on = set(fail_on)
        self.calls = []
        self.started_at = []
        self.finished_at = []
        self.active = 0
        self.max_active = 0

    async def __call__(self, payload):
        loop = asyncio.get_running_loop()
        self.calls.append(payload)
        self.started_at.append(loop.time())
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.duration)
            if payload in self.fail_on:
                raise RuntimeError(f"failed: {payload}")
            return f"done: {payload}"
        finally:
            self.active -= 1
            self.finished_at.append(loop.time())


# ============================================================
# ORDERING
# ============================================================

class TestOrdering:
    """Tests for FIFO order and single concurrency."""

    @pytest.mark.asyncio
    async def test_fifo_order(self):
        handler = RecordingHandler(duration=0.01)
        scheduler = RequestScheduler(handler, delay_seconds=0.0)

        futures = [scheduler.submit(p) for p in ("a", "b", "c", "d")]
        results = await asyncio.gather(*futures)

        assert handler.calls == ["a", "b", "c", "d"]
        assert results == ["done: a", "done: b", "done: c", "done: d"]

    @pytest.mark.asyncio
    async def test_one_request_in_flight(self):
        handler = RecordingHandler(duration=0.02)
        scheduler = RequestScheduler(handler, delay_seconds=0.0)

        await asyncio.gather(*(scheduler.submit(i) for i in range(5)))

        assert handler.max_active == 1

    @pytest.mark.asyncio
    async def test_pending_count(self):
        handler = RecordingHandler(duration=0.01)
        scheduler = RequestScheduler(handler, delay_seconds=0.0)

        futures = [scheduler.submit(i) for i in range(3)]
        assert scheduler.pending == 3
        assert scheduler.is_processing

        await asyncio.gather(*futures)
        await scheduler.join()

        assert scheduler.pending == 0
        assert not scheduler.is_processing
        assert not scheduler.in_flight


# ============================================================
# SPACING
# ============================================================

class TestSpacing:
    """Tests for the delay between consecutive requests."""

    @pytest.mark.asyncio
    async def test_delay_between_requests(self):
        delay = 0.05
        handler = RecordingHandler()
        scheduler = RequestScheduler(handler, delay_seconds=delay)

        await asyncio.gather(*(scheduler.submit(i) for i in range(3)))

        for previous_end, next_start in zip(handler.finished_at, handler.started_at[1:]):
            assert next_start - previous_end >= delay * 0.9

    @pytest.mark.asyncio
    async def test_delay_applies_after_failure(self):
        delay = 0.05
        handler = RecordingHandler(fail_on={"bad"})
        scheduler = RequestScheduler(handler, delay_seconds=delay)

        first = scheduler.submit("bad")
        second = scheduler.submit("good")
        await asyncio.gather(first, second, return_exceptions=True)

        assert handler.started_at[1] - handler.finished_at[0] >= delay * 0.9

    def test_default_delay(self):
        scheduler = RequestScheduler(RecordingHandler())

        assert scheduler.delay_seconds == 2.0


# ============================================================
# FAILURES
# ============================================================

class TestFailureIsolation:
    """Tests that one failure does not affect queued work."""

    @pytest.mark.asyncio
    async def test_failure_resolves_only_its_own_future(self):
        handler = RecordingHandler(fail_on={"b"})
        scheduler = RequestScheduler(handler, delay_seconds=0.0)

        results = await asyncio.gather(
            scheduler.submit("a"),
            scheduler.submit("b"),
            scheduler.submit("c"),
            return_exceptions=True,
        )

        assert results[0] == "done: a"
        assert isinstance(results[1], RuntimeError)
        assert results[2] == "done: c"

        stats = scheduler.get_stats()
        assert stats["submitted"] == 3
        assert stats["succeeded"] == 2
        assert stats["failed"] == 1

    @pytest.mark.asyncio
    async def test_cancelled_request_is_skipped(self):
        handler = RecordingHandler(duration=0.01)
        scheduler = RequestScheduler(handler, delay_seconds=0.0)

        first = scheduler.submit("a")
        second = scheduler.submit("b")
        second.cancel()

        await first
        await scheduler.join()

        assert handler.calls == ["a"]


# ============================================================
# RESTART
# ============================================================

class TestRestart:
    """Tests for the worker restarting after the queue drains."""

    @pytest.mark.asyncio
    async def test_submit_after_idle_restarts_worker(self):
        handler = RecordingHandler()
        scheduler = RequestScheduler(handler, delay_seconds=0.0)

        assert await scheduler.submit("first") == "done: first"
        await scheduler.join()
        assert not scheduler.is_processing

        assert await scheduler.submit("second") == "done: second"
        assert handler.calls == ["first", "second"]


# ============================================================
# CLOSE
# ============================================================

class TestClose:
    """Tests for stopping the scheduler."""

    @pytest.mark.asyncio
    async def test_close_skips_trailing_delay(self):
        handler = RecordingHandler()
        scheduler = RequestScheduler(handler, delay_seconds=30.0)

        assert await scheduler.submit("only") == "done: only"
        await asyncio.wait_for(scheduler.close(), timeout=1.0)

        assert not scheduler.is_processing

    @pytest.mark.asyncio
    async def test_close_finishes_queued_requests(self):
        delay = 0.02
        handler = RecordingHandler(duration=0.01)
        scheduler = RequestScheduler(handler, delay_seconds=delay)

        futures = [scheduler.submit(p) for p in ("a", "b", "c")]
        await scheduler.close()

        assert all(f.done() for f in futures)
        assert handler.calls == ["a", "b", "c"]
        for previous_end, next_start in zip(handler.finished_at, handler.started_at[1:]):
            assert next_start - previous_end >= delay * 0.9

    @pytest.mark.asyncio
    async def test_close_when_idle(self):
        scheduler = RequestScheduler(RecordingHandler())

        await scheduler.close()

        assert not scheduler.is_processing
