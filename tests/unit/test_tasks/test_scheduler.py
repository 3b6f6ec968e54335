"""
Unit tests for the asyncio task scheduler.
"""
import asyncio

import pytest

from app.tasks.scheduler import AsyncioTaskScheduler


class TestAsyncioTaskScheduler:
    """Test cases for AsyncioTaskScheduler."""

    @pytest.mark.asyncio
    async def test_job_runs_after_delay(self):
        """Test the job runs once the delay has elapsed."""
        scheduler = AsyncioTaskScheduler()
        ran = asyncio.Event()

        async def job():
            ran.set()

        handle = scheduler.schedule(0.01, job, name="quick")

        assert scheduler.pending_count == 1
        await asyncio.wait_for(ran.wait(), timeout=1)
        await asyncio.sleep(0.01)

        assert handle.done
        assert not handle.cancelled
        assert scheduler.pending_count == 0

    @pytest.mark.asyncio
    async def test_schedule_returns_immediately(self):
        """Test scheduling does not wait for the delay."""
        delays = []
        release = asyncio.Event()

        async def sleep(delay):
            delays.append(delay)
            await release.wait()

        scheduler = AsyncioTaskScheduler(sleep=sleep)
        ran = []

        async def job():
            ran.append(True)

        scheduler.schedule(2.0, job)
        await asyncio.sleep(0)

        assert delays == [2.0]
        assert ran == []

        release.set()
        await asyncio.sleep(0.01)

        assert ran == [True]

    @pytest.mark.asyncio
    async def test_cancel_all(self):
        """Test outstanding jobs are cancelled and never run."""
        scheduler = AsyncioTaskScheduler()
        ran = []

        async def job():
            ran.append(True)

        first = scheduler.schedule(10, job)
        second = scheduler.schedule(10, job)

        assert scheduler.cancel_all() == 2
        await asyncio.sleep(0.01)

        assert first.cancelled and second.cancelled
        assert first.done and second.done
        assert scheduler.pending_count == 0
        assert ran == []
        assert scheduler.cancel_all() == 0

    @pytest.mark.asyncio
    async def test_failing_job_logged_and_dropped(self):
        """Test a raising job does not leak its exception."""
        scheduler = AsyncioTaskScheduler()

        async def job():
            raise RuntimeError("boom")

        handle = scheduler.schedule(0, job)
        await asyncio.sleep(0.01)

        assert handle.done
        assert handle._task.exception() is None
        assert scheduler.pending_count == 0
