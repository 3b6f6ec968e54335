"""
Delayed background task scheduling with cancellation handles.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Dict, List, Optional
from uuid import uuid4

from app.utils.logging import get_logger

logger = get_logger(__name__)

Job = Callable[[], Awaitable[None]]
Sleep = Callable[[float], Awaitable[None]]


class ScheduledTask:
    """Handle to a scheduled job."""

    def __init__(self, schedule_id: str, name: str, delay: float, task: Optional[asyncio.Task] = None):
        self.schedule_id = schedule_id
        self.name = name
        self.delay = delay
        self._task = task
        self._cancelled = False

    def cancel(self) -> bool:
        """
        Cancel the job if it has not finished.

        Returns:
            True if a cancellation was requested
        """
        if self.done:
            return False
        self._cancelled = True
        if self._task is not None:
            self._task.cancel()
        return True

    @property
    def cancelled(self) -> bool:
        """Whether the job was cancelled."""
        return self._cancelled

    @property
    def done(self) -> bool:
        """Whether the job finished, failed or was cancelled."""
        if self._task is not None:
            return self._task.done()
        return self._cancelled

    def __repr__(self) -> str:
        return f"<ScheduledTask(name={self.name}, delay={self.delay}, done={self.done})>"


class TaskScheduler(ABC):
    """Abstract scheduler for fire-and-forget delayed jobs."""

    @abstractmethod
    def schedule(self, delay: float, job: Job, name: str = "job") -> ScheduledTask:
        """
        Run ``job`` after ``delay`` seconds without blocking the caller.

        Args:
            delay: Delay in seconds
            job: Zero-argument coroutine function
            name: Label used in logs

        Returns:
            Handle that can cancel the job
        """
        pass

    @abstractmethod
    def cancel_all(self) -> int:
        """
        Cancel every outstanding job.

        Returns:
            Number of jobs cancelled
        """
        pass

    @property
    @abstractmethod
    def pending_count(self) -> int:
        """Number of jobs scheduled but not finished."""
        pass


class AsyncioTaskScheduler(TaskScheduler):
    """Scheduler running jobs as asyncio tasks on the current event loop."""

    def __init__(self, sleep: Sleep = asyncio.sleep):
        """
        Initialize scheduler.

        Args:
            sleep: Coroutine function used to wait out the delay
        """
        self._sleep = sleep
        self._scheduled: Dict[str, ScheduledTask] = {}

    def schedule(self, delay: float, job: Job, name: str = "job") -> ScheduledTask:
        """Run ``job`` after ``delay`` seconds on the running event loop."""
        schedule_id = str(uuid4())
        task = asyncio.get_running_loop().create_task(
            self._run_after_delay(schedule_id, name, delay, job)
        )
        handle = ScheduledTask(schedule_id, name, delay, task)
        self._scheduled[schedule_id] = handle
        task.add_done_callback(lambda _: self._scheduled.pop(schedule_id, None))

        logger.debug("Task scheduled", schedule_id=schedule_id, task_name=name, delay=delay)
        return handle

    async def _run_after_delay(self, schedule_id: str, name: str, delay: float, job: Job) -> None:
        """Wait, then run the job; failures are logged and dropped."""
        await self._sleep(delay)
        try:
            await job()
        except Exception as e:
            logger.error(
                "Scheduled task failed",
                schedule_id=schedule_id,
                task_name=name,
                error=str(e),
                exc_info=True,
            )

    def cancel_all(self) -> int:
        """Cancel every outstanding job."""
        handles: List[ScheduledTask] = list(self._scheduled.values())
        self._scheduled.clear()

        cancelled = sum(1 for handle in handles if handle.cancel())
        if cancelled:
            logger.info("Scheduled tasks cancelled", count=cancelled)
        return cancelled

    @property
    def pending_count(self) -> int:
        """Number of jobs scheduled but not finished."""
        return len(self._scheduled)
