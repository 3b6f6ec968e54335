"""
Shared fixtures for the Persona mock test suite.
"""
from typing import List
from uuid import uuid4

import pytest

from app.repositories.customer_repository import InMemoryCustomerDirectory
from app.services.persona_mock import PersonaMockService
from app.tasks.scheduler import Job, ScheduledTask, TaskScheduler


class ManualTaskScheduler(TaskScheduler):
    """Scheduler that queues jobs until a test runs them explicitly."""

    def __init__(self):
        self.queued: List[tuple] = []

    def schedule(self, delay: float, job: Job, name: str = "job") -> ScheduledTask:
        handle = ScheduledTask(str(uuid4()), name, delay)
        self.queued.append((handle, job))
        return handle

    def cancel_all(self) -> int:
        cancelled = sum(1 for handle, _ in self.queued if handle.cancel())
        self.queued.clear()
        return cancelled

    @property
    def pending_count(self) -> int:
        return sum(1 for handle, _ in self.queued if not handle.done)

    async def run_all(self) -> int:
        """Run every queued job that was not cancelled."""
        jobs, self.queued = self.queued, []
        ran = 0
        for handle, job in jobs:
            if not handle.cancelled:
                await job()
                ran += 1
        return ran


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self):
        self.calls: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.calls.append(delay)


@pytest.fixture
def manual_scheduler():
    """Scheduler whose jobs run only when the test asks."""
    return ManualTaskScheduler()


@pytest.fixture
def recording_sleep():
    """Sleep that returns immediately and records its delays."""
    return RecordingSleep()


@pytest.fixture
def persona_mock(manual_scheduler, recording_sleep):
    """Engine with manual scheduling and no wall-clock waits."""
    return PersonaMockService(
        scheduler=manual_scheduler,
        processing_delay=2.0,
        sleep=recording_sleep,
    )


@pytest.fixture
def customer_directory():
    """Empty in-memory customer directory."""
    return InMemoryCustomerDirectory()
