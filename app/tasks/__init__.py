"""
Background task scheduling package.
"""
from app.tasks.scheduler import AsyncioTaskScheduler, ScheduledTask, TaskScheduler

__all__ = [
    "TaskScheduler",
    "AsyncioTaskScheduler",
    "ScheduledTask",
]
