"""
One-shot timers for reminders and debounced saves.

Anything with `call_later(delay, callback, *args) -> handle`, where the
handle has `cancel()`, can drive the tracker. `SchedulerTimers` is the
runtime backend: each call becomes an APScheduler `date` job on an
`AsyncIOScheduler`. Tests pass a fake they can advance by hand.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional, Protocol

from apscheduler.job import Job
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

log = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Timers(Protocol):
    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle: ...


class ScheduledJob:
    """Handle for one `date` job; cancelling a job that already ran is a no-op."""

    def __init__(self, job: Job):
        self.job = job

    @property
    def id(self) -> str:
        return self.job.id

    def cancel(self) -> None:
        try:
            self.job.remove()
        except JobLookupError:
            pass


class SchedulerTimers:
    """
    `Timers` backed by APScheduler.

    The scheduler is built and started on first use, bound to the event loop
    that is running at that point.
    """

    def __init__(self, scheduler: Optional[AsyncIOScheduler] = None):
        self.scheduler = scheduler

    def _running_scheduler(self) -> AsyncIOScheduler:
        if self.scheduler is None:
            self.scheduler = AsyncIOScheduler(
                event_loop=asyncio.get_running_loop(), timezone=timezone.utc
            )
        if not self.scheduler.running:
            self.scheduler.start()
            log.info("Timer scheduler started")
        return self.scheduler

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> ScheduledJob:
        scheduler = self._running_scheduler()

        # Coroutine jobs run on the event loop; plain functions would go to a worker thread.
        async def run(*job_args: Any) -> None:
            callback(*job_args)

        run_date = datetime.now(timezone.utc) + timedelta(seconds=max(delay, 0))
        job = scheduler.add_job(
            run,
            trigger=DateTrigger(run_date=run_date),
            args=args,
            misfire_grace_time=None,
        )
        return ScheduledJob(job)

    def shutdown(self) -> None:
        if self.scheduler is not None and self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            log.info("Timer scheduler stopped")
