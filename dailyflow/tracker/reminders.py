"""
Reminder Scheduler — one-shot timers for tasks with a reminder time.

Reminder state is a pure function of the current tasks-by-date snapshot:
`reschedule()` cancels every registered timer before registering fresh
ones, so edited or deleted tasks never leave an orphaned reminder behind.

Timers
------
See `dailyflow.tracker.timers`. The APScheduler backend is the default;
tests pass a fake they can advance by hand.

Delivery
--------
  permission "granted"  → system notification
  permission "default"  → ask once; notify if granted, alert otherwise
  permission "denied"   → blocking alert
"""
from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Mapping, Optional, Protocol, Sequence

from dailyflow.tracker import dates
from dailyflow.tracker.document import Task
from dailyflow.tracker.timers import SchedulerTimers, TimerHandle, Timers

log = logging.getLogger(__name__)

REMINDER_TITLE = "Task reminder"


class Permission:
    GRANTED = "granted"
    DENIED = "denied"
    DEFAULT = "default"


class Notifier(Protocol):
    def permission(self) -> str: ...

    def request_permission(self) -> str: ...

    def notify(self, title: str, body: str) -> None: ...

    def alert(self, message: str) -> None: ...


class ConsoleNotifier:
    """Notifier for terminal sessions: notifications go to the log, alerts to stdout."""

    def __init__(self, permission: str = Permission.DEFAULT):
        self._permission = permission

    def permission(self) -> str:
        return self._permission

    def request_permission(self) -> str:
        self._permission = Permission.GRANTED
        return self._permission

    def notify(self, title: str, body: str) -> None:
        log.info("%s: %s", title, body)

    def alert(self, message: str) -> None:
        print(message, flush=True)


# ---------------------------------------------------------------------------
# Pure derivation
# ---------------------------------------------------------------------------

@dataclass
class ScheduledReminder:
    day: str
    task: Task
    due: datetime
    delay: float   # seconds from `now`


def pending_reminders(
    tasks_by_date: Mapping[str, Sequence[Task]],
    now: datetime,
) -> list[ScheduledReminder]:
    """Reminders whose fire time is strictly after `now`. Past ones are dropped."""
    result: list[ScheduledReminder] = []
    for day, tasks in tasks_by_date.items():
        for task in tasks:
            if not task.reminder_time:
                continue
            try:
                due = dates.combine(day, task.reminder_time)
            except ValueError:
                log.warning(
                    "Skipping reminder with bad date/time: task=%s day=%r time=%r",
                    task.id, day, task.reminder_time,
                )
                continue
            delay = (due - now).total_seconds()
            if delay <= 0:
                continue
            result.append(ScheduledReminder(day=day, task=task, due=due, delay=delay))
    return result


def deliver_reminder(task: Task, notifier: Notifier) -> None:
    """Exactly one delivery attempt for a fired reminder."""
    permission = notifier.permission()
    if permission == Permission.GRANTED:
        notifier.notify(REMINDER_TITLE, task.text)
        return
    if permission != Permission.DENIED:
        if notifier.request_permission() == Permission.GRANTED:
            notifier.notify(REMINDER_TITLE, task.text)
        else:
            notifier.alert(f"Reminder: {task.text}")
        return
    notifier.alert(f"Reminder: {task.text}")


# ---------------------------------------------------------------------------
# Scheduler
# ---------------------------------------------------------------------------

class ReminderScheduler:
    """
    Registry of pending reminder timers.

    Each timer gets its own key, so tasks that share an id (on different
    dates, say) are still cancelled by `cancel_all()`.
    """

    def __init__(
        self,
        notifier: Notifier,
        timers: Optional[Timers] = None,
        clock: Callable[[], datetime] = dates.now,
    ):
        self._notifier = notifier
        self._timers = timers
        self._clock = clock
        self._handles: dict[int, tuple[Task, TimerHandle]] = {}
        self._keys = itertools.count()

    @property
    def pending(self) -> list[str]:
        return [task.id for task, _ in self._handles.values()]

    def _get_timers(self) -> Timers:
        if self._timers is None:
            self._timers = SchedulerTimers()
        return self._timers

    def cancel_all(self) -> None:
        for _, handle in self._handles.values():
            handle.cancel()
        self._handles = {}

    def reschedule(self, tasks_by_date: Mapping[str, Sequence[Task]]) -> int:
        """Cancel everything, then register one timer per future reminder."""
        self.cancel_all()
        reminders = pending_reminders(tasks_by_date, self._clock())
        if not reminders:
            return 0
        timers = self._get_timers()
        for reminder in reminders:
            key = next(self._keys)
            handle = timers.call_later(reminder.delay, self._fire, key, reminder.task)
            self._handles[key] = (reminder.task, handle)
            log.debug("Reminder for task %s due at %s", reminder.task.id, reminder.due.isoformat())
        log.info("Scheduled %d reminder(s)", len(reminders))
        return len(reminders)

    def _fire(self, key: int, task: Task) -> None:
        self._handles.pop(key, None)
        log.info("Reminder fired for task %s", task.id)
        try:
            deliver_reminder(task, self._notifier)
        except Exception:
            log.exception("Reminder delivery failed for task %s", task.id)
