"""
TrackerSession — the single writer of a user's in-memory document.

Each mutation swaps `document` for a new snapshot, then:
  - restarts the debounced save (once the document has been loaded), and
  - reschedules reminders when tasks-by-date changed.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

import httpx

from dailyflow.tracker import dates, document as mutations
from dailyflow.tracker.aggregation import Dashboard, build_dashboard
from dailyflow.tracker.client import ApiClient, ApiError
from dailyflow.tracker.document import UserDocument, default_document
from dailyflow.tracker.reminders import ConsoleNotifier, Notifier, ReminderScheduler
from dailyflow.tracker.sync import DocumentSynchronizer
from dailyflow.tracker.timers import SchedulerTimers, Timers

log = logging.getLogger(__name__)


class AuthMode:
    LOGIN = "login"
    SIGNUP = "signup"


class TrackerSession:
    def __init__(
        self,
        api: ApiClient,
        notifier: Optional[Notifier] = None,
        timers: Optional[Timers] = None,
        clock: Callable[[], datetime] = dates.now,
        save_delay: Optional[float] = None,
    ):
        self.api = api
        self.identity = ""
        self.document = default_document()
        self.loaded = False
        self.selected_date = dates.today_key()
        self._owned_timers = SchedulerTimers() if timers is None else None
        timers = timers or self._owned_timers
        self.scheduler = ReminderScheduler(notifier or ConsoleNotifier(), timers=timers, clock=clock)
        self.synchronizer = DocumentSynchronizer(api.save_document, timers=timers, delay=save_delay)

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    async def authenticate(self, mobile: str, mode: str = AuthMode.LOGIN) -> UserDocument:
        """Log in or sign up, then load the user's document."""
        trimmed = (mobile or "").strip()
        if not trimmed:
            raise ApiError(400, "MOBILE_REQUIRED", "Enter mobile number")
        if mode == AuthMode.SIGNUP:
            await self.api.signup(trimmed)
        else:
            await self.api.login(trimmed)
        return await self.load(trimmed)

    async def load(self, mobile: str) -> UserDocument:
        """
        Fetch the document for `mobile`. Any failure falls back to the
        default document so the session stays usable.
        """
        self.synchronizer.cancel()
        self.identity = mobile
        self.loaded = False
        if not mobile:
            doc = default_document()
        else:
            try:
                doc = await self.api.fetch_document(mobile)
            except (ApiError, httpx.HTTPError, ValueError, KeyError, TypeError) as exc:
                log.error("API load failed for %s: %s", mobile, exc)
                doc = default_document(mobile)
        self.document = doc
        self.scheduler.reschedule(doc.tasks_by_date)
        self.loaded = True
        return doc

    def logout(self) -> None:
        self.synchronizer.cancel()
        self.scheduler.cancel_all()
        self.identity = ""
        self.document = default_document()
        self.selected_date = dates.today_key()
        self.loaded = True

    def close(self) -> None:
        """Drop pending timers and stop the scheduler this session started."""
        self.synchronizer.cancel()
        self.scheduler.cancel_all()
        if self._owned_timers is not None:
            self._owned_timers.shutdown()

    # ------------------------------------------------------------------
    # Snapshot handling
    # ------------------------------------------------------------------

    def _commit(self, doc: UserDocument) -> UserDocument:
        if doc is self.document:
            return doc
        previous, self.document = self.document, doc
        if doc.tasks_by_date is not previous.tasks_by_date:
            self.scheduler.reschedule(doc.tasks_by_date)
        if self.loaded and self.identity:
            self.synchronizer.schedule(doc)
        return doc

    def dashboard(self) -> Dashboard:
        return build_dashboard(self.document, self.selected_date)

    # ------------------------------------------------------------------
    # Habits
    # ------------------------------------------------------------------

    def toggle_habit(self, habit_id: str, checked: bool) -> UserDocument:
        return self._commit(mutations.toggle_habit(self.document, habit_id, checked))

    def add_habit(self, label: str) -> UserDocument:
        return self._commit(mutations.add_habit(self.document, label))

    def delete_habit(self, habit_id: str) -> UserDocument:
        return self._commit(mutations.delete_habit(self.document, habit_id))

    def rename_habit(self, habit_id: str, label: str) -> UserDocument:
        return self._commit(mutations.rename_habit(self.document, habit_id, label))

    # ------------------------------------------------------------------
    # Tasks (on the selected date)
    # ------------------------------------------------------------------

    def select_date(self, day: str) -> UserDocument:
        if not day:
            return self.document
        self.selected_date = day
        return self._commit(mutations.visit_date(self.document, day))

    def add_task(self, text: str, reminder_time: str = "") -> UserDocument:
        return self._commit(
            mutations.add_task(self.document, self.selected_date, text, reminder_time)
        )

    def toggle_task(self, task_id: str) -> UserDocument:
        return self._commit(mutations.toggle_task(self.document, self.selected_date, task_id))

    def edit_task(self, task_id: str, text: str) -> UserDocument:
        return self._commit(mutations.edit_task(self.document, self.selected_date, task_id, text))

    def delete_task(self, task_id: str) -> UserDocument:
        return self._commit(mutations.delete_task(self.document, self.selected_date, task_id))
