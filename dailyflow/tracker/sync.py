"""
Document Synchronizer — trailing-edge debounced persistence.

Every mutation calls `schedule(snapshot)`. The write only happens once no
new snapshot has arrived for `delay` seconds, and it always carries the
latest snapshot. Failed writes are logged and dropped; the next mutation
schedules a fresh attempt.
"""
from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from dailyflow.core.config import settings
from dailyflow.tracker.document import UserDocument
from dailyflow.tracker.timers import SchedulerTimers, TimerHandle, Timers

log = logging.getLogger(__name__)

Persist = Callable[[UserDocument], Union[None, Awaitable[Any]]]


class DocumentSynchronizer:
    def __init__(
        self,
        persist: Persist,
        timers: Optional[Timers] = None,
        delay: Optional[float] = None,
    ):
        self._persist = persist
        self._timers = timers
        self.delay = settings.SAVE_DEBOUNCE_SECONDS if delay is None else delay
        self._handle: Optional[TimerHandle] = None
        self._snapshot: Optional[UserDocument] = None
        self._inflight: set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self, snapshot: UserDocument) -> None:
        """Restart the quiet-period timer with `snapshot` as the value to write."""
        self.cancel()
        self._snapshot = snapshot
        if self._timers is None:
            self._timers = SchedulerTimers()
        self._handle = self._timers.call_later(self.delay, self._flush)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._snapshot = None

    def _flush(self) -> None:
        snapshot, self._snapshot, self._handle = self._snapshot, None, None
        if snapshot is None:
            return
        try:
            result = self._persist(snapshot)
        except Exception:
            log.exception("Failed to save data for %s", snapshot.identity)
            return
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._inflight.add(task)
            task.add_done_callback(lambda t: self._on_done(t, snapshot.identity))

    def _on_done(self, task: asyncio.Task, identity: str) -> None:
        self._inflight.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.error("Failed to save data for %s: %s", identity, exc)

    async def drain(self) -> None:
        """Wait for writes that have already started."""
        if self._inflight:
            await asyncio.gather(*self._inflight, return_exceptions=True)
