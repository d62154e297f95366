"""
Tests for the debounced document synchronizer.
"""
import asyncio

from dailyflow.tracker.document import add_habit, default_document
from dailyflow.tracker.sync import DocumentSynchronizer


class TestDebounce:
    def test_three_quick_mutations_one_write(self, timers):
        saved = []
        sync = DocumentSynchronizer(saved.append, timers=timers, delay=0.4)
        doc = default_document("+1")
        snapshots = []
        for label in ("One", "Two", "Three"):
            doc = add_habit(doc, label)
            snapshots.append(doc)
            sync.schedule(doc)
            timers.advance(0.1)
        assert saved == []
        timers.advance(0.4)
        assert saved == [snapshots[-1]]
        assert [h.label for h in saved[0].habits][-3:] == ["One", "Two", "Three"]
        assert not sync.pending

    def test_quiet_period_resets(self, timers):
        saved = []
        sync = DocumentSynchronizer(saved.append, timers=timers, delay=0.4)
        sync.schedule(default_document("+1"))
        timers.advance(0.3)
        sync.schedule(default_document("+2"))
        timers.advance(0.3)
        assert saved == []
        timers.advance(0.2)
        assert [d.identity for d in saved] == ["+2"]

    def test_separate_bursts_write_separately(self, timers):
        saved = []
        sync = DocumentSynchronizer(saved.append, timers=timers, delay=0.4)
        sync.schedule(default_document("+1"))
        timers.advance(1)
        sync.schedule(default_document("+2"))
        timers.advance(1)
        assert [d.identity for d in saved] == ["+1", "+2"]

    def test_cancel_drops_pending_write(self, timers):
        saved = []
        sync = DocumentSynchronizer(saved.append, timers=timers, delay=0.4)
        sync.schedule(default_document("+1"))
        assert sync.pending
        sync.cancel()
        timers.advance(1)
        assert saved == []

    def test_failed_write_is_not_retried(self, timers):
        calls = []

        def persist(doc):
            calls.append(doc)
            raise ConnectionError("offline")

        sync = DocumentSynchronizer(persist, timers=timers, delay=0.4)
        sync.schedule(default_document("+1"))
        timers.advance(1)
        timers.advance(10)
        assert len(calls) == 1
        assert not sync.pending

    def test_uses_configured_delay_by_default(self, timers):
        sync = DocumentSynchronizer(lambda doc: None, timers=timers)
        assert sync.delay == 0.4


class TestAsyncPersist:
    def test_awaitable_persist_runs_on_loop(self, timers):
        saved = []

        async def persist(doc):
            saved.append(doc)

        async def scenario():
            sync = DocumentSynchronizer(persist, timers=timers, delay=0.4)
            sync.schedule(default_document("+1"))
            timers.advance(0.5)
            await sync.drain()

        asyncio.run(scenario())
        assert [d.identity for d in saved] == ["+1"]

    def test_async_failure_is_logged_not_raised(self, timers, caplog):
        async def persist(doc):
            raise ConnectionError("offline")

        async def scenario():
            sync = DocumentSynchronizer(persist, timers=timers, delay=0.4)
            sync.schedule(default_document("+1"))
            timers.advance(0.5)
            await sync.drain()
            await asyncio.sleep(0)

        asyncio.run(scenario())
        assert "Failed to save data" in caplog.text

    def test_real_event_loop_timers(self):
        saved = []

        async def scenario():
            sync = DocumentSynchronizer(saved.append, delay=0.01)
            for identity in ("+1", "+2", "+3"):
                sync.schedule(default_document(identity))
            await asyncio.sleep(0.05)

        asyncio.run(scenario())
        assert [d.identity for d in saved] == ["+3"]
