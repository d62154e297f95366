"""
Tests for TrackerSession: loading, fallback, debounced saves and
reminder rescheduling driven by mutations.
"""
import asyncio

import httpx
import pytest

from dailyflow.tracker import dates
from dailyflow.tracker.client import ApiClient, ApiError
from dailyflow.tracker.document import DEFAULT_HABITS, Habit, Task, UserDocument
from dailyflow.tracker.session import AuthMode, TrackerSession


class FakeApi:
    def __init__(self, document=None, fail_with=None):
        self.document = document
        self.fail_with = fail_with
        self.saved = []
        self.calls = []

    async def signup(self, mobile):
        self.calls.append(("signup", mobile))
        return mobile

    async def login(self, mobile):
        self.calls.append(("login", mobile))
        return mobile

    async def fetch_document(self, mobile):
        self.calls.append(("fetch", mobile))
        if self.fail_with:
            raise self.fail_with
        return self.document or UserDocument(identity=mobile)

    async def save_document(self, doc):
        self.saved.append(doc)
        return doc



@pytest.fixture()
def run():
    return asyncio.run


class TestLoad:
    def test_authenticate_login_loads_document(self, run, timers, notifier):
        doc = UserDocument(identity="+1", habits=(Habit("a", "A"),), history={}, tasks_by_date={})
        api = FakeApi(document=doc)
        session = TrackerSession(api, notifier=notifier, timers=timers)
        loaded = run(session.authenticate(" +1 "))
        assert loaded is doc
        assert session.identity == "+1"
        assert session.loaded
        assert api.calls == [("login", "+1"), ("fetch", "+1")]

    def test_authenticate_signup(self, run, timers, notifier):
        api = FakeApi()
        session = TrackerSession(api, notifier=notifier, timers=timers)
        run(session.authenticate("+2", mode=AuthMode.SIGNUP))
        assert api.calls[0] == ("signup", "+2")

    def test_authenticate_blank_mobile(self, run, timers, notifier):
        session = TrackerSession(FakeApi(), notifier=notifier, timers=timers)
        with pytest.raises(ApiError) as exc:
            run(session.authenticate("   "))
        assert exc.value.message == "Enter mobile number"

    @pytest.mark.parametrize("error", [
        ApiError(500, "INTERNAL_ERROR", "boom"),
        httpx.ConnectError("refused"),
        ValueError("Expecting value"),
        KeyError("id"),
    ])
    def test_load_failure_falls_back_to_default(self, run, timers, notifier, error):
        session = TrackerSession(FakeApi(fail_with=error), notifier=notifier, timers=timers)
        doc = run(session.load("+1"))
        assert doc.identity == "+1"
        assert doc.habits == DEFAULT_HABITS
        assert session.loaded

    def test_undecodable_body_falls_back_to_default(self, run, timers, notifier):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>"))
        api = ApiClient(base_url="http://api.test/api", transport=transport)
        session = TrackerSession(api, notifier=notifier, timers=timers)
        doc = run(session.load("+1"))
        assert doc.habits == DEFAULT_HABITS
        assert session.loaded

    def test_load_does_not_trigger_save(self, run, timers, notifier):
        api = FakeApi()
        session = TrackerSession(api, notifier=notifier, timers=timers)
        run(session.load("+1"))
        timers.advance(5)
        assert api.saved == []

    def test_load_schedules_reminders(self, run, timers, notifier):
        day = dates.today_key()
        doc = UserDocument(identity="+1", tasks_by_date={day: (Task("t1", "x", reminder_time="23:59"),)})
        session = TrackerSession(FakeApi(document=doc), notifier=notifier, timers=timers,
                                 clock=lambda: dates.combine(day, "00:01"))
        run(session.load("+1"))
        assert session.scheduler.pending == ["t1"]


class TestMutations:
    def _session(self, run, timers, notifier, api=None):
        session = TrackerSession(api or FakeApi(), notifier=notifier, timers=timers, save_delay=0.4)
        run(session.load("+1"))
        return session

    def test_three_mutations_one_save(self, run, timers, notifier):
        api = FakeApi()
        session = self._session(run, timers, notifier, api)

        async def scenario():
            session.add_habit("Yoga")
            session.toggle_habit("yoga", True)
            session.rename_habit("yoga", "Morning yoga")
            timers.advance(0.5)
            await session.synchronizer.drain()

        run(scenario())
        assert len(api.saved) == 1
        assert api.saved[0] is session.document
        assert api.saved[0].habits[-1] == Habit("yoga", "Morning yoga")

    def test_noop_mutation_does_not_save(self, run, timers, notifier):
        api = FakeApi()
        session = self._session(run, timers, notifier, api)
        session.add_habit("   ")
        assert not session.synchronizer.pending

    def test_logged_out_session_does_not_save(self, run, timers, notifier):
        session = TrackerSession(FakeApi(), notifier=notifier, timers=timers)
        session.logout()
        session.add_habit("Yoga")
        assert not session.synchronizer.pending

    def test_task_changes_reschedule_reminders(self, run, timers, notifier):
        session = self._session(run, timers, notifier)
        session.select_date("2999-01-01")
        session.add_task("Dentist", "09:00")
        [task] = session.document.tasks_for("2999-01-01")
        assert session.scheduler.pending == [task.id]
        [reminder] = [h for h in timers.active if h.callback == session.scheduler._fire]

        session.delete_task(task.id)
        assert session.scheduler.pending == []
        assert reminder.cancelled

    def test_habit_changes_keep_reminders(self, run, timers, notifier):
        session = self._session(run, timers, notifier)
        session.select_date("2999-01-01")
        session.add_task("Dentist", "09:00")
        [reminder] = [h for h in timers.active if h.callback == session.scheduler._fire]
        session.toggle_habit("wake", True)
        assert not reminder.cancelled
        assert len(session.scheduler.pending) == 1

    def test_dashboard_uses_selected_date(self, run, timers, notifier):
        session = self._session(run, timers, notifier)
        session.select_date("2999-01-01")
        session.add_task("Dentist")
        dash = session.dashboard()
        assert dash.selected_date == "2999-01-01"
        assert dash.tasks_total == 1

    def test_logout_resets_everything(self, run, timers, notifier):
        session = self._session(run, timers, notifier)
        session.select_date("2999-01-01")
        session.add_task("Dentist", "09:00")
        session.logout()
        assert session.identity == ""
        assert session.scheduler.pending == []
        assert not session.synchronizer.pending
        assert session.document.habits == DEFAULT_HABITS
