"""
Tests for the httpx API client against a mocked transport.
"""
import asyncio
import json

import httpx
import pytest

from dailyflow.tracker.client import ApiClient, ApiError
from dailyflow.tracker.document import DEFAULT_HABITS, Habit, UserDocument

BASE_URL = "http://testserver/api"


def _run(handler, scenario):
    async def main():
        async with ApiClient(BASE_URL, transport=httpx.MockTransport(handler)) as api:
            return await scenario(api)

    return asyncio.run(main())


class TestAuth:
    def test_signup_posts_mobile(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(201, json={"mobile": "+1"})

        assert _run(handler, lambda api: api.signup("+1")) == "+1"
        assert seen == {"path": "/api/auth/signup", "body": {"mobile": "+1"}}

    def test_login_unknown_raises(self):
        def handler(request):
            return httpx.Response(404, json={"code": "USER_NOT_FOUND", "message": "User not found."})

        with pytest.raises(ApiError) as exc:
            _run(handler, lambda api: api.login("+1"))
        assert exc.value.status_code == 404
        assert exc.value.code == "USER_NOT_FOUND"
        assert exc.value.message == "User not found."

    def test_error_without_json_body(self):
        def handler(request):
            return httpx.Response(502, text="Bad gateway")

        with pytest.raises(ApiError) as exc:
            _run(handler, lambda api: api.health())
        assert exc.value.code == "REQUEST_FAILED"
        assert exc.value.message == "Request failed"

    def test_health(self):
        def handler(request):
            assert request.url.path == "/api/health"
            return httpx.Response(200, json={"ok": True})

        assert _run(handler, lambda api: api.health()) is True


class TestDocument:
    def test_fetch_sends_identity_header(self):
        def handler(request):
            assert request.headers["X-User-Mobile"] == "+1"
            return httpx.Response(200, json={
                "habits": [{"id": "a", "label": "A"}],
                "history": {"2026-03-10": {"habits": {"a": True}}},
                "tasksByDate": {},
            })

        doc = _run(handler, lambda api: api.fetch_document("+1"))
        assert doc.identity == "+1"
        assert doc.habits == (Habit("a", "A"),)
        assert doc.tasks_by_date == {}

    def test_fetch_empty_document_uses_defaults(self):
        def handler(request):
            return httpx.Response(200, json={"habits": [], "history": {}, "tasksByDate": None})

        doc = _run(handler, lambda api: api.fetch_document("+1"))
        assert doc.habits == DEFAULT_HABITS
        assert len(doc.history) == 1
        assert len(doc.tasks_by_date) == 1

    def test_save_posts_full_payload(self):
        doc = UserDocument(identity="+1", habits=(Habit("a", "A"),), history={}, tasks_by_date={})
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["header"] = request.headers["X-User-Mobile"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=seen["body"])

        saved = _run(handler, lambda api: api.save_document(doc))
        assert seen["method"] == "POST"
        assert seen["header"] == "+1"
        assert seen["body"] == {"habits": [{"id": "a", "label": "A"}], "history": {}, "tasksByDate": {}}
        assert saved.habits == doc.habits

    def test_fetch_stats_passes_selected_date(self):
        def handler(request):
            assert request.url.path == "/api/stats"
            assert request.url.params["selected_date"] == "2026-03-01"
            return httpx.Response(200, json={"streak": 4})

        body = _run(handler, lambda api: api.fetch_stats("+1", "2026-03-01"))
        assert body["streak"] == 4
