"""
HTTP client for the DailyFlow API.

Thin async wrapper over httpx. Non-2xx responses become `ApiError`
carrying the server's `{code, message}` envelope; transport failures
surface as `httpx.HTTPError`. Callers decide whether to fall back.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from dailyflow.core.config import IDENTITY_HEADER, settings
from dailyflow.tracker.document import UserDocument

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class ApiError(Exception):
    def __init__(self, status_code: int, code: str, message: str):
        self.status_code = status_code
        self.code = code
        self.message = message
        super().__init__(f"{status_code} {code}: {message}")


def _raise_for_error(response: httpx.Response) -> None:
    if response.is_success:
        return
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    raise ApiError(
        status_code=response.status_code,
        code=body.get("code", "REQUEST_FAILED"),
        message=body.get("message") or "Request failed",
    )


class ApiClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.API_URL,
            transport=transport,
            timeout=timeout,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self, method: str, url: str, mobile: Optional[str] = None, **kwargs: Any
    ) -> Any:
        headers = {IDENTITY_HEADER: mobile} if mobile else {}
        response = await self._client.request(method, url, headers=headers, **kwargs)
        _raise_for_error(response)
        return response.json()

    # --- auth ---

    async def health(self) -> bool:
        body = await self._request("GET", "/health")
        return bool(body.get("ok"))

    async def signup(self, mobile: str) -> str:
        body = await self._request("POST", "/auth/signup", json={"mobile": mobile})
        return body["mobile"]

    async def login(self, mobile: str) -> str:
        body = await self._request("POST", "/auth/login", json={"mobile": mobile})
        return body["mobile"]

    # --- document ---

    async def fetch_document(self, mobile: str) -> UserDocument:
        body = await self._request("GET", "/data", mobile=mobile)
        return UserDocument.from_payload(mobile, body)

    async def save_document(self, doc: UserDocument) -> UserDocument:
        body = await self._request("POST", "/data", mobile=doc.identity, json=doc.to_payload())
        log.debug("Saved document for %s", doc.identity)
        return UserDocument.from_payload(doc.identity, body)

    async def fetch_stats(self, mobile: str, selected_date: Optional[str] = None) -> dict[str, Any]:
        params = {"selected_date": selected_date} if selected_date else None
        return await self._request("GET", "/stats", mobile=mobile, params=params)
