"""Shared helpers for gateway tests."""

from __future__ import annotations

from collections import deque
from typing import Any

import httpx

from gateway.ingestion.base import BaseProviderClient
from gateway.models.media import MediaKind, Provider


class StubClient(BaseProviderClient):
    """Provider client returning canned payloads and recording calls."""

    def __init__(self, provider: Provider) -> None:
        self.provider = provider
        self.hits: list[dict[str, Any]] = []
        self.detail: dict[str, Any] = {}
        self.error: Exception | None = None
        self.calls: list[tuple[str, str, MediaKind, str | None]] = []

    async def search_by_title(
        self, title: str, kind: MediaKind, year: str | None = None
    ) -> list[dict[str, Any]]:
        self.calls.append(("search", title, kind, year))
        if self.error:
            raise self.error
        return list(self.hits)

    async def fetch_by_id(self, native_id: str, kind: MediaKind) -> dict[str, Any]:
        self.calls.append(("fetch", native_id, kind, None))
        if self.error:
            raise self.error
        return dict(self.detail)


def build_response(
    url: str, *, method: str = "GET", status: int = 200, json_data: Any | None = None, text: str | None = None
) -> httpx.Response:
    request = httpx.Request(method, url)
    if text is not None:
        return httpx.Response(status_code=status, text=text, request=request)
    return httpx.Response(status_code=status, json=json_data if json_data is not None else {}, request=request)


def make_async_client(responses: deque[httpx.Response | Exception], call_log: list[dict[str, Any]]) -> type:
    """Build a stand-in for ``httpx.AsyncClient`` replaying queued responses."""

    class DummyAsyncClient:
        def __init__(self, *args: Any, **kwargs: Any) -> None:
            self._responses = responses

        async def __aenter__(self) -> "DummyAsyncClient":
            return self

        async def __aexit__(self, *args: Any) -> bool:
            return False

        def _next(self, method: str, url: str, kwargs: dict[str, Any]) -> httpx.Response:
            call_log.append({"method": method, "url": url, **kwargs})
            if not self._responses:
                raise RuntimeError("No stub responses configured")
            outcome = self._responses.popleft()
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
            return self._next(method, url, kwargs)

        async def post(self, url: str, **kwargs: Any) -> httpx.Response:
            return self._next("POST", url, kwargs)

    return DummyAsyncClient
