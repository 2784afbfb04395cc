"""Shared fixtures: an in-memory stand-in for Playwright's APIRequestContext.

Usage:
    def test_profile(fake_request):
        fake_request.route("GET", "https://canvas.test/api/v1/users/self", json={"id": 1})
"""

from __future__ import annotations

import json
import typing as t
from datetime import datetime, timezone

import pytest

from gradewatch.models import StudentProfile
from gradewatch.terms import GradingPeriod


class FakeResponse:
    def __init__(self, status: int = 200, json_body: t.Any = None, text: str | None = None,
                 headers: dict[str, str] | None = None) -> None:
        self.status = status
        self.status_text = "OK" if 200 <= status < 300 else "Error"
        self.headers = {k.lower(): v for k, v in (headers or {}).items()}
        self._text = text if text is not None else ("" if json_body is None else json.dumps(json_body))

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    async def text(self) -> str:
        return self._text

    async def json(self) -> t.Any:
        return json.loads(self._text)


class FakeRequest:
    """Routes (method, url) to queued responses and records every call."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list[FakeResponse]] = {}
        self.calls: list[dict[str, t.Any]] = []

    def route(self, method: str, url: str, status: int = 200, json: t.Any = None,
              text: str | None = None, headers: dict[str, str] | None = None) -> None:
        self.routes.setdefault((method, url), []).append(FakeResponse(status, json, text, headers))

    def _respond(self, method: str, url: str, **kwargs: t.Any) -> FakeResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        queue = self.routes.get((method, url))
        if not queue:
            return FakeResponse(404, {"errors": [{"message": "not found"}]})
        return queue.pop(0) if len(queue) > 1 else queue[0]

    async def get(self, url: str, **kwargs: t.Any) -> FakeResponse:
        return self._respond("GET", url, **kwargs)

    async def put(self, url: str, **kwargs: t.Any) -> FakeResponse:
        return self._respond("PUT", url, **kwargs)

    async def delete(self, url: str, **kwargs: t.Any) -> FakeResponse:
        return self._respond("DELETE", url, **kwargs)

    async def dispose(self) -> None:
        return None


class FakeKVRequest(FakeRequest):
    """Behaves like a Workers KV values endpoint backed by a dict."""

    def __init__(self) -> None:
        super().__init__()
        self.values: dict[str, str] = {}

    def _respond(self, method: str, url: str, **kwargs: t.Any) -> FakeResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        if method == "GET":
            if url not in self.values:
                return FakeResponse(404, {"success": False})
            return FakeResponse(200, text=self.values[url])
        if method == "PUT":
            self.values[url] = kwargs["data"]
            return FakeResponse(200, {"success": True})
        self.values.pop(url, None)
        return FakeResponse(200, {"success": True})


@pytest.fixture
def fake_request() -> FakeRequest:
    return FakeRequest()


@pytest.fixture
def fake_kv_request() -> FakeKVRequest:
    return FakeKVRequest()


@pytest.fixture
def profile() -> StudentProfile:
    return StudentProfile(id=42, name="Ada Student")


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def period(id: t.Any, title: str, start: str | None = None, end: str | None = None) -> GradingPeriod:
    return GradingPeriod(id=id, title=title, start_date=start, end_date=end)
