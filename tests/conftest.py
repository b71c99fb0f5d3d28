"""Shared fakes: a recording requests.Session replacement and a controllable clock."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest
import requests

from correios_hub.integrations.correios.client import CorreiosClient
from correios_hub.integrations.correios.http_client import CorreiosHttpClient


BASE_URL = "https://apihom.correios.com.br"


def make_response(status: int, body: Any = None, *, text: Optional[str] = None) -> requests.Response:
    """Build a real requests.Response so .json()/.text behave like the wire."""
    resp = requests.Response()
    resp.status_code = status
    if text is not None:
        resp._content = text.encode("utf-8")
        resp.headers["Content-Type"] = "text/plain"
    else:
        resp._content = json.dumps(body).encode("utf-8")
        resp.headers["Content-Type"] = "application/json"
    resp.encoding = "utf-8"
    return resp


def token_response(token: str = "tok-1") -> requests.Response:
    return make_response(201, {"token": token, "ambiente": "HOMOLOGACAO"})


class FakeSession:
    """Replays queued responses (or raises queued exceptions) and records every call."""

    def __init__(self) -> None:
        self.queue: List[Any] = []
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def queue_response(self, *items: Any) -> "FakeSession":
        self.queue.extend(items)
        return self

    def request(self, method: str, url: str, **kwargs) -> requests.Response:
        self.calls.append({"method": method, "url": url, **kwargs})
        if not self.queue:
            raise AssertionError(f"unexpected request: {method} {url}")
        item = self.queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def close(self) -> None:
        self.closed = True

    # helpers for assertions
    def paths(self) -> List[str]:
        return [c["url"][len(BASE_URL):] for c in self.calls]


class FakeClock:
    def __init__(self, start: Optional[datetime] = None) -> None:
        self.now = start or datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def http_client(fake_session: FakeSession, clock: FakeClock) -> CorreiosHttpClient:
    return CorreiosHttpClient(
        "user",
        "secret",
        "0067599079",
        production=False,
        session=fake_session,  # type: ignore[arg-type]
        clock=clock,
        token_ttl_sec=3600,
    )


@pytest.fixture
def client(http_client: CorreiosHttpClient) -> CorreiosClient:
    return CorreiosClient(http=http_client, batch_size=5, batch_id="1")
