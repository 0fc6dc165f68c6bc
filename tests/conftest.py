"""
Pytest configuration for the TimeTagger client.

Provides fixtures for:
- An in-memory fake TimeTagger server served through `httpx.MockTransport`
- Clients wired to that fake server or to ad-hoc request handlers
- Settings isolation from the developer's environment and `.env`
"""

from __future__ import annotations

import json
import time
from typing import Any, Callable, Dict, List, Optional, Set

import httpx
import pytest

from timetagger_client.client import TimeTaggerClient
from timetagger_client.config import get_settings

BASE_URL = "http://timetagger.test/timetagger/api/v2/"
API_KEY = "test-api-key"


class FakeTimeTagger:
    """
    Minimal stateful stand-in for the TimeTagger v2 API.

    Stores wire records/settings by key, stamps accepted writes with the current
    `server_time` (fractional seconds) and answers the update feed from it.
    """

    def __init__(self) -> None:
        self.records: Dict[str, Dict[str, Any]] = {}
        self.settings: Dict[str, Dict[str, Any]] = {}
        self.requests: List[httpx.Request] = []
        self.server_time: float = 1_700_000_000.25
        self.reset: bool = False
        self.reject_keys: Set[str] = set()

    def add_record(self, key: str, t1: int, t2: int, ds: Optional[str] = "", mt: int = 0, st: Optional[float] = None) -> None:
        self.records[key] = {
            "key": key,
            "t1": t1,
            "t2": t2,
            "ds": ds,
            "mt": mt or t1,
            "st": self.server_time if st is None else st,
        }

    def add_setting(self, key: str, value: Any, mt: int = 1_600_000_000, st: Optional[float] = None) -> None:
        self.settings[key] = {
            "key": key,
            "value": value,
            "mt": mt,
            "st": self.server_time if st is None else st,
        }

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.headers.get("authtoken") != API_KEY:
            return httpx.Response(401, text="Invalid auth token")

        endpoint = request.url.path.rsplit("/", 1)[-1]
        if request.method == "GET" and endpoint == "records":
            start, end = (int(part) for part in request.url.params["timerange"].split("-"))
            found = [r for r in self.records.values() if r["t1"] <= end and r["t2"] >= start]
            return httpx.Response(200, json={"records": found})
        if request.method == "GET" and endpoint == "settings":
            return httpx.Response(200, json={"settings": list(self.settings.values())})
        if request.method == "GET" and endpoint == "updates":
            since = float(request.url.params["since"])
            return httpx.Response(
                200,
                json={
                    "server_time": int(self.server_time * 1000),
                    "reset": 1 if self.reset else 0,
                    "records": [r for r in self.records.values() if r["st"] > since],
                    "settings": [s for s in self.settings.values() if s["st"] > since],
                },
            )
        if request.method == "PUT" and endpoint in ("records", "settings"):
            store = self.records if endpoint == "records" else self.settings
            return httpx.Response(200, json=self._write(store, json.loads(request.content)))
        return httpx.Response(404, text=f"No such endpoint: {request.method} {endpoint}")

    def _write(self, store: Dict[str, Dict[str, Any]], items: List[Dict[str, Any]]) -> Dict[str, List[str]]:
        accepted: List[str] = []
        failed: List[str] = []
        errors: List[str] = []
        for item in items:
            if item["key"] in self.reject_keys:
                failed.append(item["key"])
                errors.append(f"Item {item['key']} was rejected")
                continue
            store[item["key"]] = {**item, "st": self.server_time}
            accepted.append(item["key"])
        return {"accepted": accepted, "failed": failed, "errors": errors}


@pytest.fixture
def fake_server() -> FakeTimeTagger:
    return FakeTimeTagger()


@pytest.fixture
def client(fake_server: FakeTimeTagger):
    """Client talking to the fake server."""
    with TimeTaggerClient(BASE_URL, API_KEY, transport=httpx.MockTransport(fake_server.handle)) as c:
        yield c


@pytest.fixture
def make_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], TimeTaggerClient]:
    """Factory for clients backed by an ad-hoc request handler."""
    created: List[TimeTaggerClient] = []

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> TimeTaggerClient:
        c = TimeTaggerClient(BASE_URL, API_KEY, transport=httpx.MockTransport(handler))
        created.append(c)
        return c

    yield _make
    for c in created:
        c.close()


@pytest.fixture
def isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path):
    """
    Run with no TIMETAGGER_*/logging env vars and no `.env` in the working directory.
    """
    for name in (
        "TIMETAGGER_URL",
        "TIMETAGGER_API_KEY",
        "TIMETAGGER_TIMEOUT",
        "TIMETAGGER_VERIFY_TLS",
        "APP_ENV",
        "LOG_LEVEL",
        "LOG_JSON",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def local_time_east_of_utc(monkeypatch: pytest.MonkeyPatch):
    """Run with the process local time zone set to UTC+1."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setenv("TZ", "CET-1")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()
