"""Pytest configuration and shared fixtures for the Brightcove provider tests."""

import asyncio
import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Tuple, Union

import httpx
import pytest

from brightcove_provider.bus import pattern_subject
from brightcove_provider.client import BrightcoveClient

FIXTURES_DIR = Path(__file__).parent / "fixtures"

CLIENT_ID = "fake-client-id"
CLIENT_SECRET = "fake-client-secret"
ACCOUNT_ID = "fake-account-id"
POLICY_KEY = "fake-policy-key"
CHANNEL_ID = "fake-channel"

OAUTH_URL = "https://oauth.brightcove.com/v3"
CMS_URL = "https://cms.api.brightcove.com/v1"
PLAYBACK_URL = "https://edge.api.brightcove.com/playback/v1"
POLICY_URL = "https://policy.api.brightcove.com/v1"

NOW = datetime(2020, 1, 1, tzinfo=timezone.utc)

# Keep tests independent of the developer's environment
for _name in list(os.environ):
    if _name.startswith("BRIGHTCOVE_"):
        del os.environ[_name]


def load_fixture(name: str) -> Any:
    with open(FIXTURES_DIR / f"{name}.json") as f:
        return json.load(f)


Reply = Union[httpx.Response, Callable[[httpx.Request], Any]]


class FakeUpstream:
    """Routes httpx requests to canned responses keyed by method and URL (no query)."""

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Reply] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, url: str, reply: Reply) -> None:
        self.routes[(method, url)] = reply

    def json(self, method: str, url: str, payload: Any, status_code: int = 200) -> None:
        self.add(method, url, httpx.Response(status_code, json=payload))

    def calls(self, method: str, url: str) -> List[httpx.Request]:
        return [r for r in self.requests if (r.method, self._key(r)[1]) == (method, url)]

    @staticmethod
    def _key(request: httpx.Request) -> Tuple[str, str]:
        return request.method, f"{request.url.scheme}://{request.url.host}{request.url.path}"

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = self._key(request)
        if key not in self.routes:
            raise AssertionError(f"Unexpected upstream request: {key}")
        reply = self.routes[key]
        if isinstance(reply, httpx.Response):
            # fresh copy per request; responses are single-use
            return httpx.Response(reply.status_code, headers=reply.headers, content=reply.content)
        result = reply(request)
        if asyncio.iscoroutine(result):
            result = await result
        return result


class FakeBus:
    """In-memory bus double: handlers, commands and broadcasts in one process."""

    def __init__(self):
        self.handlers: Dict[str, Callable] = {}
        self.observers: Dict[str, List[Callable]] = {}
        self.commands: List[Tuple[Dict[str, Any], Dict[str, Any]]] = []
        self.broadcasts: List[Tuple[Dict[str, Any], Dict[str, Any]]] = []

    async def query_handler(self, pattern, handler):
        self.handlers[pattern_subject(pattern)] = handler

    async def command_handler(self, pattern, handler):
        self.handlers[pattern_subject(pattern)] = handler

    async def observe(self, pattern, handler):
        self.observers.setdefault(pattern_subject(pattern), []).append(handler)

    async def query(self, pattern, payload):
        return await self.handlers[pattern_subject(pattern)](payload)

    async def send_command(self, pattern, payload):
        self.commands.append((dict(pattern), payload))
        return await self.handlers[pattern_subject(pattern)](payload)

    async def broadcast(self, pattern, payload):
        self.broadcasts.append((dict(pattern), payload))
        for handler in self.observers.get(pattern_subject(pattern), []):
            await handler(payload)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def http_client(upstream):
    return httpx.AsyncClient(transport=httpx.MockTransport(upstream))


@pytest.fixture
def make_client(http_client):
    """Factory for clients wired to the fake upstream with a fixed clock."""

    def factory(**kwargs) -> BrightcoveClient:
        options = {
            "client_id": CLIENT_ID,
            "client_secret": CLIENT_SECRET,
            "account_id": ACCOUNT_ID,
            "clock": lambda: NOW,
            "http_client": http_client,
        }
        options.update(kwargs)
        return BrightcoveClient(**options)

    return factory


@pytest.fixture
def bus() -> FakeBus:
    return FakeBus()


@pytest.fixture
def channel() -> Dict[str, Any]:
    return {
        "id": CHANNEL_ID,
        "secrets": {
            "brightcove": {
                "clientId": CLIENT_ID,
                "clientSecret": CLIENT_SECRET,
                "accountId": ACCOUNT_ID,
            }
        },
    }
