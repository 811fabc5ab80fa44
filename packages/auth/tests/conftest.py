"""Test fixtures for the auth session.

Provides:
  - MockTransport: sequential canned httpx responses, recording requests
  - GatedTransport: holds every response until the test releases it, for
    interleaving tests
  - A credential store over fakeredis, and a gated variant that pauses
    between reading the token and handing it back
"""

from __future__ import annotations

import asyncio

import httpx
import pytest
from fakeredis.aioredis import FakeRedis
from softreview_api_access.client import ReviewDirectoryClient
from softreview_session_access.client import RedisAdapter
from softreview_session_access.stores import CredentialStore

BASE_URL = "http://api.test/api/v1"


class MockTransport(httpx.AsyncBaseTransport):
    """Returns preconfigured responses in order; 500 once exhausted."""

    def __init__(self, responses: list[httpx.Response] | None = None) -> None:
        self.responses = list(responses or [])
        self.requests: list[httpx.Request] = []

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.responses:
            response = self.responses.pop(0)
            response.stream = httpx.ByteStream(response.content)
            return response
        return httpx.Response(500, json={"error": "No more mock responses"})


class GatedTransport(MockTransport):
    """Like MockTransport, but each response waits for `release()`."""

    def __init__(self, responses: list[httpx.Response] | None = None) -> None:
        super().__init__(responses)
        self.gate = asyncio.Event()

    def release(self) -> None:
        self.gate.set()

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        await self.gate.wait()
        response = self.responses.pop(0)
        response.stream = httpx.ByteStream(response.content)
        return response


@pytest.fixture
def credentials() -> CredentialStore:
    return CredentialStore(RedisAdapter(FakeRedis(decode_responses=True)), "browser-1")


@pytest.fixture
def make_api():
    def _make(*responses: httpx.Response, transport: MockTransport | None = None):
        transport = transport or MockTransport(responses=list(responses))
        return ReviewDirectoryClient(base_url=BASE_URL, transport=transport), transport

    return _make


@pytest.fixture
def gated():
    """Factory for a GatedTransport over the given responses."""

    def _make(*responses: httpx.Response) -> GatedTransport:
        return GatedTransport(list(responses))

    return _make


class GatedCredentialStore(CredentialStore):
    """Reads the stored token, then waits for `release()` before returning it."""

    def __init__(self, client: RedisAdapter, browser_id: str) -> None:
        super().__init__(client, browser_id)
        self.read = asyncio.Event()
        self.gate = asyncio.Event()

    def release(self) -> None:
        self.gate.set()

    async def get(self) -> str | None:
        token = await super().get()
        self.read.set()
        await self.gate.wait()
        return token


@pytest.fixture
def gated_credentials() -> GatedCredentialStore:
    return GatedCredentialStore(RedisAdapter(FakeRedis(decode_responses=True)), "browser-1")
