"""Shared test fixtures for API Access tests.

Provides:
  - Mock HTTP transport for httpx (intercepts all requests)
  - A client factory wired to that transport
"""

from __future__ import annotations

import json

import httpx
import pytest
from softreview_api_access.client import ReviewDirectoryClient

BASE_URL = "http://api.test/api/v1"


class MockTransport(httpx.AsyncBaseTransport):
    """Mock HTTP transport that returns preconfigured responses.

    Each call to handle_async_request pops the next response from the list.
    If the list is exhausted, returns a 500 error.
    """

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

    def body(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)


@pytest.fixture
def make_client():
    """Build a client over a MockTransport that returns the given responses."""
    clients: list[ReviewDirectoryClient] = []

    def _make(*responses: httpx.Response, token: str | None = None):
        transport = MockTransport(responses=list(responses))
        client = ReviewDirectoryClient(base_url=BASE_URL, token=token, transport=transport)
        clients.append(client)
        return client, transport

    yield _make
