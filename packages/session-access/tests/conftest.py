"""Test fixtures for Session Access.

Provides a MockRedis adapter that mirrors the RedisAdapter interface, recording
all operations so tests can assert on exactly which keys were touched, plus a
real RedisAdapter over fakeredis for end-to-end store tests.
"""

from __future__ import annotations

import pytest
from fakeredis.aioredis import FakeRedis
from softreview_session_access.client import RedisAdapter


class MockRedis:
    """In-memory Redis mock that mirrors RedisAdapter's async interface."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.expiries: dict[str, int] = {}
        self.calls: list[tuple[str, tuple]] = []

    async def get(self, key: str) -> str | None:
        self.calls.append(("get", (key,)))
        return self.store.get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> None:
        self.calls.append(("set", (key, value)))
        self.store[key] = value
        if ex:
            self.expiries[key] = ex

    async def delete(self, *keys: str) -> None:
        self.calls.append(("delete", keys))
        for key in keys:
            self.store.pop(key, None)
            self.expiries.pop(key, None)


@pytest.fixture
def mock_redis() -> MockRedis:
    return MockRedis()


@pytest.fixture
def fake_adapter() -> RedisAdapter:
    return RedisAdapter(FakeRedis(decode_responses=True))
