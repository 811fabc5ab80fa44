"""Redis client adapter for session storage.

Normalizes the interface between the Upstash SDK (cloud) and fakeredis (local
dev and tests). The session layer only needs plain string keys, so the adapter
exposes get/set/delete and nothing else.

Environment detection:
  - UPSTASH_REDIS_REST_URL set → Upstash SDK (shared deployments)
  - Otherwise → fakeredis (in-memory, process-local)

Usage:
    from softreview_session_access.client import get_client

    client = get_client()
    await client.set("sr:tab:abc:pending_action", json_str)
    value = await client.get("sr:tab:abc:pending_action")
"""

from __future__ import annotations

import os
from typing import Any


class RedisAdapter:
    """Unified async string-key interface over Upstash SDK or fakeredis."""

    def __init__(self, raw_client: Any) -> None:
        self._client = raw_client

    async def get(self, key: str) -> str | None:
        value = await self._client.get(key)
        if value is None or isinstance(value, str):
            return value
        return value.decode()

    async def set(self, key: str, value: str, ex: int | None = None) -> None:
        if ex:
            await self._client.set(key, value, ex=ex)
        else:
            await self._client.set(key, value)

    async def delete(self, *keys: str) -> None:
        await self._client.delete(*keys)


# ============================================================================
# Singleton management
# ============================================================================

_client: RedisAdapter | None = None


def get_client() -> RedisAdapter:
    """Return a lazily-initialized RedisAdapter singleton.

    Environment detection:
      - UPSTASH_REDIS_REST_URL set → Upstash SDK
      - Otherwise → fakeredis (in-memory, no external dependency)
    """
    global _client
    if _client is not None:
        return _client

    if os.environ.get("UPSTASH_REDIS_REST_URL"):
        from upstash_redis.asyncio import Redis

        raw = Redis.from_env()
        _client = RedisAdapter(raw)
    else:
        from fakeredis.aioredis import FakeRedis

        raw = FakeRedis(decode_responses=True)
        _client = RedisAdapter(raw)

    return _client


def reset_client() -> None:
    """Reset the client singleton — used in tests to inject mocks."""
    global _client
    _client = None


def set_client(adapter: RedisAdapter) -> None:
    """Inject a client — used in tests."""
    global _client
    _client = adapter
