"""Typed single-slot stores on top of the RedisAdapter.

PendingActionStore holds at most one continuation per tab. Writing a new one
silently replaces the previous one: starting a second draft before finishing
the first discards the first. That is the contract, and tests pin it.

CredentialStore holds the bearer token for a browser.
"""

from __future__ import annotations

import logging
import os

from pydantic import ValidationError
from softreview_shared.review_models import (
    PendingModeration,
    ReviewDraft,
    pending_action_adapter,
)

from softreview_session_access.client import RedisAdapter
from softreview_session_access.keys import credential_key, pending_action_key

logger = logging.getLogger(__name__)


def _env_draft_ttl() -> int | None:
    raw = os.environ.get("SOFTREVIEW_DRAFT_TTL", "")
    return int(raw) if raw else None


class PendingActionStore:
    """get/set/clear over the single pending-action slot of one tab."""

    def __init__(
        self, client: RedisAdapter, tab_id: str, ttl_seconds: int | None = None
    ) -> None:
        self._client = client
        self.tab_id = tab_id
        self.key = pending_action_key(tab_id)
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else _env_draft_ttl()

    async def get(self) -> ReviewDraft | PendingModeration | None:
        """Load the stored continuation.

        A corrupt entry is cleared and reported as absent.
        """
        raw = await self._client.get(self.key)
        if raw is None:
            return None
        try:
            return pending_action_adapter.validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding corrupt pending action for tab '{self.tab_id}': {e}")
            await self.clear()
            return None

    async def set(self, action: ReviewDraft | PendingModeration) -> None:
        await self._client.set(self.key, action.model_dump_json(), ex=self.ttl_seconds)

    async def clear(self) -> None:
        await self._client.delete(self.key)


class CredentialStore:
    """get/set/clear for the persisted bearer token."""

    def __init__(self, client: RedisAdapter, browser_id: str) -> None:
        self._client = client
        self.browser_id = browser_id
        self.key = credential_key(browser_id)

    async def get(self) -> str | None:
        token = await self._client.get(self.key)
        return token or None

    async def set(self, token: str) -> None:
        await self._client.set(self.key, token)

    async def clear(self) -> None:
        await self._client.delete(self.key)
