"""Test fixtures for the review manager.

Provides:
  - RoutedTransport: httpx transport answering by "METHOD /path", recording
    every request so tests can count exactly what reached the server
  - MockRedis: in-memory RedisAdapter stand-in that exposes its raw store
  - Stack: one tab's worth of wired-up components (API client, stores, auth
    session, draft workflow, moderation) with a scripted prompt and a recorded
    alert list

Fixtures use realistic directory data: a deployment platform with a couple of
reviews, a signed-in reviewer.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field

import httpx
import pytest
from softreview_api_access.client import ReviewDirectoryClient
from softreview_auth.session import AuthSession
from softreview_review_manager.moderation import ModerationActions
from softreview_review_manager.workflow import ReviewDraftWorkflow
from softreview_session_access.stores import CredentialStore, PendingActionStore
from softreview_shared.catalog_models import ProductRef

BASE_PATH = "/api/v1"


# ============================================================================
# HTTP
# ============================================================================


class RoutedTransport(httpx.AsyncBaseTransport):
    """Answers each request from the queue registered for its method and path.

    The last response in a queue is sticky, so a route registered once can be
    hit any number of times. Unregistered routes get a 404.
    """

    def __init__(self) -> None:
        self.routes: dict[str, list[httpx.Response]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, *responses: httpx.Response) -> None:
        self.routes.setdefault(f"{method} {path}", []).extend(responses)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix(BASE_PATH)
        queue = self.routes.get(f"{request.method} {path}")
        if not queue:
            return httpx.Response(404, json={"error": "not found"})
        template = queue.pop(0) if len(queue) > 1 else queue[0]
        return httpx.Response(
            template.status_code,
            content=template.content,
            headers=template.headers,
        )

    def sent(self, method: str, path: str) -> list[httpx.Request]:
        return [
            r
            for r in self.requests
            if r.method == method and r.url.path.removeprefix(BASE_PATH) == path
        ]

    def body(self, request: httpx.Request) -> dict:
        return json.loads(request.content)


# ============================================================================
# Storage
# ============================================================================


class MockRedis:
    """In-memory Redis mock that mirrors RedisAdapter's async interface."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.calls: list[tuple[str, tuple]] = []

    async def get(self, key: str) -> str | None:
        self.calls.append(("get", (key,)))
        return self.store.get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> None:
        self.calls.append(("set", (key, value)))
        self.store[key] = value

    async def delete(self, *keys: str) -> None:
        self.calls.append(("delete", keys))
        for key in keys:
            self.store.pop(key, None)


# ============================================================================
# Wiring
# ============================================================================

USER = {"id": "user-1", "email": "ada@example.com", "handle": "ada", "role": "user"}
PRODUCT = {
    "id": "prod-1",
    "company_id": "comp-1",
    "name": "Vercel",
    "slug": "vercel",
    "category": "Deployment & Hosting",
    "avg_rating": 4.5,
    "total_reviews": 2,
}
REVIEWS = [
    {
        "id": "rev-1",
        "product_id": "prod-1",
        "user_id": "user-2",
        "body": "Preview deployments changed how we review PRs.",
        "rating": 5,
        "helpful_count": 4,
    },
    {
        "id": "rev-2",
        "product_id": "prod-1",
        "user_id": "user-3",
        "title": "Pricey at scale",
        "body": "Bandwidth costs add up once traffic grows.",
        "rating": 3,
        "helpful_count": 1,
    },
]


@dataclass
class Stack:
    transport: RoutedTransport
    redis: MockRedis
    api: ReviewDirectoryClient
    pending: PendingActionStore
    credentials: CredentialStore
    auth: AuthSession
    workflow: ReviewDraftWorkflow
    moderation: ModerationActions
    answers: list[str | None] = field(default_factory=list)
    prompts: list[str] = field(default_factory=list)
    alerts: list[str] = field(default_factory=list)

    async def sign_in(self) -> None:
        self.transport.add(
            "POST", "/auth/login", httpx.Response(200, json={"token": "tok-1", "user": USER})
        )
        result = await self.auth.login("ada@example.com", "hunter22")
        assert result.success

    def review_posts(self) -> list[httpx.Request]:
        return self.transport.sent("POST", "/reviews")


@pytest.fixture
def product_ref() -> ProductRef:
    return ProductRef(id="prod-1", name="Vercel")


@pytest.fixture
async def stack():
    transport = RoutedTransport()
    redis = MockRedis()
    api = ReviewDirectoryClient(base_url=f"http://api.test{BASE_PATH}", transport=transport)
    pending = PendingActionStore(redis, "tab-1")
    credentials = CredentialStore(redis, "browser-1")
    auth = AuthSession(api, credentials)
    workflow = ReviewDraftWorkflow(auth, api, pending)

    answers: list[str | None] = []
    prompts: list[str] = []
    alerts: list[str] = []

    def prompt(message: str) -> str | None:
        prompts.append(message)
        return answers.pop(0) if answers else None

    moderation = ModerationActions(auth, api, pending, prompt=prompt, notify=alerts.append)
    harness = Stack(
        transport=transport,
        redis=redis,
        api=api,
        pending=pending,
        credentials=credentials,
        auth=auth,
        workflow=workflow,
        moderation=moderation,
        answers=answers,
        prompts=prompts,
        alerts=alerts,
    )
    await auth.resolve()
    yield harness
    await auth.close()


@pytest.fixture
def product_payload() -> dict:
    return dict(PRODUCT)


@pytest.fixture
def reviews_payload() -> list[dict]:
    return [dict(r) for r in REVIEWS]
