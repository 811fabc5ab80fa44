"""Directory API client — every REST call the review workflow makes.

One client instance per browser session. It owns the httpx AsyncClient and the
bearer token the auth session hands it; the token is attached to every request
whenever one is present, regardless of whether the endpoint needs it.

Error handling:
  - Non-2xx responses raise ApiError carrying the server's `error` (or
    `details`) message, so workflow code can match on message substrings.
  - Connection failures are retried with exponential backoff via tenacity.
    Only failures where the request never reached the server are retried, so a
    POST is never sent twice.
  - Anything still failing surfaces as ApiError; callers convert it to UI state.

Configuration:
  - SOFTREVIEW_API_URL: base URL (default http://localhost:8080/api/v1)
  - SOFTREVIEW_API_TIMEOUT: per-request timeout in seconds (default 30)
"""

from __future__ import annotations

import logging
import os
from typing import Any

import httpx
from pydantic import ValidationError
from softreview_shared.auth_models import AuthResponse, Identity
from softreview_shared.catalog_models import Company, Product, Review
from softreview_shared.review_models import CreateReviewRequest
from softreview_shared.solution_models import CreateProductRequest
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from softreview_api_access.normalize import extract_items, extract_reviews, review_fields

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8080/api/v1"
DEFAULT_TIMEOUT = 30.0


class ApiError(Exception):
    """A failed API call. `str(error)` is the server's message."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ReviewDirectoryClient:
    """Async REST client for /auth, /products, /companies and /reviews."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url or os.environ.get("SOFTREVIEW_API_URL", DEFAULT_BASE_URL)
        self.timeout = timeout or float(os.environ.get("SOFTREVIEW_API_TIMEOUT", DEFAULT_TIMEOUT))
        self.token = token
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self.request_count: int = 0

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    @retry(
        retry=retry_if_exception_type((httpx.ConnectError, httpx.ConnectTimeout)),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=8),
        stop=stop_after_attempt(3),
        reraise=True,
    )
    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        self.request_count += 1
        return await self._get_client().request(method, path, headers=self._headers(), **kwargs)

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Send one request and return the decoded JSON body (None if empty)."""
        try:
            response = await self._send(method, path, json=json, params=params)
        except httpx.HTTPError as e:
            logger.error(f"API request {method} {path} failed: {e}")
            raise ApiError(f"Network error: {e}") from e

        try:
            data = response.json() if response.content else None
        except ValueError:
            data = None

        if response.is_error:
            message = "Request failed"
            if isinstance(data, dict):
                message = str(data.get("error") or data.get("details") or message)
            logger.error(f"API request {method} {path} returned {response.status_code}: {message}")
            raise ApiError(message, status_code=response.status_code)

        return data

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    async def login(self, email: str, password: str) -> AuthResponse:
        data = await self.request("POST", "/auth/login", json={"email": email, "password": password})
        return self._auth_response(data)

    async def register(self, email: str, password: str, handle: str) -> AuthResponse:
        data = await self.request(
            "POST",
            "/auth/register",
            json={"email": email, "password": password, "handle": handle},
        )
        return self._auth_response(data)

    async def get_profile(self) -> Identity:
        data = await self.request("GET", "/auth/profile")
        try:
            return Identity.model_validate(data)
        except ValidationError as e:
            raise ApiError(f"Malformed profile response: {e}") from e

    @staticmethod
    def _auth_response(data: Any) -> AuthResponse:
        try:
            return AuthResponse.model_validate(data)
        except ValidationError as e:
            raise ApiError(f"Malformed auth response: {e}") from e

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    async def get_products(self, params: dict[str, Any] | None = None) -> list[Product]:
        data = await self.request("GET", "/products", params=params or None)
        return _parse_all(Product, extract_items(data, "products"))

    async def get_product(self, product_id: str) -> Product:
        data = await self.request("GET", f"/products/{product_id}")
        return _parse_one(Product, data)

    async def search_products(self, query: str) -> list[Product]:
        data = await self.request("GET", "/products/search", params={"q": query})
        return _parse_all(Product, extract_items(data, "products"))

    async def create_product(self, product: CreateProductRequest) -> dict[str, Any] | None:
        return await self.request("POST", "/products", json=product.model_dump(exclude_none=True))

    # ------------------------------------------------------------------
    # Companies
    # ------------------------------------------------------------------

    async def get_companies(self, params: dict[str, Any] | None = None) -> list[Company]:
        data = await self.request("GET", "/companies", params=params or None)
        return _parse_all(Company, extract_items(data, "companies"))

    async def search_companies(self, query: str) -> list[Company]:
        data = await self.request("GET", "/companies/search", params={"q": query})
        return _parse_all(Company, extract_items(data, "companies"))

    # ------------------------------------------------------------------
    # Reviews
    # ------------------------------------------------------------------

    async def get_reviews_by_product(self, product_id: str) -> list[Review]:
        data = await self.request("GET", f"/reviews/product/{product_id}")
        return _parse_all(Review, [review_fields(item) for item in extract_reviews(data)])

    async def create_review(self, review: CreateReviewRequest) -> dict[str, Any] | None:
        return await self.request("POST", "/reviews", json=review.model_dump())

    async def upvote_review(self, review_id: str) -> dict[str, Any] | None:
        return await self.request("POST", f"/reviews/{review_id}/upvote")

    async def downvote_review(self, review_id: str) -> dict[str, Any] | None:
        return await self.request("POST", f"/reviews/{review_id}/downvote")

    async def flag_review(self, review_id: str, reason: str) -> dict[str, Any] | None:
        return await self.request("POST", f"/reviews/{review_id}/flag", json={"reason": reason})


def _parse_one(model: type[Any], data: Any) -> Any:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ApiError(f"Malformed {model.__name__} response: {e}") from e


def _parse_all(model: type[Any], items: list[dict[str, Any]]) -> list[Any]:
    """Validate each item, skipping (and logging) the ones that don't fit."""
    parsed = []
    for item in items:
        try:
            parsed.append(model.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Skipping malformed {model.__name__}: {e}")
    return parsed


# ============================================================================
# Singleton management
# ============================================================================

_client: ReviewDirectoryClient | None = None


def get_api_client() -> ReviewDirectoryClient:
    """Return a lazily-initialized client configured from the environment."""
    global _client
    if _client is None:
        _client = ReviewDirectoryClient()
    return _client


def reset_api_client() -> None:
    """Reset the client singleton — used in tests."""
    global _client
    _client = None
