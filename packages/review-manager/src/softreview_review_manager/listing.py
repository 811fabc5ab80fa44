"""Product and company listings — load, filter and sort for the directory pages."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Literal

from softreview_api_access.client import ApiError, ReviewDirectoryClient
from softreview_shared.catalog_models import Company, Product

logger = logging.getLogger(__name__)

ProductSort = Literal["rating", "reviews", "name"]
CompanySort = Literal["name", "created", "updated"]

ALL_CATEGORIES = "all"


def _matches(term: str, *values: str | None) -> bool:
    return any(term in (value or "").lower() for value in values)


def filter_products(
    products: list[Product], search: str = "", category: str = ALL_CATEGORIES
) -> list[Product]:
    """Case-insensitive search over name and description, plus a category filter."""
    term = search.lower()
    return [
        p
        for p in products
        if _matches(term, p.name, p.description)
        and (category == ALL_CATEGORIES or p.category == category)
    ]


def sort_products(products: list[Product], sort_by: str = "rating") -> list[Product]:
    """rating and reviews sort descending; name ascending. Unknown keys keep order."""
    if sort_by == "rating":
        return sorted(products, key=lambda p: p.avg_rating or 0.0, reverse=True)
    if sort_by == "reviews":
        return sorted(products, key=lambda p: p.total_reviews, reverse=True)
    if sort_by == "name":
        return sorted(products, key=lambda p: p.name.casefold())
    return list(products)


def filter_companies(companies: list[Company], search: str = "") -> list[Company]:
    term = search.lower()
    return [c for c in companies if _matches(term, c.name, c.website)]


def _timestamp(value: datetime | None) -> float:
    # naive and aware datetimes can't be compared directly
    return value.timestamp() if value else float("-inf")


def sort_companies(companies: list[Company], sort_by: str = "name") -> list[Company]:
    """name ascending; created/updated newest first, undated last."""
    if sort_by == "name":
        return sorted(companies, key=lambda c: c.name.casefold())
    if sort_by == "created":
        return sorted(companies, key=lambda c: _timestamp(c.created_at), reverse=True)
    if sort_by == "updated":
        return sorted(companies, key=lambda c: _timestamp(c.updated_at), reverse=True)
    return list(companies)


class ProductListing:
    """State behind the software directory page."""

    def __init__(self, api: ReviewDirectoryClient) -> None:
        self.api = api
        self.products: list[Product] = []
        self.loading = False
        self.error: str | None = None
        self.search = ""
        self.category = ALL_CATEGORIES
        self.sort_by: ProductSort = "rating"

    async def load(self, params: dict[str, Any] | None = None, query: str = "") -> None:
        """Fetch the catalog, or the server's search results when a query is given."""
        self.loading = True
        self.error = None
        try:
            if query.strip():
                self.products = await self.api.search_products(query.strip())
            else:
                self.products = await self.api.get_products(params)
        except ApiError as e:
            logger.error(f"Failed to load products: {e}")
            self.error = "Failed to load software. Please try again later."
        finally:
            self.loading = False

    def categories(self) -> list[str]:
        return [ALL_CATEGORIES, *sorted({p.category for p in self.products if p.category})]

    def visible(self) -> list[Product]:
        return sort_products(filter_products(self.products, self.search, self.category), self.sort_by)


class CompanyListing:
    """State behind the company directory page."""

    def __init__(self, api: ReviewDirectoryClient) -> None:
        self.api = api
        self.companies: list[Company] = []
        self.loading = False
        self.error: str | None = None
        self.search = ""
        self.sort_by: CompanySort = "name"

    async def load(self, params: dict[str, Any] | None = None) -> None:
        self.loading = True
        self.error = None
        try:
            self.companies = await self.api.get_companies(params)
        except ApiError as e:
            logger.error(f"Failed to load companies data: {e}")
            self.error = "Failed to load companies data. Please try again later."
        finally:
            self.loading = False

    def visible(self) -> list[Company]:
        return sort_companies(filter_companies(self.companies, self.search), self.sort_by)
