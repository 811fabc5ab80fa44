"""Catalog models — server-owned products, companies and reviews.

These mirror the JSON the directory API returns. The client never mutates them
locally; vote counts and ratings are always re-read from the server.

Design choices:
  - Unknown server fields are ignored, so additive API changes never break
    parsing.
  - Optional server fields (avg_rating, timestamps) stay None rather than being
    defaulted to fake values; sorting code decides how to order them.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class ProductRef(BaseModel):
    """The minimal product reference a draft carries across a login redirect."""

    id: str
    name: str = ""


class Product(BaseModel):
    id: str
    company_id: str = ""
    name: str
    slug: str = ""
    category: str = ""
    short_tagline: str | None = None
    description: str | None = None
    homepage_url: str | None = None
    docs_url: str | None = None
    avg_rating: float | None = None
    total_reviews: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def ref(self) -> ProductRef:
        return ProductRef(id=self.id, name=self.name)


class Company(BaseModel):
    id: str
    name: str
    website: str | None = None
    slug: str = ""
    logo_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class Review(BaseModel):
    """A review as listed under a product. `user_id` is the author."""

    id: str = ""
    product_id: str = ""
    user_id: str = ""
    title: str | None = None
    body: str = ""
    rating: int = 0
    status: str = "published"
    helpful_count: int = 0
    flag_count: int = 0
    edited: bool = False
    user_handle: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
