"""Add-a-solution models — the form a user fills in to list new software."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

from softreview_shared.models import LoginRedirect, PlatformResult


class SolutionFormData(BaseModel):
    """The add-a-solution form. `company_id` is empty when no company is picked."""

    name: str = ""
    category: str = ""
    description: str = ""
    homepage_url: str = ""
    company_id: str = ""
    company_name: str = ""


class CreateProductRequest(BaseModel):
    """Body of POST /products.

    Serialize with `exclude_none=True`: company_id and short_tagline are only
    sent when they have a value.
    """

    name: str
    slug: str
    category: str
    description: str = ""
    homepage_url: str = ""
    company_id: str | None = None
    short_tagline: str | None = None


SolutionStatus = Literal["submitted", "invalid", "failed", "unauthenticated", "busy"]


class SolutionOutcome(PlatformResult):
    """Returned by SolutionSubmission.submit."""

    status: SolutionStatus
    errors: dict[str, str] = {}
    redirect: LoginRedirect | None = None
