"""Add-a-solution form — list a new piece of software in the directory.

Name and category are required. The slug is derived from the name, and the
first 200 characters of the description double as the short tagline. The
owning company is optional: it is picked from a server-side search that only
runs once the query is at least two characters long.

Listing a product needs an account. An anonymous submit returns a login
redirect and sends nothing; the form stays as typed.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import Any

from softreview_api_access.client import ApiError, ReviewDirectoryClient
from softreview_auth.session import AuthSession
from softreview_shared.catalog_models import Company
from softreview_shared.models import LoginRedirect
from softreview_shared.solution_models import (
    CreateProductRequest,
    SolutionFormData,
    SolutionOutcome,
)

logger = logging.getLogger(__name__)

Notifier = Callable[[str], None]

CATEGORIES = {
    "hosting": "Hosting",
    "feature_toggles": "Feature Toggles",
    "ci_cd": "CI/CD",
    "observability": "Observability",
    "other": "Other",
}

TAGLINE_MAX_LENGTH = 200
COMPANY_SEARCH_MIN_LENGTH = 2
ADD_SOLUTION_PATH = "/add-solution"

NAME_REQUIRED_MESSAGE = "Product name is required"
CATEGORY_REQUIRED_MESSAGE = "Product category is required"
SUBMIT_SUCCESS_MESSAGE = "Solution submitted successfully!"


def slugify(name: str) -> str:
    """Lowercase, keep [a-z0-9 -], collapse whitespace and dashes into one dash."""
    slug = re.sub(r"[^a-z0-9\s-]", "", name.lower())
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def validate_solution(form: SolutionFormData) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not form.name.strip():
        errors["name"] = NAME_REQUIRED_MESSAGE
    if not form.category:
        errors["category"] = CATEGORY_REQUIRED_MESSAGE
    return errors


def build_product_request(form: SolutionFormData) -> CreateProductRequest:
    name = form.name.strip()
    description = form.description.strip()
    return CreateProductRequest(
        name=name,
        slug=slugify(name),
        category=form.category,
        description=description,
        homepage_url=form.homepage_url.strip(),
        company_id=form.company_id or None,
        short_tagline=description[:TAGLINE_MAX_LENGTH] or None,
    )


class SolutionSubmission:
    """State behind the add-a-solution page."""

    def __init__(
        self,
        auth: AuthSession,
        api: ReviewDirectoryClient,
        notify: Notifier,
        login_path: str = "/login",
    ) -> None:
        self.auth = auth
        self.api = api
        self.notify = notify
        self.login_path = login_path
        self.form = SolutionFormData()
        self.search_query = ""
        self.companies: list[Company] = []
        self.show_company_results = False
        self.is_searching = False
        self.is_submitting = False

    @property
    def can_submit(self) -> bool:
        return not self.is_submitting and bool(self.form.name) and bool(self.form.category)

    def update_field(self, name: str, value: Any) -> None:
        self.form = self.form.model_copy(update={name: value})

    # ------------------------------------------------------------------
    # Company picker
    # ------------------------------------------------------------------

    async def search_companies(self, query: str) -> None:
        self.search_query = query
        if len(query) < COMPANY_SEARCH_MIN_LENGTH:
            self._close_company_results()
            return

        self.is_searching = True
        try:
            companies = await self.api.search_companies(query)
        except ApiError as e:
            logger.error(f"Error searching companies: {e}")
            companies = []
        finally:
            self.is_searching = False

        if query != self.search_query:
            # a newer keystroke owns the dropdown
            return
        self.companies = companies
        self.show_company_results = bool(companies)

    def select_company(self, company: Company) -> None:
        self.form = self.form.model_copy(update={"company_id": company.id, "company_name": company.name})
        self.search_query = company.name
        self._close_company_results()

    def clear_company(self) -> None:
        self.form = self.form.model_copy(update={"company_id": "", "company_name": ""})
        self.search_query = ""
        self._close_company_results()

    def _close_company_results(self) -> None:
        self.companies = []
        self.show_company_results = False

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    async def submit(self) -> SolutionOutcome:
        if self.is_submitting:
            return SolutionOutcome(success=False, status="busy", message="Already submitting")

        if not self.auth.is_authenticated:
            return SolutionOutcome(
                success=False,
                status="unauthenticated",
                message="Log in to add a solution",
                redirect=LoginRedirect(path=self.login_path, return_to=ADD_SOLUTION_PATH),
            )

        errors = validate_solution(self.form)
        if errors:
            message = next(iter(errors.values()))
            self.notify(message)
            return SolutionOutcome(success=False, status="invalid", message=message, errors=errors)

        request = build_product_request(self.form)
        self.is_submitting = True
        try:
            await self.api.create_product(request)
        except ApiError as e:
            logger.error(f"Error submitting solution '{request.slug}': {e}")
            message = f"Error submitting solution: {e}"
            self.notify(message)
            return SolutionOutcome(success=False, status="failed", message=message)
        finally:
            self.is_submitting = False

        logger.info(f"Submitted solution '{request.slug}'")
        self.notify(SUBMIT_SUCCESS_MESSAGE)
        self.form = SolutionFormData()
        self.search_query = ""
        return SolutionOutcome(success=True, status="submitted", message=SUBMIT_SUCCESS_MESSAGE)
