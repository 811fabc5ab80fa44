"""Field validation for the review composer.

Runs locally and synchronously; nothing here talks to the server. The rules
match what POST /reviews enforces, so a form that passes here is only rejected
server-side for business reasons (e.g. a duplicate review).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from softreview_shared.review_models import ReviewFormData

TITLE_MAX_LENGTH = 200
BODY_MIN_LENGTH = 10
RATING_MIN = 1
RATING_MAX = 5


def _field(form_data: ReviewFormData | Mapping[str, Any], name: str) -> Any:
    if isinstance(form_data, Mapping):
        return form_data.get(name)
    return getattr(form_data, name, None)


def validate_review(form_data: ReviewFormData | Mapping[str, Any]) -> dict[str, str]:
    """Return field → error message. An empty dict means the form is valid.

    Never raises, whatever shape the input has.
    """
    errors: dict[str, str] = {}

    title = _field(form_data, "title")
    if title and len(str(title)) > TITLE_MAX_LENGTH:
        errors["title"] = "Title must be 200 characters or less"

    body = _field(form_data, "body")
    body_text = body.strip() if isinstance(body, str) else ""
    if not body_text:
        errors["body"] = "Review content is required"
    elif len(body_text) < BODY_MIN_LENGTH:
        errors["body"] = "Review must be at least 10 characters long"

    rating = _field(form_data, "rating")
    if (
        isinstance(rating, bool)
        or not isinstance(rating, int)
        or not RATING_MIN <= rating <= RATING_MAX
    ):
        errors["rating"] = "Please select a rating from 1 to 5 stars"

    return errors
