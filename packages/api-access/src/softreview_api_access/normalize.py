"""Response-shape normalization for list endpoints.

The reviews endpoint has shipped several envelopes over time. Callers get one
list no matter which shape arrives, checked in this priority order:

  1. bare array          [...]
  2. {"reviews": [...]}  (or the resource key, e.g. "products")
  3. {"data": [...]}
  4. {"results": [...]}

Anything else normalizes to an empty list.
"""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)

_CONTENT_FIELDS = ("body", "content", "review_content", "text", "description", "comment", "review")
_ID_FIELDS = ("id", "review_id", "_id", "reviewId")


def unwrap_list(payload: Any, key: str) -> list[Any]:
    """Return the inner array of a list response, or [] if there is none."""
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, dict):
        return []
    for candidate in (key, "data", "results"):
        value = payload.get(candidate)
        if isinstance(value, list):
            return value
    return []


def extract_items(payload: Any, key: str) -> list[dict[str, Any]]:
    """Unwrap a list response and keep only object items."""
    return [item for item in unwrap_list(payload, key) if isinstance(item, dict)]


def _is_usable_review(item: Any) -> bool:
    if not isinstance(item, dict):
        return False
    has_content = any(item.get(f) for f in _CONTENT_FIELDS)
    has_id = any(item.get(f) for f in _ID_FIELDS)
    return has_content or has_id


def extract_reviews(payload: Any) -> list[dict[str, Any]]:
    """Unwrap a reviews response and drop entries with neither content nor id."""
    items = unwrap_list(payload, "reviews")
    usable = [item for item in items if _is_usable_review(item)]
    dropped = len(items) - len(usable)
    if dropped:
        logger.warning(f"Dropped {dropped} unusable review entries")
    return usable


def review_fields(item: dict[str, Any]) -> dict[str, Any]:
    """Map alternative content/id field names onto the Review model's names."""
    fields = dict(item)
    if not fields.get("body"):
        fields["body"] = next((item[f] for f in _CONTENT_FIELDS if item.get(f)), "")
    if not fields.get("id"):
        fields["id"] = next((str(item[f]) for f in _ID_FIELDS if item.get(f)), "")
    return fields
