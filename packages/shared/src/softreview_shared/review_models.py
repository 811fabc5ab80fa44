"""Review workflow models — drafts, continuations and outcomes.

A continuation is whatever the user was trying to do when the auth gate sent
them to the login page. It is stored in the per-tab pending-action slot and
resumed once the session becomes authenticated:

  - ReviewDraft: a review composition, restored into an open composer
  - PendingModeration: an upvote/downvote/flag click, replayed once

Both carry an `intent` discriminator so a single slot can hold either kind.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Literal

from pydantic import BaseModel, Field, TypeAdapter

from softreview_shared.catalog_models import ProductRef
from softreview_shared.models import LoginRedirect, PlatformResult

ModerationKind = Literal["upvote", "downvote", "flag"]


class ReviewFormData(BaseModel):
    """The fields of the review composer. Rating starts at five stars."""

    title: str = ""
    body: str = ""
    rating: int | None = 5


class ReviewDraft(BaseModel):
    intent: Literal["compose_review"] = "compose_review"
    product: ProductRef
    form_data: ReviewFormData = Field(default_factory=ReviewFormData)
    return_path: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class PendingModeration(BaseModel):
    intent: ModerationKind
    review_id: str
    product: ProductRef | None = None
    return_path: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


PendingAction = Annotated[ReviewDraft | PendingModeration, Field(discriminator="intent")]

pending_action_adapter: TypeAdapter[ReviewDraft | PendingModeration] = TypeAdapter(PendingAction)


class CreateReviewRequest(BaseModel):
    """Body of POST /reviews."""

    product_id: str
    title: str = ""
    body: str
    rating: int


class ComposerState(BaseModel):
    """The review composition surface as the view renders it."""

    is_open: bool = False
    product: ProductRef | None = None
    form_data: ReviewFormData = Field(default_factory=ReviewFormData)
    errors: dict[str, str] = {}
    is_submitting: bool = False


SubmissionStatus = Literal["submitted", "deferred", "invalid", "failed", "unauthenticated", "busy"]


class SubmissionOutcome(PlatformResult):
    """Returned by ReviewDraftWorkflow.begin_submission and submit."""

    status: SubmissionStatus
    errors: dict[str, str] = {}
    redirect: LoginRedirect | None = None
    refresh_required: bool = False


ModerationStatus = Literal["done", "failed", "deferred", "cancelled", "busy"]


class ModerationResult(PlatformResult):
    """Returned by each moderation action."""

    status: ModerationStatus
    action: ModerationKind
    review_id: str
    request_sent: bool = False
    refresh_required: bool = False
    redirect: LoginRedirect | None = None
