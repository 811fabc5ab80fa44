"""Review draft workflow — compose → validate → (maybe defer) → submit.

The deferred path is exactly-once: an anonymous user's draft is written to the
tab's pending-action slot, the user is sent to log in, and on the way back the
draft is read, cleared, and reopened in the composer. It is never submitted on
the user's behalf; they press submit again.

Validation runs before deferral, so a draft that could never be submitted is
never carried across the login redirect.

Known limitation: the slot is per tab, not per product. Beginning a second
draft before the first is restored discards the first.
"""

from __future__ import annotations

import logging
from typing import Any

from softreview_api_access.client import ApiError, ReviewDirectoryClient
from softreview_auth.session import AuthSession
from softreview_session_access.stores import PendingActionStore
from softreview_shared.catalog_models import Product, ProductRef
from softreview_shared.models import LoginRedirect
from softreview_shared.review_models import (
    ComposerState,
    CreateReviewRequest,
    ReviewDraft,
    ReviewFormData,
    SubmissionOutcome,
)

from softreview_review_manager.validation import validate_review

logger = logging.getLogger(__name__)

ALREADY_REVIEWED_MESSAGE = "You have already reviewed this product"
LOGIN_REQUIRED_MESSAGE = "Please log in to write a review"
GENERIC_SUBMIT_MESSAGE = "Failed to submit review. Please try again."


def submission_error_message(error: str) -> str:
    """Map a server error onto the text shown above the composer."""
    lowered = error.lower()
    if "already reviewed" in lowered:
        return ALREADY_REVIEWED_MESSAGE
    if "not authenticated" in lowered:
        return LOGIN_REQUIRED_MESSAGE
    return GENERIC_SUBMIT_MESSAGE


def as_ref(product: Product | ProductRef) -> ProductRef:
    if isinstance(product, Product):
        return product.ref()
    return product


class ReviewDraftWorkflow:
    """Drives the review composer for one tab."""

    def __init__(
        self,
        auth: AuthSession,
        api: ReviewDirectoryClient,
        pending: PendingActionStore,
        login_path: str = "/login",
    ) -> None:
        self.auth = auth
        self.api = api
        self.pending = pending
        self.login_path = login_path
        self.composer = ComposerState()

    # ------------------------------------------------------------------
    # Composer surface
    # ------------------------------------------------------------------

    def open(self, product: Product | ProductRef, form_data: ReviewFormData | None = None) -> None:
        self.composer = ComposerState(
            is_open=True,
            product=as_ref(product),
            form_data=form_data or ReviewFormData(),
        )

    def close(self) -> None:
        if self.composer.is_submitting:
            return
        self.composer = ComposerState()

    def update_field(self, name: str, value: Any) -> None:
        """Edit one field; its error (if any) is cleared as the user types."""
        self.composer.form_data = self.composer.form_data.model_copy(update={name: value})
        self.composer.errors.pop(name, None)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    async def defer(
        self,
        product: Product | ProductRef,
        form_data: ReviewFormData,
        current_path: str,
    ) -> LoginRedirect:
        """Park the draft in the tab's slot and return where to send the user."""
        draft = ReviewDraft(product=as_ref(product), form_data=form_data, return_path=current_path)
        await self.pending.set(draft)
        logger.info(f"Deferred review for product '{draft.product.id}' until login")
        return LoginRedirect(path=self.login_path, return_to=current_path)

    async def begin_submission(
        self,
        product: Product | ProductRef,
        form_data: ReviewFormData,
        current_path: str,
    ) -> SubmissionOutcome:
        """Validate, then either defer behind login or submit straight away."""
        errors = validate_review(form_data)
        if errors:
            self.composer.errors = errors
            return SubmissionOutcome(
                success=False, status="invalid", message="Review has errors", errors=errors
            )

        if not self.auth.is_authenticated:
            redirect = await self.defer(product, form_data, current_path)
            self.composer = ComposerState()
            return SubmissionOutcome(
                success=False,
                status="deferred",
                message="Log in to finish your review",
                redirect=redirect,
            )

        return await self.submit(product, form_data)

    async def submit(self, product: Product | ProductRef, form_data: ReviewFormData) -> SubmissionOutcome:
        """Send the review. Requires a valid form and an authenticated session."""
        if self.composer.is_submitting:
            return SubmissionOutcome(success=False, status="busy", message="Already submitting")

        errors = validate_review(form_data)
        if errors:
            self.composer.errors = errors
            return SubmissionOutcome(
                success=False, status="invalid", message="Review has errors", errors=errors
            )

        ref = as_ref(product)
        if not self.auth.is_authenticated:
            errors = {"general": LOGIN_REQUIRED_MESSAGE}
            self.composer.errors = errors
            return SubmissionOutcome(
                success=False, status="unauthenticated", message=LOGIN_REQUIRED_MESSAGE, errors=errors
            )

        request = CreateReviewRequest(
            product_id=ref.id,
            title=(form_data.title or "").strip(),
            body=form_data.body.strip(),
            rating=form_data.rating,
        )

        self.composer.is_submitting = True
        try:
            await self.api.create_review(request)
        except ApiError as e:
            logger.error(f"Failed to create review for product '{ref.id}': {e}")
            message = submission_error_message(str(e))
            self.composer = ComposerState(
                is_open=True,
                product=ref,
                form_data=form_data,
                errors={"general": message},
            )
            return SubmissionOutcome(
                success=False, status="failed", message=message, errors={"general": message}
            )
        finally:
            self.composer.is_submitting = False

        if isinstance(await self.pending.get(), ReviewDraft):
            await self.pending.clear()
        self.composer = ComposerState()
        logger.info(f"Review submitted for product '{ref.id}'")
        return SubmissionOutcome(
            success=True, status="submitted", message="Review submitted", refresh_required=True
        )

    # ------------------------------------------------------------------
    # Restoration
    # ------------------------------------------------------------------

    async def restore_pending_draft(self) -> ReviewDraft | None:
        """Reopen a deferred draft after login. Calling it again is a no-op.

        The slot is cleared before the composer opens, so a reload cannot
        replay it. Moderation continuations are left in place.
        """
        if not self.auth.is_authenticated:
            return None

        action = await self.pending.get()
        if not isinstance(action, ReviewDraft):
            return None

        await self.pending.clear()
        self.open(action.product, action.form_data)
        logger.info(f"Restored pending review for product '{action.product.id}'")
        return action
