"""Product detail view-model — the page where reviews are read, written and moderated.

Owns the product, its review list and the loading flags, and routes user
gestures to the draft workflow and moderation actions. After any action that
reached the server it re-reads the review list; counts are never patched
locally.

A view that has been navigated away from is deactivated. Responses that arrive
afterwards no longer touch its state.
"""

from __future__ import annotations

import logging

from softreview_api_access.client import ApiError, ReviewDirectoryClient
from softreview_auth.session import AuthSession
from softreview_shared.auth_models import Identity
from softreview_shared.catalog_models import Product, ProductRef, Review
from softreview_shared.models import LoginRedirect
from softreview_shared.review_models import ModerationResult, ReviewFormData, SubmissionOutcome

from softreview_review_manager.moderation import ModerationActions
from softreview_review_manager.workflow import ReviewDraftWorkflow

logger = logging.getLogger(__name__)

LOAD_FAILED_MESSAGE = "Failed to load software details. Please try again later."


class ProductDetailView:
    def __init__(
        self,
        product_id: str,
        api: ReviewDirectoryClient,
        auth: AuthSession,
        workflow: ReviewDraftWorkflow,
        moderation: ModerationActions,
    ) -> None:
        self.product_id = product_id
        self.api = api
        self.auth = auth
        self.workflow = workflow
        self.moderation = moderation
        self.product: Product | None = None
        self.reviews: list[Review] = []
        self.loading = False
        self.reviews_loading = False
        self.error: str | None = None
        self.active = True
        auth.on_authenticated(self._on_authenticated)

    @property
    def path(self) -> str:
        return f"/software/{self.product_id}"

    def _ref(self) -> ProductRef:
        if self.product is not None:
            return self.product.ref()
        return ProductRef(id=self.product_id)

    def deactivate(self) -> None:
        self.active = False
        self.auth.remove_listener(self._on_authenticated)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self) -> None:
        self.loading = True
        self.error = None
        try:
            product = await self.api.get_product(self.product_id)
        except ApiError as e:
            logger.error(f"Failed to load software data: {e}")
            if self.active:
                self.error = LOAD_FAILED_MESSAGE
                self.loading = False
            return

        if not self.active:
            return
        self.product = product
        self.loading = False
        await self.reload_reviews()

    async def reload_reviews(self) -> None:
        """Re-read the review list. A failure shows an empty list."""
        self.reviews_loading = True
        try:
            reviews = await self.api.get_reviews_by_product(self.product_id)
        except ApiError as e:
            logger.error(f"Failed to load reviews: {e}")
            reviews = []
        if self.active:
            self.reviews = reviews
            self.reviews_loading = False

    # ------------------------------------------------------------------
    # Reviews
    # ------------------------------------------------------------------

    async def write_review(self) -> LoginRedirect | None:
        """Open the composer, or park an empty draft and ask for login."""
        if not self.auth.is_authenticated:
            return await self.workflow.defer(self._ref(), ReviewFormData(), self.path)
        self.workflow.open(self._ref())
        return None

    async def submit_review(self) -> SubmissionOutcome:
        composer = self.workflow.composer
        outcome = await self.workflow.begin_submission(
            composer.product or self._ref(), composer.form_data, self.path
        )
        if outcome.refresh_required:
            await self.reload_reviews()
        return outcome

    # ------------------------------------------------------------------
    # Moderation
    # ------------------------------------------------------------------

    async def upvote(self, review_id: str) -> ModerationResult:
        result = await self.moderation.upvote(review_id, return_path=self.path, product=self._ref())
        return await self._after_moderation(result)

    async def downvote(self, review_id: str) -> ModerationResult:
        result = await self.moderation.downvote(review_id, return_path=self.path, product=self._ref())
        return await self._after_moderation(result)

    async def flag(self, review_id: str) -> ModerationResult:
        result = await self.moderation.flag_review(review_id, return_path=self.path, product=self._ref())
        return await self._after_moderation(result)

    async def _after_moderation(self, result: ModerationResult) -> ModerationResult:
        if result.refresh_required:
            await self.reload_reviews()
        return result

    # ------------------------------------------------------------------
    # Post-login resume
    # ------------------------------------------------------------------

    async def resume_after_login(self) -> None:
        """Restore a parked draft or replay a parked moderation click."""
        if not self.active:
            return
        await self.workflow.restore_pending_draft()
        result = await self.moderation.resume_pending()
        if result is not None:
            await self._after_moderation(result)

    async def _on_authenticated(self, identity: Identity) -> None:
        logger.info(f"Resuming pending actions for '{identity.handle}'")
        await self.resume_after_login()
