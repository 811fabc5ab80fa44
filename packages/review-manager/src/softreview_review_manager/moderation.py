"""Moderation actions — upvote, downvote and flag on existing reviews.

Every action goes through the same gate:

  1. Anonymous → store a PendingModeration in the tab's slot and return a
     login redirect. No request is sent.
  2. Authenticated → send it. Flag first asks for a reason; an empty or
     cancelled reason aborts quietly.
  3. Whenever a request went out, the result says `refresh_required`; vote
     counts are re-read from the server, never adjusted locally.

After login, resume_pending() replays a stored moderation click once, so the
user does not have to repeat it.

Failures: flag failures are shown to the user through the notifier; vote
failures are only logged, to keep the review list uncluttered.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from softreview_api_access.client import ApiError, ReviewDirectoryClient
from softreview_auth.session import AuthSession
from softreview_session_access.stores import PendingActionStore
from softreview_shared.catalog_models import Product, ProductRef
from softreview_shared.models import LoginRedirect
from softreview_shared.review_models import ModerationKind, ModerationResult, PendingModeration

from softreview_review_manager.workflow import as_ref

logger = logging.getLogger(__name__)

ReasonPrompt = Callable[[str], str | None]
Notifier = Callable[[str], None]

FLAG_PROMPT = "Please provide a reason for flagging this review:"
FLAG_SUCCESS_MESSAGE = "Review has been flagged. Thank you for helping maintain quality!"
FLAG_FAILURE_MESSAGE = "Failed to flag review. Please try again."


class ModerationActions:
    """Auth-gated moderation for one tab."""

    def __init__(
        self,
        auth: AuthSession,
        api: ReviewDirectoryClient,
        pending: PendingActionStore,
        prompt: ReasonPrompt,
        notify: Notifier,
        login_path: str = "/login",
    ) -> None:
        self.auth = auth
        self.api = api
        self.pending = pending
        self.prompt = prompt
        self.notify = notify
        self.login_path = login_path
        self._in_flight: set[tuple[str, str]] = set()

    async def upvote(
        self,
        review_id: str,
        *,
        return_path: str,
        product: Product | ProductRef | None = None,
    ) -> ModerationResult:
        return await self._vote("upvote", review_id, return_path, product)

    async def downvote(
        self,
        review_id: str,
        *,
        return_path: str,
        product: Product | ProductRef | None = None,
    ) -> ModerationResult:
        return await self._vote("downvote", review_id, return_path, product)

    async def flag_review(
        self,
        review_id: str,
        *,
        return_path: str,
        product: Product | ProductRef | None = None,
    ) -> ModerationResult:
        if not self.auth.is_authenticated:
            return await self._defer("flag", review_id, return_path, product)

        reason = self.prompt(FLAG_PROMPT)
        if reason is None or not reason.strip():
            return ModerationResult(
                success=False,
                status="cancelled",
                message="Flag cancelled",
                action="flag",
                review_id=review_id,
            )

        key = ("flag", review_id)
        if key in self._in_flight:
            return self._busy("flag", review_id)

        self._in_flight.add(key)
        try:
            await self.api.flag_review(review_id, reason.strip())
        except ApiError as e:
            logger.error(f"Failed to flag review '{review_id}': {e}")
            self.notify(FLAG_FAILURE_MESSAGE)
            return self._sent("flag", review_id, success=False, message=FLAG_FAILURE_MESSAGE)
        finally:
            self._in_flight.discard(key)

        self.notify(FLAG_SUCCESS_MESSAGE)
        return self._sent("flag", review_id, success=True, message=FLAG_SUCCESS_MESSAGE)

    async def resume_pending(self) -> ModerationResult | None:
        """Replay a moderation click stored before login, exactly once.

        The slot is cleared before the replay. Review drafts are left for the
        draft workflow.
        """
        if not self.auth.is_authenticated:
            return None

        action = await self.pending.get()
        if not isinstance(action, PendingModeration):
            return None

        await self.pending.clear()
        logger.info(f"Replaying {action.intent} on review '{action.review_id}' after login")
        if action.intent == "flag":
            return await self.flag_review(
                action.review_id, return_path=action.return_path, product=action.product
            )
        return await self._vote(action.intent, action.review_id, action.return_path, action.product)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _vote(
        self,
        action: ModerationKind,
        review_id: str,
        return_path: str,
        product: Product | ProductRef | None,
    ) -> ModerationResult:
        if not self.auth.is_authenticated:
            return await self._defer(action, review_id, return_path, product)

        key = (action, review_id)
        if key in self._in_flight:
            return self._busy(action, review_id)

        send = self.api.upvote_review if action == "upvote" else self.api.downvote_review
        self._in_flight.add(key)
        try:
            await send(review_id)
        except ApiError as e:
            logger.warning(f"Failed to {action} review '{review_id}': {e}")
            return self._sent(action, review_id, success=False, message=str(e))
        finally:
            self._in_flight.discard(key)

        return self._sent(action, review_id, success=True, message=f"Review {action}d")

    async def _defer(
        self,
        action: ModerationKind,
        review_id: str,
        return_path: str,
        product: Product | ProductRef | None,
    ) -> ModerationResult:
        await self.pending.set(
            PendingModeration(
                intent=action,
                review_id=review_id,
                product=as_ref(product) if product is not None else None,
                return_path=return_path,
            )
        )
        return ModerationResult(
            success=False,
            status="deferred",
            message="Log in to continue",
            action=action,
            review_id=review_id,
            redirect=LoginRedirect(path=self.login_path, return_to=return_path),
        )

    @staticmethod
    def _sent(action: ModerationKind, review_id: str, *, success: bool, message: str) -> ModerationResult:
        return ModerationResult(
            success=success,
            status="done" if success else "failed",
            message=message,
            action=action,
            review_id=review_id,
            request_sent=True,
            refresh_required=True,
        )

    @staticmethod
    def _busy(action: ModerationKind, review_id: str) -> ModerationResult:
        return ModerationResult(
            success=False,
            status="busy",
            message="Already in progress",
            action=action,
            review_id=review_id,
        )
