"""Auth session — the single source of truth for who is acting now.

State machine:

    resolving ──(token + profile ok)──────────► authenticated
        │                                          │  ▲
        └──(no token / expired / profile fails)──► anonymous
                                                   │  │
                 login()/register() succeed ───────┘  │
                 logout() ────────────────────────────┘

One AuthSession per browser session, passed explicitly to whatever needs it
(workflow, moderation, views) rather than reached through a module global, so
tests substitute it freely.

Interleaving: every login/register/logout starts a new generation. A sign-in
or profile response that comes back tagged with an older generation is dropped,
so a logout that lands while a login is in flight leaves the user logged out.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Literal

from softreview_api_access.client import ApiError, ReviewDirectoryClient
from softreview_session_access.stores import CredentialStore
from softreview_shared.auth_models import AuthResponse, AuthResult, Identity

from softreview_auth.jwt import is_expired

logger = logging.getLogger(__name__)

SessionState = Literal["resolving", "anonymous", "authenticated"]
AuthListener = Callable[[Identity], Awaitable[None]]

STALE_SIGN_IN = "Session changed during sign-in"


class AuthSession:
    """Holds the current identity and the operations that change it."""

    def __init__(self, api: ReviewDirectoryClient, credentials: CredentialStore) -> None:
        self.api = api
        self.credentials = credentials
        self.identity: Identity | None = None
        self.state: SessionState = "resolving"
        self.loading = True
        self.error: str | None = None
        self._generation = 0
        self._listeners: list[AuthListener] = []

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    def on_authenticated(self, listener: AuthListener) -> None:
        """Register a callback run after every transition into authenticated."""
        self._listeners.append(listener)

    def remove_listener(self, listener: AuthListener) -> None:
        """Unregister a callback added with on_authenticated. Unknown ones are ignored."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def resolve(self) -> None:
        """Resolve the persisted credential into an identity, once per load."""
        generation = self._generation
        try:
            token = await self.credentials.get()
            if generation != self._generation:
                logger.info("Session changed while reading the stored credential")
                return
            if token is None:
                self._become_anonymous()
                return

            if is_expired(token):
                logger.info("Discarding expired stored credential")
                await self.credentials.clear()
                if generation == self._generation:
                    self._become_anonymous()
                return

            self.api.token = token
            try:
                profile = await self.api.get_profile()
            except ApiError as e:
                logger.error(f"Failed to fetch user profile: {e}")
                if generation == self._generation:
                    self.api.token = None
                    await self.credentials.clear()
                    self._become_anonymous()
                else:
                    self._drop_token(token)
                return

            if generation != self._generation:
                logger.info("Discarding profile resolved after the session changed")
                self._drop_token(token)
                return
            await self._become_authenticated(profile)
        finally:
            self.loading = False
            if self.state == "resolving":
                self.state = "anonymous"

    async def close(self) -> None:
        """Tear down: drop listeners and close the API client."""
        self._listeners.clear()
        await self.api.close()

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    async def login(self, email: str, password: str) -> AuthResult:
        self.error = None
        self._generation += 1
        generation = self._generation
        try:
            response = await self.api.login(email, password)
        except ApiError as e:
            return self._fail(e.message or "Login failed")
        return await self._accept(response, generation)

    async def register(self, email: str, password: str, handle: str) -> AuthResult:
        self.error = None
        self._generation += 1
        generation = self._generation
        try:
            response = await self.api.register(email, password, handle)
        except ApiError as e:
            return self._fail(e.message or "Registration failed")
        return await self._accept(response, generation)

    async def logout(self) -> None:
        """Always succeeds. State is cleared before the first await."""
        self._generation += 1
        self.identity = None
        self.api.token = None
        self.error = None
        self.state = "anonymous"
        await self.credentials.clear()

    async def refresh_profile(self) -> None:
        """Re-fetch the identity. On failure the current identity is kept."""
        generation = self._generation
        try:
            profile = await self.api.get_profile()
        except ApiError as e:
            logger.error(f"Failed to refresh profile: {e}")
            return
        if generation == self._generation and self.is_authenticated:
            self.identity = profile

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def _accept(self, response: AuthResponse, generation: int) -> AuthResult:
        if generation != self._generation:
            logger.warning("Discarding sign-in response that arrived after the session changed")
            return AuthResult(success=False, error=STALE_SIGN_IN)

        await self.credentials.set(response.token)
        if generation != self._generation:
            # logout ran while the token was being written
            await self.credentials.clear()
            return AuthResult(success=False, error=STALE_SIGN_IN)

        self.api.token = response.token
        await self._become_authenticated(response.user)
        return AuthResult(success=True)

    def _fail(self, message: str) -> AuthResult:
        logger.warning(f"Sign-in failed: {message}")
        self.error = message
        return AuthResult(success=False, error=message)

    def _drop_token(self, token: str) -> None:
        # a newer sign-in may already have installed its own token
        if self.api.token == token:
            self.api.token = None

    def _become_anonymous(self) -> None:
        self.identity = None
        self.state = "anonymous"

    async def _become_authenticated(self, identity: Identity) -> None:
        self.identity = identity
        self.state = "authenticated"
        self.loading = False
        for listener in list(self._listeners):
            try:
                await listener(identity)
            except Exception:
                logger.exception("Post-login listener failed")
