"""Auth domain models — the identity held by the auth session."""

from pydantic import BaseModel


class Identity(BaseModel):
    """The authenticated user as returned by /auth/profile."""

    id: str
    email: str
    handle: str
    role: str = "user"


class AuthResponse(BaseModel):
    """Body of a successful /auth/login or /auth/register call."""

    token: str
    user: Identity


class AuthResult(BaseModel):
    """Returned by AuthSession.login and AuthSession.register.

    Callers check `success`; these operations never raise.
    """

    success: bool
    error: str | None = None
