"""Pydantic base models shared across components.

These serve as the contract types that flow between the workflow layer and the
access layers. Expected business failures (bad credentials, a duplicate review,
a cancelled flag prompt) come back as result objects so callers check a flag
instead of catching exceptions.
"""

from pydantic import BaseModel


class PlatformResult(BaseModel):
    """Standard result envelope returned by workflow operations."""

    success: bool
    message: str = ""


class LoginRedirect(BaseModel):
    """Instruction to send the user to the login flow.

    `return_to` is the path the login page should navigate back to once the
    user is authenticated.
    """

    path: str = "/login"
    return_to: str
