"""Local inspection of the stored bearer token.

The client never holds the API's signing secret, so it cannot verify a token.
It can still read the `exp` claim to skip a pointless /auth/profile round trip
for a token that has obviously expired. Opaque (non-JWT) tokens are left for
the server to judge.
"""

from __future__ import annotations

import time

import jwt as pyjwt


def token_expiry(token: str) -> int | None:
    """Return the token's `exp` claim, or None if it isn't a readable JWT.

    The signature is NOT verified; the result is only a hint.
    """
    try:
        payload = pyjwt.decode(
            token,
            options={"verify_signature": False, "verify_exp": False},
        )
    except pyjwt.InvalidTokenError:
        return None
    exp = payload.get("exp")
    return int(exp) if isinstance(exp, int | float) else None


def is_expired(token: str, leeway: int = 0) -> bool:
    """True only when the token is a JWT whose `exp` is in the past."""
    exp = token_expiry(token)
    if exp is None:
        return False
    return exp + leeway < time.time()
