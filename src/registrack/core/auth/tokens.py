"""Client-side bearer token checks.

The client cannot verify token signatures; the backend stays the source
of truth for revocation. These helpers only read the claims to discard
tokens that have visibly expired.
"""

from __future__ import annotations

import time
from typing import Any

import jwt

_UNVERIFIED_OPTIONS = {
    "verify_signature": False,
    "verify_exp": False,
    "verify_nbf": False,
    "verify_iat": False,
    "verify_aud": False,
    "verify_iss": False,
    "verify_sub": False,
    "verify_jti": False,
}


def read_claims(token: str) -> dict[str, Any] | None:
    """Decode the claims segment of a JWT without verifying it.

    Args:
        token: Encoded JWT string.

    Returns:
        The claims object, or None if the token cannot be decoded.
    """
    try:
        return jwt.decode(token, options=_UNVERIFIED_OPTIONS)
    except jwt.InvalidTokenError:
        return None


def is_token_valid(token: str | None, now: float | None = None) -> bool:
    """Check whether a stored token may still be used.

    A token without an `exp` claim never expires client-side. A token
    whose claims cannot be decoded, or whose `exp` is not a number, is
    invalid.

    Args:
        token: Encoded JWT string.
        now: Current Unix time in seconds (defaults to the wall clock).

    Returns:
        True iff the token decodes and is not past its expiry.
    """
    if not token:
        return False

    claims = read_claims(token)
    if claims is None:
        return False

    exp = claims.get("exp")
    if exp is None:
        return True
    if isinstance(exp, bool) or not isinstance(exp, int | float):
        return False

    now_ms = (time.time() if now is None else now) * 1000
    return now_ms < exp * 1000
