"""
JWT utilities for inspecting access tokens on the client side.

Functions
---------
decode_token_claims(token: str) -> dict | None
    Read the claims of a JWT without verifying its signature.
token_expiry(token: str) -> datetime | None
    Expiration (`exp` claim) of a token as a timezone-aware datetime.
is_token_expired(token: str, now: datetime | None = None) -> bool
    True if the token is unreadable or its `exp` claim is in the past.

Notes
-----
The client never holds the signing key: the signature is the backend's
concern. These helpers only decide, without a network call, whether a stored
token is still worth sending.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from jose import jwt, JWTError

logger = logging.getLogger(__name__)


def decode_token_claims(token: str) -> Optional[dict]:
    """
    Decode the claims of a JWT without signature verification.

    Parameters
    ----------
    token : str
        Encoded JWT string as returned by `/auth/login`.

    Returns
    -------
    dict | None
        The claims, or None if the token is malformed.
    """
    try:
        return jwt.get_unverified_claims(token)
    except JWTError as e:
        logger.warning("Stored token could not be decoded: %s", e)
        return None


def token_expiry(token: str) -> Optional[datetime]:
    """Return the `exp` claim as a UTC datetime, or None when absent/unreadable."""
    claims = decode_token_claims(token)
    if not claims or claims.get("exp") is None:
        return None
    try:
        return datetime.fromtimestamp(float(claims["exp"]), tz=timezone.utc)
    except (TypeError, ValueError):
        return None


def is_token_expired(token: str, now: Optional[datetime] = None) -> bool:
    """
    Check a token's expiry against the current time.

    Parameters
    ----------
    token : str
        Encoded JWT string.
    now : datetime, optional
        Reference time (timezone-aware). Defaults to the current UTC time.

    Returns
    -------
    bool
        True if the token cannot be decoded or its `exp` is in the past.
        A token without an `exp` claim is treated as not expired.
    """
    claims = decode_token_claims(token)
    if claims is None:
        return True
    exp = claims.get("exp")
    if exp is None:
        return False
    now = now or datetime.now(timezone.utc)
    try:
        return float(exp) < now.timestamp()
    except (TypeError, ValueError):
        return True
