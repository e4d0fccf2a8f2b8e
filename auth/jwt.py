"""
JWT session token creation and verification.

Tokens are HS256 JWTs signed with ``config.jwt_secret`` (env var:
``JWT_SECRET``).  They carry ``userId``/``username`` plus ``iat``/``exp``
and are never stored server-side, so the only ways a token stops working
are expiry and a signature mismatch.
"""

from __future__ import annotations

import time
from typing import Optional

import jwt

from config.settings import config
from utils.schemas import TokenClaims


class InvalidToken(Exception):
    """Token is malformed, badly signed, incomplete or expired."""


def issue_token(
    user_id: str,
    username: str,
    *,
    secret: Optional[str] = None,
    ttl_seconds: Optional[int] = None,
    algorithm: Optional[str] = None,
    now: Optional[int] = None,
) -> str:
    """Create a signed token bound to ``user_id``/``username``."""
    secret = secret or config.jwt_secret
    if not secret:
        raise InvalidToken("no signing secret configured")
    issued_at = int(now if now is not None else time.time())
    ttl = config.jwt_expiry_seconds if ttl_seconds is None else ttl_seconds
    payload = {
        "sub": user_id,
        "userId": user_id,
        "username": username,
        "iat": issued_at,
        "exp": issued_at + ttl,
    }
    return jwt.encode(payload, secret, algorithm=algorithm or config.jwt_algorithm)


def verify_token(
    token: str,
    *,
    secret: Optional[str] = None,
    algorithm: Optional[str] = None,
    now: Optional[float] = None,
) -> TokenClaims:
    """
    Verify ``token`` and return its claims.

    Raises ``InvalidToken`` when the signature does not match, the token
    cannot be decoded, a claim is missing, or ``now`` is at or past ``exp``.
    """
    secret = secret or config.jwt_secret
    if not secret:
        raise InvalidToken("no signing secret configured")
    try:
        # Expiry is checked below so the clock can be injected.
        payload = jwt.decode(
            token,
            secret,
            algorithms=[algorithm or config.jwt_algorithm],
            options={"require": ["exp", "iat"], "verify_exp": False, "verify_iat": False},
        )
    except jwt.InvalidTokenError as exc:
        raise InvalidToken(str(exc)) from exc

    user_id = payload.get("userId") or payload.get("sub")
    username = payload.get("username")
    if not user_id or not username:
        raise InvalidToken("token payload is missing identity claims")

    current = time.time() if now is None else now
    if current >= payload["exp"]:
        raise InvalidToken("token expired")

    return TokenClaims(
        user_id=str(user_id),
        username=str(username),
        issued_at=int(payload["iat"]),
        expires_at=int(payload["exp"]),
    )
