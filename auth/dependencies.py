"""
Session verification for protected routes.

``authenticate_request`` turns the request's cookies into either an
``AuthenticatedContext`` or an ``AuthRejection`` without raising;
``require_user`` is the FastAPI dependency that routes declare and that
converts a rejection into a 401 which also clears the dead cookie.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Union

from fastapi import Depends, Request

from auth.jwt import InvalidToken, verify_token
from config.settings import Settings, get_settings
from store.couch import get_couch_client
from store.credentials import CredentialStore
from utils.errors import InternalError, Unauthorized

logger = logging.getLogger(__name__)

MISSING_CREDENTIAL = "Not authenticated."
INVALID_CREDENTIAL = "Invalid or expired token."


@dataclass(frozen=True)
class AuthenticatedContext:
    user_id: str
    username: str
    expires_at: int


@dataclass(frozen=True)
class AuthRejection:
    reason: str
    clear_cookie: bool = False


AuthResult = Union[AuthenticatedContext, AuthRejection]


def clear_cookie_header(settings: Settings) -> str:
    """``Set-Cookie`` value that makes the browser drop the session cookie."""
    parts = [f"{settings.cookie_name}=", "Path=/", "HttpOnly", "Max-Age=0", "SameSite=Strict"]
    if settings.cookie_secure:
        parts.append("Secure")
    return "; ".join(parts)


def authenticate_request(cookies: Mapping[str, str], settings: Settings) -> AuthResult:
    token = cookies.get(settings.cookie_name)
    if not token:
        return AuthRejection(MISSING_CREDENTIAL)
    try:
        claims = verify_token(
            token, secret=settings.jwt_secret, algorithm=settings.jwt_algorithm
        )
    except InvalidToken as exc:
        logger.info("Token verification failed: %s", exc)
        return AuthRejection(INVALID_CREDENTIAL, clear_cookie=True)
    return AuthenticatedContext(
        user_id=claims.user_id,
        username=claims.username,
        expires_at=claims.expires_at,
    )


async def require_user(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> AuthenticatedContext:
    """
    Resolve the authenticated user or fail the request with 401.

    With ``verify_identity_on_request`` enabled the identity document is
    re-read on every call, so deleted users lose access before their
    token expires.
    """
    if settings.missing_auth_config():
        logger.error("JWT_SECRET is not configured.")
        raise InternalError("Service not configured.")

    result = authenticate_request(request.cookies, settings)
    if isinstance(result, AuthRejection):
        headers = {"set-cookie": clear_cookie_header(settings)} if result.clear_cookie else None
        raise Unauthorized(result.reason, headers=headers)

    if settings.verify_identity_on_request:
        store = CredentialStore(await get_couch_client(request, settings), settings.auth_db)
        identity = await store.find_by_id(result.user_id)
        if identity is None or identity.username != result.username:
            raise Unauthorized(
                INVALID_CREDENTIAL, headers={"set-cookie": clear_cookie_header(settings)}
            )

    return result
