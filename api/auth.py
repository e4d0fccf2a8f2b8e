"""
Auth API routes — register, login, logout, me.

Route prefix: /api
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Any, Dict

from fastapi import APIRouter, Depends, Response, status

from auth.dependencies import AuthenticatedContext, require_user
from auth.jwt import issue_token
from auth.password import hash_password, new_salt, verify_password
from config.settings import Settings, get_settings
from store.credentials import CredentialStore, get_credential_store
from utils.errors import BadRequest, InternalError, Unauthorized
from utils.schemas import Credentials, MeResponse, MessageResponse, RegisterResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

# Usernames double as collection names in the store.
_COLLECTION_NAME = re.compile(r"^[a-z][a-z0-9_$()+/-]*$")

_LOGIN_FAILED = "Invalid username or password."

_DECOY_SALT = new_salt()


@lru_cache(maxsize=1)
def _decoy_hash() -> str:
    return hash_password("decoy-password", _DECOY_SALT)


def _require_credentials(creds: Credentials) -> Credentials:
    if not creds.is_complete():
        raise BadRequest("Username and password are required.")
    return creds


# ── Endpoints ──────────────────────────────────────────────────────────


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    creds: Credentials,
    store: CredentialStore = Depends(get_credential_store),
) -> Dict[str, Any]:
    """Register a new user and create their private task collection."""
    _require_credentials(creds)
    if not _COLLECTION_NAME.match(creds.username):
        raise BadRequest(
            "Username must start with a lowercase letter and contain only "
            "lowercase letters, digits and _$()+-/."
        )

    salt = new_salt()
    user_id = await store.create_identity(
        creds.username, hash_password(creds.password, salt), salt
    )
    logger.info("Registered user %s (%s)", creds.username, user_id)

    return RegisterResponse(
        message="User registered successfully.", id=user_id
    ).model_dump(by_alias=True)


@router.post("/login")
async def login(
    creds: Credentials,
    response: Response,
    store: CredentialStore = Depends(get_credential_store),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    """Login with username + password; sets the ``auth`` session cookie."""
    _require_credentials(creds)
    if settings.missing_auth_config():
        logger.error("JWT_SECRET is not configured.")
        raise InternalError("Service configuration error.")

    identity = await store.find_by_username(creds.username)
    if identity is None:
        # Unknown usernames pay for one hash too, same as a wrong password.
        verify_password(creds.password, _DECOY_SALT, _decoy_hash())
        raise Unauthorized(_LOGIN_FAILED)
    if not verify_password(creds.password, identity.salt, identity.password_hash):
        raise Unauthorized(_LOGIN_FAILED)

    token = issue_token(
        identity.id,
        identity.username,
        secret=settings.jwt_secret,
        ttl_seconds=settings.jwt_expiry_seconds,
        algorithm=settings.jwt_algorithm,
    )
    response.set_cookie(
        settings.cookie_name,
        token,
        max_age=settings.jwt_expiry_seconds,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
    )
    logger.info("Login: %s (%s)", identity.username, identity.id)
    return MessageResponse(message="Login successful.").model_dump()


@router.get("/logout")
async def logout(
    response: Response,
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    """Drop the session cookie.  Tokens are stateless, nothing is revoked."""
    response.delete_cookie(
        settings.cookie_name,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
    )
    return MessageResponse(message="Logout successful.").model_dump()


@router.get("/me")
async def me(user: AuthenticatedContext = Depends(require_user)) -> Dict[str, Any]:
    return MeResponse(username=user.username, user_id=user.user_id).model_dump(by_alias=True)
