"""
CredentialStore — identity lookups and creation against the auth collection.

Each user also owns a private collection named after their username; its
existence doubles as the uniqueness check for usernames.
"""

from __future__ import annotations

import logging
from typing import Any, NoReturn, Optional

from fastapi import Depends
from pydantic import ValidationError

from config.settings import Settings, get_settings
from store.couch import CouchClient, StoreResponse, get_couch_client
from utils.errors import Conflict, InternalError, StoreError
from utils.schemas import UserIdentity

logger = logging.getLogger(__name__)


def _raise_store_error(action: str, resp: StoreResponse, message: str) -> NoReturn:
    logger.error("%s failed: %d %s", action, resp.status_code, resp.body)
    raise StoreError(message, store_status=resp.status_code, store_body=resp.body)


def _parse_identity(doc: Any) -> Optional[UserIdentity]:
    """Stored identity, or ``None`` when the document lacks usable credentials."""
    try:
        return UserIdentity.model_validate(doc)
    except ValidationError as exc:
        doc_id = doc.get("_id") if isinstance(doc, dict) else None
        logger.error("Unusable identity document %r: %s", doc_id, exc)
        return None


class CredentialStore:
    """Gateway between the auth routes and the identity documents."""

    def __init__(self, client: CouchClient, auth_db: str = "users") -> None:
        self._client = client
        self._auth_db = auth_db

    async def find_by_username(self, username: str) -> Optional[UserIdentity]:
        """Exact-match lookup; only the first match is considered."""
        resp = await self._client.find(self._auth_db, {"username": username}, limit=1)
        if not resp.ok:
            _raise_store_error("Identity query", resp, "Could not process login request.")
        docs = (resp.body or {}).get("docs") or []
        if not docs:
            return None
        return _parse_identity(docs[0])

    async def find_by_id(self, user_id: str) -> Optional[UserIdentity]:
        resp = await self._client.get_document(self._auth_db, user_id)
        if resp.status_code == 404:
            return None
        if not resp.ok:
            _raise_store_error("Identity fetch", resp, "Authentication service returned an error.")
        return _parse_identity(resp.body)

    async def create_user_database(self, username: str) -> None:
        resp = await self._client.create_database(username)
        if resp.status_code == 412 and resp.error == "file_exists":
            raise Conflict()
        if not resp.ok:
            _raise_store_error("User collection creation", resp, "Could not create user account.")

    async def create_identity(self, username: str, password_hash: str, salt: str) -> str:
        """
        Create the user's collection, then their identity document.

        Returns the new identity id.  Raises ``Conflict`` when the
        username's collection already exists.  If the identity document
        cannot be written the collection is left behind; this is logged
        for manual cleanup and reported as ``InternalError``.
        """
        await self.create_user_database(username)

        resp = await self._client.create_document(
            self._auth_db,
            {"username": username, "passwordHash": password_hash, "salt": salt},
        )
        user_id = resp.body.get("id") if isinstance(resp.body, dict) else None
        if not resp.ok or not user_id:
            logger.error(
                "Identity document for %r failed (%d %s); collection %r is orphaned",
                username, resp.status_code, resp.body, username,
            )
            raise InternalError("Failed to finalize user registration.")
        return str(user_id)


def get_credential_store(
    client: CouchClient = Depends(get_couch_client),
    settings: Settings = Depends(get_settings),
) -> CredentialStore:
    return CredentialStore(client, settings.auth_db)
