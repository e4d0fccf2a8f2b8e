"""
CouchClient — async HTTP client for a CouchDB-style document store.

One outbound request per call, no retries.  Methods return the raw
status and JSON body as a ``StoreResponse``; deciding what a status
means is left to the gateways built on top.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx
from fastapi import Depends, Request

from config.settings import Settings, get_settings
from utils.errors import InternalError, ServiceUnavailable

logger = logging.getLogger(__name__)


@dataclass
class StoreResponse:
    status_code: int
    body: Any

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def error(self) -> Optional[str]:
        if isinstance(self.body, dict):
            return self.body.get("error")
        return None


def _segment(value: str) -> str:
    return quote(value, safe="")


class CouchClient:
    """Async client for the store's HTTP API."""

    def __init__(self, http: httpx.AsyncClient) -> None:
        self._http = http

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "CouchClient":
        missing = settings.missing_store_config()
        if missing:
            logger.error("Document store not configured: missing %s", ", ".join(missing))
            raise InternalError("Service configuration error.")
        http = httpx.AsyncClient(
            base_url=settings.database_url.rstrip("/") + "/",
            auth=(settings.db_username, settings.db_password),
            headers={"Accept": "application/json"},
            timeout=settings.store_timeout_seconds,
            transport=transport,
        )
        return cls(http)

    async def aclose(self) -> None:
        await self._http.aclose()

    # ── Raw request ─────────────────────────────────────────────────────

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Dict[str, str]] = None,
    ) -> StoreResponse:
        try:
            resp = await self._http.request(method, path, json=json, params=params)
        except httpx.TransportError as exc:
            logger.error("Store request %s %s failed: %s", method, path, exc)
            raise ServiceUnavailable() from exc

        try:
            body = resp.json()
        except ValueError:
            body = {"error": "invalid_response", "reason": resp.text[:200]}
        if not resp.is_success:
            logger.warning("Store %s %s → %d %s", method, path, resp.status_code, body)
        return StoreResponse(status_code=resp.status_code, body=body)

    # ── Collections ─────────────────────────────────────────────────────

    async def create_database(self, db: str) -> StoreResponse:
        return await self.request("PUT", _segment(db))

    async def all_docs(self, db: str) -> StoreResponse:
        return await self.request(
            "GET", f"{_segment(db)}/_all_docs", params={"include_docs": "true"}
        )

    async def find(self, db: str, selector: Dict[str, Any], *, limit: int = 1) -> StoreResponse:
        return await self.request(
            "POST", f"{_segment(db)}/_find", json={"selector": selector, "limit": limit}
        )

    # ── Documents ───────────────────────────────────────────────────────

    async def create_document(self, db: str, doc: Dict[str, Any]) -> StoreResponse:
        return await self.request("POST", _segment(db), json=doc)

    async def get_document(self, db: str, doc_id: str) -> StoreResponse:
        return await self.request("GET", f"{_segment(db)}/{_segment(doc_id)}")

    async def put_document(self, db: str, doc_id: str, doc: Dict[str, Any]) -> StoreResponse:
        return await self.request("PUT", f"{_segment(db)}/{_segment(doc_id)}", json=doc)

    async def delete_document(self, db: str, doc_id: str, rev: str) -> StoreResponse:
        return await self.request(
            "DELETE", f"{_segment(db)}/{_segment(doc_id)}", params={"rev": rev}
        )


async def get_couch_client(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> CouchClient:
    """
    Dependency function — the app-wide client, created on first use.

    Runs on the event loop with no await between the check and the
    assignment, so concurrent first requests share one client.  Closed by
    the application's shutdown hook.
    """
    client = getattr(request.app.state, "couch", None)
    if client is None:
        client = CouchClient.from_settings(settings)
        request.app.state.couch = client
    return client
