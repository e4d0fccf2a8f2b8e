"""
TaskStore — CRUD on a user's private task collection.

Responses from the store are forwarded with their status and body
untouched; revision-tag conflicts are the store's call, not ours.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import Depends

from store.couch import CouchClient, StoreResponse, get_couch_client
from utils.errors import BadRequest

logger = logging.getLogger(__name__)


def _require_ref(doc: Dict[str, Any]) -> tuple[str, str]:
    doc_id, rev = doc.get("_id"), doc.get("_rev")
    if not doc_id or not rev:
        raise BadRequest("Missing _id or _rev.")
    return str(doc_id), str(rev)


class TaskStore:
    """Gateway for task documents, scoped per call to one username."""

    def __init__(self, client: CouchClient) -> None:
        self._client = client

    async def list_tasks(self, username: str) -> StoreResponse:
        """All task documents; on success ``body`` is a list of docs."""
        resp = await self._client.all_docs(username)
        if not resp.ok:
            return StoreResponse(resp.status_code, {"error": "Database error."})
        rows = (resp.body or {}).get("rows") or []
        docs = [
            row["doc"]
            for row in rows
            if row.get("doc") and not str(row.get("id", "")).startswith("_design/")
        ]
        return StoreResponse(resp.status_code, docs)

    async def create_task(self, username: str, doc: Dict[str, Any]) -> StoreResponse:
        if not doc:
            raise BadRequest("Request body cannot be empty.")
        return await self._client.create_document(username, doc)

    async def update_task(self, username: str, doc: Dict[str, Any]) -> StoreResponse:
        doc_id, _ = _require_ref(doc)
        return await self._client.put_document(username, doc_id, doc)

    async def delete_task(self, username: str, doc: Dict[str, Any]) -> StoreResponse:
        doc_id, rev = _require_ref(doc)
        return await self._client.delete_document(username, doc_id, rev)


def get_task_store(client: CouchClient = Depends(get_couch_client)) -> TaskStore:
    return TaskStore(client)
