"""
Task API routes — list / create / update / delete on the caller's collection.

Route prefix: /api
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse

from auth.dependencies import AuthenticatedContext, require_user
from store.couch import StoreResponse
from store.tasks import TaskStore, get_task_store
from utils.errors import BadRequest, StoreError
from utils.task_filters import TASK_FILTERS, compute_stats, filter_tasks

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tasks"])


def _forward(resp: StoreResponse) -> JSONResponse:
    """Relay the store's answer as-is, revision conflicts included."""
    return JSONResponse(status_code=resp.status_code, content=resp.body)


@router.get("/tasks")
async def list_tasks(
    status_filter: str = Query("all", alias="filter"),
    q: str = Query(""),
    user: AuthenticatedContext = Depends(require_user),
    tasks: TaskStore = Depends(get_task_store),
):
    if status_filter not in TASK_FILTERS:
        raise BadRequest(f"filter must be one of: {', '.join(TASK_FILTERS)}.")
    resp = await tasks.list_tasks(user.username)
    if resp.ok and (status_filter != "all" or q):
        resp = StoreResponse(resp.status_code, filter_tasks(resp.body, status_filter, q))
    return _forward(resp)


@router.get("/tasks/stats")
async def task_stats(
    user: AuthenticatedContext = Depends(require_user),
    tasks: TaskStore = Depends(get_task_store),
) -> Dict[str, int]:
    resp = await tasks.list_tasks(user.username)
    if not resp.ok:
        raise StoreError("Database error.", store_status=resp.status_code, store_body=resp.body)
    return compute_stats(resp.body).model_dump()


@router.post("/tasks")
async def create_task(
    body: Optional[Dict[str, Any]] = Body(default=None),
    user: AuthenticatedContext = Depends(require_user),
    tasks: TaskStore = Depends(get_task_store),
):
    resp = await tasks.create_task(user.username, body or {})
    if resp.ok:
        logger.debug("Task %s created for %s", (resp.body or {}).get("id"), user.username)
    return _forward(resp)


@router.put("/tasks")
async def update_task(
    body: Optional[Dict[str, Any]] = Body(default=None),
    user: AuthenticatedContext = Depends(require_user),
    tasks: TaskStore = Depends(get_task_store),
):
    return _forward(await tasks.update_task(user.username, body or {}))


@router.delete("/tasks")
async def delete_task(
    body: Optional[Dict[str, Any]] = Body(default=None),
    user: AuthenticatedContext = Depends(require_user),
    tasks: TaskStore = Depends(get_task_store),
):
    return _forward(await tasks.delete_task(user.username, body or {}))
