"""
TasksApi — async wrapper around the ``/api/tasks`` endpoints.

The session cookie lives in the underlying ``httpx.AsyncClient`` cookie
jar, so a client that logged in through ``login`` carries it on every
subsequent call.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

import httpx

from utils.schemas import Task

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, status_code: int, detail: Any = None) -> None:
        super().__init__(f"API error {status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class SessionExpired(ApiError):
    """The server answered 401; the user has to log in again."""


def _check(resp: httpx.Response) -> Any:
    try:
        body = resp.json()
    except ValueError:
        body = resp.text
    if resp.status_code == 401:
        raise SessionExpired(401, body)
    if not resp.is_success:
        raise ApiError(resp.status_code, body)
    return body


class TasksApi:
    def __init__(self, http: httpx.AsyncClient, base_path: str = "/api") -> None:
        self._http = http
        self._base = base_path.rstrip("/")

    async def login(self, username: str, password: str) -> None:
        _check(await self._http.post(
            f"{self._base}/login", json={"username": username, "password": password}
        ))

    async def logout(self) -> None:
        _check(await self._http.get(f"{self._base}/logout"))

    async def fetch_tasks(self) -> List[Task]:
        docs = _check(await self._http.get(f"{self._base}/tasks"))
        return [Task.model_validate(doc) for doc in docs]

    async def create_task(self, task: Task) -> Dict[str, Any]:
        return _check(await self._http.post(f"{self._base}/tasks", json=task.to_document()))

    async def update_task(self, task: Task) -> Dict[str, Any]:
        return _check(await self._http.put(f"{self._base}/tasks", json=task.to_document()))

    async def delete_task(self, task_id: str, rev: str) -> Dict[str, Any]:
        return _check(await self._http.request(
            "DELETE", f"{self._base}/tasks", json={"_id": task_id, "_rev": rev}
        ))
