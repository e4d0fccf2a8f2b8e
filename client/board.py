"""
TaskBoard — the task list a user is looking at, plus its view state.

Every mutation goes to the server first; the local list only changes
once the call succeeded, so a rejected update (e.g. a stale ``_rev``)
leaves the board exactly as it was.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from client.api import TasksApi
from utils.schemas import Task, TaskStats
from utils.task_filters import TASK_FILTERS, compute_stats, task_matches

logger = logging.getLogger(__name__)


class TaskBoard:
    def __init__(self, api: TasksApi) -> None:
        self.api = api
        self.tasks: List[Task] = []
        self.filter: str = "all"
        self.search: str = ""
        self.editing_id: Optional[str] = None

    # ── View state ──────────────────────────────────────────────────────

    def set_filter(self, value: str) -> None:
        if value not in TASK_FILTERS:
            raise ValueError(f"unknown filter {value!r}")
        self.filter = value

    def set_search(self, term: str) -> None:
        self.search = term

    def visible(self) -> List[Task]:
        return [t for t in self.tasks if task_matches(t.to_document(), self.filter, self.search)]

    def stats(self) -> TaskStats:
        return compute_stats([t.to_document() for t in self.tasks])

    def get(self, task_id: str) -> Optional[Task]:
        return next((t for t in self.tasks if t.id == task_id), None)

    # ── Server-backed operations ────────────────────────────────────────

    async def load(self) -> None:
        self.tasks = await self.api.fetch_tasks()
        logger.debug("Loaded %d tasks", len(self.tasks))

    async def submit(self, title: str, description: str, deadline: str) -> Task:
        """Create a task, or update the one being edited."""
        title, description = title.strip(), description.strip()
        if not title or not deadline:
            raise ValueError("a task needs a title and a deadline")

        if self.editing_id is not None:
            current = self.get(self.editing_id)
            if current is None:
                self.editing_id = None
                raise LookupError("task being edited is no longer on the board")
            task = await self.update(
                current.model_copy(update={"title": title, "description": description, "deadline": deadline})
            )
            self.editing_id = None
            return task

        task = Task(
            title=title,
            description=description,
            deadline=deadline,
            created_at=datetime.now(timezone.utc).isoformat(),
            completed=False,
        )
        result = await self.api.create_task(task)
        created = task.model_copy(update={"id": result["id"], "rev": result["rev"]})
        self.tasks.append(created)
        return created

    async def update(self, task: Task) -> Task:
        result = await self.api.update_task(task)
        updated = task.model_copy(update={"rev": result["rev"]})
        self.tasks = [updated if t.id == task.id else t for t in self.tasks]
        return updated

    async def toggle_completed(self, task_id: str, completed: bool) -> Task:
        current = self.get(task_id)
        if current is None:
            raise LookupError(task_id)
        return await self.update(current.model_copy(update={"completed": completed}))

    async def delete(self, task_id: str) -> None:
        current = self.get(task_id)
        if current is None or not current.rev:
            raise LookupError(f"missing _rev for {task_id}")
        await self.api.delete_task(current.id, current.rev)
        self.tasks = [t for t in self.tasks if t.id != task_id]

    def start_edit(self, task_id: str) -> Task:
        current = self.get(task_id)
        if current is None:
            raise LookupError(task_id)
        self.editing_id = task_id
        return current

    def cancel_edit(self) -> None:
        self.editing_id = None
