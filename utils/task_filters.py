"""
Completion filter, search and stats over task documents.

Used both by the task routes and by ``client.board``, so nothing here may
depend on the server side.
"""

from __future__ import annotations

from typing import Any, Dict, List

from utils.schemas import TaskStats

TASK_FILTERS = ("all", "pending", "completed")


def task_matches(task: Dict[str, Any], status: str = "all", search: str = "") -> bool:
    """Completion filter plus case-insensitive match on title or description."""
    completed = bool(task.get("completed"))
    if status == "pending" and completed:
        return False
    if status == "completed" and not completed:
        return False
    term = search.lower()
    if not term:
        return True
    title = str(task.get("title") or "").lower()
    description = str(task.get("description") or "").lower()
    return term in title or term in description


def filter_tasks(tasks: List[Dict[str, Any]], status: str = "all", search: str = "") -> List[Dict[str, Any]]:
    return [t for t in tasks if task_matches(t, status, search)]


def compute_stats(tasks: List[Dict[str, Any]]) -> TaskStats:
    completed = sum(1 for t in tasks if t.get("completed"))
    return TaskStats(total=len(tasks), pending=len(tasks) - completed, completed=completed)
