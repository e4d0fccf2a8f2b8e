"""
client — Python client for the task tracker API.

Provides:
  • ``TasksApi`` — async HTTP wrapper around ``/api/tasks``
  • ``TaskBoard`` — explicitly owned task-list state (filter, search, edit mode)
"""

from client.api import ApiError, SessionExpired, TasksApi
from client.board import TaskBoard

__all__ = ["ApiError", "SessionExpired", "TasksApi", "TaskBoard"]
