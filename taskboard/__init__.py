"""Taskboard - a task and project management REST API.

Users own projects, projects hold tasks, and every task keeps an append-only
audit history. Managers can pull a completion report built from that history.

Example Usage:
    ```python
    from datetime import datetime, timezone

    from taskboard import Database, TaskService
    from taskboard.project.models import TaskPriority
    from taskboard.project.schemas import CreateTaskRequest

    db = Database("taskboard.db")
    tasks = TaskService(db)
    request = CreateTaskRequest(
        title="Ship it",
        due_date=datetime(2026, 7, 1, tzinfo=timezone.utc),
        priority=TaskPriority.HIGH,
    )
    task = tasks.create_task(project_id, request, user_id)
    ```
"""

from ._version import __version__
from .project import (
    Database,
    ProjectService,
    ReportService,
    TaskService,
    UserService,
)

__all__ = [
    "__version__",
    "Database",
    "ProjectService",
    "ReportService",
    "TaskService",
    "UserService",
]
