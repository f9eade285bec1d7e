"""Task and project management core.

Provides the domain entities, SQLite storage with a unit of work, and the
services behind the HTTP API.
"""

from .exceptions import (
    BusinessRuleError,
    NotFoundError,
    PermissionDeniedError,
    ProjectNotFoundError,
    StateTransitionError,
    StorageError,
    TaskboardError,
    TaskLimitExceededError,
    TaskNotFoundError,
    UserNotFoundError,
)
from .models import ChangeType, PerformanceReport, Project, Task, TaskHistory, TaskPriority, TaskStatus, User
from .project_service import ProjectService
from .report_service import ReportService
from .storage import Database, UnitOfWork
from .task_service import TaskService
from .user_service import UserService

__all__ = [
    # Models
    "ChangeType",
    "PerformanceReport",
    "Project",
    "Task",
    "TaskHistory",
    "TaskPriority",
    "TaskStatus",
    "User",
    # Storage
    "Database",
    "UnitOfWork",
    # Services
    "ProjectService",
    "ReportService",
    "TaskService",
    "UserService",
    # Exceptions
    "BusinessRuleError",
    "NotFoundError",
    "PermissionDeniedError",
    "ProjectNotFoundError",
    "StateTransitionError",
    "StorageError",
    "TaskboardError",
    "TaskLimitExceededError",
    "TaskNotFoundError",
    "UserNotFoundError",
]
