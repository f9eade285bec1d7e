"""Exception classes for the task and project management core.

The core raises these on the first violated precondition. Translation to
transport status codes happens in ``taskboard.web.routes``.
"""

from typing import Any, Dict, Optional


class TaskboardError(Exception):
    """Base exception for all taskboard errors."""

    code = "TASKBOARD_ERROR"

    def __init__(self, message: str, code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message
        if code:
            self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the error to a dictionary for API responses."""
        result = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class NotFoundError(TaskboardError):
    """A referenced entity does not exist."""

    code = "NOT_FOUND"


class UserNotFoundError(NotFoundError):
    """Exception when the acting or referenced user cannot be found."""

    code = "USER_NOT_FOUND"

    def __init__(self, message: str, user_id: Optional[str] = None):
        self.user_id = user_id
        super().__init__(message, details={"user_id": user_id} if user_id else None)


class ProjectNotFoundError(NotFoundError):
    """Exception when a project cannot be found."""

    code = "PROJECT_NOT_FOUND"

    def __init__(self, message: str, project_id: Optional[str] = None):
        self.project_id = project_id
        super().__init__(message, details={"project_id": project_id} if project_id else None)


class TaskNotFoundError(NotFoundError):
    """Exception when a task cannot be found."""

    code = "TASK_NOT_FOUND"

    def __init__(self, message: str, task_id: Optional[str] = None):
        self.task_id = task_id
        super().__init__(message, details={"task_id": task_id} if task_id else None)


class BusinessRuleError(TaskboardError):
    """A domain rule rejects the requested operation."""

    code = "BUSINESS_RULE_VIOLATION"


class TaskLimitExceededError(BusinessRuleError):
    """Exception when a project is already at task capacity."""

    code = "TASK_LIMIT_EXCEEDED"

    def __init__(self, message: str, project_id: str, limit: int):
        self.project_id = project_id
        self.limit = limit
        super().__init__(message, details={"project_id": project_id, "limit": limit})


class StateTransitionError(BusinessRuleError):
    """Exception for invalid task status transitions."""

    code = "INVALID_STATE_TRANSITION"

    def __init__(self, message: str, from_state: str, to_state: str, task_id: Optional[str] = None):
        self.from_state = from_state
        self.to_state = to_state
        self.task_id = task_id
        super().__init__(
            message,
            details={"from_state": from_state, "to_state": to_state, "task_id": task_id},
        )


class PermissionDeniedError(TaskboardError):
    """The caller lacks the role required for the operation."""

    code = "PERMISSION_DENIED"


class StorageError(TaskboardError):
    """Exception for storage-related errors."""

    code = "STORAGE_ERROR"
