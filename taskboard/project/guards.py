"""Existence and role checks shared by the services.

Each check either returns the loaded entity or raises the matching error.
"""

from typing import Optional

from taskboard.constants import NIL_USER_ID

from .exceptions import PermissionDeniedError, ProjectNotFoundError, TaskNotFoundError, UserNotFoundError
from .models import Project, Task, User
from .storage import ProjectRepository, TaskRepository, UserRepository


def check_user(user_id: Optional[str], users: UserRepository) -> User:
    """Resolve the acting user.

    Raises:
        UserNotFoundError: If the id is missing, the nil sentinel, or unknown
    """
    if not user_id or user_id == NIL_USER_ID:
        raise UserNotFoundError("Missing or invalid user")

    user = users.get_by_id(user_id)
    if user is None:
        raise UserNotFoundError("User is not registered", user_id)
    return user


def check_manager(user_id: Optional[str], users: UserRepository) -> User:
    """Resolve the acting user and require the Manager role."""
    user = check_user(user_id, users)
    if not user.is_manager:
        raise PermissionDeniedError(
            "Only managers can access this resource",
            details={"user_id": user.id, "role": user.role},
        )
    return user


def check_project(project_id: str, projects: ProjectRepository) -> Project:
    """Load a project with its tasks or raise ``ProjectNotFoundError``."""
    project = projects.get_with_tasks(project_id)
    if project is None:
        raise ProjectNotFoundError("Project not found", project_id)
    return project


def check_task(task_id: str, tasks: TaskRepository) -> Task:
    task = tasks.get_by_id(task_id)
    if task is None:
        raise TaskNotFoundError("Task not found", task_id)
    return task
