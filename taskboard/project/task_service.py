"""Task lifecycle operations and the audit ledger that records them.

Every operation resolves the acting user first, runs inside one unit of work
and commits at most once, so a failure never leaves a partial set of ledger
entries behind.
"""

import logging
from datetime import datetime
from typing import List, Optional

from taskboard.constants import MAX_TASKS_PER_PROJECT
from taskboard.utils.clock import Clock, as_utc, utc_now

from .exceptions import TaskLimitExceededError
from .guards import check_project, check_task, check_user
from .models import Task, TaskHistory
from .schemas import (
    AddCommentRequest,
    CreateTaskRequest,
    TaskHistoryResponse,
    TaskResponse,
    UpdateStatusRequest,
    UpdateTaskRequest,
)
from .storage import Database

logger = logging.getLogger(__name__)


def format_long_date(value: Optional[datetime]) -> Optional[str]:
    """Render a due date for the ledger, e.g. ``Monday, June 15, 2026``.

    The time of day is not part of the rendered value.
    """
    if value is None:
        return None
    return f"{value:%A}, {value:%B} {value.day}, {value:%Y}"


class TaskService:
    """Creates, mutates and deletes tasks, recording each change in the task history."""

    def __init__(self, db: Database, clock: Clock = utc_now):
        self.db = db
        self.clock = clock

    def create_task(self, project_id: str, request: CreateTaskRequest, user_id: str) -> TaskResponse:
        """Create a task in a project and record its creation.

        Args:
            project_id: Project that will own the task
            request: Validated task payload
            user_id: Acting user

        Returns:
            The created task

        Raises:
            UserNotFoundError: If the acting user does not exist
            ProjectNotFoundError: If the project does not exist
            TaskLimitExceededError: If the project already holds the maximum number of tasks
        """
        with self.db.unit_of_work() as uow:
            check_user(user_id, uow.users)
            project = check_project(project_id, uow.projects)

            if project.task_count >= MAX_TASKS_PER_PROJECT:
                raise TaskLimitExceededError(
                    f"Project has reached the limit of {MAX_TASKS_PER_PROJECT} tasks",
                    project_id=project_id,
                    limit=MAX_TASKS_PER_PROJECT,
                )

            now = self.clock()
            task = Task(
                title=request.title,
                description=request.description,
                due_date=as_utc(request.due_date),
                priority=request.priority,
                project_id=project_id,
                created_at=now,
            )
            uow.tasks.add(task)
            uow.history.add(TaskHistory.for_creation(task.id, user_id, task.title, now))
            uow.commit()

        logger.info(f"Created task {task.id} in project {project_id}")
        return TaskResponse.from_task(task)

    def get_tasks_by_project(self, project_id: str, user_id: str) -> List[TaskResponse]:
        with self.db.unit_of_work() as uow:
            check_user(user_id, uow.users)
            check_project(project_id, uow.projects)
            tasks = uow.tasks.list_by_project(project_id)

        logger.debug(f"Listed {len(tasks)} tasks for project {project_id}")
        return [TaskResponse.from_task(t) for t in tasks]

    def get_task_by_id(self, task_id: str, user_id: str) -> TaskResponse:
        with self.db.unit_of_work() as uow:
            check_user(user_id, uow.users)
            task = check_task(task_id, uow.tasks)
        return TaskResponse.from_task(task)

    def update_task_details(self, task_id: str, request: UpdateTaskRequest, user_id: str) -> None:
        """Replace the editable fields of a task.

        One ledger entry is recorded per field whose value actually changed,
        compared against the task as loaded. The change is committed even
        when nothing differs, in which case no entries are written.
        """
        with self.db.unit_of_work() as uow:
            check_user(user_id, uow.users)
            task = check_task(task_id, uow.tasks)

            now = self.clock()
            due_date = as_utc(request.due_date)
            changes = []
            if task.title != request.title:
                changes.append(("Title", task.title, request.title))
            if task.description != request.description:
                changes.append(("Description", task.description, request.description))
            if task.due_date != due_date:
                changes.append(("DueTo", format_long_date(task.due_date), format_long_date(due_date)))
            if task.status != request.status:
                changes.append(("Status", task.status.value, request.status.value))

            for field_name, old_value, new_value in changes:
                uow.history.add(
                    TaskHistory.for_update(task_id, user_id, field_name, old_value, new_value, now)
                )

            task.update_details(request.title, request.description, due_date, request.status, now)
            uow.tasks.update(task)
            uow.commit()

        logger.info(f"Updated task {task_id} ({len(changes)} fields changed)")

    def update_task_status(self, task_id: str, request: UpdateStatusRequest, user_id: str) -> None:
        """Move a task to a new status.

        Nothing is written when the status is unchanged.

        Raises:
            StateTransitionError: If the task is completed and the new status is not
        """
        with self.db.unit_of_work() as uow:
            check_user(user_id, uow.users)
            task = check_task(task_id, uow.tasks)

            old_status = task.status.value
            new_status = request.status.value
            if old_status == new_status:
                logger.debug(f"Task {task_id} already has status {new_status}")
                return

            now = self.clock()
            uow.history.add(TaskHistory.for_update(task_id, user_id, "Status", old_status, new_status, now))
            task.update_status(request.status, now)
            uow.tasks.update(task)
            uow.commit()

        logger.info(f"Task {task_id} status changed from {old_status} to {new_status}")

    def add_comment(self, task_id: str, request: AddCommentRequest, user_id: str) -> None:
        with self.db.unit_of_work() as uow:
            check_user(user_id, uow.users)
            check_task(task_id, uow.tasks)

            uow.history.add(TaskHistory.for_comment(task_id, user_id, request.comment, self.clock()))
            uow.commit()

        logger.info(f"Added comment to task {task_id}")

    def delete_task(self, task_id: str, user_id: str) -> None:
        """Delete a task. Its history goes with it."""
        with self.db.unit_of_work() as uow:
            check_user(user_id, uow.users)
            task = check_task(task_id, uow.tasks)

            uow.tasks.delete(task)
            uow.commit()

        logger.info(f"Deleted task {task_id}")

    def get_task_history(self, task_id: str, user_id: str) -> List[TaskHistoryResponse]:
        """Return the ledger of a task, newest entry first."""
        with self.db.unit_of_work() as uow:
            check_user(user_id, uow.users)
            check_task(task_id, uow.tasks)
            entries = uow.history.list_by_task(task_id)

        return [TaskHistoryResponse.from_entry(e) for e in entries]
