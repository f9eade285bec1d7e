"""Data models for the task and project management core.

This module defines the domain entities: users, projects, tasks and the
append-only task history ledger, plus the performance report value.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from taskboard.constants import MANAGER_ROLE, USER_ROLE
from taskboard.utils.clock import utc_now

from .exceptions import StateTransitionError


def new_id() -> str:
    return str(uuid.uuid4())


class TaskStatus(Enum):
    """Task status. Values are the serialized form used in the ledger."""
    PENDING = "Pendente"
    IN_PROGRESS = "EmAndamento"
    COMPLETED = "Concluida"

    @property
    def is_active(self) -> bool:
        return self in (TaskStatus.PENDING, TaskStatus.IN_PROGRESS)


class TaskPriority(Enum):
    """Task priority, fixed when the task is created."""
    LOW = "Baixa"
    MEDIUM = "Media"
    HIGH = "Alta"


class ChangeType(Enum):
    """Kind of event recorded in the task history."""
    CREATE = "Create"
    UPDATE = "Update"
    COMMENT = "Comment"


@dataclass
class User:
    """A registered user. Role is either ``User`` or ``Manager``."""

    name: str
    email: str
    role: str = USER_ROLE
    id: str = field(default_factory=new_id)

    @property
    def is_manager(self) -> bool:
        return self.role == MANAGER_ROLE


@dataclass
class Project:
    """A project owned by a user. ``tasks`` is only populated when loaded with tasks."""

    name: str
    owner_user_id: str
    description: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    id: str = field(default_factory=new_id)
    tasks: List[Task] = field(default_factory=list)

    @property
    def task_count(self) -> int:
        return len(self.tasks)


class Task:
    """A unit of work inside a project.

    State changes only through ``update_details`` and ``update_status``; every
    field is exposed read-only. Priority is set at construction and never
    changes afterwards.
    """

    __slots__ = (
        "_id",
        "_title",
        "_description",
        "_due_date",
        "_status",
        "_priority",
        "_created_at",
        "_updated_at",
        "_project_id",
    )

    def __init__(
        self,
        title: str,
        description: Optional[str],
        due_date: Optional[datetime],
        priority: TaskPriority,
        project_id: str,
        created_at: Optional[datetime] = None,
    ):
        self._id = new_id()
        self._title = title
        self._description = description
        self._due_date = due_date
        self._priority = priority
        self._project_id = project_id
        self._status = TaskStatus.PENDING
        self._created_at = created_at or utc_now()
        self._updated_at: Optional[datetime] = None

    @classmethod
    def rehydrate(
        cls,
        id: str,
        title: str,
        description: Optional[str],
        due_date: Optional[datetime],
        status: TaskStatus,
        priority: TaskPriority,
        created_at: datetime,
        updated_at: Optional[datetime],
        project_id: str,
    ) -> Task:
        """Rebuild a stored task exactly as persisted."""
        task = cls.__new__(cls)
        task._id = id
        task._title = title
        task._description = description
        task._due_date = due_date
        task._status = status
        task._priority = priority
        task._created_at = created_at
        task._updated_at = updated_at
        task._project_id = project_id
        return task

    @property
    def id(self) -> str:
        return self._id

    @property
    def title(self) -> str:
        return self._title

    @property
    def description(self) -> Optional[str]:
        return self._description

    @property
    def due_date(self) -> Optional[datetime]:
        return self._due_date

    @property
    def status(self) -> TaskStatus:
        return self._status

    @property
    def priority(self) -> TaskPriority:
        return self._priority

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> Optional[datetime]:
        return self._updated_at

    @property
    def project_id(self) -> str:
        return self._project_id

    def update_details(
        self,
        title: str,
        description: Optional[str],
        due_date: Optional[datetime],
        status: TaskStatus,
        updated_at: datetime,
    ) -> None:
        """Overwrite the editable fields. Priority is left untouched.

        Unlike ``update_status`` this does not guard against reopening a
        completed task.
        """
        self._title = title
        self._description = description
        self._due_date = due_date
        self._status = status
        self._updated_at = updated_at

    def update_status(self, new_status: TaskStatus, updated_at: datetime) -> None:
        """Change the status of the task.

        Raises:
            StateTransitionError: If the task is completed and ``new_status``
                is anything other than completed.
        """
        if self._status == TaskStatus.COMPLETED and new_status != TaskStatus.COMPLETED:
            raise StateTransitionError(
                "Cannot reopen a completed task",
                from_state=self._status.value,
                to_state=new_status.value,
                task_id=self._id,
            )
        self._status = new_status
        self._updated_at = updated_at

    def __repr__(self) -> str:
        return f"Task(id={self._id!r}, title={self._title!r}, status={self._status.value})"


@dataclass(frozen=True)
class TaskHistory:
    """One immutable entry of a task's audit ledger.

    Use the ``for_*`` factories; each records exactly one event. An entry
    holds either an old/new value pair or a comment, never both.
    """

    task_id: str
    user_id: str
    change_type: ChangeType
    timestamp: datetime
    field_name: Optional[str] = None
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    comment: Optional[str] = None
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        if not isinstance(self.change_type, ChangeType):
            raise ValueError(f"Unknown change type: {self.change_type!r}")
        has_values = self.old_value is not None or self.new_value is not None
        if self.comment is not None and has_values:
            raise ValueError("A history entry holds either a comment or a value change, not both")

    @classmethod
    def for_creation(cls, task_id: str, user_id: str, title: str, timestamp: datetime) -> TaskHistory:
        return cls(
            task_id=task_id,
            user_id=user_id,
            change_type=ChangeType.CREATE,
            timestamp=timestamp,
            new_value=f"Tarefa '{title}' foi criada.",
        )

    @classmethod
    def for_update(
        cls,
        task_id: str,
        user_id: str,
        field_name: str,
        old_value: Optional[str],
        new_value: Optional[str],
        timestamp: datetime,
    ) -> TaskHistory:
        return cls(
            task_id=task_id,
            user_id=user_id,
            change_type=ChangeType.UPDATE,
            timestamp=timestamp,
            field_name=field_name,
            old_value=old_value,
            new_value=new_value,
        )

    @classmethod
    def for_comment(cls, task_id: str, user_id: str, comment: str, timestamp: datetime) -> TaskHistory:
        return cls(
            task_id=task_id,
            user_id=user_id,
            change_type=ChangeType.COMMENT,
            timestamp=timestamp,
            comment=comment,
        )


@dataclass(frozen=True)
class PerformanceReport:
    """Completion statistics over the report window."""

    report_name: str
    period: str
    generated_at: datetime
    total_tasks_completed: int
    distinct_users_who_completed_tasks: int
    average_tasks_completed_per_user: float
