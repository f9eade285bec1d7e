"""Request and response models for the service layer.

Requests carry the input constraints (required fields, maximum lengths) so
payloads are validated before they reach a service. Responses are the output
projections of the domain entities.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .models import PerformanceReport, Project, Task, TaskHistory, TaskPriority, TaskStatus, User


# Requests

class CreateTaskRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=1000)
    due_date: datetime
    priority: TaskPriority


class UpdateTaskRequest(BaseModel):
    """Full replacement of the editable task fields. Priority is not editable."""
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=1000)
    due_date: datetime
    status: TaskStatus


class UpdateStatusRequest(BaseModel):
    status: TaskStatus


class AddCommentRequest(BaseModel):
    comment: str = Field(..., min_length=1, max_length=1000)


class CreateProjectRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field("", max_length=500)


class CreateUserRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    email: str = Field(..., max_length=254, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    role: Literal["User", "Manager"] = "User"


# Responses

class TaskResponse(BaseModel):
    id: str
    project_id: str
    title: str
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    status: TaskStatus
    priority: TaskPriority
    created_at: datetime
    updated_at: Optional[datetime] = None

    @classmethod
    def from_task(cls, task: Task) -> "TaskResponse":
        return cls(
            id=task.id,
            project_id=task.project_id,
            title=task.title,
            description=task.description,
            due_date=task.due_date,
            status=task.status,
            priority=task.priority,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )


class TaskHistoryResponse(BaseModel):
    id: str
    change_type: str
    field_name: Optional[str] = None
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    comment: Optional[str] = None
    timestamp: datetime
    user_id: str

    @classmethod
    def from_entry(cls, entry: TaskHistory) -> "TaskHistoryResponse":
        return cls(
            id=entry.id,
            change_type=entry.change_type.value,
            field_name=entry.field_name,
            old_value=entry.old_value,
            new_value=entry.new_value,
            comment=entry.comment,
            timestamp=entry.timestamp,
            user_id=entry.user_id,
        )


class ProjectSummary(BaseModel):
    id: str
    name: str
    task_count: int

    @classmethod
    def from_project(cls, project: Project) -> "ProjectSummary":
        return cls(id=project.id, name=project.name, task_count=project.task_count)


class ProjectDetail(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    created_at: datetime
    tasks: List[TaskResponse] = Field(default_factory=list)

    @classmethod
    def from_project(cls, project: Project) -> "ProjectDetail":
        return cls(
            id=project.id,
            name=project.name,
            description=project.description,
            created_at=project.created_at,
            tasks=[TaskResponse.from_task(t) for t in project.tasks],
        )


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    role: str

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(id=user.id, name=user.name, email=user.email, role=user.role)


class PerformanceReportResponse(BaseModel):
    report_name: str
    period: str
    generated_at: datetime
    total_tasks_completed: int
    distinct_users_who_completed_tasks: int
    average_tasks_completed_per_user: float

    @classmethod
    def from_report(cls, report: PerformanceReport) -> "PerformanceReportResponse":
        return cls(
            report_name=report.report_name,
            period=report.period,
            generated_at=report.generated_at,
            total_tasks_completed=report.total_tasks_completed,
            distinct_users_who_completed_tasks=report.distinct_users_who_completed_tasks,
            average_tasks_completed_per_user=report.average_tasks_completed_per_user,
        )
