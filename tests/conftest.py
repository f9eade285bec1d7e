import sqlite3
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add the project root to the Python path so tests can import 'taskboard'
# without an installed distribution.
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from taskboard.project import Database, ProjectService, ReportService, TaskService, UserService  # noqa: E402
from taskboard.project.models import TaskPriority  # noqa: E402
from taskboard.project.schemas import CreateProjectRequest, CreateTaskRequest, CreateUserRequest  # noqa: E402

FIXED_NOW = datetime(2026, 6, 15, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock pinned to a settable instant."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


def count_rows(db: Database, table: str) -> int:
    conn = sqlite3.connect(str(db.db_path))
    try:
        return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
    finally:
        conn.close()


def task_request(title: str = "Write report", **overrides) -> CreateTaskRequest:
    data = {
        "title": title,
        "description": "Quarterly numbers",
        "due_date": datetime(2026, 6, 20, 10, 0, tzinfo=timezone.utc),
        "priority": TaskPriority.HIGH,
    }
    data.update(overrides)
    return CreateTaskRequest(**data)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def db(tmp_path: Path) -> Database:
    return Database(tmp_path / "taskboard.db")


@pytest.fixture
def user_service(db):
    return UserService(db)


@pytest.fixture
def project_service(db, clock):
    return ProjectService(db, clock)


@pytest.fixture
def task_service(db, clock):
    return TaskService(db, clock)


@pytest.fixture
def report_service(db, clock):
    return ReportService(db, clock)


@pytest.fixture
def user(user_service):
    return user_service.create_user(CreateUserRequest(name="Alice", email="alice@example.com"))


@pytest.fixture
def other_user(user_service):
    return user_service.create_user(CreateUserRequest(name="Bob", email="bob@example.com"))


@pytest.fixture
def manager(user_service):
    return user_service.create_user(
        CreateUserRequest(name="Maria", email="maria@example.com", role="Manager")
    )


@pytest.fixture
def project(project_service, user):
    return project_service.create_project(
        CreateProjectRequest(name="Launch", description="Product launch"), user.id
    )


@pytest.fixture
def task(task_service, project, user):
    return task_service.create_task(project.id, task_request(), user.id)
