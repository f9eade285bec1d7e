"""SQLite-backed storage for users, projects, tasks and task history.

A ``Database`` owns the schema and hands out units of work. A unit of work is
one connection and one transaction shared by the four repositories; nothing
is persisted until ``commit()`` is called and anything left uncommitted is
discarded when the block exits.
"""

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional, Union

from taskboard.utils.clock import from_storage, to_storage

from .exceptions import BusinessRuleError, StorageError
from .models import ChangeType, Project, Task, TaskHistory, TaskPriority, TaskStatus, User

logger = logging.getLogger(__name__)


def _dt(value: Optional[datetime]) -> Optional[str]:
    return to_storage(value) if value is not None else None


def _parse_dt(value: Optional[str]) -> Optional[datetime]:
    return from_storage(value) if value else None


class Database:
    """SQLite database holding the taskboard schema."""

    def __init__(self, db_path: Union[str, Path]):
        """Initialize storage with database path.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_schema()

        logger.info(f"Initialized Database at {self.db_path}")

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        # Cascades and the owner restriction rely on this
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def _init_schema(self) -> None:
        """Create tables and indexes if they do not exist yet."""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    email TEXT NOT NULL UNIQUE,
                    role TEXT NOT NULL DEFAULT 'User'
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS projects (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    description TEXT,
                    created_at TEXT NOT NULL,
                    owner_user_id TEXT NOT NULL,
                    FOREIGN KEY (owner_user_id) REFERENCES users (id) ON DELETE RESTRICT
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    description TEXT,
                    due_date TEXT,
                    status TEXT NOT NULL,
                    priority TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT,
                    project_id TEXT NOT NULL,
                    FOREIGN KEY (project_id) REFERENCES projects (id) ON DELETE CASCADE
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS task_history (
                    id TEXT PRIMARY KEY,
                    task_id TEXT NOT NULL,
                    user_id TEXT NOT NULL,
                    change_type TEXT NOT NULL,
                    field_name TEXT,
                    old_value TEXT,
                    new_value TEXT,
                    comment TEXT,
                    timestamp TEXT NOT NULL,
                    FOREIGN KEY (task_id) REFERENCES tasks (id) ON DELETE CASCADE,
                    FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE RESTRICT
                )
            """)

            conn.execute("CREATE INDEX IF NOT EXISTS idx_projects_owner ON projects (owner_user_id)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_tasks_project ON tasks (project_id)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_history_task ON task_history (task_id)")
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_history_completion "
                "ON task_history (change_type, new_value, timestamp)"
            )

            conn.commit()

    @contextmanager
    def _get_connection(self) -> Iterator[sqlite3.Connection]:
        """Get database connection with proper error handling."""
        conn = None
        try:
            conn = self._connect()
            yield conn
        except sqlite3.Error as e:
            if conn:
                conn.rollback()
            raise StorageError(f"Database error: {e}")
        finally:
            if conn:
                conn.close()

    @contextmanager
    def unit_of_work(self) -> Iterator["UnitOfWork"]:
        """Open a transactional scope for one service operation."""
        with self._get_connection() as conn:
            yield UnitOfWork(conn)


class UnitOfWork:
    """Repositories bound to a single connection and transaction."""

    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn
        self._baseline = conn.total_changes
        self.users = UserRepository(conn)
        self.projects = ProjectRepository(conn)
        self.tasks = TaskRepository(conn)
        self.history = TaskHistoryRepository(conn)

    def commit(self) -> int:
        """Persist all pending changes.

        Returns:
            Number of rows affected since the previous commit
        """
        self._conn.commit()
        affected = self._conn.total_changes - self._baseline
        self._baseline = self._conn.total_changes
        logger.debug(f"Committed unit of work ({affected} rows)")
        return affected


class UserRepository:
    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn

    def add(self, user: User) -> None:
        try:
            self._conn.execute(
                "INSERT INTO users (id, name, email, role) VALUES (?, ?, ?, ?)",
                (user.id, user.name, user.email, user.role),
            )
        except sqlite3.IntegrityError as e:
            raise BusinessRuleError(
                f"A user with email '{user.email}' is already registered",
                details={"email": user.email},
            ) from e

    def get_by_id(self, user_id: str) -> Optional[User]:
        row = self._conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        return _row_to_user(row) if row else None

    def list(self) -> List[User]:
        rows = self._conn.execute("SELECT * FROM users ORDER BY name DESC").fetchall()
        return [_row_to_user(row) for row in rows]

    def delete(self, user: User) -> None:
        try:
            self._conn.execute("DELETE FROM users WHERE id = ?", (user.id,))
        except sqlite3.IntegrityError as e:
            raise BusinessRuleError(
                "Cannot delete a user who owns projects or has recorded task history",
                details={"user_id": user.id},
            ) from e


class ProjectRepository:
    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn

    def add(self, project: Project) -> None:
        self._conn.execute(
            """
            INSERT INTO projects (id, name, description, created_at, owner_user_id)
            VALUES (?, ?, ?, ?, ?)
            """,
            (project.id, project.name, project.description, _dt(project.created_at), project.owner_user_id),
        )

    def get_by_id(self, project_id: str) -> Optional[Project]:
        row = self._conn.execute("SELECT * FROM projects WHERE id = ?", (project_id,)).fetchone()
        return _row_to_project(row) if row else None

    def get_with_tasks(self, project_id: str) -> Optional[Project]:
        """Load a project together with its tasks (oldest first)."""
        project = self.get_by_id(project_id)
        if project is None:
            return None
        project.tasks = TaskRepository(self._conn).list_by_project(project_id)
        return project

    def list_by_owner(self, owner_user_id: str) -> List[Project]:
        """Projects of an owner, newest first, each loaded with its tasks."""
        rows = self._conn.execute(
            "SELECT * FROM projects WHERE owner_user_id = ? ORDER BY created_at DESC, rowid DESC",
            (owner_user_id,),
        ).fetchall()
        tasks = TaskRepository(self._conn)
        projects = []
        for row in rows:
            project = _row_to_project(row)
            project.tasks = tasks.list_by_project(project.id)
            projects.append(project)
        return projects

    def delete(self, project: Project) -> None:
        self._conn.execute("DELETE FROM projects WHERE id = ?", (project.id,))


class TaskRepository:
    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn

    def add(self, task: Task) -> None:
        self._conn.execute(
            """
            INSERT INTO tasks (
                id, title, description, due_date, status, priority,
                created_at, updated_at, project_id
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                task.id,
                task.title,
                task.description,
                _dt(task.due_date),
                task.status.value,
                task.priority.value,
                _dt(task.created_at),
                _dt(task.updated_at),
                task.project_id,
            ),
        )

    def get_by_id(self, task_id: str) -> Optional[Task]:
        row = self._conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()
        return _row_to_task(row) if row else None

    def list_by_project(self, project_id: str) -> List[Task]:
        rows = self._conn.execute(
            "SELECT * FROM tasks WHERE project_id = ? ORDER BY created_at ASC, rowid ASC",
            (project_id,),
        ).fetchall()
        return [_row_to_task(row) for row in rows]

    def update(self, task: Task) -> None:
        """Write back the mutable fields. Priority is never rewritten."""
        self._conn.execute(
            """
            UPDATE tasks
            SET title = ?, description = ?, due_date = ?, status = ?, updated_at = ?
            WHERE id = ?
            """,
            (
                task.title,
                task.description,
                _dt(task.due_date),
                task.status.value,
                _dt(task.updated_at),
                task.id,
            ),
        )

    def delete(self, task: Task) -> None:
        self._conn.execute("DELETE FROM tasks WHERE id = ?", (task.id,))

    def has_active_tasks(self, project_id: str) -> bool:
        row = self._conn.execute(
            "SELECT 1 FROM tasks WHERE project_id = ? AND status IN (?, ?) LIMIT 1",
            (project_id, TaskStatus.PENDING.value, TaskStatus.IN_PROGRESS.value),
        ).fetchone()
        return row is not None

    def get_completed_since(self, start: datetime) -> List[TaskHistory]:
        """Ledger entries that moved a task to completed at or after ``start``."""
        rows = self._conn.execute(
            """
            SELECT * FROM task_history
            WHERE change_type = ? AND new_value = ? AND timestamp >= ?
            ORDER BY timestamp ASC, rowid ASC
            """,
            (ChangeType.UPDATE.value, TaskStatus.COMPLETED.value, to_storage(start)),
        ).fetchall()
        return [_row_to_history(row) for row in rows]


class TaskHistoryRepository:
    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn

    def add(self, entry: TaskHistory) -> None:
        self._conn.execute(
            """
            INSERT INTO task_history (
                id, task_id, user_id, change_type, field_name,
                old_value, new_value, comment, timestamp
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                entry.id,
                entry.task_id,
                entry.user_id,
                entry.change_type.value,
                entry.field_name,
                entry.old_value,
                entry.new_value,
                entry.comment,
                to_storage(entry.timestamp),
            ),
        )

    def list_by_task(self, task_id: str) -> List[TaskHistory]:
        """History of a task, newest first."""
        rows = self._conn.execute(
            "SELECT * FROM task_history WHERE task_id = ? ORDER BY timestamp DESC, rowid DESC",
            (task_id,),
        ).fetchall()
        return [_row_to_history(row) for row in rows]


def _row_to_user(row: sqlite3.Row) -> User:
    return User(id=row["id"], name=row["name"], email=row["email"], role=row["role"])


def _row_to_project(row: sqlite3.Row) -> Project:
    return Project(
        id=row["id"],
        name=row["name"],
        description=row["description"],
        created_at=from_storage(row["created_at"]),
        owner_user_id=row["owner_user_id"],
    )


def _row_to_task(row: sqlite3.Row) -> Task:
    return Task.rehydrate(
        id=row["id"],
        title=row["title"],
        description=row["description"],
        due_date=_parse_dt(row["due_date"]),
        status=TaskStatus(row["status"]),
        priority=TaskPriority(row["priority"]),
        created_at=from_storage(row["created_at"]),
        updated_at=_parse_dt(row["updated_at"]),
        project_id=row["project_id"],
    )


def _row_to_history(row: sqlite3.Row) -> TaskHistory:
    return TaskHistory(
        id=row["id"],
        task_id=row["task_id"],
        user_id=row["user_id"],
        change_type=ChangeType(row["change_type"]),
        field_name=row["field_name"],
        old_value=row["old_value"],
        new_value=row["new_value"],
        comment=row["comment"],
        timestamp=from_storage(row["timestamp"]),
    )
