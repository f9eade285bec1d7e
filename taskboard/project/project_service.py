"""Project creation, lookup and deletion."""

import logging
from typing import List

from taskboard.utils.clock import Clock, utc_now

from .exceptions import BusinessRuleError, ProjectNotFoundError
from .guards import check_project, check_user
from .models import Project
from .schemas import CreateProjectRequest, ProjectDetail, ProjectSummary
from .storage import Database

logger = logging.getLogger(__name__)


class ProjectService:
    def __init__(self, db: Database, clock: Clock = utc_now):
        self.db = db
        self.clock = clock

    def create_project(self, request: CreateProjectRequest, user_id: str) -> ProjectDetail:
        """Create a project owned by the acting user."""
        with self.db.unit_of_work() as uow:
            check_user(user_id, uow.users)

            project = Project(
                name=request.name,
                description=request.description,
                owner_user_id=user_id,
                created_at=self.clock(),
            )
            uow.projects.add(project)
            uow.commit()

        logger.info(f"Created project {project.id} for user {user_id}")
        return ProjectDetail.from_project(project)

    def get_user_projects(self, user_id: str) -> List[ProjectSummary]:
        """List the projects owned by the acting user with their task counts."""
        with self.db.unit_of_work() as uow:
            check_user(user_id, uow.users)
            projects = uow.projects.list_by_owner(user_id)

        return [ProjectSummary.from_project(p) for p in projects]

    def get_project_by_id(self, project_id: str, user_id: str) -> ProjectDetail:
        with self.db.unit_of_work() as uow:
            check_user(user_id, uow.users)
            project = check_project(project_id, uow.projects)

        return ProjectDetail.from_project(project)

    def delete_project(self, project_id: str, user_id: str) -> None:
        """Delete a project together with its tasks and their history.

        Raises:
            ProjectNotFoundError: If the project does not exist
            BusinessRuleError: If the project still has pending or in-progress tasks
        """
        with self.db.unit_of_work() as uow:
            check_user(user_id, uow.users)

            project = uow.projects.get_by_id(project_id)
            if project is None:
                raise ProjectNotFoundError("Project not found", project_id)

            if uow.tasks.has_active_tasks(project_id):
                raise BusinessRuleError(
                    "Cannot delete the project while it has pending or in-progress tasks. "
                    "Complete or remove them first.",
                    details={"project_id": project_id},
                )

            uow.projects.delete(project)
            uow.commit()

        logger.info(f"Deleted project {project_id}")
