"""Taskboard Web Application - FastAPI app factory.

Builds the database and the services from configuration and attaches them to
the application state, where the routes pick them up.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskboard import __version__
from taskboard.config import Config
from taskboard.project import Database, ProjectService, ReportService, TaskService, UserService
from taskboard.utils.clock import Clock, utc_now

from .routes import router

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Service instances shared by all requests of one application."""

    db: Database
    users: UserService
    projects: ProjectService
    tasks: TaskService
    reports: ReportService

    @classmethod
    def build(cls, db: Database, clock: Clock = utc_now) -> "Services":
        return cls(
            db=db,
            users=UserService(db),
            projects=ProjectService(db, clock),
            tasks=TaskService(db, clock),
            reports=ReportService(db, clock),
        )


def create_app(config: Optional[Config] = None, clock: Clock = utc_now) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or Config.load_config()

    app = FastAPI(
        title="Taskboard",
        description="Task and project management API with an audited task history",
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    # Configure CORS
    origins_env = os.getenv("TASKBOARD_CORS_ORIGINS", "").strip()
    origins_list = [o.strip() for o in origins_env.split(",") if o.strip()] or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    db = Database(config.database.path)
    app.state.config = config
    app.state.services = Services.build(db, clock)

    app.include_router(router)

    logger.info(f"Taskboard app created (database: {config.database.path})")
    return app
