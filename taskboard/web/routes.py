import asyncio
import logging
import uuid
from functools import partial
from typing import Any, Callable, List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request, Response

from taskboard import __version__
from taskboard.constants import NIL_USER_ID, USER_ID_HEADER
from taskboard.project.exceptions import (
    BusinessRuleError,
    NotFoundError,
    PermissionDeniedError,
    TaskboardError,
)
from taskboard.project.schemas import (
    AddCommentRequest,
    CreateProjectRequest,
    CreateTaskRequest,
    CreateUserRequest,
    PerformanceReportResponse,
    ProjectDetail,
    ProjectSummary,
    TaskHistoryResponse,
    TaskResponse,
    UpdateStatusRequest,
    UpdateTaskRequest,
    UserResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _status_for(error: Exception) -> int:
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, PermissionDeniedError):
        return 403
    if isinstance(error, BusinessRuleError):
        return 400
    return 500


def _format_error_response(error: Exception, status_code: int = 500) -> HTTPException:
    """Format error as HTTPException with structured error detail."""
    if isinstance(error, TaskboardError):
        return HTTPException(status_code=status_code, detail={"error": error.to_dict()})
    # Internal details stay in the log
    wrapped = TaskboardError("An unexpected error occurred", code="INTERNAL_ERROR")
    return HTTPException(status_code=status_code, detail={"error": wrapped.to_dict()})


async def _run(func: Callable[..., Any], *args: Any) -> Any:
    """Run a blocking service call in the executor and translate its errors."""
    try:
        return await asyncio.get_event_loop().run_in_executor(None, partial(func, *args))
    except TaskboardError as e:
        status_code = _status_for(e)
        log = logger.error if status_code >= 500 else logger.info
        log(f"{func.__name__} failed ({status_code}): {e}")
        raise _format_error_response(e, status_code)
    except Exception as e:
        logger.error(f"Unexpected error in {func.__name__}: {e}", exc_info=True)
        raise _format_error_response(e, 500)


def get_services(request: Request):
    return request.app.state.services


def get_user_id(x_user_id: Optional[str] = Header(None, alias=USER_ID_HEADER)) -> str:
    """Caller identity from the request header.

    Missing or malformed values map to the nil id, which the services reject
    as an unknown user.
    """
    if not x_user_id:
        return NIL_USER_ID
    try:
        return str(uuid.UUID(x_user_id.strip()))
    except ValueError:
        return NIL_USER_ID


def _normalize_id(value: str) -> str:
    """Canonical lowercase form of a UUID path id; other values pass through."""
    try:
        return str(uuid.UUID(value.strip()))
    except ValueError:
        return value


@router.get("/api/v1/health")
async def health():
    return {"status": "ok", "version": __version__}


# --- Users ---

@router.post("/api/v1/users", response_model=UserResponse, status_code=201)
async def create_user(req: CreateUserRequest, services=Depends(get_services)):
    return await _run(services.users.create_user, req)


@router.get("/api/v1/users", response_model=List[UserResponse])
async def list_users(services=Depends(get_services)):
    return await _run(services.users.list_users)


@router.get("/api/v1/users/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, services=Depends(get_services)):
    user = await _run(services.users.get_user, _normalize_id(user_id))
    if user is None:
        raise HTTPException(
            status_code=404,
            detail={"error": {"code": "USER_NOT_FOUND", "message": "User not found"}},
        )
    return user


@router.delete("/api/v1/users/{user_id}", status_code=204, response_class=Response)
async def delete_user(user_id: str, services=Depends(get_services)):
    await _run(services.users.delete_user, _normalize_id(user_id))
    return Response(status_code=204)


# --- Projects ---

@router.post("/api/v1/projects", response_model=ProjectDetail, status_code=201)
async def create_project(
    req: CreateProjectRequest,
    user_id: str = Depends(get_user_id),
    services=Depends(get_services),
):
    return await _run(services.projects.create_project, req, user_id)


@router.get("/api/v1/projects", response_model=List[ProjectSummary])
async def list_projects(user_id: str = Depends(get_user_id), services=Depends(get_services)):
    return await _run(services.projects.get_user_projects, user_id)


@router.get("/api/v1/projects/{project_id}", response_model=ProjectDetail)
async def get_project(project_id: str, user_id: str = Depends(get_user_id), services=Depends(get_services)):
    return await _run(services.projects.get_project_by_id, _normalize_id(project_id), user_id)


@router.delete("/api/v1/projects/{project_id}", status_code=204, response_class=Response)
async def delete_project(project_id: str, user_id: str = Depends(get_user_id), services=Depends(get_services)):
    await _run(services.projects.delete_project, _normalize_id(project_id), user_id)
    return Response(status_code=204)


# --- Tasks ---

@router.post("/api/v1/tasks/projects/{project_id}", response_model=TaskResponse, status_code=201)
async def create_task(
    project_id: str,
    req: CreateTaskRequest,
    user_id: str = Depends(get_user_id),
    services=Depends(get_services),
):
    return await _run(services.tasks.create_task, _normalize_id(project_id), req, user_id)


@router.get("/api/v1/tasks/projects/{project_id}", response_model=List[TaskResponse])
async def list_project_tasks(project_id: str, user_id: str = Depends(get_user_id), services=Depends(get_services)):
    return await _run(services.tasks.get_tasks_by_project, _normalize_id(project_id), user_id)


@router.get("/api/v1/tasks/{task_id}", response_model=TaskResponse)
async def get_task(task_id: str, user_id: str = Depends(get_user_id), services=Depends(get_services)):
    return await _run(services.tasks.get_task_by_id, _normalize_id(task_id), user_id)


@router.put("/api/v1/tasks/{task_id}", status_code=204, response_class=Response)
async def update_task(
    task_id: str,
    req: UpdateTaskRequest,
    user_id: str = Depends(get_user_id),
    services=Depends(get_services),
):
    await _run(services.tasks.update_task_details, _normalize_id(task_id), req, user_id)
    return Response(status_code=204)


@router.patch("/api/v1/tasks/{task_id}/status", status_code=204, response_class=Response)
async def update_task_status(
    task_id: str,
    req: UpdateStatusRequest,
    user_id: str = Depends(get_user_id),
    services=Depends(get_services),
):
    await _run(services.tasks.update_task_status, _normalize_id(task_id), req, user_id)
    return Response(status_code=204)


@router.post("/api/v1/tasks/{task_id}/comments", status_code=201)
async def add_comment(
    task_id: str,
    req: AddCommentRequest,
    user_id: str = Depends(get_user_id),
    services=Depends(get_services),
):
    task_id = _normalize_id(task_id)
    await _run(services.tasks.add_comment, task_id, req, user_id)
    return {"task_id": task_id, "comment": req.comment}


@router.delete("/api/v1/tasks/{task_id}", status_code=204, response_class=Response)
async def delete_task(task_id: str, user_id: str = Depends(get_user_id), services=Depends(get_services)):
    await _run(services.tasks.delete_task, _normalize_id(task_id), user_id)
    return Response(status_code=204)


@router.get("/api/v1/tasks/{task_id}/history", response_model=List[TaskHistoryResponse])
async def get_task_history(task_id: str, user_id: str = Depends(get_user_id), services=Depends(get_services)):
    return await _run(services.tasks.get_task_history, _normalize_id(task_id), user_id)


# --- Reports ---

@router.get("/api/v1/reports/performance", response_model=PerformanceReportResponse)
async def performance_report(user_id: str = Depends(get_user_id), services=Depends(get_services)):
    return await _run(services.reports.generate_report, user_id)
