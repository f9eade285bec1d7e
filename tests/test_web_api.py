"""Tests for the HTTP API.

Run against an in-process app with a throwaway database.
"""

import uuid

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from taskboard.config import Config
from taskboard.project.exceptions import PermissionDeniedError, TaskNotFoundError
from taskboard.web.app import create_app
from taskboard.web.routes import _run


@pytest.fixture
def client(tmp_path, clock):
    config = Config()
    config.database.path = tmp_path / "api.db"
    with TestClient(create_app(config, clock)) as client:
        yield client


def _create_user(client, name, email, role="User"):
    resp = client.post("/api/v1/users", json={"name": name, "email": email, "role": role})
    assert resp.status_code == 201
    return resp.json()["id"]


@pytest.fixture
def alice(client):
    return _create_user(client, "Alice", "alice@example.com")


@pytest.fixture
def boss(client):
    return _create_user(client, "Maria", "maria@example.com", role="Manager")


@pytest.fixture
def project_id(client, alice):
    resp = client.post(
        "/api/v1/projects",
        json={"name": "Launch", "description": "Product launch"},
        headers={"X-User-Id": alice},
    )
    assert resp.status_code == 201
    return resp.json()["id"]


def _task_payload(title="Write report"):
    return {
        "title": title,
        "description": "Quarterly numbers",
        "due_date": "2026-06-20T10:00:00Z",
        "priority": "Alta",
    }


@pytest.fixture
def task_id(client, alice, project_id):
    resp = client.post(
        f"/api/v1/tasks/projects/{project_id}",
        json=_task_payload(),
        headers={"X-User-Id": alice},
    )
    assert resp.status_code == 201
    return resp.json()["id"]


def _error_code(resp):
    return resp.json()["detail"]["error"]["code"]


def test_health(client):
    resp = client.get("/api/v1/health")

    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_create_and_fetch_task(client, alice, task_id):
    resp = client.get(f"/api/v1/tasks/{task_id}", headers={"X-User-Id": alice})

    assert resp.status_code == 200
    body = resp.json()
    assert body["title"] == "Write report"
    assert body["status"] == "Pendente"
    assert body["priority"] == "Alta"
    assert body["updated_at"] is None


def test_header_is_case_insensitive_for_uuid(client, alice, task_id):
    resp = client.get(f"/api/v1/tasks/{task_id}", headers={"X-User-Id": alice.upper()})

    assert resp.status_code == 200


def test_path_ids_are_case_insensitive_for_uuid(client, alice, project_id, task_id):
    headers = {"X-User-Id": alice}

    task_resp = client.get(f"/api/v1/tasks/{task_id.upper()}", headers=headers)
    history_resp = client.get(f"/api/v1/tasks/{task_id.upper()}/history", headers=headers)
    project_resp = client.get(f"/api/v1/projects/{project_id.upper()}", headers=headers)
    user_resp = client.get(f"/api/v1/users/{alice.upper()}")

    assert task_resp.status_code == 200
    assert task_resp.json()["id"] == task_id
    assert history_resp.status_code == 200
    assert len(history_resp.json()) == 1
    assert project_resp.status_code == 200
    assert project_resp.json()["id"] == project_id
    assert user_resp.status_code == 200
    assert user_resp.json()["id"] == alice


def test_comment_on_uppercase_task_id_is_recorded(client, alice, task_id):
    headers = {"X-User-Id": alice}

    resp = client.post(
        f"/api/v1/tasks/{task_id.upper()}/comments", json={"comment": "Looks good"}, headers=headers
    )

    assert resp.status_code == 201
    assert resp.json()["task_id"] == task_id
    history = client.get(f"/api/v1/tasks/{task_id}/history", headers=headers).json()
    assert history[0]["comment"] == "Looks good"


@pytest.mark.parametrize("headers", [{}, {"X-User-Id": "not-a-uuid"}, {"X-User-Id": str(uuid.uuid4())}])
def test_missing_or_unknown_caller_is_not_found(client, task_id, headers):
    resp = client.get(f"/api/v1/tasks/{task_id}", headers=headers)

    assert resp.status_code == 404
    assert _error_code(resp) == "USER_NOT_FOUND"


def test_missing_task_is_not_found(client, alice):
    resp = client.get(f"/api/v1/tasks/{uuid.uuid4()}", headers={"X-User-Id": alice})

    assert resp.status_code == 404
    assert _error_code(resp) == "TASK_NOT_FOUND"


def test_invalid_payload_is_rejected(client, alice, project_id):
    payload = _task_payload(title="x" * 201)

    resp = client.post(f"/api/v1/tasks/projects/{project_id}", json=payload, headers={"X-User-Id": alice})

    assert resp.status_code == 422


def test_task_limit_is_bad_request(client, alice, project_id):
    for i in range(20):
        resp = client.post(
            f"/api/v1/tasks/projects/{project_id}", json=_task_payload(f"T{i}"), headers={"X-User-Id": alice}
        )
        assert resp.status_code == 201

    resp = client.post(f"/api/v1/tasks/projects/{project_id}", json=_task_payload("T20"), headers={"X-User-Id": alice})

    assert resp.status_code == 400
    assert _error_code(resp) == "TASK_LIMIT_EXCEEDED"


def test_status_lifecycle_and_history(client, alice, task_id):
    headers = {"X-User-Id": alice}

    resp = client.patch(f"/api/v1/tasks/{task_id}/status", json={"status": "Concluida"}, headers=headers)
    assert resp.status_code == 204

    resp = client.patch(f"/api/v1/tasks/{task_id}/status", json={"status": "Pendente"}, headers=headers)
    assert resp.status_code == 400
    assert _error_code(resp) == "INVALID_STATE_TRANSITION"

    resp = client.post(f"/api/v1/tasks/{task_id}/comments", json={"comment": "Done!"}, headers=headers)
    assert resp.status_code == 201

    history = client.get(f"/api/v1/tasks/{task_id}/history", headers=headers).json()
    assert [h["change_type"] for h in history] == ["Comment", "Update", "Create"]
    assert history[1]["new_value"] == "Concluida"


def test_update_task_details(client, alice, task_id):
    headers = {"X-User-Id": alice}
    payload = {
        "title": "Write final report",
        "description": "Quarterly numbers",
        "due_date": "2026-06-20T10:00:00Z",
        "status": "EmAndamento",
    }

    resp = client.put(f"/api/v1/tasks/{task_id}", json=payload, headers=headers)

    assert resp.status_code == 204
    body = client.get(f"/api/v1/tasks/{task_id}", headers=headers).json()
    assert body["title"] == "Write final report"
    assert body["status"] == "EmAndamento"
    assert body["priority"] == "Alta"


def test_update_ignores_priority_field(client, alice, task_id):
    headers = {"X-User-Id": alice}
    payload = {
        "title": "Write report",
        "description": "Quarterly numbers",
        "due_date": "2026-06-20T10:00:00Z",
        "status": "Pendente",
        "priority": "Baixa",
    }

    resp = client.put(f"/api/v1/tasks/{task_id}", json=payload, headers=headers)

    assert resp.status_code == 204
    assert client.get(f"/api/v1/tasks/{task_id}", headers=headers).json()["priority"] == "Alta"


def test_delete_task(client, alice, project_id, task_id):
    headers = {"X-User-Id": alice}

    assert client.delete(f"/api/v1/tasks/{task_id}", headers=headers).status_code == 204
    assert client.get(f"/api/v1/tasks/{task_id}", headers=headers).status_code == 404
    assert client.get(f"/api/v1/tasks/projects/{project_id}", headers=headers).json() == []


def test_report_requires_manager(client, alice, boss, task_id):
    client.patch(f"/api/v1/tasks/{task_id}/status", json={"status": "Concluida"}, headers={"X-User-Id": alice})

    denied = client.get("/api/v1/reports/performance", headers={"X-User-Id": alice})
    allowed = client.get("/api/v1/reports/performance", headers={"X-User-Id": boss})

    assert denied.status_code == 403
    assert _error_code(denied) == "PERMISSION_DENIED"
    assert allowed.status_code == 200
    body = allowed.json()
    assert body["total_tasks_completed"] == 1
    assert body["distinct_users_who_completed_tasks"] == 1
    assert body["average_tasks_completed_per_user"] == 1.0


def test_projects_endpoints(client, alice, project_id, task_id):
    headers = {"X-User-Id": alice}

    listing = client.get("/api/v1/projects", headers=headers).json()
    assert listing == [{"id": project_id, "name": "Launch", "task_count": 1}]

    detail = client.get(f"/api/v1/projects/{project_id}", headers=headers).json()
    assert [t["id"] for t in detail["tasks"]] == [task_id]

    resp = client.delete(f"/api/v1/projects/{project_id}", headers=headers)
    assert resp.status_code == 400

    client.patch(f"/api/v1/tasks/{task_id}/status", json={"status": "Concluida"}, headers=headers)
    assert client.delete(f"/api/v1/projects/{project_id}", headers=headers).status_code == 204
    assert client.get(f"/api/v1/projects/{project_id}", headers=headers).status_code == 404


def test_users_endpoints(client, alice):
    assert client.get(f"/api/v1/users/{alice}").json()["name"] == "Alice"
    assert client.get(f"/api/v1/users/{uuid.uuid4()}").status_code == 404

    duplicate = client.post("/api/v1/users", json={"name": "Again", "email": "alice@example.com"})
    assert duplicate.status_code == 400

    assert client.delete(f"/api/v1/users/{alice}").status_code == 204
    assert client.get("/api/v1/users").json() == []


@pytest.mark.asyncio
async def test_run_translates_domain_errors():
    def missing():
        raise TaskNotFoundError("Task not found", "t-1")

    def denied():
        raise PermissionDeniedError("nope")

    with pytest.raises(HTTPException) as not_found:
        await _run(missing)
    with pytest.raises(HTTPException) as forbidden:
        await _run(denied)

    assert not_found.value.status_code == 404
    assert not_found.value.detail["error"]["details"] == {"task_id": "t-1"}
    assert forbidden.value.status_code == 403


@pytest.mark.asyncio
async def test_run_hides_unexpected_errors():
    def broken():
        raise RuntimeError("secret internals")

    with pytest.raises(HTTPException) as exc_info:
        await _run(broken)

    assert exc_info.value.status_code == 500
    assert exc_info.value.detail["error"]["code"] == "INTERNAL_ERROR"
    assert "secret" not in exc_info.value.detail["error"]["message"]
