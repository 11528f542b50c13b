from unittest.mock import AsyncMock

from task_api.app import app
from task_api.services.task_service import get_task_service

BASE = "/api/v1/tasks"


def _create(client, title, **fields):
    response = client.post(BASE, json={"title": title, **fields})
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_create_task_returns_view(client):
    response = client.post(
        BASE, json={"title": "Write docs", "description": "API guide", "status": "in progress"}
    )

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Task created successfully"
    task = body["data"]
    assert task["id"] == 1
    assert task["title"] == "Write docs"
    assert task["description"] == "API guide"
    assert task["status"] == "IN_PROGRESS"
    assert task["statusDisplay"] == "In Progress"
    assert task["createdAt"] == task["updatedAt"]


def test_create_task_defaults_status(client):
    task = _create(client, "Write docs", status="  ")

    assert task["status"] == "TODO"
    assert task["statusDisplay"] == "To Do"


def test_create_task_missing_title(client):
    response = client.post(BASE, json={"description": "no title"})

    assert response.status_code == 400
    body = response.json()
    assert body == {
        "success": False,
        "message": "Validation failed",
        "errors": {"title": "Title is required"},
    }


def test_create_task_oversized_fields(client):
    response = client.post(BASE, json={"title": "x" * 101, "description": "y" * 501})

    assert response.status_code == 400
    assert response.json()["errors"] == {
        "title": "Title must be between 1 and 100 characters",
        "description": "Description cannot exceed 500 characters",
    }


def test_create_task_invalid_status(client):
    response = client.post(BASE, json={"title": "Write docs", "status": "bogus"})

    assert response.status_code == 400
    body = response.json()
    assert body == {"success": False, "message": "Invalid task status: bogus"}


def test_create_task_duplicate_title(client):
    _create(client, "Write docs")

    response = client.post(BASE, json={"title": "Write docs"})

    assert response.status_code == 409
    assert response.json()["message"] == "Task with title 'Write docs' already exists"


def test_get_task(client):
    created = _create(client, "Write docs")

    response = client.get(f"{BASE}/{created['id']}")

    assert response.status_code == 200
    assert response.json()["data"] == created


def test_get_missing_task(client):
    response = client.get(f"{BASE}/5")

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Task not found with ID: 5"}


def test_get_task_with_non_integer_id(client):
    response = client.get(f"{BASE}/abc")

    assert response.status_code == 400
    assert "task_id" in response.json()["errors"]


def test_list_tasks_query_precedence(client):
    _create(client, "Deploy", status="TODO")
    _create(client, "Review deploy script", status="COMPLETED")
    _create(client, "Lunch", status="COMPLETED")

    everything = client.get(BASE).json()["data"]
    by_status = client.get(BASE, params={"status": "completed"}).json()["data"]
    by_search = client.get(BASE, params={"search": "deploy", "status": "completed"}).json()["data"]

    assert [task["title"] for task in everything] == ["Deploy", "Review deploy script", "Lunch"]
    assert [task["title"] for task in by_status] == ["Lunch", "Review deploy script"]
    assert [task["title"] for task in by_search] == ["Deploy", "Review deploy script"]


def test_list_tasks_blank_filters_return_all(client):
    _create(client, "A")
    _create(client, "B")

    response = client.get(BASE, params={"status": " ", "search": ""})

    assert response.status_code == 200
    assert len(response.json()["data"]) == 2


def test_list_tasks_invalid_status(client):
    response = client.get(BASE, params={"status": "someday"})

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid task status: someday"


def test_update_task_partial(client):
    created = _create(client, "A", description="B")

    response = client.put(f"{BASE}/{created['id']}", json={"description": "C"})

    assert response.status_code == 200
    task = response.json()["data"]
    assert task["title"] == "A"
    assert task["description"] == "C"
    assert task["status"] == "TODO"
    assert task["createdAt"] == created["createdAt"]
    assert task["updatedAt"] > created["updatedAt"]


def test_update_task_blank_status_is_ignored(client):
    created = _create(client, "A", status="IN_PROGRESS")

    response = client.put(f"{BASE}/{created['id']}", json={"status": ""})

    assert response.json()["data"]["status"] == "IN_PROGRESS"


def test_update_task_empty_title_fails_validation(client):
    created = _create(client, "A")

    response = client.put(f"{BASE}/{created['id']}", json={"title": ""})

    assert response.status_code == 400
    assert response.json()["errors"] == {"title": "Title must be between 1 and 100 characters"}


def test_update_task_duplicate_title(client):
    _create(client, "A")
    second = _create(client, "B")

    response = client.put(f"{BASE}/{second['id']}", json={"title": "A"})

    assert response.status_code == 409


def test_update_missing_task(client):
    response = client.put(f"{BASE}/9", json={"title": "x"})

    assert response.status_code == 404


def test_delete_task(client):
    created = _create(client, "A")

    response = client.delete(f"{BASE}/{created['id']}")

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "Task deleted successfully",
        "data": None,
    }
    assert client.get(f"{BASE}/{created['id']}").status_code == 404


def test_delete_missing_task(client):
    assert client.delete(f"{BASE}/3").status_code == 404


def test_complete_task(client):
    created = _create(client, "A")

    response = client.patch(f"{BASE}/{created['id']}/complete")

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Task marked as completed"
    assert body["data"]["status"] == "COMPLETED"
    assert body["data"]["statusDisplay"] == "Completed"


def test_complete_missing_task(client):
    assert client.patch(f"{BASE}/3/complete").status_code == 404


def test_statistics(client):
    _create(client, "a")
    _create(client, "b")
    _create(client, "c", status="in_progress")
    _create(client, "d", status="Cancelled")

    response = client.get(f"{BASE}/statistics")

    assert response.status_code == 200
    assert response.json()["data"] == {
        "todoCount": 2,
        "inProgressCount": 1,
        "completedCount": 0,
        "cancelledCount": 1,
        "totalCount": 4,
    }


def test_unexpected_error_is_not_leaked(client):
    failing = AsyncMock()
    failing.get_all_tasks.side_effect = RuntimeError("database password is hunter2")
    app.dependency_overrides[get_task_service] = lambda: failing

    response = client.get(BASE)

    assert response.status_code == 500
    body = response.json()
    assert body == {
        "success": False,
        "message": "An unexpected error occurred. Please try again later.",
    }


def test_health(client):
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Application is healthy"
    assert body["data"]["status"] == "UP"
    assert body["data"]["application"] == "Task Management API"


def test_health_ping(client):
    response = client.get("/api/v1/health/ping")

    assert response.status_code == 200
    assert response.json()["data"] == "pong"


def test_create_task_title_length_ignores_padding(client):
    padded = "  " + "x" * 100

    response = client.post(BASE, json={"title": padded})

    assert response.status_code == 201
    assert response.json()["data"]["title"] == padded


def test_unknown_path_uses_error_envelope(client):
    response = client.get("/api/v1/nothing-here")

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Not Found"}


def test_wrong_method_uses_error_envelope(client):
    response = client.post(f"{BASE}/statistics")

    assert response.status_code == 405
    assert response.json() == {"success": False, "message": "Method Not Allowed"}
    assert "GET" in response.headers["allow"]
