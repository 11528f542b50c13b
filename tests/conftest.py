import os

# Read by task_store.create_task_store when the app modules are imported
os.environ.setdefault("TASK_STORE_BACKEND", "memory")
# Keep a developer's local .env out of the test run
os.environ.setdefault("APP_ENV", "production")

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from task_api.app import app
from task_api.services.task_service import TaskService, get_task_service
from task_api.services.task_store import InMemoryTaskStore


class FakeClock:
    """Returns a strictly increasing UTC timestamp on every call."""

    def __init__(self, start=None, step=timedelta(seconds=1)):
        self.current = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        self.step = step

    def __call__(self):
        now = self.current
        self.current = self.current + self.step
        return now


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def store(clock):
    return InMemoryTaskStore(clock=clock)


@pytest.fixture()
def service(store):
    return TaskService(task_store=store)


@pytest.fixture()
def client(service):
    """TestClient wired to a service over a fresh in-memory store."""
    app.dependency_overrides[get_task_service] = lambda: service
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
