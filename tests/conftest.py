import os

import pytest
from fastapi.testclient import TestClient

# Memory backend and quiet logs for the whole test run
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from taskboard.main import app  # noqa: E402
from taskboard.repositories import InMemoryRepository, get_repository  # noqa: E402
from taskboard.service import TaskService  # noqa: E402

from .helpers import StepClock  # noqa: E402


@pytest.fixture()
def repo():
    return InMemoryRepository()


@pytest.fixture()
def service(repo):
    return TaskService(repo, "alice", clock=StepClock())


@pytest.fixture()
def client(repo):
    app.dependency_overrides[get_repository] = lambda: repo
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
