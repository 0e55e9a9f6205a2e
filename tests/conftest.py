import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import create_app
from app.service import TaskService

from .fakes import InMemoryTaskStore


@pytest.fixture()
def store() -> InMemoryTaskStore:
    return InMemoryTaskStore()


@pytest.fixture()
def service(store: InMemoryTaskStore) -> TaskService:
    return TaskService(store)


@pytest.fixture()
def client(store: InMemoryTaskStore):
    app = create_app(Settings(), store=store)
    with TestClient(app) as c:
        yield c
