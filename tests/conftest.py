import pathlib
from typing import Any

from collections.abc import Generator
from fastapi import FastAPI
from fastapi.testclient import TestClient
import inject
import pytest

from app.application import create_fastapi_app
from app.config import reset_config, set_config
from app.db.db import Database
from app.services.store.db_store import DbResourceStore
from app.services.store.in_memory_store import InMemoryResourceStore
from app.services.store.resource_store import ResourceStore
from tests.test_config import get_test_config


# Don't search for tests in the helper modules
def pytest_ignore_collect(collection_path: pathlib.Path, config: Any) -> bool:
    return collection_path.name in ("mock_data.py", "utils.py", "test_config.py")


@pytest.fixture
def database() -> Generator[Database, Any, None]:
    db = Database("sqlite:///:memory:")
    db.generate_tables()
    yield db


@pytest.fixture
def in_memory_store() -> InMemoryResourceStore:
    return InMemoryResourceStore()


@pytest.fixture
def db_store(database: Database) -> DbResourceStore:
    return DbResourceStore(database)


@pytest.fixture(params=["memory", "database"])
def store(request: pytest.FixtureRequest, database: Database) -> ResourceStore:
    if request.param == "memory":
        return InMemoryResourceStore()
    return DbResourceStore(database)


@pytest.fixture
def fastapi_app() -> Generator[FastAPI, None, None]:
    set_config(get_test_config())
    app = create_fastapi_app()
    yield app
    inject.clear()
    reset_config()


@pytest.fixture
def api_client(fastapi_app: FastAPI) -> TestClient:
    return TestClient(fastapi_app)
