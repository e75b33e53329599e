"""
Test configuration and fixtures for the hit services.
This centralizes all test setup, making individual tests clean.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine

from hit_counter.app import create_app
from hit_counter.config import ServiceName
from hit_counter.storage.strategies import (
    DocumentHitStorage,
    InMemoryHitStorage,
    RelationalHitStorage,
)

from tests.helpers import FakeRedis, make_settings


@pytest.fixture
def memory_storage():
    return InMemoryHitStorage()


@pytest.fixture
def document_storage():
    return DocumentHitStorage(FakeRedis(), container="test:hits")


@pytest.fixture
def relational_storage(tmp_path):
    """
    Relational storage on a fresh SQLite file for each test.
    """
    engine = create_engine(
        f"sqlite:///{tmp_path / 'hits.db'}",
        connect_args={"check_same_thread": False}
    )
    storage = RelationalHitStorage(engine).connect()
    try:
        yield storage
    finally:
        engine.dispose()


@pytest.fixture(params=["memory", "document", "relational"])
def any_storage(request):
    """Each storage backend in turn, for behaviour all of them share"""
    return request.getfixturevalue(f"{request.param}_storage")


@pytest.fixture
def sqlite_url(tmp_path):
    return f"sqlite:///{tmp_path / 'shared.db'}"


@pytest.fixture
def logger_client():
    """Hit-logger app with no store configured (in-memory)"""
    app = create_app(ServiceName.HIT_LOGGER, make_settings())
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def counter_client():
    """Hit-counter app with no store configured (in-memory)"""
    app = create_app(ServiceName.HIT_COUNTER, make_settings())
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
