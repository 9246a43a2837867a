"""Shared fixtures: an in-memory SQL document store and an app client bound to it."""

import os

# Must be set before app.core.config is imported
os.environ.setdefault("STORE_BACKEND", "sql")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADMIN_API_KEY"] = "test-admin-key"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["NETWORK_ENABLE_TIMEOUT"] = "5"

import pytest
from fastapi.testclient import TestClient

from app.db.database import create_db_engine
from app.store.guard import ConnectivityGuard
from app.store.sql_store import SQLDocumentStore

ADMIN_HEADERS = {"X-API-Key": "test-admin-key"}


@pytest.fixture
def store():
    store = SQLDocumentStore(create_db_engine("sqlite://"))
    yield store
    store.close()


@pytest.fixture
def guard(store):
    return ConnectivityGuard(store, enable_timeout=5.0)


@pytest.fixture
def client():
    from app.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_headers():
    return dict(ADMIN_HEADERS)
