"""
Store construction and FastAPI dependencies.
The store client is built once in the application lifespan and kept on
``app.state``; every request reuses it.
"""

from fastapi import Request
import logging

from app.core.config import Settings, settings as default_settings
from app.store.base import ContentStore
from app.store.guard import ConnectivityGuard

logger = logging.getLogger(__name__)


def create_store(config: Settings = default_settings) -> ContentStore:
    """Build the configured content store backend."""
    backend = config.store_backend.lower()
    if backend == "sql":
        from app.db.database import create_db_engine
        from app.store.sql_store import SQLDocumentStore
        return SQLDocumentStore(create_db_engine(config.database_url))
    if backend == "firestore":
        from app.store.firestore_store import FirestoreDocumentStore
        return FirestoreDocumentStore(
            project=config.firestore_project,
            database=config.firestore_database,
            credentials_file=config.firestore_credentials_file,
        )
    raise ValueError(f"Unknown store_backend: {config.store_backend!r} (expected 'sql' or 'firestore')")


def create_guard(store: ContentStore, config: Settings = default_settings) -> ConnectivityGuard:
    return ConnectivityGuard(
        store,
        enable_timeout=config.network_enable_timeout,
        write_timeout=config.store_write_timeout,
    )


def get_store(request: Request) -> ContentStore:
    """Dependency injection for the process-wide store client."""
    return request.app.state.store


def get_guard(request: Request) -> ConnectivityGuard:
    return request.app.state.guard
