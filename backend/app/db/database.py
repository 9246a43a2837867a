"""
Database engine construction for the SQL document store.
SQLite gets a single shared connection (file or in-memory); PostgreSQL
and other servers get a pre-pinged, recycled QueuePool.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool
import logging
import os

from app.core.config import settings
from app.db.models import Base

logger = logging.getLogger(__name__)

_BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))


def _resolve_sqlite_url(database_url: str) -> str:
    """Resolve ./relative SQLite paths against the backend directory."""
    db_path = database_url.replace("sqlite:///", "", 1)
    if database_url.startswith("sqlite:///") and db_path.startswith("./"):
        return f"sqlite:///{os.path.join(_BACKEND_DIR, db_path[2:])}"
    return database_url


def create_db_engine(database_url: str = None) -> Engine:
    """Build the engine for ``database_url`` (defaults to settings.database_url)."""
    database_url = database_url or settings.database_url

    if database_url.startswith("sqlite"):
        # SQLite: StaticPool shares one connection across threads
        engine = create_engine(
            _resolve_sqlite_url(database_url),
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,
        )

        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    # PostgreSQL / MySQL: production pooling
    return create_engine(
        database_url,
        poolclass=QueuePool,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_recycle=settings.database_pool_recycle,
        pool_pre_ping=settings.database_pool_pre_ping,
        pool_timeout=30,
        echo=False,
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Create the document table if it does not exist."""
    Base.metadata.create_all(bind=engine)
    logger.info(f"Document table ready on {engine.url.render_as_string(hide_password=True)}")
