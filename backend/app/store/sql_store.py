"""
SQL-backed content store.

Stores every document as a JSON field map in the ``content_documents`` table.
Mirrors the hosted client's offline mode: after ``disable_network()`` every
operation fails with ``StoreOfflineError`` until ``enable_network()``.
"""

from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence, Tuple
import logging
import uuid

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from app.db.database import create_session_factory, init_db
from app.db.models import StoredDocument
from app.store.base import BatchWrite, ContentStore, Fields, StoreOfflineError, WriteMode

logger = logging.getLogger(__name__)


def generate_document_key() -> str:
    """20-character key, the same length the hosted store generates."""
    return uuid.uuid4().hex[:20]


class SQLDocumentStore(ContentStore):
    """ContentStore over a SQLAlchemy engine."""

    name = "sql"

    def __init__(self, engine: Engine, create_schema: bool = True):
        self.engine = engine
        self._session_factory = create_session_factory(engine)
        self._network_enabled = True
        if create_schema:
            init_db(engine)

    # ------------------------------------------------------------------
    # Session handling
    # ------------------------------------------------------------------
    @contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        if not self._network_enabled:
            raise StoreOfflineError(f"Failed to {operation} because the client is offline.")
        db = self._session_factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    @staticmethod
    def _write(db: Session, collection: str, key: str, fields: Fields, mode: WriteMode) -> None:
        doc = db.get(StoredDocument, (collection, key))
        if doc is None:
            db.add(StoredDocument(collection=collection, key=key, fields=dict(fields)))
        elif mode == WriteMode.MERGE:
            doc.fields = {**(doc.fields or {}), **fields}
        else:
            doc.fields = dict(fields)

    # ------------------------------------------------------------------
    # ContentStore
    # ------------------------------------------------------------------
    def get_document(self, collection: str, key: str) -> Optional[Fields]:
        with self._session("get document") as db:
            doc = db.get(StoredDocument, (collection, key))
            return dict(doc.fields or {}) if doc is not None else None

    def set_document(
        self, collection: str, key: str, fields: Fields, mode: WriteMode = WriteMode.REPLACE
    ) -> None:
        with self._session("set document") as db:
            self._write(db, collection, key, fields, mode)

    def add_document(self, collection: str, fields: Fields) -> str:
        key = generate_document_key()
        with self._session("add document") as db:
            db.add(StoredDocument(collection=collection, key=key, fields=dict(fields)))
        return key

    def delete_document(self, collection: str, key: str) -> None:
        with self._session("delete document") as db:
            doc = db.get(StoredDocument, (collection, key))
            if doc is not None:
                db.delete(doc)

    def list_documents(self, collection: str) -> List[Tuple[str, Fields]]:
        with self._session("list documents") as db:
            rows = (
                db.query(StoredDocument)
                .filter(StoredDocument.collection == collection)
                .order_by(StoredDocument.created_at, StoredDocument.key)
                .all()
            )
            return [(row.key, dict(row.fields or {})) for row in rows]

    def commit_batch(self, writes: Sequence[BatchWrite]) -> None:
        with self._session("commit batch") as db:
            for write in writes:
                self._write(db, write.collection, write.key, write.fields, write.mode)
                # Flush per write so a later write to the same key sees this one
                db.flush()

    def enable_network(self) -> None:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        if not self._network_enabled:
            logger.info("SQL store network path re-enabled")
        self._network_enabled = True

    def disable_network(self) -> None:
        self._network_enabled = False
        logger.info("SQL store network path disabled")

    def ping(self) -> bool:
        with self._session("ping") as db:
            db.execute(text("SELECT 1"))
        return True

    def close(self) -> None:
        self.engine.dispose()
