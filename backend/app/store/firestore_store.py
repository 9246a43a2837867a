"""
Firestore-backed content store (store_backend=firestore).

Collections are created implicitly on first write. The server client has no
offline queue, so ``disable_network`` closes the client and
``enable_network`` re-creates it; operations in between fail as offline.
"""

from typing import List, Optional, Sequence, Tuple
import logging

from google.cloud import firestore
from google.oauth2 import service_account

from app.store.base import (
    SETTINGS_COLLECTION,
    BatchWrite,
    ContentStore,
    Fields,
    StoreOfflineError,
    WriteMode,
)

logger = logging.getLogger(__name__)


class FirestoreDocumentStore(ContentStore):
    """ContentStore over ``google.cloud.firestore.Client``."""

    name = "firestore"

    def __init__(
        self,
        project: Optional[str] = None,
        database: Optional[str] = None,
        credentials_file: Optional[str] = None,
    ):
        self.project = project
        self.database = database
        self.credentials_file = credentials_file
        self._client: Optional[firestore.Client] = None
        self._client = self._connect()

    def _connect(self) -> firestore.Client:
        kwargs = {}
        if self.project:
            kwargs["project"] = self.project
        if self.database:
            kwargs["database"] = self.database
        if self.credentials_file:
            kwargs["credentials"] = service_account.Credentials.from_service_account_file(
                self.credentials_file
            )
        client = firestore.Client(**kwargs)
        logger.info(f"Firestore client ready (project={client.project})")
        return client

    def _require_client(self, operation: str) -> firestore.Client:
        if self._client is None:
            raise StoreOfflineError(f"Failed to {operation} because the client is offline.")
        return self._client

    # ------------------------------------------------------------------
    # ContentStore
    # ------------------------------------------------------------------
    def get_document(self, collection: str, key: str) -> Optional[Fields]:
        client = self._require_client("get document")
        snapshot = client.collection(collection).document(key).get()
        if not snapshot.exists:
            return None
        return snapshot.to_dict() or {}

    def set_document(
        self, collection: str, key: str, fields: Fields, mode: WriteMode = WriteMode.REPLACE
    ) -> None:
        client = self._require_client("set document")
        client.collection(collection).document(key).set(fields, merge=mode == WriteMode.MERGE)

    def add_document(self, collection: str, fields: Fields) -> str:
        client = self._require_client("add document")
        _, ref = client.collection(collection).add(fields)
        return ref.id

    def delete_document(self, collection: str, key: str) -> None:
        client = self._require_client("delete document")
        client.collection(collection).document(key).delete()

    def list_documents(self, collection: str) -> List[Tuple[str, Fields]]:
        client = self._require_client("list documents")
        return [(snap.id, snap.to_dict() or {}) for snap in client.collection(collection).stream()]

    def commit_batch(self, writes: Sequence[BatchWrite]) -> None:
        client = self._require_client("commit batch")
        batch = client.batch()
        for write in writes:
            ref = client.collection(write.collection).document(write.key)
            batch.set(ref, write.fields, merge=write.mode == WriteMode.MERGE)
        batch.commit()

    def enable_network(self) -> None:
        if self._client is None:
            self._client = self._connect()
            logger.info("Firestore network path re-enabled")

    def disable_network(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
            logger.info("Firestore network path disabled")

    def ping(self) -> bool:
        client = self._require_client("ping")
        list(client.collection(SETTINGS_COLLECTION).limit(1).stream())
        return True

    def close(self) -> None:
        self.disable_network()
