"""
Content store interface.

The hosted document database is organised into named collections of
key-addressed documents, each holding a field map. Every backend implements
this interface; repositories only ever talk to a ``ContentStore`` instance
that is created once at startup and passed in explicitly.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

# Collection names
PACKAGES_COLLECTION = "packages"
TESTIMONIALS_COLLECTION = "testimonials"
HIGHLIGHTS_COLLECTION = "destination-highlights"
SETTINGS_COLLECTION = "settings"

Fields = Dict[str, Any]


class WriteMode(str, Enum):
    REPLACE = "replace"  # discard every prior field not in the write
    MERGE = "merge"  # overwrite only the fields present in the write


class StoreOfflineError(ConnectionError):
    """Raised by a backend whose network path is disabled."""


@dataclass
class BatchWrite:
    """One set-operation inside ``commit_batch``."""

    collection: str
    key: str
    fields: Fields = field(default_factory=dict)
    mode: WriteMode = WriteMode.REPLACE


class ContentStore(ABC):
    """Document database client."""

    name = "abstract"

    @abstractmethod
    def get_document(self, collection: str, key: str) -> Optional[Fields]:
        """Return the document's fields, or None when it does not exist."""

    @abstractmethod
    def set_document(
        self, collection: str, key: str, fields: Fields, mode: WriteMode = WriteMode.REPLACE
    ) -> None:
        """Create or overwrite the document at ``key``."""

    @abstractmethod
    def add_document(self, collection: str, fields: Fields) -> str:
        """Create a document under a store-generated key and return the key."""

    @abstractmethod
    def delete_document(self, collection: str, key: str) -> None:
        """Delete the document; deleting a missing key is not an error."""

    @abstractmethod
    def list_documents(self, collection: str) -> List[Tuple[str, Fields]]:
        """Return every (key, fields) pair in the collection."""

    @abstractmethod
    def enable_network(self) -> None:
        """(Re)enable the network path. Idempotent."""

    @abstractmethod
    def disable_network(self) -> None:
        """Put the client in offline mode."""

    @abstractmethod
    def commit_batch(self, writes: Sequence[BatchWrite]) -> None:
        """Apply all writes atomically."""

    def ping(self) -> bool:
        """Cheap reachability probe used by health checks."""
        self.list_documents(SETTINGS_COLLECTION)
        return True

    def close(self) -> None:
        """Release client resources at shutdown."""
