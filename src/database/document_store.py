"""Document Store Abstraction.

The backend reads and writes documents through this narrow async interface
so trigger and callable logic never touches a concrete database client.

Supports:
- In-memory storage (tests and local development)
- Any SQLAlchemy async engine (see sql_document_store)
"""

from __future__ import annotations

import copy
import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class _ServerTimestamp:
    """Sentinel replaced by the store's current time on write."""

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


# Collection names
USERS = "users"
REPORTS = "reports"
ANNOUNCEMENTS = "announcements"
NOTIFICATIONS = "notifications"
EMAIL_VERIFICATIONS = "emailVerifications"
PASSWORD_CHANGE_VERIFICATIONS = "passwordChangeVerifications"
PROCESSED_EVENTS = "processedEvents"


class DocumentNotFoundError(LookupError):
    """Raised when updating a document that does not exist."""

    def __init__(self, collection: str, doc_id: str):
        self.collection = collection
        self.doc_id = doc_id
        super().__init__(f"{collection}/{doc_id} not found")


@dataclass
class DocumentSnapshot:
    """A document id together with its data."""
    id: str
    data: Dict[str, Any] = field(default_factory=dict)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DocumentStore(ABC):
    """Abstract base class for document stores."""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or utcnow

    def now(self) -> datetime:
        """Current server time, used to resolve SERVER_TIMESTAMP."""
        return self._clock()

    def _resolve(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Copy ``data`` replacing SERVER_TIMESTAMP sentinels (top level only)."""
        now = self.now()
        return {
            key: (now if value is SERVER_TIMESTAMP else copy.deepcopy(value))
            for key, value in data.items()
        }

    @staticmethod
    def new_id() -> str:
        return uuid.uuid4().hex

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Return the document data, or None if it does not exist."""

    @abstractmethod
    async def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Create or overwrite a document."""

    @abstractmethod
    async def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        """
        Merge ``fields`` into an existing document.

        Raises:
            DocumentNotFoundError: If the document does not exist
        """

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> None:
        """Delete a document. Deleting a missing document is a no-op."""

    @abstractmethod
    async def query(self, collection: str, **equals: Any) -> List[DocumentSnapshot]:
        """Return every document whose fields equal the given values."""

    async def add(self, collection: str, data: Dict[str, Any]) -> str:
        """Create a document with a generated id and return the id."""
        doc_id = self.new_id()
        await self.set(collection, doc_id, data)
        return doc_id

    async def exists(self, collection: str, doc_id: str) -> bool:
        return await self.get(collection, doc_id) is not None


def matches(data: Dict[str, Any], equals: Dict[str, Any]) -> bool:
    """Equality filter shared by the stores."""
    return all(data.get(key) == value for key, value in equals.items())


class InMemoryDocumentStore(DocumentStore):
    """
    Dictionary-backed store.

    Holds ``{collection: {doc_id: data}}``. Returned data is always a copy,
    so callers cannot mutate stored state by accident.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        super().__init__(clock)
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def _collection(self, collection: str) -> Dict[str, Dict[str, Any]]:
        return self._collections.setdefault(collection, {})

    def seed(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Synchronously place a document (fixtures and local bootstrapping)."""
        self._collection(collection)[doc_id] = self._resolve(data)

    def dump(self, collection: str) -> Dict[str, Dict[str, Any]]:
        """Synchronous copy of a whole collection."""
        return copy.deepcopy(self._collection(collection))

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        data = self._collection(collection).get(doc_id)
        return copy.deepcopy(data) if data is not None else None

    async def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        self._collection(collection)[doc_id] = self._resolve(data)

    async def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        docs = self._collection(collection)
        if doc_id not in docs:
            raise DocumentNotFoundError(collection, doc_id)
        docs[doc_id].update(self._resolve(fields))

    async def delete(self, collection: str, doc_id: str) -> None:
        self._collection(collection).pop(doc_id, None)

    async def query(self, collection: str, **equals: Any) -> List[DocumentSnapshot]:
        return [
            DocumentSnapshot(id=doc_id, data=copy.deepcopy(data))
            for doc_id, data in self._collection(collection).items()
            if matches(data, equals)
        ]
