"""
Document storage layer.

The managed document database is reached only through ``DocumentStore``.
``InMemoryDocumentStore`` backs tests and local development;
``SQLDocumentStore`` keeps documents as JSON rows in any SQLAlchemy async
database.
"""

from .document_store import (
    ANNOUNCEMENTS,
    EMAIL_VERIFICATIONS,
    NOTIFICATIONS,
    PASSWORD_CHANGE_VERIFICATIONS,
    PROCESSED_EVENTS,
    REPORTS,
    SERVER_TIMESTAMP,
    USERS,
    DocumentNotFoundError,
    DocumentSnapshot,
    DocumentStore,
    InMemoryDocumentStore,
)

__all__ = [
    "ANNOUNCEMENTS",
    "EMAIL_VERIFICATIONS",
    "NOTIFICATIONS",
    "PASSWORD_CHANGE_VERIFICATIONS",
    "PROCESSED_EVENTS",
    "REPORTS",
    "SERVER_TIMESTAMP",
    "USERS",
    "DocumentNotFoundError",
    "DocumentSnapshot",
    "DocumentStore",
    "InMemoryDocumentStore",
]
