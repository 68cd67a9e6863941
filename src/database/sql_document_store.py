"""SQLAlchemy-backed Document Store.

Keeps every document as a JSON row in a single ``documents`` table keyed by
(collection, doc_id). Works with any SQLAlchemy async driver; SQLite via
aiosqlite for development, PostgreSQL via asyncpg for self-hosting.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from config.database import DatabaseSettings, get_database_settings

from .document_store import (
    DocumentNotFoundError,
    DocumentSnapshot,
    DocumentStore,
    matches,
)

logger = logging.getLogger(__name__)


CREATE_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS documents (
        collection VARCHAR(128) NOT NULL,
        doc_id VARCHAR(128) NOT NULL,
        data TEXT NOT NULL,
        PRIMARY KEY (collection, doc_id)
    )
"""


def _encode(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def create_engine(settings: Optional[DatabaseSettings] = None) -> AsyncEngine:
    """
    Create an async SQLAlchemy engine for the document table.

    Args:
        settings: Database settings. If None, loads from environment.

    Returns:
        AsyncEngine: Configured async engine instance.
    """
    settings = settings or get_database_settings()

    logger.info(
        "Creating async document store engine",
        extra={"driver": settings.driver, "sqlite": settings.is_sqlite},
    )

    kwargs: Dict[str, Any] = {}
    if settings.is_sqlite:
        kwargs["poolclass"] = NullPool

    engine = create_async_engine(
        settings.async_url,
        echo=settings.echo_sql,
        connect_args=settings.get_connect_args(),
        **kwargs,
    )

    if settings.is_sqlite:
        @event.listens_for(engine.sync_engine, "connect")
        def on_connect(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.close()

    return engine


class SQLDocumentStore(DocumentStore):
    """
    Document store on top of an SQLAlchemy async engine.

    Call ``create_schema()`` once before use.
    """

    def __init__(self, engine: AsyncEngine, clock: Optional[Callable[[], datetime]] = None):
        super().__init__(clock)
        self._engine = engine

    @classmethod
    def from_settings(cls, settings: Optional[DatabaseSettings] = None) -> "SQLDocumentStore":
        return cls(create_engine(settings))

    async def create_schema(self) -> None:
        async with self._engine.begin() as conn:
            await conn.execute(text(CREATE_TABLE_SQL))

    async def dispose(self) -> None:
        await self._engine.dispose()

    def _dumps(self, data: Dict[str, Any]) -> str:
        return json.dumps(data, default=_encode)

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        async with self._engine.connect() as conn:
            result = await conn.execute(
                text("SELECT data FROM documents WHERE collection = :collection AND doc_id = :doc_id"),
                {"collection": collection, "doc_id": doc_id},
            )
            row = result.first()
        return json.loads(row.data) if row else None

    async def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        async with self._engine.begin() as conn:
            await conn.execute(
                text("""
                    INSERT INTO documents (collection, doc_id, data)
                    VALUES (:collection, :doc_id, :data)
                    ON CONFLICT (collection, doc_id) DO UPDATE SET data = excluded.data
                """),
                {
                    "collection": collection,
                    "doc_id": doc_id,
                    "data": self._dumps(self._resolve(data)),
                },
            )

    async def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        async with self._engine.begin() as conn:
            result = await conn.execute(
                text("SELECT data FROM documents WHERE collection = :collection AND doc_id = :doc_id"),
                {"collection": collection, "doc_id": doc_id},
            )
            row = result.first()
            if row is None:
                raise DocumentNotFoundError(collection, doc_id)

            merged = json.loads(row.data)
            merged.update(self._resolve(fields))
            await conn.execute(
                text("UPDATE documents SET data = :data WHERE collection = :collection AND doc_id = :doc_id"),
                {"collection": collection, "doc_id": doc_id, "data": self._dumps(merged)},
            )

    async def delete(self, collection: str, doc_id: str) -> None:
        async with self._engine.begin() as conn:
            await conn.execute(
                text("DELETE FROM documents WHERE collection = :collection AND doc_id = :doc_id"),
                {"collection": collection, "doc_id": doc_id},
            )

    async def query(self, collection: str, **equals: Any) -> List[DocumentSnapshot]:
        # Equality filters run in Python so JSON fields need no dialect-specific operators
        async with self._engine.connect() as conn:
            result = await conn.execute(
                text("SELECT doc_id, data FROM documents WHERE collection = :collection ORDER BY doc_id"),
                {"collection": collection},
            )
            rows = result.all()

        snapshots = []
        for row in rows:
            data = json.loads(row.data)
            if matches(data, equals):
                snapshots.append(DocumentSnapshot(id=row.doc_id, data=data))
        return snapshots
