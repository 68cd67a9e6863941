"""
Tests for the document stores.

The same behaviour is checked against the in-memory store and the
SQLAlchemy store on a temporary SQLite file.
"""

from datetime import datetime, timezone

import pytest

from config.database import DatabaseSettings
from database.document_store import (
    SERVER_TIMESTAMP,
    DocumentNotFoundError,
    InMemoryDocumentStore,
)
from database.sql_document_store import SQLDocumentStore, create_engine
from domain.models import VerificationRecord

from factories import FIXED_NOW, FakeClock


class TestInMemoryStore:

    @pytest.mark.asyncio
    async def test_set_get_roundtrip_is_a_copy(self):
        store = InMemoryDocumentStore()
        data = {"tags": ["a"]}
        await store.set("things", "t1", data)
        data["tags"].append("b")

        stored = await store.get("things", "t1")
        stored["tags"].append("c")

        assert (await store.get("things", "t1")) == {"tags": ["a"]}

    @pytest.mark.asyncio
    async def test_server_timestamp(self):
        store = InMemoryDocumentStore(clock=FakeClock())
        await store.set("things", "t1", {"createdAt": SERVER_TIMESTAMP})

        assert (await store.get("things", "t1"))["createdAt"] == FIXED_NOW

    @pytest.mark.asyncio
    async def test_update_missing_raises(self):
        store = InMemoryDocumentStore()
        with pytest.raises(DocumentNotFoundError):
            await store.update("things", "nope", {"a": 1})

    @pytest.mark.asyncio
    async def test_query_and_add(self):
        store = InMemoryDocumentStore()
        first = await store.add("things", {"kind": "x"})
        await store.add("things", {"kind": "y"})

        [match] = await store.query("things", kind="x")
        assert match.id == first
        assert len(await store.query("things")) == 2


class TestSQLDocumentStore:
    """Tests for the SQLAlchemy store on SQLite."""

    @pytest.fixture
    def db_settings(self, tmp_path):
        return DatabaseSettings(driver="sqlite+aiosqlite", sqlite_path=tmp_path / "documents.db")

    @pytest.mark.asyncio
    async def test_crud(self, db_settings):
        store = SQLDocumentStore.from_settings(db_settings)
        await store.create_schema()
        try:
            await store.set("users", "u1", {"email": "ana@example.com", "role": "user"})
            await store.update("users", "u1", {"emailVerified": True})

            assert await store.get("users", "u1") == {
                "email": "ana@example.com", "role": "user", "emailVerified": True,
            }
            assert await store.exists("users", "u1")

            await store.delete("users", "u1")
            assert await store.get("users", "u1") is None
        finally:
            await store.dispose()

    @pytest.mark.asyncio
    async def test_overwrite_and_query(self, db_settings):
        store = SQLDocumentStore.from_settings(db_settings)
        await store.create_schema()
        try:
            await store.set("notifications", "n1", {"userId": "u1", "read": False})
            await store.set("notifications", "n2", {"userId": "u1", "read": True})
            await store.set("notifications", "n2", {"userId": "u2", "read": False})

            unread = await store.query("notifications", userId="u1", read=False)
            assert [s.id for s in unread] == ["n1"]
            assert len(await store.query("notifications", read=False)) == 2
        finally:
            await store.dispose()

    @pytest.mark.asyncio
    async def test_update_missing_raises(self, db_settings):
        store = SQLDocumentStore.from_settings(db_settings)
        await store.create_schema()
        try:
            with pytest.raises(DocumentNotFoundError):
                await store.update("users", "ghost", {"a": 1})
        finally:
            await store.dispose()

    @pytest.mark.asyncio
    async def test_timestamps_survive_as_datetimes(self, db_settings):
        """Stored ISO strings validate back into aware datetimes."""
        store = SQLDocumentStore(create_engine(db_settings), clock=FakeClock())
        await store.create_schema()
        try:
            await store.set("emailVerifications", "u1", {
                "code": "123456",
                "expiresAt": datetime(2026, 3, 14, 9, 40, tzinfo=timezone.utc),
                "createdAt": SERVER_TIMESTAMP,
            })
            record = VerificationRecord.from_document(None, await store.get("emailVerifications", "u1"))

            assert record.expires_at == datetime(2026, 3, 14, 9, 40, tzinfo=timezone.utc)
            assert record.created_at == FIXED_NOW
        finally:
            await store.dispose()
