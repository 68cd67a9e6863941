"""Pytest configuration and fixtures for test suite."""

import os
import sys
from pathlib import Path
from typing import Any, Dict

import pytest

# Set test environment BEFORE any other imports
os.environ.setdefault("APP_ENVIRONMENT", "test")
os.environ.setdefault("DB_DRIVER", "memory")
os.environ["EMAIL_USER"] = ""
os.environ["EMAIL_PASS"] = ""

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from database.document_store import ANNOUNCEMENTS, REPORTS, USERS, InMemoryDocumentStore  # noqa: E402
from notifications.email_provider import set_email_provider  # noqa: E402
from notifications.email_triggers import EmailTriggerService  # noqa: E402

from factories import (  # noqa: E402
    FakeClock,
    RecordingEmailProvider,
    make_announcement,
    make_report,
    make_user,
)


@pytest.fixture(autouse=True)
def reset_email_provider():
    """Never let a test pick up a real transport."""
    set_email_provider(None)
    yield
    set_email_provider(None)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock) -> InMemoryDocumentStore:
    return InMemoryDocumentStore(clock=clock)


@pytest.fixture
def email_provider() -> RecordingEmailProvider:
    return RecordingEmailProvider()


@pytest.fixture
def email_triggers(email_provider) -> EmailTriggerService:
    return EmailTriggerService(provider=email_provider)


@pytest.fixture
def seed(store):
    """Seed helper: ``seed.user(uid, **fields)``, ``seed.report(id, **fields)``."""

    class Seeder:
        def user(self, uid: str, **fields: Any) -> Dict[str, Any]:
            data = make_user(**fields)
            store.seed(USERS, uid, data)
            return data

        def report(self, report_id: str, **fields: Any) -> Dict[str, Any]:
            data = make_report(**fields)
            store.seed(REPORTS, report_id, data)
            return data

        def announcement(self, announcement_id: str, **fields: Any) -> Dict[str, Any]:
            data = make_announcement(**fields)
            store.seed(ANNOUNCEMENTS, announcement_id, data)
            return data

    return Seeder()
