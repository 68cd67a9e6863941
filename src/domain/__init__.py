"""
Domain layer for the pollution report backend.

Document models for users, reports, announcements, notifications and
verification codes, plus the document change envelope delivered by
storage triggers.
"""

from .events import DocumentChange, EntityType, Operation
from .models import (
    AdminResponse,
    Announcement,
    Comment,
    DocumentModel,
    Notification,
    NotificationSettings,
    Report,
    ReportStatus,
    User,
    UserRole,
    UserSettings,
    VerificationRecord,
)
from .results import CallableResult

__all__ = [
    "CallableResult",
    "DocumentChange",
    "EntityType",
    "Operation",
    "AdminResponse",
    "Announcement",
    "Comment",
    "DocumentModel",
    "Notification",
    "NotificationSettings",
    "Report",
    "ReportStatus",
    "User",
    "UserRole",
    "UserSettings",
    "VerificationRecord",
]
