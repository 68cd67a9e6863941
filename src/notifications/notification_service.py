"""
Notification inbox service.

Read-side operations over a user's own in-app notifications: list, unread
count, mark read, delete. Records are never edited except for ``read``.
"""

import logging
from datetime import datetime, timezone
from typing import List

from database.document_store import NOTIFICATIONS, DocumentStore
from domain.models import Notification
from security.api_errors import APIError, ErrorCode

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50
_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _sort_key(notification: Notification) -> datetime:
    created = notification.created_at
    if created is None:
        return _EPOCH
    if created.tzinfo is None:
        return created.replace(tzinfo=timezone.utc)
    return created


class NotificationInboxService:
    """Per-user notification inbox."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def _all(self, uid: str) -> List[Notification]:
        snapshots = await self.store.query(NOTIFICATIONS, userId=uid)
        return [Notification.from_document(s.id, s.data) for s in snapshots]

    async def _owned(self, uid: str, notification_id: str) -> Notification:
        data = await self.store.get(NOTIFICATIONS, notification_id)
        if data is None:
            raise APIError(ErrorCode.NOT_FOUND, "Notification not found")
        notification = Notification.from_document(notification_id, data)
        if notification.user_id != uid:
            raise APIError(ErrorCode.PERMISSION_DENIED, "Notification belongs to another user")
        return notification

    async def list_notifications(self, uid: str, limit: int = DEFAULT_LIMIT) -> List[Notification]:
        """Newest first."""
        notifications = await self._all(uid)
        notifications.sort(key=_sort_key, reverse=True)
        return notifications[:limit]

    async def unread_count(self, uid: str) -> int:
        return len(await self.store.query(NOTIFICATIONS, userId=uid, read=False))

    async def mark_read(self, uid: str, notification_id: str) -> None:
        await self._owned(uid, notification_id)
        await self.store.update(NOTIFICATIONS, notification_id, {"read": True})

    async def mark_all_read(self, uid: str) -> int:
        unread = await self.store.query(NOTIFICATIONS, userId=uid, read=False)
        for snapshot in unread:
            await self.store.update(NOTIFICATIONS, snapshot.id, {"read": True})
        logger.info(f"Marked {len(unread)} notifications read for user {uid}")
        return len(unread)

    async def delete(self, uid: str, notification_id: str) -> None:
        await self._owned(uid, notification_id)
        await self.store.delete(NOTIFICATIONS, notification_id)

    async def delete_all(self, uid: str) -> int:
        snapshots = await self.store.query(NOTIFICATIONS, userId=uid)
        for snapshot in snapshots:
            await self.store.delete(NOTIFICATIONS, snapshot.id)
        logger.info(f"Deleted {len(snapshots)} notifications for user {uid}")
        return len(snapshots)
