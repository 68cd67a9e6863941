"""
Notification writer.

Persists in-app notification records. Writes are best effort: a failure
is logged and swallowed so the triggering write and any email still go
through.
"""

import logging
from typing import Optional

from database.document_store import NOTIFICATIONS, SERVER_TIMESTAMP, DocumentStore
from domain.models import Notification

logger = logging.getLogger(__name__)


class NotificationWriter:
    """Writes one notification document per (recipient, event) pair."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def write(self, notification: Notification) -> Optional[str]:
        """
        Store ``notification`` unread, stamped with the server time.

        Returns:
            The new document id, or None if the write failed
        """
        data = notification.to_document()
        data["read"] = False
        data["createdAt"] = SERVER_TIMESTAMP

        try:
            notification_id = await self.store.add(NOTIFICATIONS, data)
        except Exception as e:
            logger.error(
                f"[NOTIFY] Failed to write {notification.type} notification for "
                f"user {notification.user_id}: {e}",
                exc_info=True,
            )
            return None

        logger.info(f"[NOTIFY] {notification.type} notification created for user {notification.user_id}")
        return notification_id
