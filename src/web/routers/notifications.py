"""
Notification Inbox Endpoints

The authenticated caller's own in-app notifications.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from domain.models import Notification
from notifications.notification_service import DEFAULT_LIMIT, NotificationInboxService
from rbac.context import CallerContext
from rbac.dependencies import require_caller

from ..dependencies import get_inbox

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])


class UnreadCount(BaseModel):
    unread: int


class BulkResult(BaseModel):
    success: bool = True
    count: int


def _serialize(notification: Notification) -> dict:
    return notification.model_dump(by_alias=True, mode="json")


@router.get("")
async def list_notifications(
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=200),
    caller: CallerContext = Depends(require_caller),
    inbox: NotificationInboxService = Depends(get_inbox),
) -> List[dict]:
    notifications = await inbox.list_notifications(caller.uid, limit=limit)
    return [_serialize(n) for n in notifications]


@router.get("/unread-count", response_model=UnreadCount)
async def unread_count(
    caller: CallerContext = Depends(require_caller),
    inbox: NotificationInboxService = Depends(get_inbox),
):
    return UnreadCount(unread=await inbox.unread_count(caller.uid))


@router.post("/read-all", response_model=BulkResult)
async def mark_all_read(
    caller: CallerContext = Depends(require_caller),
    inbox: NotificationInboxService = Depends(get_inbox),
):
    return BulkResult(count=await inbox.mark_all_read(caller.uid))


@router.post("/{notification_id}/read")
async def mark_read(
    notification_id: str,
    caller: CallerContext = Depends(require_caller),
    inbox: NotificationInboxService = Depends(get_inbox),
):
    await inbox.mark_read(caller.uid, notification_id)
    return {"success": True}


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: str,
    caller: CallerContext = Depends(require_caller),
    inbox: NotificationInboxService = Depends(get_inbox),
):
    await inbox.delete(caller.uid, notification_id)
    return {"success": True}


@router.delete("", response_model=BulkResult)
async def delete_all_notifications(
    caller: CallerContext = Depends(require_caller),
    inbox: NotificationInboxService = Depends(get_inbox),
):
    return BulkResult(count=await inbox.delete_all(caller.uid))
