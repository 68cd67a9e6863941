"""
Document Trigger Endpoint

The hosting platform delivers every qualifying report/announcement write
here as a ``DocumentChange``. The response summarises what was dispatched;
notification failures never turn into an error response.
"""

import logging
import secrets
from typing import Optional

from fastapi import APIRouter, Depends, Header

from config.settings import Settings
from domain.events import DocumentChange
from notifications.dispatcher import DispatchResult, NotificationDispatcher
from security.api_errors import APIError, ErrorCode

from ..dependencies import get_dispatcher, get_settings_dep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/triggers", tags=["Triggers"])


async def verify_trigger_secret(
    x_trigger_secret: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings_dep),
) -> None:
    """
    Check the shared secret.

    Without a configured secret the check is skipped in development and
    every delivery is refused in production.
    """
    expected = settings.trigger_secret
    if not expected:
        if settings.is_production:
            logger.error("Rejecting trigger delivery: APP_TRIGGER_SECRET is not configured")
            raise APIError(ErrorCode.UNAUTHENTICATED, "Invalid trigger secret")
        return
    if not x_trigger_secret or not secrets.compare_digest(x_trigger_secret, expected):
        raise APIError(ErrorCode.UNAUTHENTICATED, "Invalid trigger secret")


@router.post(
    "/documents",
    response_model=DispatchResult,
    dependencies=[Depends(verify_trigger_secret)],
)
async def on_document_change(
    change: DocumentChange,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> DispatchResult:
    """Classify a document change and fan out its notifications."""
    return await dispatcher.handle_change(change)
