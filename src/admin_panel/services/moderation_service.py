"""
Moderation Service - rejection warnings.

An admin rejecting an off-topic report can send the reporter a warning
email. The warning carries compliance intent, so it ignores the
reporter's notification preferences and verification state; it only needs
an address.
"""

import logging
from typing import Optional

from database.document_store import USERS, DocumentStore
from domain.models import User
from domain.results import CallableResult
from notifications.eligibility import EmailCategory, is_email_eligible
from notifications.email_triggers import EmailTriggerService
from security.api_errors import APIError, ErrorCode

from .admin_access import load_admin

logger = logging.getLogger(__name__)

DEFAULT_REJECTION_REASON = "Content not related to pollution reporting"


class ModerationService:
    """Service for admin moderation actions."""

    def __init__(self, store: DocumentStore, email_triggers: Optional[EmailTriggerService] = None):
        self.store = store
        self.email_triggers = email_triggers or EmailTriggerService()

    async def send_rejection_warning(
        self,
        caller_uid: str,
        report_id: Optional[str],
        reporter_id: Optional[str],
        report_location: Optional[str] = None,
        report_type: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> CallableResult:
        """
        Email a rejection warning to a report's author.

        Returns ``results.email`` = whether the email went out.
        """
        await load_admin(self.store, caller_uid, "Only admins can send rejection notices")

        if not report_id or not reporter_id:
            raise APIError(ErrorCode.INVALID_ARGUMENT, "reportId and reporterId are required")

        reporter = User.from_document(reporter_id, await self.store.get(USERS, reporter_id))

        sent = False
        if is_email_eligible(reporter, EmailCategory.REJECTION_WARNING):
            sent = await self.email_triggers.send_rejection_warning(
                reporter,
                report_id,
                report_type,
                report_location,
                reason or DEFAULT_REJECTION_REASON,
            )
        else:
            logger.info(f"Reporter {reporter_id} has no email; rejection warning not sent")

        return CallableResult.ok(email=sent)
