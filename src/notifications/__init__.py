"""
Notification Delivery System

Status-change notifications for pollution reports and announcements.

Provides:
- Transition classification over before/after document snapshots
- Recipient resolution (reporter, barangay and main admins, announcement audience)
- In-app notification records and the per-user inbox
- Email eligibility filtering and SMTP delivery

Usage:
    from notifications import NotificationDispatcher

    dispatcher = NotificationDispatcher(store)
    result = await dispatcher.handle_change(change)
"""

from .email_provider import (
    EmailProvider,
    EmailMessage,
    DeliveryResult,
    DeliveryStatus,
    DisabledEmailProvider,
    get_email_provider,
    set_email_provider,
    send_email,
)
from .smtp_provider import SMTPProvider
from .email_triggers import EmailTriggerService, EmailTriggerType
from .transitions import Transition, TransitionKind, classify_change
from .eligibility import EmailCategory, is_email_eligible
from .recipients import RecipientResolver
from .notification_writer import NotificationWriter
from .notification_service import NotificationInboxService
from .dispatcher import DispatchResult, NotificationDispatcher, plan_effects

__all__ = [
    # Mail transport
    "EmailProvider",
    "EmailMessage",
    "DeliveryResult",
    "DeliveryStatus",
    "DisabledEmailProvider",
    "SMTPProvider",
    "get_email_provider",
    "set_email_provider",
    "send_email",
    # Email content
    "EmailTriggerService",
    "EmailTriggerType",
    # Dispatch
    "Transition",
    "TransitionKind",
    "classify_change",
    "EmailCategory",
    "is_email_eligible",
    "RecipientResolver",
    "NotificationWriter",
    "NotificationDispatcher",
    "DispatchResult",
    "plan_effects",
    # Inbox
    "NotificationInboxService",
]
