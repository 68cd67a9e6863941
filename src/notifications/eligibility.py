"""
Email eligibility filter.

Decides whether a user should get an email for a notification category.
In-app notifications are not gated here; they are always written.
"""

from enum import Enum

from domain.models import User

from .transitions import TransitionKind


class EmailCategory(str, Enum):
    REPORT_STATUS = "report_status"
    UPVOTE = "upvote"
    ANNOUNCEMENT = "announcement"
    NEW_REPORT = "new_report"
    REJECTION_WARNING = "rejection_warning"


_CATEGORY_BY_KIND = {
    TransitionKind.REPORT_ACCEPTED: EmailCategory.REPORT_STATUS,
    TransitionKind.REPORT_IN_PROGRESS: EmailCategory.REPORT_STATUS,
    TransitionKind.REPORT_DONE: EmailCategory.REPORT_STATUS,
    TransitionKind.REPORT_REJECTED: EmailCategory.REPORT_STATUS,
    TransitionKind.ADMIN_COMMENT: EmailCategory.REPORT_STATUS,
    TransitionKind.ADMIN_RESPONSE: EmailCategory.REPORT_STATUS,
    TransitionKind.UPVOTE: EmailCategory.UPVOTE,
    TransitionKind.ANNOUNCEMENT: EmailCategory.ANNOUNCEMENT,
    TransitionKind.NEW_REPORT: EmailCategory.NEW_REPORT,
}


def category_for(kind: TransitionKind) -> EmailCategory:
    return _CATEGORY_BY_KIND[kind]


def is_email_eligible(user: User, category: EmailCategory) -> bool:
    """
    Check whether ``user`` may be emailed for ``category``.

    Rejection warnings only need an address. New-report alerts to admins
    need a verified address. Everything else also needs the global email
    flag and the category flag.
    """
    if not user.email:
        return False
    if category == EmailCategory.REJECTION_WARNING:
        return True
    if not user.email_verified:
        return False
    if category == EmailCategory.NEW_REPORT:
        return True

    prefs = user.notifications
    if not prefs.email:
        return False
    if category == EmailCategory.REPORT_STATUS:
        return prefs.report_status
    if category == EmailCategory.UPVOTE:
        return prefs.upvote
    if category == EmailCategory.ANNOUNCEMENT:
        return prefs.announcement
    return False
