"""
In-app notification content.

Titles and messages shown in the notification inbox, one pair per
transition kind.
"""

from typing import Tuple

from domain.models import Notification, User

from .transitions import Transition, TransitionKind

PREVIEW_LENGTH = 50


def preview(text: str, length: int = PREVIEW_LENGTH) -> str:
    """Truncate ``text`` to ``length`` characters, marking the cut with '...'."""
    text = text or ""
    return text[:length] + ("..." if len(text) > length else "")


STATUS_TITLES = {
    TransitionKind.REPORT_ACCEPTED: "✅ Report Accepted",
    TransitionKind.REPORT_IN_PROGRESS: "🔄 Report In Progress",
    TransitionKind.REPORT_DONE: "🎉 Report Resolved",
    TransitionKind.REPORT_REJECTED: "❌ Report Rejected",
}


def status_message(kind: TransitionKind, location: str) -> str:
    if kind == TransitionKind.REPORT_ACCEPTED:
        return f'Your pollution report at "{location}" has been accepted and is now being processed.'
    if kind == TransitionKind.REPORT_IN_PROGRESS:
        return f'Your pollution report at "{location}" is now being worked on.'
    if kind == TransitionKind.REPORT_DONE:
        return (
            f'Congratulations! Your pollution report at "{location}" has been resolved. '
            "Thank you for helping keep our community clean!"
        )
    return f'Your report at "{location}" has been rejected. Please contact an admin if you have questions.'


def title_and_message(transition: Transition) -> Tuple[str, str]:
    kind = transition.kind
    report = transition.report

    if kind.is_status_change:
        return STATUS_TITLES[kind], status_message(kind, report.location)

    if kind == TransitionKind.UPVOTE:
        return (
            "👍 New Upvote!",
            f'Your pollution report at "{report.location}" received an upvote! Total: {report.upvotes}',
        )

    if kind == TransitionKind.ADMIN_COMMENT:
        return (
            "💬 Admin Comment",
            f'An admin commented on your report at "{report.location}": "{preview(transition.comment.text)}"',
        )

    if kind == TransitionKind.ADMIN_RESPONSE:
        return (
            "📝 Admin Response",
            f'An admin responded to your report at "{report.location}": "{preview(report.response_text)}"',
        )

    if kind == TransitionKind.NEW_REPORT:
        reporter = report.reporter_name or "A user"
        return (
            "📋 New Report Submitted",
            f"{reporter} submitted a new {report.pollution_type} pollution report at {report.location}",
        )

    announcement = transition.announcement
    return f"📢 {announcement.title}", preview(announcement.description or announcement.subtitle or "", 100)


def build_notification(transition: Transition, recipient: User) -> Notification:
    """The in-app record for one (recipient, transition) pair."""
    title, message = title_and_message(transition)
    notification = Notification(
        user_id=recipient.id,
        type=transition.kind.value,
        title=title,
        message=message,
        barangay_id=transition.barangay_id,
    )

    kind = transition.kind
    if kind == TransitionKind.ANNOUNCEMENT:
        notification.announcement_id = transition.document_id
    else:
        notification.report_id = transition.document_id

    if kind == TransitionKind.NEW_REPORT:
        notification.from_user_id = transition.report.reporter_id
        notification.from_user_name = transition.report.reporter_name or "A user"
    elif kind == TransitionKind.ADMIN_COMMENT:
        notification.from_user_id = transition.comment.user_id
        notification.from_user_name = transition.comment.user_name or "Admin"
    elif kind == TransitionKind.ADMIN_RESPONSE:
        notification.from_user_name = "Admin"
    return notification
