"""
Email Notification Triggers

Email content and sending for every pollution report notification.
Integrates with the email provider for delivery and tracks all notifications.

Trigger Categories:
- Report notifications (accepted, in progress, resolved, rejected)
- Engagement notifications (upvote, admin comment, admin response)
- Admin notifications (new report submitted, rejection warning)
- Announcements
- Account notifications (email verification, password change, password reset)

Every send is a single best-effort attempt: the ``send_*`` methods return
True/False and never raise.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from html import escape
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4

from domain.models import Announcement, Comment, Report, User

from .email_provider import (
    DeliveryResult,
    DeliveryStatus,
    EmailProvider,
    get_email_provider,
    send_email,
)
from .content import status_message
from .transitions import Transition, TransitionKind

logger = logging.getLogger(__name__)

FOOTER = "Pollution Report App - Keeping our barangays clean"


class EmailTriggerType(str, Enum):
    """Types of email triggers."""
    # Reports
    REPORT_ACCEPTED = "report_accepted"
    REPORT_IN_PROGRESS = "report_in_progress"
    REPORT_DONE = "report_done"
    REPORT_REJECTED = "report_rejected"

    # Engagement
    UPVOTE = "upvote"
    ADMIN_COMMENT = "admin_comment"
    ADMIN_RESPONSE = "admin_response"

    # Admin
    NEW_REPORT = "new_report"
    REJECTION_WARNING = "rejection_warning"

    ANNOUNCEMENT = "announcement"

    # Account
    EMAIL_VERIFICATION = "email_verification"
    PASSWORD_CHANGE_CODE = "password_change_code"
    PASSWORD_RESET = "password_reset"


@dataclass
class EmailNotification:
    """Email notification record."""
    id: UUID
    trigger_type: EmailTriggerType
    recipient_email: str
    recipient_name: str
    subject: str
    body_html: str

    # Context
    user_id: Optional[str] = None
    entity_id: Optional[str] = None  # Related document (report id, announcement id)
    entity_type: Optional[str] = None

    # Status
    sent_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None
    error_message: Optional[str] = None
    message_id: Optional[str] = None

    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


STATUS_STYLE = {
    TransitionKind.REPORT_ACCEPTED: ("✅ Report Accepted", "#0dcaf0", "#0dcaf0"),
    TransitionKind.REPORT_IN_PROGRESS: ("🔄 Report In Progress", "#0dcaf0", "#0dcaf0"),
    TransitionKind.REPORT_DONE: ("🎉 Report Resolved", "#198754", "#198754"),
    TransitionKind.REPORT_REJECTED: ("❌ Report Rejected", "#dc3545", "#dc3545"),
}

STATUS_COLORS = {"Done": "#198754", "In Progress": "#0dcaf0"}


def _layout(heading: str, color: str, body: str, heading_color: str = "white") -> str:
    """Shared frame for every email: colored header, grey body, footer."""
    return f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
    <div style="background: {color}; color: {heading_color}; padding: 20px; text-align: center;">
        <h1>{heading}</h1>
    </div>
    <div style="padding: 20px; background: #f8f9fa;">
        {body}
        <hr>
        <p style="color: #6c757d; font-size: 12px;">{FOOTER}</p>
    </div>
</div>
    """


def _card(rows: str, border: Optional[str] = None) -> str:
    edge = f" border-left: 4px solid {border};" if border else ""
    return f'<div style="background: white; padding: 15px; border-radius: 8px; margin: 15px 0;{edge}">{rows}</div>'


class EmailTriggerService:
    """
    Service for triggering and sending email notifications.

    Provides templates and sending logic for all notification types.
    """

    def __init__(self, provider: Optional[EmailProvider] = None):
        self._provider = provider
        self._notifications: List[EmailNotification] = []
        self._from_name = "Pollution Report"

    @property
    def provider(self) -> EmailProvider:
        return self._provider or get_email_provider()

    # =========================================================================
    # TRANSITION DISPATCH
    # =========================================================================

    async def send_for_transition(self, transition: Transition, recipient: User) -> bool:
        """Send the email matching a classified transition to one recipient."""
        kind = transition.kind
        if kind.is_status_change:
            return await self.send_report_status(recipient, kind, transition.document_id, transition.report)
        if kind == TransitionKind.UPVOTE:
            return await self.send_upvote(recipient, transition.document_id, transition.report)
        if kind == TransitionKind.ADMIN_COMMENT:
            return await self.send_admin_comment(
                recipient, transition.document_id, transition.report, transition.comment
            )
        if kind == TransitionKind.ADMIN_RESPONSE:
            return await self.send_admin_response(recipient, transition.document_id, transition.report)
        if kind == TransitionKind.NEW_REPORT:
            return await self.send_new_report(recipient, transition.document_id, transition.report)
        return await self.send_announcement(recipient, transition.document_id, transition.announcement)

    # =========================================================================
    # REPORT TRIGGERS
    # =========================================================================

    async def send_report_status(
        self,
        recipient: User,
        kind: TransitionKind,
        report_id: str,
        report: Report,
    ) -> bool:
        """Send report accepted / in progress / resolved / rejected email."""
        heading, color, border = STATUS_STYLE[kind]
        subject = f"{heading} - {report.pollution_type} Pollution"
        status_color = STATUS_COLORS.get(report.status, "#ffc107")

        details = f"""
            <p><strong>Report ID:</strong> {escape(report_id)}</p>
            <p><strong>Type:</strong> {escape(report.pollution_type)} Pollution</p>
            <p><strong>Location:</strong> {escape(report.location)}</p>
            <p><strong>Status:</strong> <span style="color: {status_color}; font-weight: bold;">{escape(report.status)}</span></p>
        """

        body = f"""
        <p>Hi <strong>{escape(recipient.display_name)}</strong>,</p>
        <p>{escape(status_message(kind, report.location))}</p>
        {_card(details, border)}
        <p>Thank you for helping keep our community clean!</p>
        """

        return await self._send(
            EmailTriggerType(kind.value),
            recipient.email,
            recipient.display_name,
            subject,
            _layout(heading, color, body),
            user_id=recipient.id,
            entity_id=report_id,
            entity_type="report",
        )

    async def send_upvote(self, recipient: User, report_id: str, report: Report) -> bool:
        """Send upvote email."""
        subject = "👍 Your Report Received an Upvote!"
        message = f'Your pollution report at "{report.location}" received an upvote! Total: {report.upvotes}'

        details = f"""
            <p><strong>Report:</strong> {escape(report.pollution_type)} Pollution at {escape(report.location)}</p>
            <p><strong>Total Upvotes:</strong> <span style="color: #198754; font-weight: bold; font-size: 1.2em;">{report.upvotes}</span></p>
        """

        body = f"""
        <p>Hi <strong>{escape(recipient.display_name)}</strong>,</p>
        <p>{escape(message)}</p>
        {_card(details)}
        <p>Thank you for contributing to a cleaner community!</p>
        """

        return await self._send(
            EmailTriggerType.UPVOTE,
            recipient.email,
            recipient.display_name,
            subject,
            _layout("👍 New Upvote!", "#198754", body),
            user_id=recipient.id,
            entity_id=report_id,
            entity_type="report",
        )

    async def send_admin_comment(
        self,
        recipient: User,
        report_id: str,
        report: Report,
        comment: Comment,
    ) -> bool:
        """Send new admin comment email."""
        subject = "💬 New Comment on Your Report"

        details = f"""
            <p><strong>Report:</strong> {escape(report.pollution_type)} Pollution at {escape(report.location)}</p>
            <p><strong>Comment:</strong></p>
            <p style="font-style: italic; color: #333;">"{escape(comment.text)}"</p>
            <p style="color: #6c757d; font-size: 12px;">- {escape(comment.user_name or 'Admin')}</p>
        """

        body = f"""
        <p>Hi <strong>{escape(recipient.display_name)}</strong>,</p>
        <p>An administrator has commented on your pollution report:</p>
        {_card(details, "#0dcaf0")}
        <p>You can view your report and respond in the app.</p>
        """

        return await self._send(
            EmailTriggerType.ADMIN_COMMENT,
            recipient.email,
            recipient.display_name,
            subject,
            _layout("💬 New Admin Comment", "#0dcaf0", body),
            user_id=recipient.id,
            entity_id=report_id,
            entity_type="report",
        )

    async def send_admin_response(self, recipient: User, report_id: str, report: Report) -> bool:
        """Send admin response email."""
        subject = "📝 Admin Response to Your Report"

        details = f"""
            <p><strong>Report:</strong> {escape(report.pollution_type)} Pollution at {escape(report.location)}</p>
            <p><strong>Admin Response:</strong></p>
            <p style="font-style: italic; color: #333;">"{escape(report.response_text)}"</p>
        """

        body = f"""
        <p>Hi <strong>{escape(recipient.display_name)}</strong>,</p>
        <p>An administrator has responded to your pollution report:</p>
        {_card(details, "#6f42c1")}
        <p>Thank you for your report!</p>
        """

        return await self._send(
            EmailTriggerType.ADMIN_RESPONSE,
            recipient.email,
            recipient.display_name,
            subject,
            _layout("📝 Admin Response", "#6f42c1", body),
            user_id=recipient.id,
            entity_id=report_id,
            entity_type="report",
        )

    # =========================================================================
    # ADMIN TRIGGERS
    # =========================================================================

    async def send_new_report(self, admin: User, report_id: str, report: Report) -> bool:
        """Alert an admin about a newly submitted report."""
        barangay = report.barangay_id
        reporter = report.reporter_name or "A user"
        admin_name = admin.full_name or "Admin"
        subject = f"📋 New {report.pollution_type} Pollution Report - {barangay or 'Your Area'}"
        scope = "" if admin.is_main_admin else " in your barangay"

        details = f"""
            <p><strong>Report ID:</strong> {escape(report_id)}</p>
            <p><strong>Pollution Type:</strong> {escape(report.pollution_type)}</p>
            <p><strong>Location:</strong> {escape(report.location)}</p>
            <p><strong>Submitted by:</strong> {escape(reporter)}</p>
            {f'<p><strong>Barangay:</strong> {escape(barangay)}</p>' if barangay else ''}
            <p><strong>Description:</strong> {escape(report.description or 'No description provided')}</p>
        """

        body = f"""
        <p>Hi <strong>{escape(admin_name)}</strong>,</p>
        <p>A new pollution report has been submitted{scope}:</p>
        {_card(details, "#0d6efd")}
        <p>Please log in to the admin dashboard to review and take action on this report.</p>
        """

        return await self._send(
            EmailTriggerType.NEW_REPORT,
            admin.email,
            admin_name,
            subject,
            _layout("📋 New Report Submitted", "#0d6efd", body),
            user_id=admin.id,
            entity_id=report_id,
            entity_type="report",
        )

    async def send_rejection_warning(
        self,
        recipient: User,
        report_id: str,
        report_type: Optional[str],
        report_location: Optional[str],
        reason: str,
    ) -> bool:
        """Send the rejection warning an admin issues for an off-topic report."""
        subject = "⚠️ Report Rejected - Action Required"

        details = f"""
            <p><strong>Report Type:</strong> {escape(report_type or 'Unknown')}</p>
            <p><strong>Location:</strong> {escape(report_location or 'Unknown location')}</p>
            <p><strong>Reason for Rejection:</strong> {escape(reason)}</p>
        """

        body = f"""
        <p>Hi <strong>{escape(recipient.display_name)}</strong>,</p>
        <p>Your pollution report has been rejected by an administrator:</p>
        {_card(details, "#dc3545")}
        <div style="background: #fff3cd; padding: 15px; border-radius: 8px; margin: 15px 0; border: 1px solid #ffc107;">
            <p style="color: #856404; margin: 0;"><strong>⚠️ WARNING:</strong> Repeatedly posting unrelated, inappropriate, or false reports may result in your account being suspended.</p>
        </div>
        <p>Please ensure your future reports are:</p>
        <ul>
            <li>Related to actual pollution issues (water, air, or land)</li>
            <li>Include accurate location information</li>
            <li>Have relevant photos when possible</li>
            <li>Provide clear descriptions of the problem</li>
        </ul>
        <p>If you believe this was a mistake, please contact your barangay administrator.</p>
        """

        return await self._send(
            EmailTriggerType.REJECTION_WARNING,
            recipient.email,
            recipient.display_name,
            subject,
            _layout("⚠️ Report Rejected", "#dc3545", body),
            user_id=recipient.id,
            entity_id=report_id,
            entity_type="report",
        )

    # =========================================================================
    # ANNOUNCEMENTS
    # =========================================================================

    async def send_announcement(
        self,
        recipient: User,
        announcement_id: str,
        announcement: Announcement,
    ) -> bool:
        """Send an announcement, personalised with the recipient's name."""
        subject = f"📢 {announcement.title}"
        posted = announcement.created_at or datetime.now(timezone.utc)
        subtitle = (
            f'<h4 style="color: #6c757d;">{escape(announcement.subtitle)}</h4>'
            if announcement.subtitle else ""
        )

        body = f"""
        <h2 style="color: #333;">{escape(announcement.title)}</h2>
        {subtitle}
        {_card(f'<p>{escape(announcement.description)}</p>')}
        <p style="color: #6c757d; font-size: 12px;">Posted on {posted.strftime('%B %d, %Y')}</p>
        """
        heading = f"📢 Hi {escape(recipient.display_name)}, New Announcement"

        return await self._send(
            EmailTriggerType.ANNOUNCEMENT,
            recipient.email,
            recipient.display_name,
            subject,
            _layout(heading, "#fd7e14", body),
            user_id=recipient.id,
            entity_id=announcement_id,
            entity_type="announcement",
        )

    # =========================================================================
    # ACCOUNT TRIGGERS
    # =========================================================================

    async def send_verification_code(
        self,
        recipient_email: str,
        recipient_name: str,
        code: str,
        ttl_minutes: int = 10,
        user_id: Optional[str] = None,
    ) -> bool:
        """Send an email-verification code."""
        subject = "🔐 Verify Your Email - Pollution Report App"

        body = f"""
        <p>Hi <strong>{escape(recipient_name)}</strong>,</p>
        <p>Your email verification code is:</p>
        <div style="background: white; padding: 20px; border-radius: 8px; margin: 20px 0; text-align: center;">
            <h1 style="color: #198754; font-size: 36px; letter-spacing: 8px; margin: 0;">{code}</h1>
        </div>
        <p>This code will expire in <strong>{ttl_minutes} minutes</strong>.</p>
        <p>If you didn't request this code, please ignore this email.</p>
        """

        return await self._send(
            EmailTriggerType.EMAIL_VERIFICATION,
            recipient_email,
            recipient_name,
            subject,
            _layout("Email Verification", "#198754", body),
            user_id=user_id,
            entity_type="account",
        )

    async def send_password_change_code(
        self,
        recipient_email: str,
        recipient_name: str,
        code: str,
        ttl_minutes: int = 10,
        user_id: Optional[str] = None,
    ) -> bool:
        """Send a password-change verification code."""
        subject = "🔐 Password Change Verification - Pollution Report App"

        body = f"""
        <p>Hi <strong>{escape(recipient_name)}</strong>,</p>
        <p>You have requested to change your password. Your verification code is:</p>
        <div style="background: white; padding: 20px; border-radius: 8px; margin: 20px 0; text-align: center;">
            <h1 style="color: #ffc107; font-size: 36px; letter-spacing: 8px; margin: 0;">{code}</h1>
        </div>
        <p>This code will expire in <strong>{ttl_minutes} minutes</strong>.</p>
        <p style="color: #dc3545;"><strong>⚠️ If you did not request this password change, please ignore this email and ensure your account is secure.</strong></p>
        """

        return await self._send(
            EmailTriggerType.PASSWORD_CHANGE_CODE,
            recipient_email,
            recipient_name,
            subject,
            _layout("Password Change Request", "#ffc107", body, heading_color="#000"),
            user_id=user_id,
            entity_type="account",
        )

    async def send_password_reset(
        self,
        recipient_email: str,
        recipient_name: str,
        reset_link: str,
        user_id: Optional[str] = None,
    ) -> bool:
        """Send a formatted password reset link."""
        subject = "🔑 Reset Your Password - Pollution Report App"
        link = escape(reset_link, quote=True)

        body = f"""
        <p>Hi <strong>{escape(recipient_name)}</strong>,</p>
        <p>We received a request to reset the password for your Pollution Report App account associated with <strong>{escape(recipient_email)}</strong>.</p>

        <div style="text-align: center; margin: 30px 0;">
            <a href="{link}"
               style="background: #198754; color: white; padding: 15px 30px; text-decoration: none; border-radius: 8px; font-size: 16px; font-weight: bold; display: inline-block;">
              Reset Your Password
            </a>
        </div>

        <p style="color: #6c757d; font-size: 14px;">Or copy and paste this link into your browser:</p>
        <p style="background: white; padding: 10px; border-radius: 4px; word-break: break-all; font-size: 12px; color: #0d6efd;">{link}</p>

        <div style="background: #fff3cd; border: 1px solid #ffc107; border-radius: 8px; padding: 15px; margin: 20px 0;">
            <p style="margin: 0; color: #856404;"><strong>⚠️ This link will expire in 1 hour.</strong></p>
        </div>

        <p style="color: #6c757d;">If you didn't request a password reset, you can safely ignore this email. Your password will remain unchanged.</p>
        <p style="color: #6c757d; font-size: 12px;"><em>This is an automated message, please do not reply.</em></p>
        """

        return await self._send(
            EmailTriggerType.PASSWORD_RESET,
            recipient_email,
            recipient_name,
            subject,
            _layout("🔑 Password Reset", "#dc3545", body),
            user_id=user_id,
            entity_type="account",
        )

    # =========================================================================
    # HELPER METHODS
    # =========================================================================

    async def _send(self, *args, **kwargs) -> bool:
        result = await self._send_email(*args, **kwargs)
        return result.success

    async def _send_email(
        self,
        trigger_type: EmailTriggerType,
        recipient_email: Optional[str],
        recipient_name: str,
        subject: str,
        body_html: str,
        user_id: Optional[str] = None,
        entity_id: Optional[str] = None,
        entity_type: Optional[str] = None,
    ) -> DeliveryResult:
        """Send email and track the notification."""
        notification = EmailNotification(
            id=uuid4(),
            trigger_type=trigger_type,
            recipient_email=recipient_email or "",
            recipient_name=recipient_name,
            subject=subject,
            body_html=body_html,
            user_id=user_id,
            entity_id=entity_id,
            entity_type=entity_type,
        )

        if not recipient_email:
            result = DeliveryResult(
                success=False,
                status=DeliveryStatus.FAILED,
                error_message="Recipient has no email address",
                error_code="NO_RECIPIENT",
            )
            self._track(notification, result)
            return result

        try:
            # SMTP is blocking; keep it off the event loop
            result = await asyncio.to_thread(
                send_email,
                to=recipient_email,
                subject=subject,
                body_html=body_html,
                from_name=self._from_name,
                tags=[f"trigger:{trigger_type.value}"],
                provider=self.provider,
            )
        except Exception as e:
            logger.exception(f"[EMAIL] Error sending {trigger_type.value}: {e}")
            result = DeliveryResult(
                success=False,
                status=DeliveryStatus.FAILED,
                error_message=str(e),
            )

        self._track(notification, result)
        logger.info(
            f"[EMAIL] {trigger_type.value} to {recipient_email}: "
            f"{'sent' if result.success else 'failed'}"
        )
        return result

    def _track(self, notification: EmailNotification, result: DeliveryResult) -> None:
        now = datetime.now(timezone.utc)
        if result.success:
            notification.sent_at = now
            notification.message_id = result.message_id
        else:
            notification.failed_at = now
            notification.error_message = result.error_message

        self._notifications.append(notification)

        # Keep last 1000 notifications
        if len(self._notifications) > 1000:
            self._notifications = self._notifications[-1000:]

    @property
    def notifications(self) -> List[EmailNotification]:
        return list(self._notifications)

    def get_notification_stats(self) -> Dict[str, Any]:
        """Get email notification statistics."""
        total = len(self._notifications)
        sent = sum(1 for n in self._notifications if n.sent_at)
        failed = sum(1 for n in self._notifications if n.failed_at)

        by_trigger: Dict[str, int] = {}
        for n in self._notifications:
            trigger = n.trigger_type.value
            by_trigger[trigger] = by_trigger.get(trigger, 0) + 1

        return {
            "total": total,
            "sent": sent,
            "failed": failed,
            "success_rate": round(sent / total * 100, 2) if total > 0 else 0,
            "by_trigger": by_trigger,
        }
