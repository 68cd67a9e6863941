"""
Email Provider Abstraction

Unified interface for the mail transport used by notification emails.

Supports:
- SMTP (Gmail app password by default)
- Disabled provider when no credentials are configured
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from config.settings import EmailSettings

logger = logging.getLogger(__name__)


class DeliveryStatus(str, Enum):
    """Email delivery status."""
    SENT = "sent"
    BOUNCED = "bounced"
    FAILED = "failed"
    DISABLED = "disabled"


@dataclass
class EmailMessage:
    """Email message to be sent."""
    to: str
    subject: str
    body_html: Optional[str] = None
    body_text: Optional[str] = None
    from_email: Optional[str] = None
    from_name: Optional[str] = None
    tags: List[str] = field(default_factory=list)

    def validate(self) -> bool:
        """Validate message has required fields."""
        if not self.to:
            raise ValueError("Recipient email (to) is required")
        if not self.subject:
            raise ValueError("Subject is required")
        if not self.body_html and not self.body_text:
            raise ValueError("Either body_html or body_text is required")
        return True


@dataclass
class DeliveryResult:
    """Result of email delivery attempt."""
    success: bool
    status: DeliveryStatus
    message_id: Optional[str] = None
    provider: Optional[str] = None
    error_message: Optional[str] = None
    error_code: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class EmailProvider(ABC):
    """Abstract base class for email providers."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return provider name for logging."""
        pass

    @abstractmethod
    def send(self, message: EmailMessage) -> DeliveryResult:
        """
        Send an email message.

        Args:
            message: Email message to send

        Returns:
            DeliveryResult with success/failure status
        """
        pass

    @abstractmethod
    def is_configured(self) -> bool:
        """Check if provider is properly configured."""
        pass


class DisabledEmailProvider(EmailProvider):
    """
    Provider used when no mail credentials are configured.

    Logs emails and reports them as not sent, so callers see ``False``
    without anything raising.
    """

    @property
    def provider_name(self) -> str:
        return "disabled"

    def send(self, message: EmailMessage) -> DeliveryResult:
        message.validate()
        logger.info(f"[EMAIL DISABLED] Not sending to {message.to}: {message.subject}")
        return DeliveryResult(
            success=False,
            status=DeliveryStatus.DISABLED,
            provider=self.provider_name,
            error_message="Email transport not configured",
            error_code="NOT_CONFIGURED",
        )

    def is_configured(self) -> bool:
        return False


# Global provider instance
_email_provider: Optional[EmailProvider] = None


def get_email_provider() -> EmailProvider:
    """
    Get the configured email provider.

    Provider selection order:
    1. EMAIL_USER + EMAIL_PASS → SMTP
    2. None → Disabled provider (logging only, every send returns False)

    Returns:
        Configured EmailProvider instance
    """
    global _email_provider

    if _email_provider is not None:
        return _email_provider

    settings = EmailSettings()
    if settings.is_configured:
        from .smtp_provider import SMTPProvider
        _email_provider = SMTPProvider.from_settings(settings)
        logger.info("Email provider: SMTP")
        return _email_provider

    logger.warning(
        "Email configuration not set. Email notifications disabled. "
        "Set EMAIL_USER and EMAIL_PASS to enable email delivery."
    )
    _email_provider = DisabledEmailProvider()
    return _email_provider


def set_email_provider(provider: Optional[EmailProvider]):
    """
    Set a custom email provider (for testing). ``None`` resets selection.

    Args:
        provider: EmailProvider instance to use
    """
    global _email_provider
    _email_provider = provider
    if provider is not None:
        logger.info(f"Email provider set to: {provider.provider_name}")


def send_email(
    to: str,
    subject: str,
    body_html: Optional[str] = None,
    body_text: Optional[str] = None,
    from_name: Optional[str] = None,
    tags: Optional[List[str]] = None,
    provider: Optional[EmailProvider] = None,
) -> DeliveryResult:
    """
    Convenience function to send an email.

    Args:
        to: Recipient email address
        subject: Email subject
        body_html: HTML body (optional)
        body_text: Plain text body (optional)
        from_name: Sender name
        tags: Tags for tracking
        provider: Explicit provider (defaults to the configured one)

    Returns:
        DeliveryResult with status
    """
    message = EmailMessage(
        to=to,
        subject=subject,
        body_html=body_html,
        body_text=body_text,
        from_name=from_name,
        tags=tags or [],
    )

    provider = provider or get_email_provider()
    return provider.send(message)
