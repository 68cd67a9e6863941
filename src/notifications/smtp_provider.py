"""
SMTP Email Provider

SMTP delivery for notification mail. Defaults target Gmail over implicit
SSL with an app password.

Configuration (see config.settings.EmailSettings):
    EMAIL_USER: account used to authenticate and as the sender address
    EMAIL_PASS: account password / app password
    EMAIL_HOST: SMTP server hostname (default: smtp.gmail.com)
    EMAIL_PORT: SMTP server port (default: 465)
    EMAIL_USE_SSL: implicit SSL (default: True)
    EMAIL_USE_TLS: STARTTLS when not using SSL (default: False)
"""

import logging
import smtplib
import ssl
import uuid
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Optional

from config.settings import EmailSettings

from .email_provider import (
    EmailProvider,
    EmailMessage,
    DeliveryResult,
    DeliveryStatus,
)

logger = logging.getLogger(__name__)


class SMTPProvider(EmailProvider):
    """SMTP email provider."""

    def __init__(
        self,
        host: str,
        port: int,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_ssl: bool = True,
        use_tls: bool = False,
        from_email: Optional[str] = None,
        from_name: Optional[str] = None,
        timeout: float = 30.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_ssl = use_ssl
        self.use_tls = use_tls
        self.from_email = from_email or username
        self.from_name = from_name
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: EmailSettings) -> "SMTPProvider":
        return cls(
            host=settings.host,
            port=settings.port,
            username=settings.user,
            password=settings.password,
            use_ssl=settings.use_ssl,
            use_tls=settings.use_tls,
            from_email=settings.user,
            from_name=settings.from_name,
        )

    @property
    def provider_name(self) -> str:
        return "smtp"

    def is_configured(self) -> bool:
        """Check if SMTP is properly configured."""
        return bool(self.host and self.from_email)

    def _build(self, message: EmailMessage) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        from_email = message.from_email or self.from_email
        from_name = message.from_name or self.from_name
        msg["From"] = formataddr((from_name, from_email)) if from_name else from_email
        msg["To"] = message.to
        msg["Subject"] = message.subject

        if message.body_text:
            msg.attach(MIMEText(message.body_text, "plain", "utf-8"))
        if message.body_html:
            msg.attach(MIMEText(message.body_html, "html", "utf-8"))
        return msg

    def send(self, message: EmailMessage) -> DeliveryResult:
        """
        Send email via SMTP.

        Args:
            message: Email message to send

        Returns:
            DeliveryResult with status
        """
        if not self.is_configured():
            return DeliveryResult(
                success=False,
                status=DeliveryStatus.FAILED,
                provider=self.provider_name,
                error_message="SMTP not configured (missing EMAIL_USER)",
                error_code="NOT_CONFIGURED",
            )

        message.validate()
        msg = self._build(message)
        sender = message.from_email or self.from_email

        try:
            if self.use_ssl:
                context = ssl.create_default_context()
                with smtplib.SMTP_SSL(
                    self.host, self.port, context=context, timeout=self.timeout
                ) as server:
                    if self.username and self.password:
                        server.login(self.username, self.password)
                    server.sendmail(sender, [message.to], msg.as_string())
            else:
                with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                    if self.use_tls:
                        server.starttls(context=ssl.create_default_context())
                    if self.username and self.password:
                        server.login(self.username, self.password)
                    server.sendmail(sender, [message.to], msg.as_string())

            logger.info(f"SMTP: Email sent to {message.to}")
            return DeliveryResult(
                success=True,
                status=DeliveryStatus.SENT,
                message_id=f"smtp-{uuid.uuid4()}",
                provider=self.provider_name,
            )

        except smtplib.SMTPAuthenticationError as e:
            logger.error(f"SMTP auth error: {e}")
            return DeliveryResult(
                success=False,
                status=DeliveryStatus.FAILED,
                provider=self.provider_name,
                error_message=f"SMTP authentication failed: {e}",
                error_code="AUTH_ERROR",
            )
        except smtplib.SMTPRecipientsRefused as e:
            logger.error(f"SMTP recipients refused: {e}")
            return DeliveryResult(
                success=False,
                status=DeliveryStatus.BOUNCED,
                provider=self.provider_name,
                error_message=f"Recipients refused: {e}",
                error_code="RECIPIENTS_REFUSED",
            )
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP error sending to {message.to}: {e}")
            return DeliveryResult(
                success=False,
                status=DeliveryStatus.FAILED,
                provider=self.provider_name,
                error_message=str(e),
                error_code="SMTP_ERROR",
            )
