"""
Tests for email providers.

Tests:
- Provider selection from EMAIL_* settings
- Disabled provider behaviour
- SMTP delivery and error mapping
"""

import smtplib
from unittest.mock import patch

import pytest

from config.settings import EmailSettings
from notifications.email_provider import (
    DeliveryStatus,
    DisabledEmailProvider,
    EmailMessage,
    get_email_provider,
    send_email,
    set_email_provider,
)
from notifications.smtp_provider import SMTPProvider


def message(**overrides) -> EmailMessage:
    fields = {"to": "ana@example.com", "subject": "Hello", "body_html": "<p>Hi</p>"}
    fields.update(overrides)
    return EmailMessage(**fields)


class TestEmailMessage:

    def test_requires_recipient(self):
        with pytest.raises(ValueError):
            message(to="").validate()

    def test_requires_a_body(self):
        with pytest.raises(ValueError):
            message(body_html=None).validate()


class TestProviderSelection:
    """Tests for picking the transport from configuration."""

    def test_disabled_without_credentials(self, monkeypatch):
        monkeypatch.setenv("EMAIL_USER", "")
        monkeypatch.setenv("EMAIL_PASS", "")

        assert isinstance(get_email_provider(), DisabledEmailProvider)

    def test_smtp_with_credentials(self, monkeypatch):
        monkeypatch.setenv("EMAIL_USER", "reports@example.com")
        monkeypatch.setenv("EMAIL_PASS", "app-password")

        provider = get_email_provider()

        assert isinstance(provider, SMTPProvider)
        assert provider.host == "smtp.gmail.com"
        assert provider.port == 465
        assert provider.from_email == "reports@example.com"

    def test_password_alias(self, monkeypatch):
        monkeypatch.setenv("EMAIL_USER", "reports@example.com")
        monkeypatch.delenv("EMAIL_PASS", raising=False)
        monkeypatch.setenv("EMAIL_PASSWORD", "secret")

        assert EmailSettings().is_configured

    def test_explicit_provider_wins(self):
        provider = DisabledEmailProvider()
        set_email_provider(provider)

        assert get_email_provider() is provider


class TestDisabledProvider:

    def test_send_reports_not_sent(self):
        result = send_email("ana@example.com", "Hello", body_html="<p>Hi</p>", provider=DisabledEmailProvider())

        assert result.success is False
        assert result.status == DeliveryStatus.DISABLED
        assert result.error_code == "NOT_CONFIGURED"


class TestSMTPProvider:
    """Tests for SMTP delivery with a mocked smtplib."""

    @pytest.fixture
    def provider(self):
        return SMTPProvider(
            host="smtp.example.com",
            port=465,
            username="reports@example.com",
            password="secret",
            from_name="Pollution Report",
        )

    def test_ssl_send(self, provider):
        with patch("notifications.smtp_provider.smtplib.SMTP_SSL") as smtp_ssl:
            server = smtp_ssl.return_value.__enter__.return_value
            result = provider.send(message())

        assert result.success
        assert result.status == DeliveryStatus.SENT
        server.login.assert_called_once_with("reports@example.com", "secret")
        sender, recipients, raw = server.sendmail.call_args[0]
        assert sender == "reports@example.com"
        assert recipients == ["ana@example.com"]
        assert "Pollution Report" in raw

    def test_starttls_send(self):
        provider = SMTPProvider(
            host="smtp.example.com",
            port=587,
            username="reports@example.com",
            password="secret",
            use_ssl=False,
            use_tls=True,
        )
        with patch("notifications.smtp_provider.smtplib.SMTP") as smtp:
            server = smtp.return_value.__enter__.return_value
            result = provider.send(message())

        assert result.success
        server.starttls.assert_called_once()

    def test_auth_error(self, provider):
        with patch("notifications.smtp_provider.smtplib.SMTP_SSL") as smtp_ssl:
            server = smtp_ssl.return_value.__enter__.return_value
            server.login.side_effect = smtplib.SMTPAuthenticationError(535, b"bad credentials")
            result = provider.send(message())

        assert not result.success
        assert result.error_code == "AUTH_ERROR"

    def test_refused_recipient_bounces(self, provider):
        with patch("notifications.smtp_provider.smtplib.SMTP_SSL") as smtp_ssl:
            server = smtp_ssl.return_value.__enter__.return_value
            server.sendmail.side_effect = smtplib.SMTPRecipientsRefused({"ana@example.com": (550, b"no")})
            result = provider.send(message())

        assert result.status == DeliveryStatus.BOUNCED

    def test_connection_error(self, provider):
        with patch("notifications.smtp_provider.smtplib.SMTP_SSL", side_effect=OSError("unreachable")):
            result = provider.send(message())

        assert not result.success
        assert result.error_code == "SMTP_ERROR"

    def test_built_message(self, provider):
        built = provider._build(message(body_text="Hi"))

        assert built["From"] == "Pollution Report <reports@example.com>"
        assert built["To"] == "ana@example.com"
        assert built["Subject"] == "Hello"
        assert built["Reply-To"] is None
        assert [part.get_content_type() for part in built.get_payload()] == ["text/plain", "text/html"]

    def test_unconfigured(self):
        provider = SMTPProvider(host="smtp.example.com", port=465)
        result = provider.send(message())

        assert result.error_code == "NOT_CONFIGURED"
