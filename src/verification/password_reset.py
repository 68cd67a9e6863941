"""
Custom password reset email.

Mints a reset link through the identity provider and sends it in the
app's own email format. Unknown addresses get the same generic answer as
known ones so the endpoint cannot be used to probe for accounts.
"""

import logging
from typing import Optional

from config.settings import Settings, get_settings
from database.document_store import USERS, DocumentStore
from domain.results import CallableResult
from notifications.email_triggers import EmailTriggerService
from rbac.identity import IdentityNotFoundError, IdentityProvider, InvalidEmailError

logger = logging.getLogger(__name__)

EMAIL_REQUIRED = "Email is required"
GENERIC_SENT = "If an account exists with this email, a reset link has been sent."
RESET_SENT = "Password reset link has been sent to your email."
INVALID_EMAIL = "Invalid email address."
SEND_FAILED = "Failed to send email. Please try again."
RESET_FAILED = "Failed to send reset email. Please try again."


class PasswordResetService:
    """Sends formatted password reset emails."""

    def __init__(
        self,
        store: DocumentStore,
        identity: IdentityProvider,
        email_triggers: Optional[EmailTriggerService] = None,
        settings: Optional[Settings] = None,
    ):
        self.store = store
        self.identity = identity
        self.email_triggers = email_triggers or EmailTriggerService()
        self.settings = settings or get_settings()

    async def send_reset_email(self, email: Optional[str]) -> CallableResult:
        """Every outcome is a result; nothing is raised to the caller."""
        if not email:
            return CallableResult.failed(error=EMAIL_REQUIRED)

        try:
            try:
                account = await self.identity.get_user_by_email(email)
            except IdentityNotFoundError:
                logger.info("Password reset requested for unknown email")
                return CallableResult.ok(GENERIC_SENT)

            profile = await self.store.get(USERS, account.uid) or {}
            name = profile.get("fullName") or profile.get("username") or "User"

            link = await self.identity.generate_password_reset_link(
                email, self.settings.password_reset_continue_url
            )
            sent = await self.email_triggers.send_password_reset(email, name, link, user_id=account.uid)
        except InvalidEmailError:
            return CallableResult.failed(error=INVALID_EMAIL)
        except Exception as e:
            logger.error(f"Error sending password reset email: {e}", exc_info=True)
            return CallableResult.failed(error=RESET_FAILED)

        if not sent:
            return CallableResult.failed(error=SEND_FAILED)

        logger.info(f"Password reset email sent to {email}")
        return CallableResult.ok(RESET_SENT)
