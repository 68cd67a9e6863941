"""
One-time verification codes.

Two independent instances of the same state machine, one record per user:

    none -> issued -> consumed | expired | exhausted

- EMAIL: confirms the address on the user's profile
- PASSWORD_CHANGE: gates the (client-side) password change flow

Issuing overwrites any pending record, so only the latest code is valid.
A wrong guess is a normal outcome returned as ``success=False``.
"""

import logging
import secrets
from datetime import timedelta
from enum import Enum
from typing import Callable, Optional

from config.settings import VerificationSettings
from database.document_store import (
    EMAIL_VERIFICATIONS,
    PASSWORD_CHANGE_VERIFICATIONS,
    SERVER_TIMESTAMP,
    USERS,
    DocumentStore,
)
from domain.models import User, VerificationRecord
from domain.results import CallableResult
from notifications.email_triggers import EmailTriggerService
from security.api_errors import APIError, ErrorCode

logger = logging.getLogger(__name__)

CODE_SENT = "Verification code sent to your email"
SEND_FAILED = "Failed to send email. Please try again."
CODE_REQUIRED = "Verification code is required"
NO_CODE = "No verification code found. Please request a new code."
CODE_EXPIRED = "Verification code has expired. Please request a new code."
TOO_MANY_ATTEMPTS = "Too many failed attempts. Please request a new code."


class VerificationPurpose(str, Enum):
    EMAIL = "email"
    PASSWORD_CHANGE = "password_change"

    @property
    def collection(self) -> str:
        if self == VerificationPurpose.EMAIL:
            return EMAIL_VERIFICATIONS
        return PASSWORD_CHANGE_VERIFICATIONS

    @property
    def success_message(self) -> str:
        if self == VerificationPurpose.EMAIL:
            return "Email verified successfully"
        return "Code verified successfully"


def generate_verification_code() -> str:
    """Uniformly random 6-digit code in 100000-999999."""
    return str(100000 + secrets.randbelow(900000))


class VerificationCodeService:
    """Issues and checks codes for one verification purpose."""

    def __init__(
        self,
        store: DocumentStore,
        purpose: VerificationPurpose,
        email_triggers: Optional[EmailTriggerService] = None,
        settings: Optional[VerificationSettings] = None,
        code_factory: Callable[[], str] = generate_verification_code,
    ):
        self.store = store
        self.purpose = purpose
        self.email_triggers = email_triggers or EmailTriggerService()
        self.settings = settings or VerificationSettings()
        self.code_factory = code_factory

    @property
    def collection(self) -> str:
        return self.purpose.collection

    # =========================================================================
    # ISSUE
    # =========================================================================

    async def issue(self, uid: str) -> CallableResult:
        """
        Generate a code, store it (replacing any pending one) and email it.

        Raises:
            APIError: FAILED_PRECONDITION if the profile has no email,
                INTERNAL if storing the code fails
        """
        data = await self.store.get(USERS, uid)
        if not data or not data.get("email"):
            raise APIError(ErrorCode.FAILED_PRECONDITION, "User email not found")
        user = User.from_document(uid, data)

        try:
            code = self.code_factory()
            expires_at = self.store.now() + timedelta(minutes=self.settings.code_ttl_minutes)
            await self.store.set(self.collection, uid, {
                "code": code,
                "email": user.email,
                "expiresAt": expires_at,
                "attempts": 0,
                "createdAt": SERVER_TIMESTAMP,
            })
            sent = await self._send(user, code)
        except Exception as e:
            logger.error(f"Error sending {self.purpose.value} verification code: {e}", exc_info=True)
            raise APIError(ErrorCode.INTERNAL, "Failed to send verification code") from e

        if not sent:
            return CallableResult.failed(error=SEND_FAILED)

        logger.info(f"{self.purpose.value} verification code sent to {user.email} for user {uid}")
        return CallableResult.ok(CODE_SENT)

    async def _send(self, user: User, code: str) -> bool:
        name = user.full_name or "User"
        ttl = self.settings.code_ttl_minutes
        if self.purpose == VerificationPurpose.EMAIL:
            return await self.email_triggers.send_verification_code(user.email, name, code, ttl, user_id=user.id)
        return await self.email_triggers.send_password_change_code(user.email, name, code, ttl, user_id=user.id)

    # =========================================================================
    # VERIFY
    # =========================================================================

    async def verify(self, uid: str, code: Optional[str]) -> CallableResult:
        """
        Check a submitted code.

        Expired records and records past the attempt limit are deleted. A
        wrong guess keeps the record with its attempt counter incremented.

        Raises:
            APIError: INTERNAL if the store fails
        """
        if not code:
            return CallableResult.failed(message=CODE_REQUIRED)

        try:
            return await self._verify(uid, str(code))
        except APIError:
            raise
        except Exception as e:
            logger.error(f"Error verifying {self.purpose.value} code: {e}", exc_info=True)
            raise APIError(ErrorCode.INTERNAL, "Failed to verify code") from e

    async def _verify(self, uid: str, code: str) -> CallableResult:
        data = await self.store.get(self.collection, uid)
        if data is None:
            return CallableResult.failed(message=NO_CODE)

        record = VerificationRecord.from_document(None, data)
        if self.store.now() > record.expires_at:
            await self.store.delete(self.collection, uid)
            return CallableResult.failed(message=CODE_EXPIRED)

        max_attempts = self.settings.max_attempts
        attempts = record.attempts + 1
        if attempts > max_attempts:
            await self.store.delete(self.collection, uid)
            return CallableResult.failed(message=TOO_MANY_ATTEMPTS)

        await self.store.update(self.collection, uid, {"attempts": attempts})

        if record.code != code:
            return CallableResult.failed(
                message=f"Invalid code. {max_attempts - attempts} attempts remaining."
            )

        if self.purpose == VerificationPurpose.EMAIL:
            await self.store.update(USERS, uid, {
                "emailVerified": True,
                "emailVerifiedAt": SERVER_TIMESTAMP,
            })

        await self.store.delete(self.collection, uid)
        logger.info(f"{self.purpose.value} code verified for user {uid}")
        return CallableResult.ok(self.purpose.success_message)
