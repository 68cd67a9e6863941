"""
Account verification flows.

- One-time codes for email verification and password change
- Custom password reset email
"""

from .codes import VerificationCodeService, VerificationPurpose, generate_verification_code
from .password_reset import PasswordResetService

__all__ = [
    "PasswordResetService",
    "VerificationCodeService",
    "VerificationPurpose",
    "generate_verification_code",
]
