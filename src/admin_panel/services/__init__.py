"""
Admin Panel Services Layer.

Business logic for:
- Account deletion
- Moderation (rejection warnings)
"""

from .account_service import AccountService
from .moderation_service import DEFAULT_REJECTION_REASON, ModerationService

__all__ = [
    "AccountService",
    "DEFAULT_REJECTION_REASON",
    "ModerationService",
]
