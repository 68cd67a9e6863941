"""
Identity Provider

Authentication is a managed external service. The backend needs three
things from it: look an account up by email, delete an account, and mint a
password-reset link. ``IdentityProvider`` is that seam; the in-memory
implementation backs tests and local development.
"""

import logging
import re
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional
from urllib.parse import urlencode

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class IdentityError(Exception):
    """Base error raised by identity providers."""


class IdentityNotFoundError(IdentityError):
    """No account matches the given uid or email."""


class InvalidEmailError(IdentityError):
    """The email address is malformed."""


@dataclass
class IdentityRecord:
    uid: str
    email: Optional[str] = None
    disabled: bool = False


class IdentityProvider(ABC):
    """Abstract base class for the managed authentication service."""

    @abstractmethod
    async def get_user_by_email(self, email: str) -> IdentityRecord:
        """
        Raises:
            InvalidEmailError: If the address is malformed
            IdentityNotFoundError: If no account uses the address
        """

    @abstractmethod
    async def delete_user(self, uid: str) -> None:
        """
        Raises:
            IdentityNotFoundError: If the account does not exist
        """

    @abstractmethod
    async def generate_password_reset_link(self, email: str, continue_url: str) -> str:
        """Create a one-hour password reset link for ``email``."""


def validate_email(email: str) -> str:
    if not EMAIL_PATTERN.match(email or ""):
        raise InvalidEmailError(f"Invalid email address: {email!r}")
    return email


class InMemoryIdentityProvider(IdentityProvider):
    """Identity provider holding accounts in a dict."""

    def __init__(self, action_url: str = "https://local-pollution-report-app.web.app/__/auth/action"):
        self.action_url = action_url
        self._users: Dict[str, IdentityRecord] = {}
        self.reset_links: Dict[str, str] = {}

    def add_user(self, uid: str, email: Optional[str] = None) -> IdentityRecord:
        record = IdentityRecord(uid=uid, email=email)
        self._users[uid] = record
        return record

    def has_user(self, uid: str) -> bool:
        return uid in self._users

    async def get_user_by_email(self, email: str) -> IdentityRecord:
        validate_email(email)
        wanted = email.lower()
        for record in self._users.values():
            if record.email and record.email.lower() == wanted:
                return record
        raise IdentityNotFoundError(f"No user with email {email}")

    async def delete_user(self, uid: str) -> None:
        if uid not in self._users:
            raise IdentityNotFoundError(f"No user with uid {uid}")
        del self._users[uid]
        logger.info(f"Deleted identity {uid}")

    async def generate_password_reset_link(self, email: str, continue_url: str) -> str:
        record = await self.get_user_by_email(email)
        query = urlencode({
            "mode": "resetPassword",
            "oobCode": secrets.token_urlsafe(24),
            "continueUrl": continue_url,
        })
        link = f"{self.action_url}?{query}"
        self.reset_links[record.uid] = link
        return link
