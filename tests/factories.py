"""Document factories and test doubles shared across the suite."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from notifications.email_provider import (
    DeliveryResult,
    DeliveryStatus,
    EmailMessage,
    EmailProvider,
)

FIXED_NOW = datetime(2026, 3, 14, 9, 30, tzinfo=timezone.utc)


class FakeClock:
    """Settable clock for the document store."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class RecordingEmailProvider(EmailProvider):
    """Email provider that keeps every message instead of sending it."""

    def __init__(self, succeed: bool = True, fail_for: Optional[List[str]] = None):
        self.succeed = succeed
        self.fail_for = set(fail_for or [])
        self.sent: List[EmailMessage] = []

    @property
    def provider_name(self) -> str:
        return "recording"

    def is_configured(self) -> bool:
        return True

    def send(self, message: EmailMessage) -> DeliveryResult:
        message.validate()
        self.sent.append(message)
        if not self.succeed or message.to in self.fail_for:
            return DeliveryResult(
                success=False,
                status=DeliveryStatus.FAILED,
                provider=self.provider_name,
                error_message="rejected by test provider",
            )
        return DeliveryResult(
            success=True,
            status=DeliveryStatus.SENT,
            message_id=f"test-{len(self.sent)}",
            provider=self.provider_name,
        )

    def to(self, address: str) -> List[EmailMessage]:
        return [m for m in self.sent if m.to == address]


# =============================================================================
# DOCUMENT FACTORIES
# =============================================================================
def preferences(**flags: bool) -> Dict[str, bool]:
    """A saved preferences object with every flag on unless overridden."""
    saved = {"email": True, "announcement": True, "upvote": True, "passwordChange": True, "reportStatus": True}
    saved.update(flags)
    return saved


def make_user(
    email: Optional[str] = "user@example.com",
    verified: bool = True,
    role: str = "user",
    barangay: Optional[str] = None,
    full_name: Optional[str] = "Juan Dela Cruz",
    notifications: Optional[Dict[str, bool]] = None,
    **extra: Any,
) -> Dict[str, Any]:
    """Raw user document in the stored (camelCase) shape."""
    data: Dict[str, Any] = {
        "email": email,
        "emailVerified": verified,
        "role": role,
        "fullName": full_name,
    }
    if barangay is not None:
        data["barangay"] = barangay
    if notifications is not None:
        data["settings"] = {"notifications": notifications}
    data.update(extra)
    return {k: v for k, v in data.items() if v is not None}


def make_report(
    reporter_id: Optional[str] = "reporter-1",
    status: str = "Pending",
    approved: bool = False,
    upvotes: int = 0,
    location: str = "Rizal Street",
    pollution_type: str = "Air",
    barangay_id: Optional[str] = "brgy-1",
    comments: Optional[List[Dict[str, Any]]] = None,
    admin_response: Optional[str] = None,
    **extra: Any,
) -> Dict[str, Any]:
    """Raw report document in the stored (camelCase) shape."""
    data: Dict[str, Any] = {
        "reporterId": reporter_id,
        "reporterName": "Juan Dela Cruz",
        "type": pollution_type,
        "location": location,
        "description": "Black smoke from a factory chimney",
        "status": status,
        "approved": approved,
        "upvotes": upvotes,
        "comments": comments or [],
        "barangayId": barangay_id,
    }
    if admin_response is not None:
        data["adminResponse"] = {"text": admin_response, "date": "2026-03-14"}
    data.update(extra)
    return {k: v for k, v in data.items() if v is not None}


def make_announcement(
    title: str = "Clean-up Drive",
    description: str = "Join us this Saturday for the river clean-up.",
    barangay_id: Optional[str] = None,
    **extra: Any,
) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "title": title,
        "description": description,
        "barangayId": barangay_id,
    }
    data.update(extra)
    return {k: v for k, v in data.items() if v is not None}


def admin_comment(text: str = "We are looking into this.", user_id: str = "admin-1") -> Dict[str, Any]:
    return {"userId": user_id, "userName": "Barangay Admin", "userRole": "admin", "text": text}


def user_comment(text: str = "Still smoky today.", user_id: str = "neighbor-1") -> Dict[str, Any]:
    return {"userId": user_id, "userName": "Neighbor", "userRole": "user", "text": text}
