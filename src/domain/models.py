"""
Document models for the pollution report backend.

These mirror the documents kept in the managed document database. Field
names are snake_case in Python and camelCase on the wire, so a raw document
(``{"reporterId": ..., "adminResponse": {...}}``) validates directly and
``to_document()`` writes it back in the stored shape.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ReportStatus(str, Enum):
    """Report lifecycle status."""
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    DONE = "Done"


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


def coerce_timestamp(value: Any) -> Any:
    """Accept exported store timestamps ({"_seconds": ..}) alongside ISO strings."""
    if isinstance(value, dict):
        seconds = value.get("_seconds", value.get("seconds"))
        if seconds is not None:
            nanos = value.get("_nanoseconds", value.get("nanoseconds", 0)) or 0
            return datetime.fromtimestamp(seconds + nanos / 1e9, tz=timezone.utc)
    return value


Timestamp = Annotated[Optional[datetime], BeforeValidator(coerce_timestamp)]


class DocumentModel(BaseModel):
    """Base for all stored documents."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @classmethod
    def from_document(cls, doc_id: Optional[str], data: Optional[Dict[str, Any]]):
        """Build a model from a stored document and its id."""
        payload = dict(data or {})
        if doc_id is not None:
            payload["id"] = doc_id
        return cls.model_validate(payload)

    def to_document(self) -> Dict[str, Any]:
        """Serialize to the stored (camelCase) shape."""
        return self.model_dump(by_alias=True, exclude_none=True, exclude={"id"})


# =============================================================================
# USERS
# =============================================================================

class NotificationSettings(DocumentModel):
    """
    Per-user notification preference flags.

    A user who never saved preferences gets ``all_enabled()``. Once the
    preferences object exists, a flag missing from it counts as off.
    """
    email: bool = False
    announcement: bool = False
    upvote: bool = False
    password_change: bool = False
    report_status: bool = False

    @field_validator("*", mode="before")
    @classmethod
    def _null_flag_is_off(cls, value: Any) -> Any:
        return False if value is None else value

    @classmethod
    def all_enabled(cls) -> "NotificationSettings":
        return cls(email=True, announcement=True, upvote=True, password_change=True, report_status=True)


class UserSettings(DocumentModel):
    notifications: NotificationSettings = Field(default_factory=NotificationSettings.all_enabled)

    @field_validator("notifications", mode="before")
    @classmethod
    def _missing_notifications(cls, value: Any) -> Any:
        return NotificationSettings.all_enabled() if value is None else value


class User(DocumentModel):
    """User profile document (``users/{uid}``)."""
    id: str
    email: Optional[str] = None
    email_verified: bool = False
    email_verified_at: Timestamp = None
    full_name: Optional[str] = None
    username: Optional[str] = None
    role: UserRole = UserRole.USER
    barangay: Optional[str] = None
    phone_number: Optional[str] = None
    settings: UserSettings = Field(default_factory=UserSettings)

    @field_validator("settings", mode="before")
    @classmethod
    def _missing_settings(cls, value: Any) -> Any:
        return value or {}

    @field_validator("role", mode="before")
    @classmethod
    def _unknown_role_is_user(cls, value: Any) -> Any:
        return value if value in (UserRole.ADMIN, "admin") else UserRole.USER

    @field_validator("email_verified", mode="before")
    @classmethod
    def _falsy_verified(cls, value: Any) -> Any:
        return bool(value)

    @property
    def notifications(self) -> NotificationSettings:
        return self.settings.notifications

    @property
    def display_name(self) -> str:
        return self.full_name or "User"

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_main_admin(self) -> bool:
        """Admin with no barangay assignment (global authority)."""
        return self.is_admin and not self.barangay


# =============================================================================
# REPORTS
# =============================================================================

class Comment(DocumentModel):
    id: Optional[str] = None
    user_id: Optional[str] = None
    user_name: Optional[str] = None
    user_role: UserRole = UserRole.USER
    text: str = ""
    created_at: Timestamp = None

    @field_validator("user_role", mode="before")
    @classmethod
    def _unknown_role_is_user(cls, value: Any) -> Any:
        return value if value in (UserRole.ADMIN, "admin") else UserRole.USER

    @property
    def is_admin(self) -> bool:
        return self.user_role == UserRole.ADMIN


class AdminResponse(DocumentModel):
    text: str = ""
    date: Optional[str] = None


class Report(DocumentModel):
    """Pollution report document (``reports/{reportId}``)."""
    id: Optional[str] = None
    reporter_id: Optional[str] = None
    reporter_name: Optional[str] = None
    pollution_type: str = Field(default="Unknown", alias="type")
    location: str = "Unknown location"
    description: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    status: str = ReportStatus.PENDING.value
    approved: bool = False
    upvotes: int = 0
    upvoted_by: List[str] = Field(default_factory=list)
    admin_response: Optional[AdminResponse] = None
    comments: List[Comment] = Field(default_factory=list)
    lat: Optional[float] = None
    lng: Optional[float] = None
    barangay_id: Optional[str] = None
    created_at: Timestamp = None

    @field_validator("approved", mode="before")
    @classmethod
    def _falsy_approved(cls, value: Any) -> Any:
        return bool(value)

    @field_validator("upvotes", mode="before")
    @classmethod
    def _missing_upvotes(cls, value: Any) -> Any:
        return value or 0

    @field_validator("comments", "images", "upvoted_by", mode="before")
    @classmethod
    def _missing_list(cls, value: Any) -> Any:
        return value or []

    @property
    def response_text(self) -> str:
        return self.admin_response.text if self.admin_response else ""

    @property
    def latest_comment(self) -> Optional[Comment]:
        return self.comments[-1] if self.comments else None


# =============================================================================
# ANNOUNCEMENTS AND NOTIFICATIONS
# =============================================================================

class Announcement(DocumentModel):
    """Announcement document; no barangay means global."""
    id: Optional[str] = None
    title: str = "New Announcement"
    subtitle: Optional[str] = None
    description: str = ""
    location: Optional[str] = None
    barangay_id: Optional[str] = None
    date: Timestamp = None
    created_at: Timestamp = None

    @property
    def is_global(self) -> bool:
        return not self.barangay_id


class Notification(DocumentModel):
    """In-app notification record (``notifications/{id}``)."""
    id: Optional[str] = None
    user_id: str
    type: str
    title: str
    message: str
    read: bool = False
    created_at: Timestamp = None
    report_id: Optional[str] = None
    announcement_id: Optional[str] = None
    barangay_id: Optional[str] = None
    from_user_id: Optional[str] = None
    from_user_name: Optional[str] = None


class VerificationRecord(DocumentModel):
    """Pending one-time code, keyed by user id."""
    code: str
    email: Optional[str] = None
    expires_at: Annotated[datetime, BeforeValidator(coerce_timestamp)]
    attempts: int = 0
    created_at: Timestamp = None
