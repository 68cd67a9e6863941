"""
FastAPI Dependency Injection for backend services.

Services are built once per application in ``ServiceContainer`` and kept on
``app.state``; routes pull what they need through these dependencies.

Usage in endpoints:
    @router.post("/api/triggers/documents")
    async def on_document_change(
        change: DocumentChange,
        dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    ):
        ...
"""

from dataclasses import dataclass, field
from fastapi import Depends, Request

from admin_panel.services import AccountService, ModerationService
from config.settings import Settings
from database.document_store import DocumentStore
from notifications.dispatcher import NotificationDispatcher
from notifications.email_triggers import EmailTriggerService
from notifications.notification_service import NotificationInboxService
from rbac.identity import IdentityProvider
from verification.codes import VerificationCodeService, VerificationPurpose
from verification.password_reset import PasswordResetService


@dataclass
class ServiceContainer:
    """Everything the routes need, wired around one store."""
    settings: Settings
    store: DocumentStore
    identity: IdentityProvider
    email_triggers: EmailTriggerService
    dispatcher: NotificationDispatcher = field(init=False)
    inbox: NotificationInboxService = field(init=False)
    accounts: AccountService = field(init=False)
    moderation: ModerationService = field(init=False)
    email_verification: VerificationCodeService = field(init=False)
    password_change: VerificationCodeService = field(init=False)
    password_reset: PasswordResetService = field(init=False)

    def __post_init__(self):
        self.dispatcher = NotificationDispatcher(self.store, self.email_triggers, self.settings)
        self.inbox = NotificationInboxService(self.store)
        self.accounts = AccountService(self.store, self.identity)
        self.moderation = ModerationService(self.store, self.email_triggers)
        verification = self.settings.verification
        self.email_verification = VerificationCodeService(
            self.store, VerificationPurpose.EMAIL, self.email_triggers, verification
        )
        self.password_change = VerificationCodeService(
            self.store, VerificationPurpose.PASSWORD_CHANGE, self.email_triggers, verification
        )
        self.password_reset = PasswordResetService(
            self.store, self.identity, self.email_triggers, self.settings
        )


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_settings_dep(container: ServiceContainer = Depends(get_container)) -> Settings:
    return container.settings


def get_dispatcher(container: ServiceContainer = Depends(get_container)) -> NotificationDispatcher:
    return container.dispatcher


def get_inbox(container: ServiceContainer = Depends(get_container)) -> NotificationInboxService:
    return container.inbox


def get_verification_service(purpose: VerificationPurpose):
    """Dependency factory for one verification purpose."""

    def dependency(container: ServiceContainer = Depends(get_container)) -> VerificationCodeService:
        if purpose == VerificationPurpose.EMAIL:
            return container.email_verification
        return container.password_change

    return dependency

