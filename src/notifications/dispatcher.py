"""
Notification Dispatcher

Consumes document-change events and fans them out into in-app notification
records and emails.

Flow per delivery:
1. Drop the delivery if its event id was already processed
2. Classify the change into transitions
3. Resolve recipients for each transition
4. Plan side effects: one notification per recipient, plus an email for
   each eligible recipient
5. Execute the side effects concurrently and wait for all of them
6. Record the event id once every recipient has its notification record

Side effects are best effort. Failures are logged and counted, never
raised, so a failing mailbox or a failed write cannot block the rest of
the batch. Email failures do not hold back recording the event; a
missing notification record does, so a redelivery can write it.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from pydantic import BaseModel, Field

from config.settings import Settings, get_settings
from database.document_store import PROCESSED_EVENTS, SERVER_TIMESTAMP, DocumentStore
from domain.events import DocumentChange
from domain.models import Notification, User
from services.logging_config import event_id_var, get_logger, log_performance

from .content import build_notification
from .eligibility import category_for, is_email_eligible
from .email_triggers import EmailTriggerService
from .notification_writer import NotificationWriter
from .recipients import RecipientResolver
from .transitions import Transition, classify_change

logger = logging.getLogger(__name__)


# =============================================================================
# SIDE EFFECTS
# =============================================================================

@dataclass(frozen=True)
class NotificationEffect:
    """Write one in-app notification."""
    notification: Notification


@dataclass(frozen=True)
class EmailEffect:
    """Send the transition's email to one recipient."""
    transition: Transition
    recipient: User


SideEffect = Union[NotificationEffect, EmailEffect]


def plan_effects(transition: Transition, recipients: Sequence[User]) -> List[SideEffect]:
    """
    Side effects for one transition.

    Every recipient gets a notification record regardless of email
    preferences; emails are filtered by eligibility.
    """
    category = category_for(transition.kind)
    effects: List[SideEffect] = []
    for recipient in recipients:
        effects.append(NotificationEffect(build_notification(transition, recipient)))
        if is_email_eligible(recipient, category):
            effects.append(EmailEffect(transition, recipient))
    return effects


class DispatchResult(BaseModel):
    """Summary of one trigger delivery."""
    event_id: Optional[str] = None
    document_id: str
    duplicate: bool = False
    transitions: List[str] = Field(default_factory=list)
    recipients: int = 0
    notifications_written: int = 0
    notifications_failed: int = 0
    emails_sent: int = 0
    emails_failed: int = 0
    errors: List[str] = Field(default_factory=list)

    @property
    def fully_delivered(self) -> bool:
        """Recipients resolved and every notification record written."""
        return not self.errors and self.notifications_failed == 0


# =============================================================================
# DISPATCHER
# =============================================================================

class NotificationDispatcher:
    """Routes document changes to notification side effects."""

    def __init__(
        self,
        store: DocumentStore,
        email_triggers: Optional[EmailTriggerService] = None,
        settings: Optional[Settings] = None,
    ):
        self.store = store
        self.email_triggers = email_triggers or EmailTriggerService()
        self.settings = settings or get_settings()
        self.writer = NotificationWriter(store)
        self.resolver = RecipientResolver(store)

    @log_performance("dispatch_change")
    async def handle_change(self, change: DocumentChange) -> DispatchResult:
        """Process one trigger delivery end to end."""
        token = event_id_var.set(change.event_id)
        try:
            return await self._handle(change)
        finally:
            event_id_var.reset(token)

    async def _handle(self, change: DocumentChange) -> DispatchResult:
        log = get_logger(__name__, entity=change.entity.value, document_id=change.document_id)
        result = DispatchResult(event_id=change.event_id, document_id=change.document_id)

        dedupe = self.settings.dedupe_trigger_events and change.event_id
        if dedupe and await self.store.exists(PROCESSED_EVENTS, change.event_id):
            log.info(f"Skipping duplicate delivery of event {change.event_id}")
            result.duplicate = True
            return result

        transitions = classify_change(change)
        if not transitions:
            log.debug(f"No notify-worthy transition for {change.operation.value}")

        for transition in transitions:
            log.info(f"Transition {transition.kind.value} on {transition.document_id}")
            result.transitions.append(transition.kind.value)
            await self.dispatch(transition, result)

        if dedupe and result.fully_delivered:
            await self._mark_processed(change)
        elif dedupe:
            log.warning(f"Event {change.event_id} left unrecorded so a redelivery can retry it")
        return result

    async def dispatch(self, transition: Transition, result: Optional[DispatchResult] = None) -> DispatchResult:
        """Resolve recipients, then run every planned side effect concurrently."""
        if result is None:
            result = DispatchResult(document_id=transition.document_id)

        try:
            recipients = await self.resolver.resolve(transition)
        except Exception as e:
            logger.error(
                f"Failed to resolve recipients for {transition.kind.value} "
                f"on {transition.document_id}: {e}",
                exc_info=True,
            )
            result.errors.append(f"{transition.kind.value}: recipient resolution failed")
            return result

        if not recipients:
            logger.info(f"No recipients for {transition.kind.value} on {transition.document_id}")
            return result

        result.recipients += len(recipients)
        effects = plan_effects(transition, recipients)
        outcomes = await asyncio.gather(
            *(self._execute(effect) for effect in effects),
            return_exceptions=True,
        )

        for effect, outcome in zip(effects, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(f"Side effect {type(effect).__name__} raised: {outcome}", exc_info=outcome)
                ok = False
            else:
                ok = bool(outcome)

            if isinstance(effect, NotificationEffect):
                if ok:
                    result.notifications_written += 1
                else:
                    result.notifications_failed += 1
            elif ok:
                result.emails_sent += 1
            else:
                result.emails_failed += 1

        logger.info(
            f"{transition.kind.value} on {transition.document_id}: "
            f"{result.notifications_written} notifications, "
            f"{result.emails_sent} emails sent, {result.emails_failed} failed"
        )
        return result

    async def _execute(self, effect: SideEffect) -> bool:
        if isinstance(effect, NotificationEffect):
            return await self.writer.write(effect.notification) is not None
        return await self.email_triggers.send_for_transition(effect.transition, effect.recipient)

    async def _mark_processed(self, change: DocumentChange) -> None:
        try:
            await self.store.set(PROCESSED_EVENTS, change.event_id, {
                "entity": change.entity.value,
                "operation": change.operation.value,
                "documentId": change.document_id,
                "processedAt": SERVER_TIMESTAMP,
            })
        except Exception as e:
            logger.error(f"Failed to record processed event {change.event_id}: {e}", exc_info=True)
