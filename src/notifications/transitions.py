"""
Transition Classifier

Turns a document change into notify-worthy transitions. A transition is
computed once per rule family from plain before/after snapshots, so the
rules can be exercised without any storage trigger.

Report updates are checked by three independent families:
1. Status/approval - accepted, in progress, done, rejected (first match wins)
2. Upvote - count strictly increased
3. Comment/response - new admin comment or changed admin response

Report creation always yields NEW_REPORT; announcement creation always
yields ANNOUNCEMENT.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from domain.events import DocumentChange, EntityType, Operation
from domain.models import Announcement, Comment, Report, ReportStatus

logger = logging.getLogger(__name__)


class TransitionKind(str, Enum):
    """Transition kinds. Values double as notification type tags."""
    REPORT_ACCEPTED = "report_accepted"
    REPORT_IN_PROGRESS = "report_in_progress"
    REPORT_DONE = "report_done"
    REPORT_REJECTED = "report_rejected"
    UPVOTE = "upvote"
    ADMIN_COMMENT = "admin_comment"
    ADMIN_RESPONSE = "admin_response"
    NEW_REPORT = "new_report"
    ANNOUNCEMENT = "announcement"

    @property
    def is_status_change(self) -> bool:
        return self in STATUS_KINDS


STATUS_KINDS = frozenset({
    TransitionKind.REPORT_ACCEPTED,
    TransitionKind.REPORT_IN_PROGRESS,
    TransitionKind.REPORT_DONE,
    TransitionKind.REPORT_REJECTED,
})


@dataclass(frozen=True)
class Transition:
    """A classified change of one document."""
    kind: TransitionKind
    document_id: str
    report: Optional[Report] = None
    announcement: Optional[Announcement] = None
    comment: Optional[Comment] = None

    @property
    def barangay_id(self) -> Optional[str]:
        source = self.report or self.announcement
        return source.barangay_id if source else None


# =============================================================================
# REPORT UPDATE RULES
# =============================================================================

def classify_status_change(before: Report, after: Report) -> Optional[TransitionKind]:
    """Status/approval rule family, in priority order."""
    if before.status == after.status and before.approved == after.approved:
        return None

    if not before.approved and after.approved:
        return TransitionKind.REPORT_ACCEPTED
    if before.status != ReportStatus.IN_PROGRESS.value and after.status == ReportStatus.IN_PROGRESS.value:
        return TransitionKind.REPORT_IN_PROGRESS
    if before.status != ReportStatus.DONE.value and after.status == ReportStatus.DONE.value:
        return TransitionKind.REPORT_DONE
    if before.approved and not after.approved:
        return TransitionKind.REPORT_REJECTED
    return None


def classify_upvote(before: Report, after: Report) -> Optional[TransitionKind]:
    if after.upvotes > before.upvotes:
        return TransitionKind.UPVOTE
    return None


def classify_comment(before: Report, after: Report) -> Optional[TransitionKind]:
    """
    Comment/response rule family.

    A new comment by the reporter suppresses the whole family. A plain user
    comment only notifies if the admin response changed in the same write.
    """
    has_new_response = bool(after.response_text) and after.response_text != before.response_text
    has_new_comment = len(after.comments) > len(before.comments)

    if not has_new_response and not has_new_comment:
        return None

    latest = after.latest_comment if has_new_comment else None
    if latest is not None and latest.user_id == after.reporter_id:
        return None

    if latest is not None and latest.is_admin:
        return TransitionKind.ADMIN_COMMENT
    if has_new_response:
        return TransitionKind.ADMIN_RESPONSE
    return None


def classify_report_update(document_id: str, before: Report, after: Report) -> List[Transition]:
    """Run every report-update rule family; each yields at most one transition."""
    if not after.reporter_id:
        return []

    transitions = []
    for rule in (classify_status_change, classify_upvote, classify_comment):
        kind = rule(before, after)
        if kind is None:
            continue
        comment = after.latest_comment if kind == TransitionKind.ADMIN_COMMENT else None
        transitions.append(
            Transition(kind=kind, document_id=document_id, report=after, comment=comment)
        )
    return transitions


# =============================================================================
# ENTRY POINT
# =============================================================================

def classify_change(change: DocumentChange) -> List[Transition]:
    """Classify one trigger delivery into zero or more transitions."""
    if change.entity == EntityType.REPORT:
        after = Report.from_document(change.document_id, change.after)
        if change.operation == Operation.CREATE:
            return [Transition(TransitionKind.NEW_REPORT, change.document_id, report=after)]
        before = Report.from_document(change.document_id, change.before)
        return classify_report_update(change.document_id, before, after)

    if change.entity == EntityType.ANNOUNCEMENT:
        if change.operation != Operation.CREATE:
            return []
        announcement = Announcement.from_document(change.document_id, change.after)
        return [Transition(TransitionKind.ANNOUNCEMENT, change.document_id, announcement=announcement)]

    logger.warning(f"Unhandled entity type: {change.entity}")
    return []
