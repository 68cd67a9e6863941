"""
Recipient resolution.

Report lifecycle, upvote and comment transitions go to the reporter.
New reports go to the barangay's admins plus every main admin.
Announcements go to everyone, or only to the announcement's barangay.
"""

import logging
from typing import Dict, Iterable, List, Optional

from database.document_store import USERS, DocumentStore
from domain.models import Announcement, User, UserRole

from .transitions import Transition, TransitionKind

logger = logging.getLogger(__name__)


def select_new_report_admins(admins: Iterable[User], barangay_id: Optional[str]) -> List[User]:
    """
    Admins to alert about a new report, de-duplicated by id.

    Barangay admins matching ``barangay_id`` come first, then main admins.
    """
    selected: Dict[str, User] = {}
    admins = [user for user in admins if user.is_admin]

    if barangay_id:
        for user in admins:
            if user.barangay == barangay_id:
                selected.setdefault(user.id, user)
    for user in admins:
        if user.is_main_admin:
            selected.setdefault(user.id, user)
    return list(selected.values())


def select_announcement_recipients(users: Iterable[User], announcement: Announcement) -> List[User]:
    if announcement.is_global:
        return list(users)
    return [user for user in users if user.barangay == announcement.barangay_id]


class RecipientResolver:
    """Loads recipient profiles for a transition from the document store."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def load_user(self, uid: str) -> User:
        """Load a profile; a missing document yields a bare profile with defaults."""
        data = await self.store.get(USERS, uid)
        return User.from_document(uid, data)

    async def resolve(self, transition: Transition) -> List[User]:
        if transition.kind == TransitionKind.NEW_REPORT:
            snapshots = await self.store.query(USERS, role=UserRole.ADMIN.value)
            admins = [User.from_document(s.id, s.data) for s in snapshots]
            return select_new_report_admins(admins, transition.report.barangay_id)

        if transition.kind == TransitionKind.ANNOUNCEMENT:
            announcement = transition.announcement
            if announcement.is_global:
                snapshots = await self.store.query(USERS)
            else:
                snapshots = await self.store.query(USERS, barangay=announcement.barangay_id)
            users = [User.from_document(s.id, s.data) for s in snapshots]
            return select_announcement_recipients(users, announcement)

        reporter_id = transition.report.reporter_id if transition.report else None
        if not reporter_id:
            logger.debug(f"No reporter on {transition.document_id}; nothing to notify")
            return []
        return [await self.load_user(reporter_id)]
