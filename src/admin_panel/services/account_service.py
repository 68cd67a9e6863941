"""
Account Service - administrative account deletion.

Main admins (no barangay) may delete any user except themselves. Barangay
admins may only delete non-admin users of their own barangay. Deletion
removes the authentication identity and then the profile document.

Unlike notification side effects, failures here are surfaced to the caller.
"""

import logging
from typing import Any

from database.document_store import USERS, DocumentStore
from domain.models import User
from domain.results import CallableResult
from rbac.identity import IdentityProvider
from security.api_errors import APIError, ErrorCode

from .admin_access import load_admin

logger = logging.getLogger(__name__)


class AccountService:
    """Service for administrative account operations."""

    def __init__(self, store: DocumentStore, identity: IdentityProvider):
        self.store = store
        self.identity = identity

    async def delete_user(self, caller_uid: str, uid: Any) -> CallableResult:
        """
        Delete another user's account.

        Raises:
            APIError: PERMISSION_DENIED, INVALID_ARGUMENT, NOT_FOUND, or
                INTERNAL when the deletion itself fails
        """
        caller = await load_admin(self.store, caller_uid, "Only admins can delete users")

        if not uid or not isinstance(uid, str):
            raise APIError(ErrorCode.INVALID_ARGUMENT, "uid is required")

        if uid == caller_uid:
            raise APIError(ErrorCode.PERMISSION_DENIED, "Cannot delete yourself")

        target_data = await self.store.get(USERS, uid)
        if not target_data:
            raise APIError(ErrorCode.NOT_FOUND, "User not found")
        target = User.from_document(uid, target_data)

        if not caller.is_main_admin:
            if target.barangay != caller.barangay:
                raise APIError(ErrorCode.PERMISSION_DENIED, "You can only delete users in your barangay")
            if target.is_admin:
                raise APIError(ErrorCode.PERMISSION_DENIED, "Barangay admins cannot delete other admins")

        try:
            await self.identity.delete_user(uid)
            await self.store.delete(USERS, uid)
        except Exception as e:
            logger.error(f"Error deleting user {uid}: {e}", exc_info=True)
            raise APIError(ErrorCode.INTERNAL, f"Failed to delete user: {e}") from e

        logger.info(f"User {uid} deleted by admin {caller_uid}")
        return CallableResult.ok("User deleted successfully")
