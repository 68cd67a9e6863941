"""
Admin access checks shared by administrative operations.
"""

from database.document_store import USERS, DocumentStore
from domain.models import User
from security.api_errors import APIError, ErrorCode


async def load_admin(store: DocumentStore, uid: str, denied_message: str) -> User:
    """
    Load the caller's profile and require the admin role.

    Raises:
        APIError: PERMISSION_DENIED if the profile is missing or not an admin
    """
    data = await store.get(USERS, uid)
    if not data:
        raise APIError(ErrorCode.PERMISSION_DENIED, denied_message)
    caller = User.from_document(uid, data)
    if not caller.is_admin:
        raise APIError(ErrorCode.PERMISSION_DENIED, denied_message)
    return caller
