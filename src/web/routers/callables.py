"""
Callable Operation Endpoints

Direct request/response operations. Each takes a JSON argument record and
the bearer-authenticated caller, and returns a ``CallableResult`` or a
categorized error.

Routes:
- POST /api/reports/rejection-notice
- POST /api/admin/users/delete
- POST /api/verification/email/send
- POST /api/verification/email/verify
- POST /api/verification/password-change/send
- POST /api/verification/password-change/verify
- POST /api/auth/password-reset
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from domain.results import CallableResult
from rbac.context import CallerContext
from rbac.dependencies import require_caller
from verification.codes import VerificationCodeService, VerificationPurpose

from ..dependencies import ServiceContainer, get_container, get_verification_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Callables"])


# =============================================================================
# Request Models
# =============================================================================

class CallableRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RejectionNoticeRequest(CallableRequest):
    report_id: Optional[str] = None
    reporter_id: Optional[str] = None
    report_location: Optional[str] = None
    report_type: Optional[str] = None
    reason: Optional[str] = None


class DeleteUserRequest(CallableRequest):
    # Left untyped so a non-string uid reaches the service as INVALID_ARGUMENT
    uid: Optional[Any] = None


class VerifyCodeRequest(CallableRequest):
    code: Optional[str] = None


class PasswordResetRequest(CallableRequest):
    email: Optional[str] = None


def _result(result: CallableResult) -> dict:
    return result.model_dump(exclude_none=True)


# =============================================================================
# Moderation and accounts
# =============================================================================

@router.post("/reports/rejection-notice")
async def send_rejection_notice(
    body: RejectionNoticeRequest,
    caller: CallerContext = Depends(require_caller),
    container: ServiceContainer = Depends(get_container),
):
    result = await container.moderation.send_rejection_warning(
        caller.uid,
        report_id=body.report_id,
        reporter_id=body.reporter_id,
        report_location=body.report_location,
        report_type=body.report_type,
        reason=body.reason,
    )
    return _result(result)


@router.post("/admin/users/delete")
async def delete_user(
    body: DeleteUserRequest,
    caller: CallerContext = Depends(require_caller),
    container: ServiceContainer = Depends(get_container),
):
    return _result(await container.accounts.delete_user(caller.uid, body.uid))


# =============================================================================
# Verification codes
# =============================================================================

def _register_verification_routes(path: str, purpose: VerificationPurpose) -> None:
    get_service = get_verification_service(purpose)

    @router.post(f"/verification/{path}/send", name=f"send_{purpose.value}_code")
    async def send_code(
        caller: CallerContext = Depends(require_caller),
        service: VerificationCodeService = Depends(get_service),
    ):
        return _result(await service.issue(caller.uid))

    @router.post(f"/verification/{path}/verify", name=f"verify_{purpose.value}_code")
    async def verify_code(
        body: VerifyCodeRequest,
        caller: CallerContext = Depends(require_caller),
        service: VerificationCodeService = Depends(get_service),
    ):
        return _result(await service.verify(caller.uid, body.code))


_register_verification_routes("email", VerificationPurpose.EMAIL)
_register_verification_routes("password-change", VerificationPurpose.PASSWORD_CHANGE)


# =============================================================================
# Password reset (no authentication)
# =============================================================================

@router.post("/auth/password-reset")
async def send_password_reset(
    body: PasswordResetRequest,
    container: ServiceContainer = Depends(get_container),
):
    return _result(await container.password_reset.send_reset_email(body.email))
