"""
Tests for one-time verification codes.

Tests:
- Code generation
- Issuing (storage, overwrite, email)
- Verifying (expiry, attempt limit, mismatch, success)
"""

from datetime import timedelta
from itertools import count
from unittest.mock import AsyncMock

import pytest

from config.settings import VerificationSettings
from database.document_store import EMAIL_VERIFICATIONS, PASSWORD_CHANGE_VERIFICATIONS, USERS
from notifications.email_triggers import EmailTriggerService
from security.api_errors import APIError, ErrorCode
from verification.codes import (
    CODE_EXPIRED,
    CODE_REQUIRED,
    CODE_SENT,
    NO_CODE,
    SEND_FAILED,
    TOO_MANY_ATTEMPTS,
    VerificationCodeService,
    VerificationPurpose,
    generate_verification_code,
)

from factories import FIXED_NOW, RecordingEmailProvider


def sequential_codes():
    numbers = count(111111)
    return lambda: str(next(numbers))


@pytest.fixture
def email_service(store, email_triggers):
    return VerificationCodeService(
        store,
        VerificationPurpose.EMAIL,
        email_triggers,
        VerificationSettings(),
        code_factory=sequential_codes(),
    )


@pytest.fixture
def password_service(store, email_triggers):
    return VerificationCodeService(
        store,
        VerificationPurpose.PASSWORD_CHANGE,
        email_triggers,
        VerificationSettings(),
        code_factory=sequential_codes(),
    )


class TestGenerateCode:

    def test_six_digits_in_range(self):
        for _ in range(200):
            code = generate_verification_code()
            assert len(code) == 6
            assert 100000 <= int(code) <= 999999


class TestIssue:
    """Tests for issuing codes."""

    @pytest.mark.asyncio
    async def test_stores_record_and_sends(self, email_service, store, seed, email_provider):
        seed.user("u1", email="ana@example.com", verified=False)

        result = await email_service.issue("u1")

        assert result.success
        assert result.message == CODE_SENT
        record = store.dump(EMAIL_VERIFICATIONS)["u1"]
        assert record["code"] == "111111"
        assert record["attempts"] == 0
        assert record["email"] == "ana@example.com"
        assert record["expiresAt"] == FIXED_NOW + timedelta(minutes=10)
        assert record["createdAt"] == FIXED_NOW
        [message] = email_provider.to("ana@example.com")
        assert "111111" in message.body_html

    @pytest.mark.asyncio
    async def test_reissue_overwrites(self, email_service, store, seed):
        """Only the latest code is ever valid."""
        seed.user("u1")

        await email_service.issue("u1")
        await email_service.issue("u1")

        assert store.dump(EMAIL_VERIFICATIONS)["u1"]["code"] == "111112"
        result = await email_service.verify("u1", "111111")
        assert not result.success
        assert (await email_service.verify("u1", "111112")).success

    @pytest.mark.asyncio
    async def test_missing_email_is_failed_precondition(self, email_service, seed):
        seed.user("u1", email=None)

        with pytest.raises(APIError) as exc_info:
            await email_service.issue("u1")
        assert exc_info.value.code == ErrorCode.FAILED_PRECONDITION

    @pytest.mark.asyncio
    async def test_missing_profile_is_failed_precondition(self, email_service):
        with pytest.raises(APIError) as exc_info:
            await email_service.issue("ghost")
        assert exc_info.value.code == ErrorCode.FAILED_PRECONDITION

    @pytest.mark.asyncio
    async def test_email_not_sent(self, store, seed):
        seed.user("u1")
        service = VerificationCodeService(
            store,
            VerificationPurpose.EMAIL,
            EmailTriggerService(provider=RecordingEmailProvider(succeed=False)),
        )

        result = await service.issue("u1")

        assert not result.success
        assert result.error == SEND_FAILED

    @pytest.mark.asyncio
    async def test_store_failure_is_internal(self, email_service, store, seed):
        seed.user("u1")
        store.set = AsyncMock(side_effect=RuntimeError("write failed"))

        with pytest.raises(APIError) as exc_info:
            await email_service.issue("u1")
        assert exc_info.value.code == ErrorCode.INTERNAL

    @pytest.mark.asyncio
    async def test_password_change_uses_own_collection(self, password_service, store, seed, email_provider):
        seed.user("u1")

        await password_service.issue("u1")

        assert "u1" in store.dump(PASSWORD_CHANGE_VERIFICATIONS)
        assert store.dump(EMAIL_VERIFICATIONS) == {}
        assert "Password Change" in email_provider.sent[0].subject


class TestVerify:
    """Tests for checking codes."""

    @pytest.mark.asyncio
    async def test_success_marks_email_verified(self, email_service, store, seed, clock):
        seed.user("u1", verified=False)
        await email_service.issue("u1")

        result = await email_service.verify("u1", "111111")

        assert result.success
        assert result.message == "Email verified successfully"
        user = store.dump(USERS)["u1"]
        assert user["emailVerified"] is True
        assert user["emailVerifiedAt"] == clock.now
        assert store.dump(EMAIL_VERIFICATIONS) == {}

    @pytest.mark.asyncio
    async def test_password_change_success_leaves_profile(self, password_service, store, seed):
        seed.user("u1", verified=False)
        await password_service.issue("u1")

        result = await password_service.verify("u1", "111111")

        assert result.message == "Code verified successfully"
        assert store.dump(USERS)["u1"]["emailVerified"] is False
        assert store.dump(PASSWORD_CHANGE_VERIFICATIONS) == {}

    @pytest.mark.asyncio
    async def test_empty_code(self, email_service):
        result = await email_service.verify("u1", "")
        assert not result.success
        assert result.message == CODE_REQUIRED

    @pytest.mark.asyncio
    async def test_no_record(self, email_service):
        result = await email_service.verify("u1", "123456")
        assert result.message == NO_CODE

    @pytest.mark.asyncio
    async def test_mismatch_reports_remaining_attempts(self, email_service, store, seed):
        seed.user("u1")
        await email_service.issue("u1")

        result = await email_service.verify("u1", "000000")

        assert not result.success
        assert result.message == "Invalid code. 4 attempts remaining."
        assert store.dump(EMAIL_VERIFICATIONS)["u1"]["attempts"] == 1

    @pytest.mark.asyncio
    async def test_sixth_attempt_deletes_record(self, email_service, store, seed):
        seed.user("u1")
        await email_service.issue("u1")
        for _ in range(5):
            await email_service.verify("u1", "000000")

        result = await email_service.verify("u1", "111111")

        assert result.message == TOO_MANY_ATTEMPTS
        assert store.dump(EMAIL_VERIFICATIONS) == {}
        assert (await email_service.verify("u1", "111111")).message == NO_CODE

    @pytest.mark.asyncio
    async def test_fifth_attempt_can_still_succeed(self, email_service, seed):
        seed.user("u1")
        await email_service.issue("u1")
        for _ in range(4):
            await email_service.verify("u1", "000000")

        assert (await email_service.verify("u1", "111111")).success

    @pytest.mark.asyncio
    async def test_expired_code_rejected_even_if_correct(self, email_service, store, seed, clock):
        seed.user("u1")
        await email_service.issue("u1")
        clock.now = FIXED_NOW + timedelta(minutes=10, seconds=1)

        result = await email_service.verify("u1", "111111")

        assert result.message == CODE_EXPIRED
        assert store.dump(EMAIL_VERIFICATIONS) == {}

    @pytest.mark.asyncio
    async def test_expiry_boundary_is_still_valid(self, email_service, seed, clock):
        seed.user("u1")
        await email_service.issue("u1")
        clock.now = FIXED_NOW + timedelta(minutes=10)

        assert (await email_service.verify("u1", "111111")).success

    @pytest.mark.asyncio
    async def test_missing_profile_on_success_is_internal(self, email_service, store, seed):
        seed.user("u1")
        await email_service.issue("u1")
        await store.delete(USERS, "u1")

        with pytest.raises(APIError) as exc_info:
            await email_service.verify("u1", "111111")
        assert exc_info.value.code == ErrorCode.INTERNAL
