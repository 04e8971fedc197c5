from datetime import timedelta

import pytest

from grama_common.errors import (
    CodeMismatch,
    InvalidPhoneFormat,
    NoActiveChallenge,
    RetryLimitExceeded,
    TransientNetworkError,
)
from grama_common.models import UserRole
from storefront.database import ChallengeDatabase, ChallengeState, UserDatabase
from storefront.services import OtpManager

from tests.conftest import CODE, PHONE


async def test_request_challenge_sends_code_and_stores_pending(otp_manager, delivery, clock):
    ack = await otp_manager.request_challenge(PHONE)

    assert delivery.sent == [(PHONE, f"Your Grama Groceries OTP is: {CODE}. Valid for 5 minutes.")]
    assert ack.expires_at == clock.now + timedelta(minutes=5)
    assert ack.resend_count == 0
    assert ack.retries_remaining == 3
    assert ack.debug_code == CODE
    assert otp_manager.status(PHONE) == ChallengeState.PENDING


async def test_code_is_stored_hashed(otp_manager):
    await otp_manager.request_challenge(PHONE)

    challenge = otp_manager.challenges.get(PHONE)
    assert CODE not in challenge.code_hash


async def test_ack_has_no_code_unless_exposed(delivery, clock, codes):
    manager = OtpManager(ChallengeDatabase(), UserDatabase(), delivery, clock=clock, code_factory=codes)

    ack = await manager.request_challenge(PHONE)

    assert ack.debug_code is None


@pytest.mark.parametrize("phone", ["", "12345", "5876543210", "98765432101", "98765abcde", "+919876543210"])
async def test_invalid_phone_issues_nothing(otp_manager, delivery, phone):
    with pytest.raises(InvalidPhoneFormat):
        await otp_manager.request_challenge(phone)

    assert delivery.sent == []
    assert otp_manager.status(phone) == ChallengeState.NO_CHALLENGE


async def test_verify_creates_customer_and_consumes_challenge(otp_manager, clock):
    await otp_manager.request_challenge(PHONE)

    user = otp_manager.verify_challenge(PHONE, CODE)

    assert user.id == f"user_{PHONE}"
    assert user.phone_number == PHONE
    assert user.role == UserRole.CUSTOMER
    assert user.profile.is_phone_verified
    assert user.created_at == clock.now
    assert otp_manager.status(PHONE) == ChallengeState.CONSUMED

    with pytest.raises(NoActiveChallenge):
        otp_manager.verify_challenge(PHONE, CODE)


async def test_second_login_returns_existing_user(otp_manager, clock):
    await otp_manager.request_challenge(PHONE)
    first = otp_manager.verify_challenge(PHONE, CODE)

    clock.advance(days=1)
    await otp_manager.request_challenge(PHONE)
    second = otp_manager.verify_challenge(PHONE, CODE)

    assert second.id == first.id
    assert second.created_at == first.created_at


def test_verify_without_challenge(otp_manager):
    with pytest.raises(NoActiveChallenge):
        otp_manager.verify_challenge(PHONE, CODE)


def test_verify_rejects_malformed_phone(otp_manager):
    with pytest.raises(InvalidPhoneFormat):
        otp_manager.verify_challenge("12345", CODE)


async def test_wrong_code_is_rejected(otp_manager, codes):
    codes.queue("482913")
    await otp_manager.request_challenge(PHONE)

    with pytest.raises(CodeMismatch):
        otp_manager.verify_challenge(PHONE, "482914")

    # Still pending, the right code works
    assert otp_manager.status(PHONE) == ChallengeState.PENDING
    assert otp_manager.verify_challenge(PHONE, "482913").phone_number == PHONE


@pytest.mark.parametrize("code", ["123456", "000000", "999999"])
async def test_no_shortcut_codes(otp_manager, code):
    await otp_manager.request_challenge(PHONE)

    with pytest.raises(CodeMismatch):
        otp_manager.verify_challenge(PHONE, code)


async def test_expired_challenge_is_rejected_even_with_right_code(otp_manager, clock):
    await otp_manager.request_challenge(PHONE)

    clock.advance(minutes=5)

    assert otp_manager.status(PHONE) == ChallengeState.EXPIRED
    with pytest.raises(NoActiveChallenge):
        otp_manager.verify_challenge(PHONE, CODE)
    assert otp_manager.status(PHONE) == ChallengeState.NO_CHALLENGE


async def test_code_still_valid_just_before_expiry(otp_manager, clock):
    await otp_manager.request_challenge(PHONE)

    clock.advance(minutes=4, seconds=59)

    assert otp_manager.verify_challenge(PHONE, CODE).phone_number == PHONE


async def test_new_request_supersedes_previous_code(otp_manager, codes):
    codes.queue("111111", "222222")
    await otp_manager.request_challenge(PHONE)
    ack = await otp_manager.request_challenge(PHONE)

    assert ack.resend_count == 1
    assert ack.retries_remaining == 2

    with pytest.raises(CodeMismatch):
        otp_manager.verify_challenge(PHONE, "111111")
    assert otp_manager.verify_challenge(PHONE, "222222").phone_number == PHONE


async def test_resend_supersedes_previous_code(otp_manager, codes):
    codes.queue("111111", "222222")
    await otp_manager.request_challenge(PHONE)
    ack = await otp_manager.resend_challenge(PHONE)

    assert ack.resend_count == 1
    assert ack.retries_remaining == 2
    with pytest.raises(CodeMismatch):
        otp_manager.verify_challenge(PHONE, "111111")
    assert otp_manager.verify_challenge(PHONE, "222222").phone_number == PHONE


async def test_fourth_resend_is_refused(otp_manager, codes, delivery):
    codes.queue("111111", "222222", "333333", "444444")
    await otp_manager.request_challenge(PHONE)

    remaining = [(await otp_manager.resend_challenge(PHONE)).retries_remaining for _ in range(3)]
    assert remaining == [2, 1, 0]

    with pytest.raises(RetryLimitExceeded):
        await otp_manager.resend_challenge(PHONE)

    assert len(delivery.sent) == 4
    # The refused resend leaves the last code usable
    assert otp_manager.verify_challenge(PHONE, "444444").phone_number == PHONE


async def test_new_request_does_not_reset_resend_cap(otp_manager, codes, delivery):
    codes.queue("111111", "222222", "333333", "444444")
    await otp_manager.request_challenge(PHONE)
    for _ in range(3):
        await otp_manager.resend_challenge(PHONE)

    with pytest.raises(RetryLimitExceeded):
        await otp_manager.request_challenge(PHONE)

    assert len(delivery.sent) == 4
    assert otp_manager.verify_challenge(PHONE, "444444").phone_number == PHONE


async def test_repeated_requests_share_the_resend_cap(otp_manager):
    remaining = [(await otp_manager.request_challenge(PHONE)).retries_remaining for _ in range(4)]

    assert remaining == [3, 2, 1, 0]
    with pytest.raises(RetryLimitExceeded):
        await otp_manager.request_challenge(PHONE)
    with pytest.raises(RetryLimitExceeded):
        await otp_manager.resend_challenge(PHONE)


async def test_request_after_expiry_starts_new_lineage(otp_manager, clock):
    await otp_manager.request_challenge(PHONE)
    for _ in range(3):
        await otp_manager.resend_challenge(PHONE)

    clock.advance(minutes=5)
    ack = await otp_manager.request_challenge(PHONE)

    assert ack.resend_count == 0
    assert ack.retries_remaining == 3


async def test_resend_after_login_starts_new_lineage(otp_manager):
    await otp_manager.request_challenge(PHONE)
    for _ in range(3):
        await otp_manager.resend_challenge(PHONE)
    otp_manager.verify_challenge(PHONE, CODE)

    ack = await otp_manager.resend_challenge(PHONE)

    assert ack.resend_count == 1


async def test_too_many_wrong_codes_locks_challenge(otp_manager):
    await otp_manager.request_challenge(PHONE)

    for _ in range(3):
        with pytest.raises(CodeMismatch):
            otp_manager.verify_challenge(PHONE, "000000")

    with pytest.raises(RetryLimitExceeded):
        otp_manager.verify_challenge(PHONE, CODE)


async def test_resend_unlocks_after_wrong_codes(otp_manager, codes):
    codes.queue("111111", "222222")
    await otp_manager.request_challenge(PHONE)
    for _ in range(3):
        with pytest.raises(CodeMismatch):
            otp_manager.verify_challenge(PHONE, "000000")

    await otp_manager.resend_challenge(PHONE)

    assert otp_manager.verify_challenge(PHONE, "222222").phone_number == PHONE


async def test_failed_delivery_keeps_previous_challenge(otp_manager, codes, delivery):
    codes.queue("111111", "222222")
    await otp_manager.request_challenge(PHONE)

    delivery.fail()
    with pytest.raises(TransientNetworkError):
        await otp_manager.request_challenge(PHONE)

    assert otp_manager.verify_challenge(PHONE, "111111").phone_number == PHONE


async def test_failed_delivery_stores_nothing(otp_manager, delivery):
    delivery.fail()

    with pytest.raises(TransientNetworkError):
        await otp_manager.request_challenge(PHONE)

    assert otp_manager.status(PHONE) == ChallengeState.NO_CHALLENGE


async def test_purge_expired(otp_manager, clock):
    await otp_manager.request_challenge(PHONE)
    await otp_manager.request_challenge("8123456789")
    clock.advance(minutes=6)

    assert otp_manager.purge_expired() == 2
    assert otp_manager.status(PHONE) == ChallengeState.NO_CHALLENGE
    assert otp_manager.challenges.challenges == {}


async def test_issuing_drops_finished_challenges(otp_manager, clock):
    await otp_manager.request_challenge(PHONE)
    otp_manager.verify_challenge(PHONE, CODE)
    await otp_manager.request_challenge("8123456789")
    clock.advance(minutes=6)

    await otp_manager.request_challenge("7123456789")

    assert set(otp_manager.challenges.challenges) == {"7123456789"}
    assert otp_manager.status(PHONE) == ChallengeState.NO_CHALLENGE
    assert otp_manager.status("7123456789") == ChallengeState.PENDING
