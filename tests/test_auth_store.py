from datetime import timedelta

import httpx
import pytest

from grama_common.errors import (
    CodeMismatch,
    InvalidOtpFormat,
    InvalidPhoneFormat,
    NoActiveChallenge,
    NotAuthenticated,
    RetryLimitExceeded,
    TransientNetworkError,
    ValidationError,
)
from grama_common.models import UserRole
from shopper.persistence import MemoryStorage
from shopper.services import StorefrontClient
from shopper.stores.auth import STORAGE_KEY, create_auth_store

from tests.conftest import CODE, PHONE


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def auth(storage, storefront_client, clock):
    return create_auth_store(storage, storefront_client, clock=clock)


async def signed_in(auth):
    assert await auth.login(PHONE)
    assert await auth.verify_otp(CODE)
    return auth


async def test_login_sends_otp(auth, delivery, clock):
    assert await auth.login(PHONE) is True

    assert delivery.sent[0][0] == PHONE
    assert auth.otp_data.phone_number == PHONE
    assert auth.otp_data.is_otp_sent is True
    assert auth.otp_data.retry_count == 0
    assert auth.otp_data.expires_at == clock.now + timedelta(minutes=5)
    assert auth.is_loading is False
    assert auth.error is None


async def test_login_with_bad_phone_sends_nothing(auth, delivery):
    assert await auth.login("12345") is False

    assert delivery.sent == []
    assert isinstance(auth.last_error, InvalidPhoneFormat)
    assert auth.error == "Invalid phone number format"
    assert auth.otp_data.is_otp_sent is False


async def test_verify_otp_signs_in(auth, storage):
    await auth.login(PHONE)

    assert await auth.verify_otp(CODE) is True

    assert auth.is_authenticated is True
    assert auth.user.phone_number == PHONE
    assert auth.user.role == UserRole.CUSTOMER
    assert auth.token
    assert auth.otp_data.is_otp_sent is False
    saved = storage.load(STORAGE_KEY)
    assert saved["is_authenticated"] is True
    assert saved["token"] == auth.token
    assert "otp_data" not in saved


async def test_verify_otp_before_login(auth):
    assert await auth.verify_otp(CODE) is False

    assert isinstance(auth.last_error, NoActiveChallenge)


async def test_verify_otp_with_bad_format(auth):
    await auth.login(PHONE)

    assert await auth.verify_otp("12345") is False

    assert isinstance(auth.last_error, InvalidOtpFormat)
    assert auth.is_authenticated is False


async def test_verify_otp_with_wrong_code(auth):
    await auth.login(PHONE)

    assert await auth.verify_otp("482914") is False

    assert isinstance(auth.last_error, CodeMismatch)
    assert auth.error == "Invalid OTP"
    assert auth.is_authenticated is False
    assert auth.is_loading is False
    # The exchange is still open for another try
    assert await auth.verify_otp(CODE) is True


async def test_resend_otp(auth, delivery):
    await auth.login(PHONE)

    assert await auth.resend_otp() is True

    assert auth.otp_data.retry_count == 1
    assert len(delivery.sent) == 2


async def test_fourth_resend_is_refused_locally(auth, delivery):
    await auth.login(PHONE)
    for _ in range(3):
        assert await auth.resend_otp() is True

    assert await auth.resend_otp() is False

    assert isinstance(auth.last_error, RetryLimitExceeded)
    assert len(delivery.sent) == 4
    assert auth.otp_data.retry_count == 3


async def test_repeated_login_keeps_resend_count(auth, delivery):
    await auth.login(PHONE)
    await auth.resend_otp()

    assert await auth.login(PHONE) is True

    assert auth.otp_data.retry_count == 2
    assert len(delivery.sent) == 3


async def test_resend_without_login(auth, delivery):
    assert await auth.resend_otp() is False

    assert isinstance(auth.last_error, NoActiveChallenge)
    assert delivery.sent == []


async def test_logout(auth, storage):
    await signed_in(auth)

    auth.logout()

    assert auth.user is None
    assert auth.token is None
    assert auth.is_authenticated is False
    assert storage.load(STORAGE_KEY)["is_authenticated"] is False


async def test_session_survives_restart(auth, storage, storefront_client):
    await signed_in(auth)

    restored = create_auth_store(storage, storefront_client)

    assert restored.is_authenticated is True
    assert restored.user == auth.user
    assert restored.token == auth.token


async def test_half_stored_session_is_not_authenticated(storage, storefront_client):
    storage.save(STORAGE_KEY, {"is_authenticated": True, "token": "abc"})

    restored = create_auth_store(storage, storefront_client)

    assert restored.is_authenticated is False


async def test_update_profile(auth):
    await signed_in(auth)

    assert await auth.update_profile(first_name="Asha", email="asha@example.com") is True

    assert auth.user.profile.first_name == "Asha"
    assert auth.user.profile.email == "asha@example.com"
    assert auth.user.role == UserRole.CUSTOMER


async def test_update_profile_requires_login(auth):
    assert await auth.update_profile(first_name="Asha") is False

    assert isinstance(auth.last_error, NotAuthenticated)


async def test_update_profile_cannot_change_role(auth):
    await signed_in(auth)

    assert await auth.update_profile(role="admin") is False

    assert isinstance(auth.last_error, ValidationError)
    assert auth.user.role == UserRole.CUSTOMER


async def test_network_failure_is_recorded(storage):
    def unreachable(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = StorefrontClient("http://storefront.test", transport=httpx.MockTransport(unreachable))
    auth = create_auth_store(storage, client)

    assert await auth.login(PHONE) is False

    assert isinstance(auth.last_error, TransientNetworkError)
    assert auth.is_loading is False
    await client.close()


async def test_clear_error(auth):
    await auth.login("12345")

    auth.clear_error()

    assert auth.error is None
    assert auth.last_error is None
