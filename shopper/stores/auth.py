"""
Auth session state

Phone + OTP login against the storefront. Only the signed-in identity
(user, token, authenticated flag) is persisted; the pending OTP exchange
lives in memory for the current session.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Protocol

from pydantic import BaseModel

from grama_common.errors import (
    GramaError,
    NoActiveChallenge,
    NotAuthenticated,
    RetryLimitExceeded,
    ValidationError,
)
from grama_common.models import User
from grama_common.validation import validate_otp, validate_phone

from ..persistence import KeyValueStorage
from .base import PersistentStore

logger = logging.getLogger(__name__)

STORAGE_KEY = "grama-auth-storage"

MAX_RESENDS = 3
OTP_TTL = timedelta(minutes=5)


class AuthClient(Protocol):
    """Storefront calls the auth store depends on"""

    async def send_otp(self, phone_number: str) -> dict:
        ...

    async def resend_otp(self, phone_number: str) -> dict:
        ...

    async def verify_otp(self, phone_number: str, otp: str) -> dict:
        ...

    async def update_profile(self, token: str, changes: dict) -> dict:
        ...


class OtpData(BaseModel):
    """OTP exchange in progress"""
    phone_number: str = ""
    is_otp_sent: bool = False
    expires_at: Optional[datetime] = None
    retry_count: int = 0


class AuthSnapshot(BaseModel):
    """Persisted part of the auth state"""
    user: Optional[User] = None
    is_authenticated: bool = False
    token: Optional[str] = None


class AuthStore(PersistentStore[AuthSnapshot]):
    """Signed-in identity of the shopper"""

    storage_key = STORAGE_KEY
    snapshot_model = AuthSnapshot

    def __init__(
        self,
        storage: KeyValueStorage,
        client: AuthClient,
        max_resends: int = MAX_RESENDS,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        super().__init__(storage)
        self._client = client
        self.max_resends = max_resends
        self._clock = clock or (lambda: datetime.now(timezone.utc))

        self.user: Optional[User] = None
        self.is_authenticated = False
        self.token: Optional[str] = None
        self.otp_data = OtpData()

    # ==================== Persistence ====================

    def snapshot(self) -> AuthSnapshot:
        return AuthSnapshot(
            user=self.user.model_copy(deep=True) if self.user else None,
            is_authenticated=self.is_authenticated,
            token=self.token,
        )

    def _apply_snapshot(self, snapshot: AuthSnapshot) -> None:
        self.user = snapshot.user
        self.token = snapshot.token
        # A session without both a user and a token is not a session
        self.is_authenticated = bool(snapshot.is_authenticated and snapshot.user and snapshot.token)

    # ==================== Actions ====================

    async def login(self, phone_number: str) -> bool:
        """
        Request an OTP for a phone number.

        Malformed numbers are rejected locally without a request.
        """
        phone_number = (phone_number or "").strip()
        try:
            validate_phone(phone_number)
        except GramaError as e:
            self._fail(e)
            return False

        self._start_request()
        data = await self._run(self._client.send_otp(phone_number), "Failed to send OTP")
        if data is None:
            return False

        self.otp_data = OtpData(
            phone_number=phone_number,
            is_otp_sent=True,
            expires_at=self._expiry(data),
            retry_count=self._used_resends(data),
        )
        self.is_loading = False
        self._changed(persist=False)
        logger.info(f"OTP requested for ******{phone_number[-4:]}")
        return True

    async def verify_otp(self, otp: str) -> bool:
        """Verify the OTP for the pending phone number and sign in"""
        phone_number = self.otp_data.phone_number
        if not self.otp_data.is_otp_sent or not phone_number:
            self._fail(NoActiveChallenge("Request an OTP first"))
            return False

        otp = (otp or "").strip()
        try:
            validate_otp(otp)
        except GramaError as e:
            self._fail(e)
            return False

        self._start_request()
        data = await self._run(self._client.verify_otp(phone_number, otp), "Failed to verify OTP")
        if data is None:
            return False

        self.user = User.model_validate(data["user"])
        self.token = data["token"]
        self.is_authenticated = True
        self.otp_data = OtpData()
        self.is_loading = False
        self._changed()
        logger.info(f"Signed in as {self.user.id}")
        return True

    async def resend_otp(self) -> bool:
        """Ask for a replacement OTP, at most ``max_resends`` times"""
        phone_number = self.otp_data.phone_number
        if not phone_number:
            self._fail(NoActiveChallenge("Request an OTP first"))
            return False

        if self.otp_data.retry_count >= self.max_resends:
            self._fail(RetryLimitExceeded())
            return False

        self._start_request()
        data = await self._run(self._client.resend_otp(phone_number), "Failed to resend OTP")
        if data is None:
            return False

        self.otp_data = OtpData(
            phone_number=phone_number,
            is_otp_sent=True,
            expires_at=self._expiry(data),
            retry_count=self.otp_data.retry_count + 1,
        )
        self.is_loading = False
        self._changed(persist=False)
        return True

    def logout(self) -> None:
        self.user = None
        self.token = None
        self.is_authenticated = False
        self.error = None
        self.last_error = None
        self.otp_data = OtpData()
        self._changed()

    async def update_profile(self, **changes) -> bool:
        """
        Update the signed-in user's profile.

        Args:
            **changes: any of first_name, last_name, email

        Returns:
            True when the storefront accepted the change
        """
        if not self.user or not self.token:
            self._fail(NotAuthenticated())
            return False

        if "role" in changes:
            self._fail(ValidationError("Role cannot be changed"))
            return False

        self._start_request()
        data = await self._run(self._client.update_profile(self.token, changes), "Failed to update profile")
        if data is None:
            return False

        self.user = User.model_validate(data["user"])
        self.is_loading = False
        self._changed()
        return True

    # ==================== Getters ====================

    def otp_expired(self) -> bool:
        expires_at = self.otp_data.expires_at
        return expires_at is not None and self._clock() >= expires_at

    def _used_resends(self, data: dict) -> int:
        # A repeated login inside an open exchange uses up a resend on the server
        remaining = data.get("retriesRemaining", self.max_resends)
        return min(max(self.max_resends - remaining, 0), self.max_resends)

    def _expiry(self, data: dict) -> datetime:
        expires_at = OtpData.model_validate({"expires_at": data.get("expiresAt")}).expires_at
        return expires_at or self._clock() + OTP_TTL


def create_auth_store(
    storage: KeyValueStorage,
    client: AuthClient,
    initial_state: Optional[AuthSnapshot] = None,
    max_resends: int = MAX_RESENDS,
    clock: Optional[Callable[[], datetime]] = None,
) -> AuthStore:
    """Create an auth store, restored from storage unless an initial state is given"""
    store = AuthStore(storage, client, max_resends=max_resends, clock=clock)
    store.restore(initial_state)
    return store
