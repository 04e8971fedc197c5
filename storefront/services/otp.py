"""
OTP Lifecycle Manager

Issues, verifies and expires phone verification challenges.

Per phone number a challenge moves through:

    NoChallenge -> Pending -> Consumed | Expired | Superseded

A superseded challenge is replaced by a fresh pending one straight away.
Expiry is checked lazily when a challenge is used; there is no timer.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from grama_common.errors import CodeMismatch, NoActiveChallenge, RetryLimitExceeded
from grama_common.models import User
from grama_common.validation import validate_phone

from ..database.challenges import Challenge, ChallengeDatabase, ChallengeState, hash_code
from ..database.users import UserDatabase
from .delivery import OtpDelivery, mask_phone

logger = logging.getLogger(__name__)

OTP_MESSAGE = "Your Grama Groceries OTP is: {code}. Valid for {minutes} minutes."


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_code() -> str:
    """Random 6-digit code without a leading zero"""
    return str(100000 + secrets.randbelow(900000))


@dataclass
class ChallengeAck:
    """Acknowledgment of an issued challenge. Never carries the code in production."""
    phone_number: str
    expires_at: datetime
    resend_count: int
    retries_remaining: int
    debug_code: Optional[str] = None


class OtpManager:
    """
    Phone verification challenges.

    Usage:
        manager = OtpManager(ChallengeDatabase(), UserDatabase(), LoggingDelivery())

        ack = await manager.request_challenge("9876543210")
        user = manager.verify_challenge("9876543210", code_from_sms)
    """

    def __init__(
        self,
        challenges: ChallengeDatabase,
        users: UserDatabase,
        delivery: OtpDelivery,
        ttl_seconds: int = 300,
        max_resends: int = 3,
        max_attempts: int = 3,
        expose_code: bool = False,
        clock: Callable[[], datetime] = utcnow,
        code_factory: Callable[[], str] = generate_code,
    ):
        """
        Args:
            challenges: Challenge storage
            users: User storage, accounts are created on first verification
            delivery: Channel that sends the code to the phone
            ttl_seconds: Challenge lifetime
            max_resends: Resends allowed per challenge lineage
            max_attempts: Wrong codes allowed per challenge
            expose_code: Echo the code in the acknowledgment (development only)
            clock: Returns the current time
            code_factory: Returns a new 6-digit code
        """
        self.challenges = challenges
        self.users = users
        self.delivery = delivery
        self.ttl = timedelta(seconds=ttl_seconds)
        self.max_resends = max_resends
        self.max_attempts = max_attempts
        self.expose_code = expose_code
        self._clock = clock
        self._code_factory = code_factory

    async def request_challenge(self, phone_number: str) -> ChallengeAck:
        """
        Issue a new challenge for a phone number.

        A pending challenge for the same number is superseded and the new
        one counts against its resend cap, so repeated requests cannot reset
        the cap or the wrong-code allowance.

        Raises:
            RetryLimitExceeded: the active lineage already used all its
                resends. The current challenge stays valid.
        """
        validate_phone(phone_number)
        now = self._clock()

        resend_count = self._next_resend_count(phone_number, now, fresh=0)
        return await self._issue(phone_number, resend_count, now)

    async def resend_challenge(self, phone_number: str) -> ChallengeAck:
        """
        Issue a replacement challenge and count it against the resend cap.

        Raises:
            RetryLimitExceeded: the lineage already used all its resends.
                The current challenge stays valid.
        """
        validate_phone(phone_number)
        now = self._clock()

        # A finished lineage is replaced by a new one that starts at this resend
        resend_count = self._next_resend_count(phone_number, now, fresh=1)
        return await self._issue(phone_number, resend_count, now)

    def verify_challenge(self, phone_number: str, code: str) -> User:
        """
        Consume the challenge for a phone number if the code matches.

        Returns:
            The user for the number, created on first verification

        Raises:
            InvalidPhoneFormat: malformed phone number
            NoActiveChallenge: nothing pending, already consumed, or expired
            RetryLimitExceeded: too many wrong codes for this challenge
            CodeMismatch: the code is not the one that was sent
        """
        validate_phone(phone_number)
        now = self._clock()

        challenge = self.challenges.get(phone_number)
        if not challenge or challenge.state != ChallengeState.PENDING:
            raise NoActiveChallenge()

        # Expiry wins over a matching code
        if challenge.is_expired(now):
            challenge.state = ChallengeState.EXPIRED
            self.challenges.discard(phone_number)
            logger.info(f"OTP for {mask_phone(phone_number)} expired")
            raise NoActiveChallenge("OTP has expired. Please request a new one.")

        if challenge.failed_attempts >= self.max_attempts:
            raise RetryLimitExceeded("Too many incorrect attempts. Please request a new OTP.")

        if not challenge.matches(str(code)):
            challenge.failed_attempts += 1
            logger.info(
                f"OTP mismatch for {mask_phone(phone_number)} "
                f"({challenge.failed_attempts}/{self.max_attempts})"
            )
            raise CodeMismatch()

        challenge.state = ChallengeState.CONSUMED
        user, created = self.users.get_or_create(phone_number, now=now)
        logger.info(
            f"OTP verified for {mask_phone(phone_number)} - "
            f"{'new' if created else 'existing'} user {user.id}"
        )
        return user

    def status(self, phone_number: str) -> ChallengeState:
        """Current lifecycle state for a phone number"""
        challenge = self.challenges.get(phone_number)
        if not challenge:
            return ChallengeState.NO_CHALLENGE
        if challenge.state == ChallengeState.PENDING and challenge.is_expired(self._clock()):
            return ChallengeState.EXPIRED
        return challenge.state

    def purge_expired(self) -> int:
        """Drop finished challenges from storage"""
        return self.challenges.purge_expired(self._clock())

    def _next_resend_count(self, phone_number: str, now: datetime, fresh: int) -> int:
        current = self.challenges.get(phone_number)
        if not current or not current.is_active(now):
            return fresh

        if current.resend_count >= self.max_resends:
            logger.warning(f"Resend limit reached for {mask_phone(phone_number)}")
            raise RetryLimitExceeded()
        return current.resend_count + 1

    async def _issue(self, phone_number: str, resend_count: int, now: datetime) -> ChallengeAck:
        code = self._code_factory()
        minutes = int(self.ttl.total_seconds() // 60)

        # A failed send leaves the previous challenge in place
        await self.delivery.send(phone_number, OTP_MESSAGE.format(code=code, minutes=minutes))

        previous = self.challenges.get(phone_number)
        if previous and previous.state == ChallengeState.PENDING:
            previous.state = ChallengeState.SUPERSEDED

        purged = self.challenges.purge_expired(now)
        if purged:
            logger.debug(f"Purged {purged} finished OTP challenges")

        challenge = self.challenges.put(
            Challenge(
                phone_number=phone_number,
                code_hash=hash_code(phone_number, code),
                created_at=now,
                expires_at=now + self.ttl,
                resend_count=resend_count,
            )
        )
        logger.info(
            f"OTP issued for {mask_phone(phone_number)}, "
            f"expires {challenge.expires_at.isoformat()}, resend {resend_count}/{self.max_resends}"
        )

        return ChallengeAck(
            phone_number=phone_number,
            expires_at=challenge.expires_at,
            resend_count=resend_count,
            retries_remaining=max(self.max_resends - resend_count, 0),
            debug_code=code if self.expose_code else None,
        )
