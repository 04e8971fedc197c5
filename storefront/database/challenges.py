"""OTP challenge storage for the storefront"""

import hashlib
import hmac
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class ChallengeState(str, Enum):
    """Lifecycle state of an OTP challenge"""
    NO_CHALLENGE = "no_challenge"
    PENDING = "pending"
    CONSUMED = "consumed"
    EXPIRED = "expired"
    SUPERSEDED = "superseded"


def hash_code(phone_number: str, code: str) -> str:
    """Codes are stored hashed, salted with the phone number"""
    return hashlib.sha256(f"{phone_number}:{code}".encode()).hexdigest()


@dataclass
class Challenge:
    """One in-flight verification attempt for a phone number"""
    phone_number: str
    code_hash: str
    created_at: datetime
    expires_at: datetime
    state: ChallengeState = ChallengeState.PENDING
    resend_count: int = 0
    failed_attempts: int = 0

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def is_active(self, now: datetime) -> bool:
        return self.state == ChallengeState.PENDING and not self.is_expired(now)

    def matches(self, code: str) -> bool:
        return hmac.compare_digest(self.code_hash, hash_code(self.phone_number, code))


class ChallengeDatabase:
    """
    In-memory challenge storage.

    Holds the latest challenge per phone number only, which is what keeps
    at most one challenge active per number.
    """

    def __init__(self):
        self.challenges: dict[str, Challenge] = {}

    def get(self, phone_number: str) -> Optional[Challenge]:
        """Get the latest challenge for a phone number"""
        return self.challenges.get(phone_number)

    def put(self, challenge: Challenge) -> Challenge:
        """Store a challenge, replacing the previous one for the same number"""
        self.challenges[challenge.phone_number] = challenge
        return challenge

    def discard(self, phone_number: str) -> bool:
        """Drop the challenge for a phone number"""
        if phone_number in self.challenges:
            del self.challenges[phone_number]
            return True
        return False

    def purge_expired(self, now: datetime) -> int:
        """Remove expired or finished challenges, returns how many were dropped"""
        stale = [
            phone for phone, challenge in self.challenges.items()
            if not challenge.is_active(now)
        ]
        for phone in stale:
            del self.challenges[phone]
        return len(stale)
