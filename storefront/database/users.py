"""User storage for the storefront"""

from datetime import datetime, timezone
from typing import Optional

from grama_common.models import User, UserProfile, UserRole


class UserDatabase:
    """In-memory user storage keyed by user id"""

    def __init__(self):
        self.users: dict[str, User] = {}

    @staticmethod
    def user_id_for(phone_number: str) -> str:
        return f"user_{phone_number}"

    def get_user(self, user_id: str) -> Optional[User]:
        """Get a user by ID"""
        return self.users.get(user_id)

    def get_by_phone(self, phone_number: str) -> Optional[User]:
        return self.users.get(self.user_id_for(phone_number))

    def get_or_create(self, phone_number: str, now: Optional[datetime] = None) -> tuple[User, bool]:
        """
        Fetch the account for a verified phone number, creating a customer
        account on first verification.

        Returns:
            (user, created)
        """
        existing = self.get_by_phone(phone_number)
        if existing:
            return existing, False

        user = User(
            id=self.user_id_for(phone_number),
            phone_number=phone_number,
            profile=UserProfile(
                first_name="User",
                last_name=phone_number[-4:],
                is_phone_verified=True,
            ),
            role=UserRole.CUSTOMER,
            created_at=now or datetime.now(timezone.utc),
        )
        self.users[user.id] = user
        return user, True

    def update_profile(self, user_id: str, changes: dict) -> Optional[User]:
        """Merge profile fields into a user. The role is never touched."""
        user = self.get_user(user_id)
        if not user:
            return None

        profile = user.profile.model_copy(update=changes)
        updated = user.model_copy(update={"profile": profile})
        self.users[user_id] = updated
        return updated
