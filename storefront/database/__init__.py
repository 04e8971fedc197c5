# Database modules

from .products import ProductDatabase
from .users import UserDatabase
from .promos import PromoDatabase
from .challenges import ChallengeDatabase, Challenge, ChallengeState

__all__ = [
    "ProductDatabase",
    "UserDatabase",
    "PromoDatabase",
    "ChallengeDatabase",
    "Challenge",
    "ChallengeState",
]
