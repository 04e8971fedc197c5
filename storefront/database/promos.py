"""Promo code storage for the storefront"""

from datetime import datetime, timezone
from typing import Optional

from ..models.promo import PromoCode, PromoType

_ALWAYS_FROM = datetime(2024, 1, 1, tzinfo=timezone.utc)
_ALWAYS_UNTIL = datetime(2099, 12, 31, tzinfo=timezone.utc)

# Seed promo codes
PROMO_CODES: list[PromoCode] = [
    PromoCode(
        code="WELCOME50",
        type=PromoType.FIXED,
        value=50,
        minimum_order=199,
        valid_from=_ALWAYS_FROM,
        valid_until=_ALWAYS_UNTIL,
        description="Flat ₹50 off your first order above ₹199",
    ),
    PromoCode(
        code="FRESH10",
        type=PromoType.PERCENTAGE,
        value=10,
        minimum_order=300,
        maximum_discount=100,
        valid_from=_ALWAYS_FROM,
        valid_until=_ALWAYS_UNTIL,
        description="10% off fresh produce orders above ₹300, up to ₹100",
    ),
    PromoCode(
        code="FREEDEL",
        type=PromoType.FREE_DELIVERY,
        valid_from=_ALWAYS_FROM,
        valid_until=_ALWAYS_UNTIL,
        description="Free delivery on any order",
    ),
    PromoCode(
        code="DIWALI20",
        type=PromoType.PERCENTAGE,
        value=20,
        minimum_order=500,
        maximum_discount=200,
        valid_from=datetime(2024, 10, 20, tzinfo=timezone.utc),
        valid_until=datetime(2024, 11, 5, tzinfo=timezone.utc),
        description="Festive 20% off, up to ₹200",
    ),
    PromoCode(
        code="VENDOR100",
        type=PromoType.FIXED,
        value=100,
        valid_from=_ALWAYS_FROM,
        valid_until=_ALWAYS_UNTIL,
        description="Retired vendor onboarding offer",
        is_active=False,
    ),
]


class PromoDatabase:
    """In-memory promo code storage, codes are case-insensitive"""

    def __init__(self, promos: Optional[list[PromoCode]] = None):
        seed = PROMO_CODES if promos is None else promos
        self.promos: dict[str, PromoCode] = {
            promo.code.upper(): promo.model_copy() for promo in seed
        }

    def get_promo(self, code: str) -> Optional[PromoCode]:
        """Get a promo code"""
        return self.promos.get(code.strip().upper())

    def add_promo(self, promo: PromoCode) -> PromoCode:
        self.promos[promo.code.upper()] = promo
        return promo

    def list_active(self, now: datetime) -> list[PromoCode]:
        """Promo codes usable right now"""
        return [
            p for p in self.promos.values()
            if p.is_active and p.valid_from <= now <= p.valid_until
        ]
