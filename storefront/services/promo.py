"""Promo code validation"""

import logging
from datetime import datetime
from typing import Callable

from grama_common.errors import InvalidPromoCode
from grama_common.pricing import PricingPolicy, DEFAULT_POLICY, promo_discount

from ..database.promos import PromoDatabase
from ..models.promo import PromoCode, PromoType
from .otp import utcnow

logger = logging.getLogger(__name__)


class PromoService:
    """Checks promo codes against a cart subtotal and prices the discount"""

    def __init__(
        self,
        promos: PromoDatabase,
        policy: PricingPolicy = DEFAULT_POLICY,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.promos = promos
        self.policy = policy
        self._clock = clock

    def validate(self, code: str, subtotal: float) -> tuple[PromoCode, float]:
        """
        Validate a promo code for a cart.

        Returns:
            (promo, discount amount)

        Raises:
            InvalidPromoCode: unknown, inactive, outside its window, used up,
                below the minimum order, or worth nothing for this cart
        """
        promo = self.promos.get_promo(code or "")
        if not promo or not promo.is_active:
            raise InvalidPromoCode()

        now = self._clock()
        if now < promo.valid_from:
            raise InvalidPromoCode("Promo code is not active yet")
        if now > promo.valid_until:
            raise InvalidPromoCode("Promo code has expired")

        if promo.usage_limit and promo.used_count >= promo.usage_limit:
            raise InvalidPromoCode("Promo code usage limit reached")

        if subtotal < promo.minimum_order:
            raise InvalidPromoCode(f"Minimum order of ₹{promo.minimum_order:g} required for {promo.code}")

        discount = self.calculate_discount(promo, subtotal)
        if discount <= 0:
            if promo.type == PromoType.FREE_DELIVERY:
                raise InvalidPromoCode("Your order already has free delivery")
            raise InvalidPromoCode()

        logger.info(f"Promo {promo.code} accepted: ₹{discount} off ₹{subtotal}")
        return promo, discount

    def active_offers(self) -> list[PromoCode]:
        return self.promos.list_active(self._clock())

    def calculate_discount(self, promo: PromoCode, subtotal: float) -> float:
        return promo_discount(promo, subtotal, self.policy)
