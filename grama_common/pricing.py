"""
Cart pricing

Pure functions that turn cart lines into a CartTotal. Used by the shopper's
CartStore after every mutation and by the storefront to price free-delivery
promo codes.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from .models import AppliedPromo, CartItem, CartTotal, PromoType


@dataclass(frozen=True)
class PricingPolicy:
    """Tax and delivery rules (5% GST, flat delivery below the free threshold)"""
    tax_rate: float = 0.05
    free_delivery_threshold: float = 500.0
    delivery_fee: float = 49.0

    def delivery_fee_for(self, subtotal: float) -> float:
        # Nothing to deliver for an empty cart
        if subtotal <= 0:
            return 0.0
        if subtotal >= self.free_delivery_threshold:
            return 0.0
        return self.delivery_fee


DEFAULT_POLICY = PricingPolicy()


def comparison_price(item: CartItem) -> float:
    """Price the variant is compared against when computing savings"""
    if item.variant.compare_at_price is not None:
        return item.variant.compare_at_price
    return item.product.base_price


def promo_discount(promo: AppliedPromo, subtotal: float, policy: PricingPolicy = DEFAULT_POLICY) -> float:
    """
    What a promo is worth for a subtotal.

    Zero below the promo's minimum order. Free delivery is worth the
    delivery fee the subtotal would pay.
    """
    if subtotal < promo.minimum_order:
        return 0.0

    if promo.type == PromoType.PERCENTAGE:
        discount = subtotal * promo.value / 100
    elif promo.type == PromoType.FIXED:
        discount = min(promo.value, subtotal)
    else:
        discount = policy.delivery_fee_for(subtotal)

    if promo.maximum_discount is not None:
        discount = min(discount, promo.maximum_discount)

    return round(discount, 2)


def calculate_totals(
    items: Iterable[CartItem],
    discount: float = 0.0,
    policy: PricingPolicy = DEFAULT_POLICY,
    promo: Optional[AppliedPromo] = None,
) -> CartTotal:
    """
    Recompute the full breakdown for a list of cart items.

    With a promo the discount is priced from its rules for this subtotal and
    ``discount`` is ignored. The discount is clamped to the amount payable
    before discount, so the total is never negative.
    """
    items = list(items)

    subtotal = sum(item.variant.price * item.quantity for item in items)
    tax = subtotal * policy.tax_rate
    delivery_fee = policy.delivery_fee_for(subtotal)
    payable = subtotal + tax + delivery_fee

    if promo is not None:
        discount = promo_discount(promo, subtotal, policy)

    discount = min(max(discount, 0.0), payable)
    savings = sum(
        max(comparison_price(item) - item.variant.price, 0.0) * item.quantity
        for item in items
    )

    return CartTotal(
        subtotal=round(subtotal, 2),
        tax=round(tax, 2),
        delivery_fee=round(delivery_fee, 2),
        discount=round(discount, 2),
        total=round(max(0.0, payable - discount), 2),
        savings=round(savings, 2),
    )
