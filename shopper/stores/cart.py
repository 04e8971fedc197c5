"""
Shopping cart state

Line items, quantities and the derived price breakdown. Totals are
recomputed synchronously after every mutation; only promo validation goes
over the network.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol

from pydantic import BaseModel, Field

from grama_common.errors import InvalidPromoCode, InvalidQuantity, ItemNotFound
from grama_common.models import AppliedPromo, CartItem, CartTotal, Product, ProductVariant
from grama_common.pricing import DEFAULT_POLICY, PricingPolicy, calculate_totals

from ..persistence import KeyValueStorage
from .base import PersistentStore

logger = logging.getLogger(__name__)

STORAGE_KEY = "grama-cart-storage"


class PromoValidator(Protocol):
    """Validates a promo code for a subtotal and returns its rules"""

    async def validate_promo(self, code: str, subtotal: float) -> AppliedPromo:
        ...


class CartSnapshot(BaseModel):
    """Persisted part of the cart"""
    items: list[CartItem] = Field(default_factory=list)
    total: CartTotal = Field(default_factory=CartTotal)
    promo: Optional[AppliedPromo] = None


class CartStore(PersistentStore[CartSnapshot]):
    """Cart for one shopper"""

    storage_key = STORAGE_KEY
    snapshot_model = CartSnapshot

    def __init__(
        self,
        storage: KeyValueStorage,
        promo_validator: PromoValidator,
        policy: PricingPolicy = DEFAULT_POLICY,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        super().__init__(storage)
        self._promo_validator = promo_validator
        self.policy = policy
        self._clock = clock or (lambda: datetime.now(timezone.utc))

        self.items: list[CartItem] = []
        self.total = CartTotal()
        self.promo: Optional[AppliedPromo] = None

    # ==================== Persistence ====================

    def snapshot(self) -> CartSnapshot:
        return CartSnapshot(
            items=[item.model_copy(deep=True) for item in self.items],
            total=self.total.model_copy(),
            promo=self.promo.model_copy() if self.promo else None,
        )

    def _apply_snapshot(self, snapshot: CartSnapshot) -> None:
        self.items = [item.model_copy(deep=True) for item in snapshot.items]
        self.promo = snapshot.promo
        # Totals are derived, never taken from storage as-is
        self.calculate_total()

    # ==================== Actions ====================

    def add_item(self, product: Product, variant: ProductVariant, quantity: int = 1) -> CartItem:
        """
        Add a product variant to the cart.

        The same (product, variant) pair is merged into its existing line.

        Raises:
            InvalidQuantity: quantity below 1
        """
        if not isinstance(quantity, int) or quantity < 1:
            raise InvalidQuantity()

        item = self._find(product.id, variant.id)
        if item:
            item.quantity += quantity
        else:
            item = CartItem(
                id=f"{product.id}-{variant.id}-{uuid.uuid4().hex[:8]}",
                product=product,
                variant=variant,
                quantity=quantity,
                added_at=self._clock(),
            )
            self.items.append(item)

        self._recalculate()
        return item

    def remove_item(self, item_id: str) -> bool:
        """Remove a line item. Unknown ids are ignored."""
        remaining = [item for item in self.items if item.id != item_id]
        if len(remaining) == len(self.items):
            return False

        self.items = remaining
        self._recalculate()
        return True

    def update_quantity(self, item_id: str, quantity: int) -> Optional[CartItem]:
        """
        Set the quantity of a line item; zero or less removes it.

        Raises:
            ItemNotFound: unknown item id with a positive quantity
        """
        if quantity <= 0:
            self.remove_item(item_id)
            return None

        item = self.get_item_by_id(item_id)
        if not item:
            raise ItemNotFound()

        item.quantity = quantity
        self._recalculate()
        return item

    def clear_cart(self) -> None:
        self.items = []
        self.promo = None
        self.total = CartTotal()
        self._changed()

    def calculate_total(self) -> CartTotal:
        self.total = calculate_totals(self.items, policy=self.policy, promo=self.promo)
        return self.total

    async def apply_promo_code(self, code: str) -> bool:
        """
        Validate a promo code for the current subtotal and apply it.

        The promo's rules are kept, so the discount is repriced as the cart
        changes and drops to zero while the subtotal is below its minimum.

        On failure the previous discount and total are kept, ``error`` and
        ``last_error`` describe what went wrong, and False is returned.
        """
        code = (code or "").strip()
        if not code:
            self._fail(InvalidPromoCode("Enter a promo code"))
            return False

        self._start_request()
        promo = await self._run(
            self._promo_validator.validate_promo(code, self.total.subtotal),
            "Failed to apply promo code",
        )
        if promo is None:
            return False

        self.promo = promo
        self.is_loading = False
        self._recalculate()
        logger.info(f"Promo {self.promo_code} applied, discount {self.total.discount}")
        return True

    def remove_promo_code(self) -> None:
        self.promo = None
        self._recalculate()

    # ==================== Getters ====================

    @property
    def promo_code(self) -> Optional[str]:
        return self.promo.code if self.promo else None

    def get_item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def get_item_by_id(self, item_id: str) -> Optional[CartItem]:
        return next((item for item in self.items if item.id == item_id), None)

    def has_item(self, product_id: str, variant_id: str) -> bool:
        return self._find(product_id, variant_id) is not None

    def _find(self, product_id: str, variant_id: str) -> Optional[CartItem]:
        return next(
            (item for item in self.items
             if item.product.id == product_id and item.variant.id == variant_id),
            None,
        )

    def _recalculate(self) -> None:
        self.calculate_total()
        self._changed()


def create_cart_store(
    storage: KeyValueStorage,
    promo_validator: PromoValidator,
    initial_state: Optional[CartSnapshot] = None,
    policy: PricingPolicy = DEFAULT_POLICY,
    clock: Optional[Callable[[], datetime]] = None,
) -> CartStore:
    """Create a cart store, restored from storage unless an initial state is given"""
    store = CartStore(storage, promo_validator, policy=policy, clock=clock)
    store.restore(initial_state)
    return store
