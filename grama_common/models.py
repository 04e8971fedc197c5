"""Shared Grama data models"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialised with camelCase keys, accepting either case on input"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ==================== Users ====================

class UserRole(str, Enum):
    CUSTOMER = "customer"
    VENDOR = "vendor"
    ADMIN = "admin"


class UserProfile(CamelModel):
    """Display profile of a user"""
    first_name: str
    last_name: str
    is_phone_verified: bool = False
    email: Optional[str] = None


class User(CamelModel):
    """Authenticated identity"""
    id: str
    phone_number: str
    profile: UserProfile
    role: UserRole = UserRole.CUSTOMER
    created_at: datetime


# ==================== Catalog ====================

class ProductCategory(str, Enum):
    FRUITS_VEGETABLES = "fruits-vegetables"
    DAIRY = "dairy"
    STAPLES = "staples"
    SNACKS = "snacks"
    BEVERAGES = "beverages"
    PERSONAL_CARE = "personal-care"


class ProductUnit(str, Enum):
    KG = "kg"
    GRAMS = "grams"
    LITERS = "liters"
    PIECES = "pieces"
    PACKETS = "packets"


class ProductVariant(CamelModel):
    """Purchasable size/price configuration of a product"""
    id: str
    name: str
    size: str
    price: float = Field(ge=0)
    compare_at_price: Optional[float] = Field(default=None, ge=0)
    sku: str
    stock: int = Field(default=100, ge=0)
    is_default: bool = False


class Product(CamelModel):
    """Product in the catalog"""
    id: str
    name: str
    description: str = ""
    brand: Optional[str] = None
    unit: ProductUnit = ProductUnit.PIECES
    category: ProductCategory
    base_price: float = Field(ge=0)
    variants: list[ProductVariant] = Field(default_factory=list)
    in_stock: bool = True

    def get_variant(self, variant_id: str) -> Optional[ProductVariant]:
        return next((v for v in self.variants if v.id == variant_id), None)


# ==================== Cart ====================

class CartItem(CamelModel):
    """One (product, variant, quantity) line in a cart"""
    id: str
    product: Product
    variant: ProductVariant
    quantity: int = Field(ge=1)
    added_at: datetime
    notes: Optional[str] = None


class CartTotal(CamelModel):
    """Derived price breakdown of a cart"""
    subtotal: float = 0.0
    tax: float = 0.0
    delivery_fee: float = 0.0
    discount: float = 0.0
    total: float = 0.0
    savings: float = 0.0


# ==================== Promo ====================

class PromoType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"
    FREE_DELIVERY = "free_delivery"


class AppliedPromo(CamelModel):
    """
    Promo code accepted for a cart.

    Carries the rules rather than a fixed amount, so the discount can be
    repriced whenever the cart changes.
    """
    code: str
    type: PromoType
    value: float = Field(default=0.0, ge=0)
    minimum_order: float = Field(default=0.0, ge=0)
    maximum_discount: Optional[float] = Field(default=None, ge=0)
