"""Promo code models for the storefront"""

from datetime import datetime

from pydantic import Field

from grama_common.models import AppliedPromo, CamelModel, PromoType


class PromoCode(AppliedPromo):
    """Promo code definition"""
    usage_limit: int = Field(default=0, ge=0)  # 0 means unlimited
    used_count: int = Field(default=0, ge=0)
    valid_from: datetime
    valid_until: datetime
    description: str = ""
    is_active: bool = True


class PromoValidateRequest(CamelModel):
    """Request to validate a promo code against a cart subtotal"""
    code: str = ""
    cart_total: float = Field(default=0.0, ge=0)


class PromoValidateResponse(AppliedPromo):
    """Accepted promo code, with the rules the cart needs to reprice it"""
    success: bool = True
    discount: float
    message: str
