# Grama shared domain: errors, input rules, models and cart pricing

from .errors import (
    GramaError,
    ValidationError,
    InvalidPhoneFormat,
    InvalidOtpFormat,
    InvalidQuantity,
    AuthChallengeError,
    NoActiveChallenge,
    CodeMismatch,
    RetryLimitExceeded,
    NotAuthenticated,
    PromoError,
    InvalidPromoCode,
    CartError,
    ItemNotFound,
    NotFound,
    TransientNetworkError,
    InternalError,
    error_from_payload,
)
from .models import (
    User,
    UserProfile,
    UserRole,
    Product,
    ProductVariant,
    ProductCategory,
    ProductUnit,
    CartItem,
    CartTotal,
    PromoType,
    AppliedPromo,
)
from .pricing import PricingPolicy, DEFAULT_POLICY, calculate_totals, promo_discount
from .validation import validate_phone, validate_otp, is_valid_phone, is_valid_otp

__all__ = [
    "GramaError",
    "ValidationError",
    "InvalidPhoneFormat",
    "InvalidOtpFormat",
    "InvalidQuantity",
    "AuthChallengeError",
    "NoActiveChallenge",
    "CodeMismatch",
    "RetryLimitExceeded",
    "NotAuthenticated",
    "PromoError",
    "InvalidPromoCode",
    "CartError",
    "ItemNotFound",
    "NotFound",
    "TransientNetworkError",
    "InternalError",
    "error_from_payload",
    "User",
    "UserProfile",
    "UserRole",
    "Product",
    "ProductVariant",
    "ProductCategory",
    "ProductUnit",
    "CartItem",
    "CartTotal",
    "PromoType",
    "AppliedPromo",
    "PricingPolicy",
    "DEFAULT_POLICY",
    "calculate_totals",
    "promo_discount",
    "validate_phone",
    "validate_otp",
    "is_valid_phone",
    "is_valid_otp",
]
