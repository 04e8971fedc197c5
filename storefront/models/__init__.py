# Storefront API models

from .auth import (
    SendOtpRequest,
    SendOtpResponse,
    VerifyOtpRequest,
    VerifyOtpResponse,
    OtpDebug,
    ProfileUpdateRequest,
    UserResponse,
)
from .product import ProductSearchResponse
from .promo import PromoCode, PromoType, PromoValidateRequest, PromoValidateResponse

__all__ = [
    "SendOtpRequest",
    "SendOtpResponse",
    "VerifyOtpRequest",
    "VerifyOtpResponse",
    "OtpDebug",
    "ProfileUpdateRequest",
    "UserResponse",
    "ProductSearchResponse",
    "PromoCode",
    "PromoType",
    "PromoValidateRequest",
    "PromoValidateResponse",
]
