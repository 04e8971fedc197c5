"""Promo code routes"""

from fastapi import APIRouter, Depends

from ..models.promo import PromoCode, PromoValidateRequest, PromoValidateResponse
from ..services import PromoService
from .deps import get_promo_service

router = APIRouter(prefix="/api/promo", tags=["Promo"])


@router.get("", response_model=list[PromoCode])
async def list_offers(promo_service: PromoService = Depends(get_promo_service)):
    """List promo codes that can be used right now"""
    return promo_service.active_offers()


@router.post("/validate", response_model=PromoValidateResponse)
async def validate_promo(
    request: PromoValidateRequest,
    promo_service: PromoService = Depends(get_promo_service),
):
    """
    Validate a promo code against a cart subtotal.

    Does not redeem the code. The response carries the discount for this
    subtotal and the rules the cart uses to reprice it as it changes.
    """
    promo, discount = promo_service.validate(request.code, request.cart_total)
    return PromoValidateResponse(
        code=promo.code,
        type=promo.type,
        value=promo.value,
        minimum_order=promo.minimum_order,
        maximum_discount=promo.maximum_discount,
        discount=discount,
        message=f"{promo.code} applied: ₹{discount:g} off",
    )
