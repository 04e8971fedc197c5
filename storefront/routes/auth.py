"""OTP authentication routes"""

from fastapi import APIRouter, Depends

from grama_common.errors import ValidationError
from grama_common.validation import validate_otp, validate_phone

from ..models.auth import (
    OtpDebug,
    SendOtpRequest,
    SendOtpResponse,
    VerifyOtpRequest,
    VerifyOtpResponse,
)
from ..services import ChallengeAck, OtpManager, SessionTokenIssuer
from .deps import get_otp_manager, get_token_issuer

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def _ack_response(ack: ChallengeAck, message: str) -> SendOtpResponse:
    return SendOtpResponse(
        message=message,
        expires_at=ack.expires_at,
        retries_remaining=ack.retries_remaining,
        debug=OtpDebug(otp=ack.debug_code) if ack.debug_code else None,
    )


@router.post("/send-otp", response_model=SendOtpResponse, response_model_exclude_none=True)
async def send_otp(
    request: SendOtpRequest,
    otp_manager: OtpManager = Depends(get_otp_manager),
):
    """
    Send an OTP to a phone number.

    Any pending OTP for the number is replaced. The code is only echoed
    back under ``debug`` when the service runs in development mode.
    """
    ack = await otp_manager.request_challenge(request.phone_number)
    return _ack_response(ack, "OTP sent successfully")


@router.post("/resend-otp", response_model=SendOtpResponse, response_model_exclude_none=True)
async def resend_otp(
    request: SendOtpRequest,
    otp_manager: OtpManager = Depends(get_otp_manager),
):
    """Send a replacement OTP, limited to 3 resends per login attempt"""
    ack = await otp_manager.resend_challenge(request.phone_number)
    return _ack_response(ack, "OTP resent successfully")


@router.post("/verify-otp", response_model=VerifyOtpResponse)
async def verify_otp(
    request: VerifyOtpRequest,
    otp_manager: OtpManager = Depends(get_otp_manager),
    tokens: SessionTokenIssuer = Depends(get_token_issuer),
):
    """
    Verify an OTP and sign the user in.

    Creates a customer account the first time a phone number is verified.
    """
    if not request.phone_number or not request.otp:
        raise ValidationError("Phone number and OTP are required")

    validate_phone(request.phone_number)
    validate_otp(request.otp)

    user = otp_manager.verify_challenge(request.phone_number, request.otp)
    return VerifyOtpResponse(
        message="OTP verified successfully",
        user=user,
        token=tokens.issue(user),
    )
