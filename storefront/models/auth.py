"""Auth and profile API models"""

from datetime import datetime
from typing import Optional

from pydantic import ConfigDict, Field

from grama_common.models import CamelModel, User


class SendOtpRequest(CamelModel):
    """Request to send (or resend) an OTP"""
    # Missing fields fall through to the format checks and come back as 400
    phone_number: str = ""


class VerifyOtpRequest(CamelModel):
    """Request to verify an OTP"""
    phone_number: str = ""
    otp: str = ""


class OtpDebug(CamelModel):
    otp: str


class SendOtpResponse(CamelModel):
    """OTP acknowledgment. ``debug`` is only present in development."""
    success: bool = True
    message: str
    expires_at: datetime
    retries_remaining: int
    debug: Optional[OtpDebug] = None


class VerifyOtpResponse(CamelModel):
    """Successful verification"""
    success: bool = True
    message: str
    user: User
    token: str


class ProfileUpdateRequest(CamelModel):
    """Profile fields a user may change. Role is not one of them."""
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    email: Optional[str] = Field(default=None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

    model_config = ConfigDict(extra="forbid")


class UserResponse(CamelModel):
    success: bool = True
    user: User
