"""Input format rules shared by the client stores and the storefront"""

import re

from .errors import InvalidPhoneFormat, InvalidOtpFormat

PHONE_PATTERN = re.compile(r"^[6-9]\d{9}$", re.ASCII)
OTP_PATTERN = re.compile(r"^\d{6}$", re.ASCII)


def is_valid_phone(phone_number) -> bool:
    return isinstance(phone_number, str) and PHONE_PATTERN.fullmatch(phone_number) is not None


def is_valid_otp(otp) -> bool:
    return isinstance(otp, str) and OTP_PATTERN.fullmatch(otp) is not None


def validate_phone(phone_number) -> str:
    """Return the phone number or raise InvalidPhoneFormat"""
    if not is_valid_phone(phone_number):
        raise InvalidPhoneFormat()
    return phone_number


def validate_otp(otp) -> str:
    """Return the OTP or raise InvalidOtpFormat"""
    if not is_valid_otp(otp):
        raise InvalidOtpFormat()
    return otp
