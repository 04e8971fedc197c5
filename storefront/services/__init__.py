# Storefront services

from .otp import OtpManager, ChallengeAck
from .delivery import OtpDelivery, LoggingDelivery, HttpSmsDelivery, create_delivery
from .promo import PromoService
from .tokens import SessionTokenIssuer

__all__ = [
    "OtpManager",
    "ChallengeAck",
    "OtpDelivery",
    "LoggingDelivery",
    "HttpSmsDelivery",
    "create_delivery",
    "PromoService",
    "SessionTokenIssuer",
]
