"""
Grama error taxonomy

Shared by the storefront service and the shopper client. Every error knows
its HTTP status and serialises to the ``{success, error, code}`` body the
service returns, so the client can map a failed response back to the same
exception class.
"""

from typing import Optional


class GramaError(Exception):
    """Base class for all domain errors"""

    status_code: int = 500
    default_message: str = "Something went wrong"

    _registry: dict[str, type["GramaError"]] = {}

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        GramaError._registry[cls.__name__] = cls

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def code(self) -> str:
        return type(self).__name__

    def to_payload(self) -> dict:
        """Error body as returned by the HTTP API"""
        return {"success": False, "error": self.message, "code": self.code}


# ==================== Validation ====================

class ValidationError(GramaError):
    """Malformed user input, correctable by the user"""
    status_code = 400
    default_message = "Invalid input"


class InvalidPhoneFormat(ValidationError):
    default_message = "Invalid phone number format"


class InvalidOtpFormat(ValidationError):
    default_message = "OTP must be 6 digits"


class InvalidQuantity(ValidationError):
    default_message = "Quantity must be at least 1"


# ==================== Auth challenge ====================

class AuthChallengeError(GramaError):
    """OTP challenge could not be satisfied"""
    status_code = 400
    default_message = "OTP verification failed"


class NoActiveChallenge(AuthChallengeError):
    default_message = "No active OTP for this phone number. Please request a new one."


class CodeMismatch(AuthChallengeError):
    default_message = "Invalid OTP"


class RetryLimitExceeded(AuthChallengeError):
    status_code = 429
    default_message = "Maximum retry attempts reached"


class NotAuthenticated(AuthChallengeError):
    status_code = 401
    default_message = "User not authenticated"


# ==================== Promo / cart ====================

class PromoError(GramaError):
    status_code = 400
    default_message = "Promo code could not be applied"


class InvalidPromoCode(PromoError):
    default_message = "Invalid promo code"


class CartError(GramaError):
    status_code = 400
    default_message = "Cart operation failed"


class ItemNotFound(CartError):
    status_code = 404
    default_message = "Item not in cart"


# ==================== Lookup ====================

class NotFound(GramaError):
    status_code = 404
    default_message = "Not found"


# ==================== Infrastructure ====================

class TransientNetworkError(GramaError):
    """Request never reached the other side, safe to retry"""
    status_code = 503
    default_message = "Network error, please try again"


class InternalError(GramaError):
    status_code = 500
    default_message = "Internal server error"


def error_from_payload(payload: Optional[dict], status_code: int) -> GramaError:
    """
    Rebuild a domain error from an API error body.

    Unknown codes fall back to a class picked by status: 5xx becomes
    InternalError, everything else a plain GramaError with that status.
    """
    payload = payload if isinstance(payload, dict) else {}
    message = payload.get("error") or payload.get("detail")
    if not isinstance(message, str):
        message = None

    error_cls = GramaError._registry.get(payload.get("code") or "")
    if error_cls is not None:
        return error_cls(message)

    if status_code >= 500:
        return InternalError(message)

    error = GramaError(message or f"Request failed with status {status_code}")
    error.status_code = status_code
    return error
