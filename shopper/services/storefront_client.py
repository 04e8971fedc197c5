"""
Storefront API Client

Async HTTP client for the storefront service. Failed calls come back as
``grama_common`` errors: transport problems as TransientNetworkError,
error responses as the class named in the body's ``code``.
"""

import logging
from typing import Optional, Any

import httpx

from grama_common.errors import TransientNetworkError, error_from_payload
from grama_common.models import AppliedPromo

logger = logging.getLogger(__name__)


class StorefrontClient:
    """
    Client for the storefront API.

    Also serves as the cart's promo validator (``validate_promo``).
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize storefront client.

        Args:
            base_url: Base URL of the storefront API
            timeout: Per-request timeout in seconds
            transport: Custom httpx transport (e.g. an in-process ASGI app)
        """
        self.base_url = base_url.rstrip("/")
        self._http_client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        body: Optional[dict] = None,
        params: Optional[dict] = None,
        token: Optional[str] = None,
    ) -> Any:
        """Make an HTTP request and decode the JSON response"""
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = await self._http_client.request(
                method=method,
                url=path,
                json=body,
                params=params,
                headers=headers,
            )
        except httpx.TransportError as e:
            logger.warning(f"{method} {path} did not reach the storefront: {e}")
            raise TransientNetworkError() from e

        if response.status_code >= 400:
            logger.error(f"Request failed: {response.status_code} - {response.text}")
            try:
                payload = response.json()
            except ValueError:
                payload = None
            raise error_from_payload(payload, response.status_code)

        return response.json()

    # ==================== Auth APIs ====================

    async def send_otp(self, phone_number: str) -> dict:
        """Ask the storefront to send an OTP"""
        return await self._request("POST", "/api/auth/send-otp", body={"phoneNumber": phone_number})

    async def resend_otp(self, phone_number: str) -> dict:
        """Ask for a replacement OTP"""
        return await self._request("POST", "/api/auth/resend-otp", body={"phoneNumber": phone_number})

    async def verify_otp(self, phone_number: str, otp: str) -> dict:
        """Verify an OTP, returns ``{user, token, ...}``"""
        return await self._request(
            "POST",
            "/api/auth/verify-otp",
            body={"phoneNumber": phone_number, "otp": otp},
        )

    async def update_profile(self, token: str, changes: dict) -> dict:
        """Update the signed-in user's profile, returns ``{user, ...}``"""
        return await self._request("PUT", "/api/user/profile", body=changes, token=token)

    # ==================== Promo APIs ====================

    async def validate_promo(self, code: str, subtotal: float) -> AppliedPromo:
        """Validate a promo code for a cart subtotal, returns the accepted promo's rules"""
        data = await self._request(
            "POST",
            "/api/promo/validate",
            body={"code": code, "cartTotal": subtotal},
        )
        return AppliedPromo.model_validate(data)

    # ==================== Catalog APIs ====================

    async def search_products(
        self,
        query: Optional[str] = None,
        category: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> dict:
        """Search the grocery catalog"""
        params = {"limit": limit, "offset": offset}
        if query:
            params["query"] = query
        if category:
            params["category"] = category
        return await self._request("GET", "/api/products", params=params)

    async def get_product(self, product_id: str) -> dict:
        """Get product details"""
        return await self._request("GET", f"/api/products/{product_id}")
