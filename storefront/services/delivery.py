"""
OTP Delivery Channels

Sends OTP messages to a phone number. The OTP manager only depends on the
``OtpDelivery`` protocol; which channel is used comes from settings.
"""

import logging
from typing import Optional, Protocol

import httpx

from grama_common.errors import TransientNetworkError, InternalError

logger = logging.getLogger(__name__)


def mask_phone(phone_number: str) -> str:
    """Keep only the last four digits for logs"""
    return f"******{phone_number[-4:]}"


class OtpDelivery(Protocol):
    """Delivers a text message to a phone number"""

    async def send(self, phone_number: str, message: str) -> None:
        ...


class LoggingDelivery:
    """
    Development channel that writes messages to the log instead of sending them.

    The message body (and so the code) is only logged at DEBUG level.
    """

    async def send(self, phone_number: str, message: str) -> None:
        logger.info(f"OTP message for {mask_phone(phone_number)} written to log (no SMS gateway configured)")
        logger.debug(f"SMS to {phone_number}: {message}")

    async def close(self) -> None:
        pass


class HttpSmsDelivery:
    """
    Delivers messages through an HTTP SMS gateway.

    Posts ``{"to", "sender", "message"}`` JSON to the gateway URL. Transport
    failures and 5xx responses raise TransientNetworkError; any other
    rejection is a configuration problem and raises InternalError.
    """

    def __init__(
        self,
        gateway_url: str,
        api_key: Optional[str] = None,
        sender_id: str = "GRAMA",
        country_code: str = "+91",
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.gateway_url = gateway_url
        self.api_key = api_key
        self.sender_id = sender_id
        self.country_code = country_code
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    async def send(self, phone_number: str, message: str) -> None:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            response = await self._http_client.post(
                self.gateway_url,
                json={
                    "to": f"{self.country_code}{phone_number}",
                    "sender": self.sender_id,
                    "message": message,
                },
                headers=headers,
            )
        except httpx.HTTPError as e:
            logger.warning(f"SMS gateway unreachable for {mask_phone(phone_number)}: {e}")
            raise TransientNetworkError("Could not send OTP, please try again") from e

        if response.status_code >= 500:
            logger.warning(f"SMS gateway error {response.status_code} for {mask_phone(phone_number)}")
            raise TransientNetworkError("Could not send OTP, please try again")

        if response.status_code >= 400:
            logger.error(f"SMS gateway rejected request: {response.status_code} - {response.text}")
            raise InternalError()

        logger.info(f"OTP SMS sent to {mask_phone(phone_number)}")


def create_delivery(settings) -> OtpDelivery:
    """Pick the delivery channel for the configured environment"""
    if settings.sms_gateway_configured:
        logger.info(f"OTP delivery: SMS gateway at {settings.sms_gateway_url}")
        return HttpSmsDelivery(
            gateway_url=settings.sms_gateway_url,
            api_key=settings.sms_api_key,
            sender_id=settings.sms_sender_id,
        )

    logger.warning("No SMS gateway configured - OTP codes will only be logged")
    return LoggingDelivery()
