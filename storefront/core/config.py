"""Storefront Service Configuration"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from grama_common.pricing import PricingPolicy


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    # Application
    app_name: str = "Grama Groceries Storefront"
    environment: str = "development"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8001
    cors_origins: list[str] = ["*"]

    # OTP lifecycle
    otp_ttl_seconds: int = 300
    otp_max_resends: int = 3
    otp_max_verify_attempts: int = 3

    # SMS delivery (codes are only logged when no gateway is configured)
    sms_gateway_url: Optional[str] = None
    sms_api_key: Optional[str] = None
    sms_sender_id: str = "GRAMA"

    # Session tokens
    session_secret: str = "grama-dev-session-secret-change-me-in-production"
    session_algorithm: str = "HS256"

    # Pricing
    tax_rate: float = 0.05
    free_delivery_threshold: float = 500.0
    delivery_fee: float = 49.0

    model_config = SettingsConfigDict(
        env_file="config/.env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_development(self) -> bool:
        """Development mode echoes OTP codes back in API responses"""
        return self.environment.lower() == "development"

    @property
    def sms_gateway_configured(self) -> bool:
        return bool(self.sms_gateway_url)

    @property
    def pricing_policy(self) -> PricingPolicy:
        return PricingPolicy(
            tax_rate=self.tax_rate,
            free_delivery_threshold=self.free_delivery_threshold,
            delivery_fee=self.delivery_fee,
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
