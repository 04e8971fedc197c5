"""Shopper Client Configuration"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings loaded from environment (``SHOPPER_`` prefix)"""

    # Storefront API
    storefront_base_url: str = "http://localhost:8001"
    request_timeout: float = 30.0

    # Local persistence; in-memory only when unset
    storage_dir: Optional[str] = None

    model_config = SettingsConfigDict(
        env_prefix="SHOPPER_",
        env_file="config/.env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
