# Shopper services

from .storefront_client import StorefrontClient

__all__ = ["StorefrontClient"]
