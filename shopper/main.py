"""
Grama Groceries Shopper

Composition root for the client side: one storefront client, one storage
backend and the three stores wired to them.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from .core.config import Settings, get_settings
from .persistence import JsonFileStorage, KeyValueStorage, MemoryStorage
from .services import StorefrontClient
from .stores import (
    AuthStore,
    CartStore,
    PreferencesStore,
    create_auth_store,
    create_cart_store,
    create_preferences_store,
)

logger = logging.getLogger(__name__)


@dataclass
class Shopper:
    """Everything a shopper session needs"""
    client: StorefrontClient
    storage: KeyValueStorage
    auth: AuthStore
    cart: CartStore
    preferences: PreferencesStore

    async def close(self) -> None:
        await self.client.close()


def create_storage(settings: Settings) -> KeyValueStorage:
    if settings.storage_dir:
        return JsonFileStorage(settings.storage_dir)
    return MemoryStorage()


def create_shopper(
    settings: Optional[Settings] = None,
    storage: Optional[KeyValueStorage] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Shopper:
    """
    Build a shopper session.

    Args:
        settings: Client settings, the environment's when omitted
        storage: Persistence backend, chosen from settings when omitted
        transport: httpx transport for the storefront client (tests pass an ASGI app)

    Returns:
        Shopper with stores restored from storage
    """
    settings = settings or get_settings()
    storage = storage or create_storage(settings)

    client = StorefrontClient(
        base_url=settings.storefront_base_url,
        timeout=settings.request_timeout,
        transport=transport,
    )

    shopper = Shopper(
        client=client,
        storage=storage,
        auth=create_auth_store(storage, client),
        cart=create_cart_store(storage, client),
        preferences=create_preferences_store(storage),
    )
    logger.info(
        f"Shopper ready against {settings.storefront_base_url} "
        f"(signed in: {shopper.auth.is_authenticated}, cart items: {shopper.cart.get_item_count()})"
    )
    return shopper


async def main() -> None:
    """Print the storefront catalog, a quick check that the client can reach it"""
    shopper = create_shopper()
    try:
        catalog = await shopper.client.search_products(limit=50)
        for product in catalog["products"]:
            print(f"{product['id']:<16} {product['name']:<32} ₹{product['basePrice']:g}")
    finally:
        await shopper.close()


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(main())
