# Shopper state stores

from .base import PersistentStore
from .auth import AuthStore, AuthSnapshot, OtpData, create_auth_store
from .cart import CartStore, CartSnapshot, PromoValidator, create_cart_store
from .preferences import (
    PreferencesStore,
    PreferencesSnapshot,
    AppSettings,
    AppNotification,
    AppBanner,
    Coordinates,
    Theme,
    Language,
    create_preferences_store,
)

__all__ = [
    "PersistentStore",
    "AuthStore",
    "AuthSnapshot",
    "OtpData",
    "create_auth_store",
    "CartStore",
    "CartSnapshot",
    "PromoValidator",
    "create_cart_store",
    "PreferencesStore",
    "PreferencesSnapshot",
    "AppSettings",
    "AppNotification",
    "AppBanner",
    "Coordinates",
    "Theme",
    "Language",
    "create_preferences_store",
]
