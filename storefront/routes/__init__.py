# API Routes

from .auth import router as auth_router
from .users import router as users_router
from .promo import router as promo_router
from .products import router as products_router

__all__ = ["auth_router", "users_router", "promo_router", "products_router"]
