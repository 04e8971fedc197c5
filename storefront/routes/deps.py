"""
Route dependencies

Services live on ``app.state`` (set up by ``create_app``); these helpers hand
them to the routes so tests can build an app with their own collaborators.
"""

from typing import Optional

from fastapi import Depends, Header, Request

from grama_common.errors import NotAuthenticated
from grama_common.models import User

from ..database import ProductDatabase, UserDatabase
from ..services import OtpManager, PromoService, SessionTokenIssuer


def get_otp_manager(request: Request) -> OtpManager:
    return request.app.state.otp_manager


def get_token_issuer(request: Request) -> SessionTokenIssuer:
    return request.app.state.token_issuer


def get_promo_service(request: Request) -> PromoService:
    return request.app.state.promo_service


def get_product_db(request: Request) -> ProductDatabase:
    return request.app.state.product_db


def get_user_db(request: Request) -> UserDatabase:
    return request.app.state.user_db


async def get_current_user(
    authorization: Optional[str] = Header(None),
    tokens: SessionTokenIssuer = Depends(get_token_issuer),
    users: UserDatabase = Depends(get_user_db),
) -> User:
    """Resolve the bearer session token to a stored user"""
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise NotAuthenticated()

    claims = tokens.decode(token.strip())
    user = users.get_user(claims["sub"])
    if not user:
        raise NotAuthenticated("User no longer exists")
    return user
