"""
Grama Groceries Storefront

HTTP service behind the shopper app: OTP login, profile updates, promo
code validation and the grocery catalog.
"""

import os
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from dotenv import load_dotenv

from grama_common.errors import GramaError, InternalError, NotFound, ValidationError, error_from_payload

from .core.config import Settings, get_settings
from .database import ChallengeDatabase, ProductDatabase, PromoDatabase, UserDatabase
from .routes import auth_router, users_router, promo_router, products_router
from .services import OtpDelivery, OtpManager, PromoService, SessionTokenIssuer, create_delivery
from .services.otp import generate_code, utcnow

# Load environment variables
load_dotenv(os.path.join(os.path.dirname(__file__), "..", "config", ".env"))

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    settings = app.state.settings
    logger.info("Storefront starting up...")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"SMS gateway: {'configured' if settings.sms_gateway_configured else 'disabled (codes logged)'}")

    yield

    logger.info("Storefront shutting down...")
    close = getattr(app.state.delivery, "close", None)
    if close:
        await close()


def register_error_handlers(app: FastAPI) -> None:
    """Every failure is answered with ``{success: false, error, code}``"""

    @app.exception_handler(GramaError)
    async def grama_error_handler(request: Request, exc: GramaError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.code} - {exc.message}")
        else:
            logger.info(f"{request.method} {request.url.path} rejected: {exc.code} - {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        # Framework errors such as unknown paths get the same body as domain errors
        if exc.status_code == 404:
            error = NotFound()
        else:
            error = error_from_payload({"detail": exc.detail}, exc.status_code)
        return JSONResponse(status_code=error.status_code, content=error.to_payload(), headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        detail = errors[0].get("msg") if errors else None
        error = ValidationError(f"Invalid request: {detail}" if detail else None)
        return JSONResponse(status_code=error.status_code, content=error.to_payload())

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        error = InternalError()
        return JSONResponse(status_code=error.status_code, content=error.to_payload())


def create_app(
    settings: Optional[Settings] = None,
    delivery: Optional[OtpDelivery] = None,
    clock: Callable[[], datetime] = utcnow,
    code_factory: Callable[[], str] = generate_code,
) -> FastAPI:
    """
    Build the storefront application.

    This is the composition root: storage, services and the delivery channel
    are created here and kept on ``app.state`` for the route dependencies.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Grama Groceries storefront API",
        version="1.0.0",
        lifespan=lifespan,
    )

    delivery = delivery or create_delivery(settings)
    user_db = UserDatabase()

    app.state.settings = settings
    app.state.delivery = delivery
    app.state.user_db = user_db
    app.state.product_db = ProductDatabase()
    app.state.otp_manager = OtpManager(
        challenges=ChallengeDatabase(),
        users=user_db,
        delivery=delivery,
        ttl_seconds=settings.otp_ttl_seconds,
        max_resends=settings.otp_max_resends,
        max_attempts=settings.otp_max_verify_attempts,
        expose_code=settings.is_development,
        clock=clock,
        code_factory=code_factory,
    )
    app.state.promo_service = PromoService(
        promos=PromoDatabase(),
        policy=settings.pricing_policy,
        clock=clock,
    )
    app.state.token_issuer = SessionTokenIssuer(
        secret=settings.session_secret,
        algorithm=settings.session_algorithm,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(promo_router)
    app.include_router(products_router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "storefront",
            "environment": settings.environment,
        }

    return app


configure_logging(get_settings())
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "storefront.main:app",
        host=get_settings().host,
        port=get_settings().port,
        reload=get_settings().debug,
    )
