"""Shared fixtures: a controllable clock, a recording SMS channel and app builders"""

from datetime import datetime, timedelta, timezone

import httpx
import pytest
from fastapi.testclient import TestClient

from grama_common.errors import TransientNetworkError
from grama_common.models import Product, ProductCategory, ProductVariant
from shopper.services import StorefrontClient
from storefront.core.config import Settings
from storefront.database import ChallengeDatabase, UserDatabase
from storefront.main import create_app
from storefront.services import OtpManager

PHONE = "9876543210"
CODE = "482913"
SESSION_SECRET = "test-session-secret-that-is-long-enough"


class FakeClock:
    def __init__(self, start: datetime = datetime(2026, 1, 15, 10, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class RecordingDelivery:
    """Keeps sent messages instead of texting anyone"""

    def __init__(self):
        self.sent: list[tuple[str, str]] = []
        self.fail_with: Exception | None = None

    async def send(self, phone_number: str, message: str) -> None:
        if self.fail_with:
            raise self.fail_with
        self.sent.append((phone_number, message))

    def fail(self, error: Exception | None = None) -> None:
        self.fail_with = error or TransientNetworkError("Could not send OTP, please try again")


class CodeSequence:
    """Hands out queued codes, then the default one"""

    def __init__(self, default: str = CODE):
        self.default = default
        self.queued: list[str] = []

    def queue(self, *codes: str) -> None:
        self.queued.extend(codes)

    def __call__(self) -> str:
        return self.queued.pop(0) if self.queued else self.default


def make_product(
    product_id: str = "prod-test",
    price: float = 100.0,
    compare_at_price: float | None = None,
    base_price: float | None = None,
    variant_id: str = "std",
) -> Product:
    variant = ProductVariant(
        id=variant_id,
        name=variant_id,
        size=variant_id,
        price=price,
        compare_at_price=compare_at_price,
        sku=f"SKU-{product_id}-{variant_id}",
    )
    return Product(
        id=product_id,
        name=f"Test {product_id}",
        category=ProductCategory.STAPLES,
        base_price=price if base_price is None else base_price,
        variants=[variant],
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def delivery():
    return RecordingDelivery()


@pytest.fixture
def codes():
    return CodeSequence()


@pytest.fixture
def otp_manager(delivery, clock, codes):
    return OtpManager(
        challenges=ChallengeDatabase(),
        users=UserDatabase(),
        delivery=delivery,
        expose_code=True,
        clock=clock,
        code_factory=codes,
    )


@pytest.fixture
def make_app(delivery, clock, codes):
    def _make_app(**overrides):
        settings = Settings(
            _env_file=None,
            **{"environment": "development", "session_secret": SESSION_SECRET, **overrides},
        )
        return create_app(settings=settings, delivery=delivery, clock=clock, code_factory=codes)

    return _make_app


@pytest.fixture
def app(make_app):
    return make_app()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
async def storefront_client(app):
    client = StorefrontClient(
        base_url="http://storefront.test",
        transport=httpx.ASGITransport(app=app),
    )
    yield client
    await client.close()


def login(client: TestClient, phone: str = PHONE) -> str:
    """Sign in through the API and return the session token"""
    sent = client.post("/api/auth/send-otp", json={"phoneNumber": phone})
    otp = sent.json()["debug"]["otp"]
    verified = client.post("/api/auth/verify-otp", json={"phoneNumber": phone, "otp": otp})
    return verified.json()["token"]
