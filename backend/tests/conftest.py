"""
Pytest configuration and shared fixtures for the loyalty registry tests.

Provides fixed test wallets, a standalone registry for unit tests, an
in-memory SQLite session, and an httpx client bound to the FastAPI app.
"""
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))
sys.path.insert(0, os.path.dirname(__file__))

# Must be set before config.settings is instantiated
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DEMO_MODE", "true")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-for-pytest-only")

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from algosdk import encoding
from httpx import ASGITransport, AsyncClient
from nacl.signing import SigningKey
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from main import app
from config import settings
from database import Base, get_db
from middleware.rate_limit import limiter
from services import registry_service
from services.loyalty_registry import LoyaltyRegistry

# ── Wallets ──────────────────────────────────────────────────────────


def _wallet(seed: int) -> str:
    """Address of the Ed25519 key whose seed is 32 copies of `seed`."""
    signing_key = SigningKey(bytes([seed]) * 32)
    return encoding.encode_address(signing_key.verify_key.encode())


ADMIN_WALLET = _wallet(1)
HOLDER_WALLET = _wallet(2)
OTHER_WALLET = _wallet(3)
INVALID_WALLET_SHORT = "ABC123"

if not settings.jwt_secret:
    settings.jwt_secret = "test-jwt-secret-for-pytest-only"
settings.administrator_wallet = ADMIN_WALLET


def as_wallet(wallet: str) -> dict:
    """Legacy caller header (honoured in demo mode)."""
    return {"X-Wallet-Address": wallet}


@pytest.fixture
def admin_wallet() -> str:
    return ADMIN_WALLET


@pytest.fixture
def holder_wallet() -> str:
    return HOLDER_WALLET


@pytest.fixture
def other_wallet() -> str:
    return OTHER_WALLET


# ── Registry Fixtures ────────────────────────────────────────────────


@pytest.fixture
def registry() -> LoyaltyRegistry:
    """A standalone registry with its own ledger, access control and event log."""
    return LoyaltyRegistry.create(ADMIN_WALLET)


@pytest.fixture(autouse=True)
def fresh_service_state():
    """Every test starts with a new process-wide registry and empty rate limits."""
    settings.demo_mode = True
    registry_service.reset_registry(ADMIN_WALLET)
    limiter.reset()
    yield
    limiter.reset()


# ── Database Fixtures ────────────────────────────────────────────────


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    In-memory SQLite database session for each test.

    StaticPool keeps the single in-memory connection alive across sessions.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_maker() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """httpx client against the app, with get_db bound to the test session."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
