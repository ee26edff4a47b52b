"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) so tests run without
Docker / PostgreSQL / Redis.  The production models are created directly
on SQLite; Redis is replaced by an ``AsyncMock``.
"""

from typing import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from src.api.middleware import limiter
from src.infrastructure import models  # noqa: F401  (registers the tables)
from src.infrastructure.database import Base
from src.infrastructure.viewers import ViewerRegistry

# ── Test DB (SQLite in-memory) ────────────────────────────────────────

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

# Every request in a test hits the same client address
limiter.enabled = False

FAKE_NOW = 1_000.0


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Create tables on a fresh in-memory database, drop them afterwards."""
    engine = create_async_engine(
        TEST_DB_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def fake_redis() -> AsyncMock:
    redis = AsyncMock()
    redis.zcard.return_value = 0
    return redis


@pytest_asyncio.fixture
async def client(session_factory, fake_redis) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient backed by SQLite and a mocked Redis."""

    async def _test_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def _test_registry():
        return ViewerRegistry(fake_redis, timeout_seconds=30, clock=lambda: FAKE_NOW)

    from src.api.app import create_app
    from src.api.dependencies import get_db, get_viewer_registry

    app = create_app()
    app.dependency_overrides[get_db] = _test_db
    app.dependency_overrides[get_viewer_registry] = _test_registry

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ── Request helpers ───────────────────────────────────────────────────

# Bandra, Mumbai
PHARMACY_LAT, PHARMACY_LNG = 19.0544, 72.8340
CUSTOMER_LAT, CUSTOMER_LNG = 19.0596, 72.8295


async def create_user(client: AsyncClient, **overrides) -> dict:
    body = {
        "name": "Aarav Sharma",
        "email": "aarav@example.com",
        "phone": "+91 98200 00001",
        "role": "customer",
        "address": "Bandra West, Mumbai",
        "latitude": CUSTOMER_LAT,
        "longitude": CUSTOMER_LNG,
    }
    body.update(overrides)
    resp = await client.post("/api/v1/users", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def create_pharmacy(client: AsyncClient, **overrides) -> dict:
    body = {
        "pharmacy_name": "Bandra Wellness Pharmacy",
        "license_number": "MH-PH-1001",
        "address": "Hill Road, Bandra West",
        "latitude": PHARMACY_LAT,
        "longitude": PHARMACY_LNG,
        "phone": "+91 22 2600 0001",
        "email": "bandra@pharmacies.example.com",
    }
    body.update(overrides)
    resp = await client.post("/api/v1/pharmacies", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def create_medicine(client: AsyncClient, **overrides) -> dict:
    body = {
        "name": "Crocin Advance",
        "brand": "GSK",
        "salt_composition": "Paracetamol 500mg",
        "category": "otc",
        "unit": "strip of 15",
        "price": 30.0,
    }
    body.update(overrides)
    resp = await client.post("/api/v1/medicines", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def create_order(
    client: AsyncClient, user_id: int, pharmacy_id: int, **overrides
) -> dict:
    body = {
        "user_id": user_id,
        "pharmacy_id": pharmacy_id,
        "order_number": "ORD-0001",
        "status": "pending",
        "total_amount": 62.0,
        "delivery_address": "Bandra West, Mumbai",
        "delivery_latitude": CUSTOMER_LAT,
        "delivery_longitude": CUSTOMER_LNG,
    }
    body.update(overrides)
    resp = await client.post("/api/v1/orders", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()
