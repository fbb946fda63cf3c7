"""Pytest configuration and fixtures for BuyNest tests.

Each test gets its own SQLite database file (aiosqlite) with the catalog
tables created from metadata, so tests can commit freely and run
concurrent sessions against the same database. Redis caching is switched
off and SendGrid is replaced by a recording fake.
"""

import os

# Must be set before app.config is imported anywhere
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ["CACHE_ENABLED"] = "false"
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from dataclasses import dataclass, field
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app import models  # noqa: F401 — register tables on Base.metadata
from app.auth.jwt import create_access_token
from app.database import Base, build_engine, get_db
from app.main import app
from app.models.product import Product
from app.models.supplier import Supplier
from app.services.catalog_store import CatalogStore
from app.services.email import DeliveryStatus, EmailClient, get_email_client


# ── Test Database Setup ──────────────────────────────────────────

@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """Fresh SQLite database file per test."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(db_session: AsyncSession) -> CatalogStore:
    return CatalogStore(db_session)


# ── Email fake ───────────────────────────────────────────────────

@dataclass
class SentEmail:
    to: str
    subject: str
    html: str


@dataclass
class RecordingEmailClient(EmailClient):
    """Records every message and answers with a fixed DeliveryStatus."""
    status: DeliveryStatus = field(
        default_factory=lambda: DeliveryStatus(ok=True, status_code=202, message_id="msg-test-1")
    )
    sent: list[SentEmail] = field(default_factory=list)

    async def send(self, to: str, subject: str, html: str) -> DeliveryStatus:
        self.sent.append(SentEmail(to=to, subject=subject, html=html))
        return self.status


@pytest.fixture
def email_client() -> RecordingEmailClient:
    return RecordingEmailClient()


# ── HTTP client ──────────────────────────────────────────────────

@pytest_asyncio.fixture
async def client(session_factory, email_client) -> AsyncGenerator[AsyncClient, None]:
    """Test client with database and email dependencies overridden."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_client] = lambda: email_client

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# ── Auth fixtures ────────────────────────────────────────────────

@pytest.fixture
def admin_headers() -> dict:
    token = create_access_token(user_id="admin-1", role="admin")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def customer_headers() -> dict:
    token = create_access_token(user_id="customer-1", role="customer")
    return {"Authorization": f"Bearer {token}"}


# ── Test Data Fixtures ───────────────────────────────────────────

@pytest.fixture
def make_product(session_factory):
    """Insert and commit a product directly, bypassing the service."""

    async def _make(product_id: str = "BYNPD00001", **overrides) -> Product:
        values = {
            "product_id": product_id,
            "name": "Test Product",
            "description": "A product for tests",
            "categories": ["Electronics"],
            "images": [],
            "labelled_price": 120.0,
            "price": 99.0,
            "stock": 10,
            "is_available": True,
        }
        values.update(overrides)
        async with session_factory() as session:
            product = Product(**values)
            session.add(product)
            await session.commit()
            return product

    return _make


@pytest.fixture
def make_supplier(session_factory):
    """Insert and commit a supplier row without touching product stock."""

    async def _make(supplier_id: str, product_id: str, **overrides) -> Supplier:
        values = {
            "supplier_id": supplier_id,
            "product_id": product_id,
            "email": f"{supplier_id.lower()}@supplier.test",
            "name": f"Supplier {supplier_id}",
            "stock": 5,
            "cost": 10.0,
            "contact_no": "0771234567",
        }
        values.update(overrides)
        async with session_factory() as session:
            supplier = Supplier(**values)
            session.add(supplier)
            await session.commit()
            return supplier

    return _make


@pytest.fixture
def fetch_product(session_factory):
    """Read a product through a fresh session (sees only committed state)."""

    async def _fetch(product_id: str) -> Product | None:
        async with session_factory() as session:
            return await CatalogStore(session).get_product(product_id)

    return _fetch


@pytest.fixture
def fetch_suppliers(session_factory):
    async def _fetch(product_id: str | None = None) -> list[Supplier]:
        async with session_factory() as session:
            return await CatalogStore(session).find_suppliers(product_id)

    return _fetch


# ── Test Markers ─────────────────────────────────────────────────

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "api: HTTP API tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "cache: Redis cache tests")
    config.addinivalue_line("markers", "slow: Slow tests")
