"""Pytest fixtures for the storefront backend.

Provides reusable test fixtures for:
- Async SQLite database (file per test) with all tables created
- Seeded profiles, addresses, products and cart items
- Guest and authenticated order drafts
- In-memory audit store for audit logger tests (see factories.py)

Usage:
    async def test_something(db_session, product):
        catalog = SqlProductCatalog(db_session)
        assert await catalog.get_product(str(product.id)) is not None
"""

import os
from decimal import Decimal
from typing import AsyncGenerator
from uuid import uuid4

os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-key-256-bits-minimum-length-required-for-security")

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from storefront.config import Settings
from storefront.domain.orders.draft import AuthenticatedOrderDraft, GuestOrderDraft
from storefront.models import Address, Base, CartItem, Product, Profile

from factories import InMemoryAuditStore, build_authenticated_draft, build_guest_draft


@pytest.fixture
def settings() -> Settings:
    return Settings(ALERT_WEBHOOK_URL=None)


@pytest.fixture
async def engine(tmp_path):
    """File-backed SQLite so separate sessions use separate connections."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'storefront.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def customer(db_session) -> Profile:
    profile = Profile(
        id=uuid4(),
        full_name="Thandi Nkosi",
        email="thandi@example.com",
        phone="0821234567",
        role="customer",
    )
    db_session.add(profile)
    await db_session.commit()
    return profile


@pytest.fixture
async def other_customer(db_session) -> Profile:
    profile = Profile(id=uuid4(), full_name="Other Customer", email="other@example.com", role="customer")
    db_session.add(profile)
    await db_session.commit()
    return profile


@pytest.fixture
async def address(db_session, customer) -> Address:
    saved = Address(
        id=uuid4(),
        user_id=customer.id,
        full_name="Thandi Nkosi",
        street_address="12 Long Street",
        city="Cape Town",
        province="Western Cape",
        postal_code="8001",
        phone="0821234567",
    )
    db_session.add(saved)
    await db_session.commit()
    return saved


@pytest.fixture
async def product(db_session) -> Product:
    item = Product(
        id=uuid4(),
        name="Linen Shirt",
        price=Decimal("100.00"),
        is_available=True,
        stock_quantity=20,
    )
    db_session.add(item)
    await db_session.commit()
    return item


@pytest.fixture
async def untracked_product(db_session) -> Product:
    item = Product(
        id=uuid4(),
        name="Gift Card",
        price=Decimal("250.00"),
        is_available=True,
        stock_quantity=None,
    )
    db_session.add(item)
    await db_session.commit()
    return item


@pytest.fixture
async def cart(db_session, customer, product) -> list[CartItem]:
    items = [CartItem(id=uuid4(), user_id=customer.id, product_id=product.id, quantity=2, size="M", color="White")]
    db_session.add_all(items)
    await db_session.commit()
    return items


@pytest.fixture
def guest_draft() -> GuestOrderDraft:
    return build_guest_draft()


@pytest.fixture
def authenticated_draft() -> AuthenticatedOrderDraft:
    return build_authenticated_draft()


@pytest.fixture
def audit_store() -> InMemoryAuditStore:
    return InMemoryAuditStore()
