"""
Pytest configuration and fixtures
"""

import pytest
import pytest_asyncio
from typing import AsyncGenerator, Dict, List
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from core.config import StoreConfig
from models import Base
from sync.client import EntityType

# In-memory database shared by every connection of the test engine
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create test database engine"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for tests"""
    session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def store_config():
    return StoreConfig(
        shop_name="test-shop",
        access_token="shpat_test_token",
        max_retries=3,
        retry_base_delay=1.0,
    )


@pytest.fixture
def remote_products():
    return [
        {
            "id": 101,
            "title": "Classic Mug #1",
            "vendor": "Acme Co",
            "variants": [{"id": 1001, "price": "12.50"}],
        },
        {
            "id": 102,
            "title": "Eco Cap #2",
            "vendor": "Globex",
            "variants": [{"id": 1002, "price": "30.00"}],
        },
    ]


@pytest.fixture
def remote_customers():
    return [
        {
            "id": 201,
            "first_name": "Alex",
            "last_name": "Smith",
            "email": "alex.smith@example.com",
        },
    ]


@pytest.fixture
def remote_orders():
    return [
        {
            "id": 301,
            "total_price": "55.00",
            "created_at": "2024-07-01T10:00:00Z",
            "customer": {"id": 201, "first_name": "Alex", "last_name": "Smith"},
            "line_items": [
                {"product_id": 101, "quantity": 2, "price": "12.50"},
                {"product_id": 102, "quantity": 1, "price": "30.00"},
            ],
        },
        {
            # Customer unknown locally and without an email
            "id": 302,
            "total_price": "12.50",
            "created_at": "2024-07-02T11:30:00Z",
            "customer": {"id": 202, "first_name": "Sam"},
            "line_items": [
                {"product_id": 101, "quantity": 1, "price": "12.50"},
                {"product_id": 999, "quantity": 4, "price": "1.00"},
            ],
        },
        {
            # Guest checkout
            "id": 303,
            "total_price": "0.00",
            "created_at": "2024-07-03T09:15:00Z",
            "customer": None,
            "line_items": [],
        },
    ]


class FakeShopifyClient:
    """Serves fixed pages per entity type and records the calls"""

    def __init__(self, pages: Dict[EntityType, List[dict]], errors: Dict[EntityType, Exception] = None):
        self.pages = pages
        self.errors = errors or {}
        self.calls = []

    async def fetch_page(self, entity_type, page_size):
        self.calls.append((entity_type, page_size))
        if entity_type in self.errors:
            raise self.errors[entity_type]
        return list(self.pages.get(entity_type, []))


@pytest.fixture
def fake_client(remote_products, remote_customers, remote_orders):
    return FakeShopifyClient({
        EntityType.PRODUCTS: remote_products,
        EntityType.CUSTOMERS: remote_customers,
        EntityType.ORDERS: remote_orders,
    })


@pytest.fixture
def client_factory():
    """Build a FakeShopifyClient with custom pages or errors"""
    return FakeShopifyClient
