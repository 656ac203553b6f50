"""
Product API - Test Configuration (conftest.py)
================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── database:          throwaway SQLite (aiosqlite) Database with tables created
    ├── app:               FastAPI app bound to `database`
    ├── test_client:       HTTPX AsyncClient talking to `app` over ASGITransport
    ├── mock_store:        ProductStore mock for service unit tests
    ├── sample_product:    valid create payload
    └── make_product:      factory for transient Product ORM instances
"""

import os
import uuid
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Override settings for testing BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["DEFAULT_PAGE_SIZE"] = "10"
os.environ["MAX_PAGE_SIZE"] = "100"

from product_api.database import Database  # noqa: E402
from product_api.main import create_app  # noqa: E402
from product_api.models.product import Product  # noqa: E402
from product_api.stores.base import ProductStore  # noqa: E402
from product_api.stores.sql_store import SqlProductStore  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Store / Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def database(tmp_path):
    """
    A fresh SQLite database file per test.

    Tables are created up front because ASGITransport does not run the
    application lifespan.
    """
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'products.db'}")
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def session(database):
    """A session on the test database for store-level tests."""
    async with database.session_factory() as s:
        yield s


@pytest.fixture
def app(database):
    return create_app(database=database)


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient configured to talk to the FastAPI app.

    Usage:
        async def test_root(test_client):
            response = await test_client.get("/")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def mock_store():
    """
    A ProductStore mock: async methods are AsyncMocks, parse_id uses the
    real UUID parsing so invalid-id paths behave like production.
    """
    store = MagicMock(spec=ProductStore)
    store.parse_id.side_effect = SqlProductStore(MagicMock()).parse_id
    return store


# ══════════════════════════════════════════════════════════════════════════
# Data Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def sample_product():
    return {
        "name": "Laptop",
        "buyer": "Vedant",
        "price": 55000,
        "location": "Delhi",
    }


@pytest.fixture
def make_product():
    """Factory for Product instances that never touch a session."""

    def _make(**overrides):
        now = datetime.now(timezone.utc)
        values = {
            "id": uuid.uuid4(),
            "name": "Laptop",
            "buyer": "Vedant",
            "price": 55000.0,
            "location": "Delhi",
            "created_at": now,
            "updated_at": now,
        }
        values.update(overrides)
        return Product(**values)

    return _make
