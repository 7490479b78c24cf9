"""
Market Registry Backend — Test Configuration (conftest.py)
============================================================

What:  Shared pytest fixtures for the entire test suite.

Fixture Hierarchy:
    Unit-level (no database):
    ├── mock_db_session: AsyncMock standing in for AsyncSession
    ├── make_user: builds detached User rows for a given role
    └── make_market / make_vendor: detached ORM rows

    API-level (temporary SQLite file per test):
    ├── test_settings: Settings pointing at tmp_path
    ├── test_app: fresh app with lifespan run (app.state.session_factory)
    ├── test_client: httpx AsyncClient on test_app
    └── market_payload / vendor_payload: camelCase bodies as the browser sends
"""

import os
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Keep the import-time default app away from any real database
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_default.db")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from app.config import Settings  # noqa: E402
from app.models.market import Market  # noqa: E402
from app.models.user import User  # noqa: E402
from app.models.vendor import Vendor  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Unit-level fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A mock async session.

    Usage:
        mock_db_session.get.return_value = market
        await market_service.update_status(mock_db_session, 1, ...)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def make_user():
    def _make(role: str, user_id: int = 1) -> User:
        return User(
            id=user_id,
            name=f"{role.title()} Person",
            email=f"{role}{user_id}@example.org",
            password="secret",
            role=role,
            status="active",
        )
    return _make


@pytest.fixture
def make_market():
    def _make(status: str = "pending", market_id: int = 1, **overrides) -> Market:
        fields = dict(
            id=market_id,
            ref_no=f"MKT-TEST{market_id:02d}",
            name="Nakasero Market",
            owner_name="Jane Owner",
            owner_id_no="CM900001",
            owner_phone="+256700000001",
            owner_email=None,
            owner_address="Plot 1, Kampala",
            address="Nakasero Hill",
            type="Public",
            size=1200.0,
            stalls_count=40,
            year_established=1995,
            operating_days="Monday-Sunday",
            operating_hours="06:00 - 18:00",
            manager_name="Sam Manager",
            manager_contact="+256700000002",
            status=status,
            created_at=datetime.now(timezone.utc),
        )
        fields.update(overrides)
        return Market(**fields)
    return _make


@pytest.fixture
def make_vendor():
    def _make(status: str = "pending", vendor_id: int = 1, **overrides) -> Vendor:
        fields = dict(
            id=vendor_id,
            ref_no=f"VND-TEST{vendor_id:02d}",
            user_id=10,
            market_id=1,
            full_name="Amina Trader",
            national_id="CF800002",
            phone="+256700000003",
            business_type="Retail",
            products="Vegetables",
            stall_type="Stall",
            stall_no=None,
            status=status,
            created_at=datetime.now(timezone.utc),
        )
        fields.update(overrides)
        return Vendor(**fields)
    return _make


# ══════════════════════════════════════════════════════════════════════════
# API-level fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'registry.db'}",
        log_level="WARNING",
        rate_limit_requests=10000,
        workflow_enforcement=True,
        seed_default_users=True,
    )


async def _running_app(settings: Settings):
    from app.main import create_app

    app = create_app(settings)
    # ASGITransport does not send lifespan events; run startup/shutdown here
    async with app.router.lifespan_context(app):
        yield app


async def _client_for(settings: Settings):
    async for app in _running_app(settings):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client


@pytest_asyncio.fixture
async def test_app(test_settings):
    """Started app (schema created, staff seeded) for tests that seed rows directly."""
    async for app in _running_app(test_settings):
        yield app


@pytest_asyncio.fixture
async def test_client(test_app):
    """
    HTTPX AsyncClient bound to a fresh app with its own SQLite file.
    The five staff accounts are seeded.
    """
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def permissive_client(tmp_path):
    """Same as test_client but with workflow enforcement switched off."""
    settings = Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'permissive.db'}",
        log_level="WARNING",
        rate_limit_requests=10000,
        workflow_enforcement=False,
    )
    async for client in _client_for(settings):
        yield client


@pytest.fixture
def market_payload():
    return {
        "ownerName": "Jane Owner",
        "ownerId": "CM900001",
        "ownerPhone": "+256700000001",
        "ownerEmail": "",
        "ownerAddress": "Plot 1, Kampala",
        "marketName": "Nakasero Market",
        "marketAddress": "Nakasero Hill",
        "marketType": "Public",
        "marketSize": "1200",
        "stallsCount": "40",
        "yearEstablished": "",
        "operatingDays": "Monday-Sunday",
        "operatingHours": "06:00 - 18:00",
        "marketManagerName": "Sam Manager",
        "marketManagerContact": "+256700000002",
        "declaration": True,
    }


@pytest.fixture
def vendor_payload():
    def _make(user_id: int, market_id=None) -> dict:
        return {
            "userId": user_id,
            "marketId": market_id if market_id is not None else "",
            "fullName": "Amina Trader",
            "nationalId": "CF800002",
            "phone": "+256700000003",
            "businessType": "Retail",
            "products": "Vegetables",
            "stallType": "Stall",
            "declaration": True,
        }
    return _make


@pytest_asyncio.fixture
async def limited_client(tmp_path):
    """Client whose app allows only 10 requests per minute per IP."""
    settings = Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'limited.db'}",
        log_level="WARNING",
        rate_limit_requests=10,
        rate_limit_window=60,
    )
    async for client in _client_for(settings):
        yield client
