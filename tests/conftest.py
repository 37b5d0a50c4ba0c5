"""Pytest configuration and shared fixtures for all tests.

This module provides:
- Settings pointing at a throwaway SQLite file and upload directory
- A Database handle with every table created
- The application and an httpx client wired to it in-process
- Helpers that create accounts and return their bearer tokens
"""

from decimal import Decimal
from typing import AsyncGenerator

import httpx
import pytest
from _pytest.config import Config

from restaurant_api.core.config import Settings
from restaurant_api.database import Database
from restaurant_api.main import create_app
from restaurant_api.models import UserRole
from restaurant_api.services import MenuItemFields, Services

TEST_SECRET = "test-signing-secret-with-enough-entropy-0123456789"

# ============================================================================
# PYTEST CONFIGURATION
# ============================================================================


def pytest_configure(config: Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, no external dependencies)")
    config.addinivalue_line("markers", "integration: Tests that go through the HTTP layer")
    config.addinivalue_line("markers", "auth: Authentication/authorization tests")


# ============================================================================
# SETTINGS / DATABASE FIXTURES
# ============================================================================


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings isolated to the test's temporary directory."""
    return Settings(
        env_mode="development",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        jwt_secret_key=TEST_SECRET,
        bcrypt_rounds=4,
        upload_directory=str(tmp_path / "uploads"),
        max_upload_bytes=1024,
    )


@pytest.fixture
async def database(settings: Settings) -> AsyncGenerator[Database, None]:
    """Database with all tables created, disposed after the test."""
    db = Database.from_settings(settings)
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def services(database: Database, settings: Settings) -> Services:
    return Services.build(database, settings)


# ============================================================================
# APPLICATION FIXTURES
# ============================================================================


@pytest.fixture
def app(settings: Settings, database: Database):
    return create_app(settings=settings, database=database)


@pytest.fixture
async def client(app) -> AsyncGenerator[httpx.AsyncClient, None]:
    """In-process client. Unhandled errors come back as 500 responses."""
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def app_services(app) -> Services:
    """The Services bundle the running app uses."""
    return app.state.services


# ============================================================================
# ACCOUNT HELPERS
# ============================================================================


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def customer_token(client: httpx.AsyncClient) -> str:
    response = await client.post(
        "/api/auth/register",
        json={
            "username": "alice",
            "email": "alice@example.com",
            "password": "alice-password",
            "full_name": "Alice Smith",
            "phone": "555-123-4567",
        },
    )
    assert response.status_code == 200, response.text
    return response.json()["token"]


@pytest.fixture
async def admin_token(app_services: Services) -> str:
    await app_services.auth.create_user(
        "admin",
        "admin@example.com",
        "admin-password",
        role=UserRole.ADMIN,
    )
    token, _ = await app_services.auth.login("admin", "admin-password")
    return token


@pytest.fixture
async def menu_items(app_services: Services) -> list[int]:
    """Two menu items: #1 at 10.00 and #2 at 5.50."""
    first = await app_services.menu.create(MenuItemFields(name="Margherita", price=Decimal("10.00")))
    second = await app_services.menu.create(MenuItemFields(name="Tiramisu", price=Decimal("5.50")))
    return [first, second]
