"""Shared test fixtures.

Every test gets a fresh in-memory SQLite database and the bundled service
catalog, installed on ``app.state`` the way the lifespan handler does it in
production (ASGITransport does not run the lifespan). Outgoing email is patched
out for every test.
"""

from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool

from carebook.core.auth import create_access_token, hash_password
from carebook.core.config import settings
from carebook.core.database import Database
from carebook.main import app
from carebook.models import User, UserRole
from carebook.services.catalog import ServiceCatalog

PASSWORD = "Secret123"


@pytest.fixture
async def database():
    db = Database(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await db.open()
    await db.create_all()
    yield db
    await db.close()


@pytest.fixture
def catalog():
    return ServiceCatalog.from_json(settings.catalog_path)


@pytest.fixture(autouse=True)
def mock_send_email():
    with patch("carebook.services.email.send_email", new_callable=AsyncMock) as mock_send:
        yield mock_send


@pytest.fixture
async def client(database, catalog):
    app.state.database = database
    app.state.catalog = catalog
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


async def _create_user(database: Database, email: str, nid_no: str, role: UserRole = UserRole.USER) -> User:
    async with database.session() as db:
        user = User(
            nid_no=nid_no,
            name=email.split("@")[0].title(),
            email=email,
            contact="01700000000",
            hashed_password=hash_password(PASSWORD),
            role=role,
        )
        db.add(user)
        await db.commit()
        return user


def _headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role.value)}"}


@pytest.fixture
async def user(database):
    return await _create_user(database, "rahim@example.com", "1990123456")


@pytest.fixture
async def other_user(database):
    return await _create_user(database, "karim@example.com", "1985654321")


@pytest.fixture
async def admin(database):
    return await _create_user(database, "admin@carebook.io", "1970000001", role=UserRole.ADMIN)


@pytest.fixture
def auth_headers(user):
    return _headers(user)


@pytest.fixture
def other_auth_headers(other_user):
    return _headers(other_user)


@pytest.fixture
def admin_headers(admin):
    return _headers(admin)


def booking_body(service_id: str = "elderly-care", value: int = 2, unit: str = "hours", **location) -> dict:
    loc = {
        "division": "Dhaka",
        "district": "Dhaka",
        "city": "Dhaka",
        "area": "Dhanmondi",
        "address": "House 12, Road 5",
    }
    loc.update(location)
    return {"service_id": service_id, "duration": {"value": value, "unit": unit}, "location": loc}
