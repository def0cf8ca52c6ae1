import os
import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise
from tortoise.exceptions import ConfigurationError

from tankhah.config import settings
from tankhah.core import db as db_module
from tankhah.core.security import hash_password
from tankhah.main import app
from tankhah.models.license import License
from tankhah.models.license_key import LicenseKey
from tankhah.models.user import User


TEST_DB_URL = "sqlite://:memory:?cache=shared"
os.environ["DATABASE_URL"] = TEST_DB_URL
db_module.DB_URL = TEST_DB_URL
db_module.TORTOISE_ORM["connections"]["default"] = TEST_DB_URL


async def _init_test_db() -> None:
    """
    Initialize a clean in-memory SQLite database for every test.
    Ensures tables are recreated from scratch.
    """
    if Tortoise._inited:
        await Tortoise.close_connections()
    await Tortoise.init(config=db_module.TORTOISE_ORM)
    await Tortoise.generate_schemas()


@pytest_asyncio.fixture
async def db():
    """
    Fresh database without an HTTP client, for store-level tests.
    """
    await _init_test_db()
    yield
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def client():
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app with a fresh DB.
    """
    await _init_test_db()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def offline_client(monkeypatch):
    """
    Client for an app started without DATABASE_URL.

    No database is opened, and every model entry point the auth and license
    paths could reach raises, so a request that needs the ORM fails loudly.
    """
    if Tortoise._inited:
        await Tortoise.close_connections()
    monkeypatch.setattr(db_module, "DB_URL", "")

    async def _no_database(*args, **kwargs):
        raise ConfigurationError("no database configured")

    def _no_queryset(*args, **kwargs):
        raise ConfigurationError("no database configured")

    for model in (User, License):
        monkeypatch.setattr(model, "get_or_none", _no_database)
    monkeypatch.setattr(License, "update_or_create", _no_database)
    monkeypatch.setattr(LicenseKey, "filter", _no_queryset)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client


@pytest.fixture
def admin_allow_list(monkeypatch):
    """Configure admin@example.com as the only address allowed to redeem master keys."""
    monkeypatch.setattr(settings, "admin_emails", ["admin@example.com"])
    return settings.admin_emails


@pytest_asyncio.fixture
async def create_admin():
    """
    Factory fixture to create admin users directly via ORM for privileged endpoints.
    """

    async def _create_admin(password: str = "AdminPass!23", email: str = "admin@example.com") -> tuple[User, str]:
        user = await User.create(
            username=f"admin_{uuid.uuid4().hex[:6]}",
            email=email,
            password_hash=hash_password(password),
            role="admin",
        )
        return user, password

    return _create_admin


@pytest_asyncio.fixture
async def create_user():
    """
    Factory fixture to create regular users directly.
    """

    async def _create_user(password: str = "UserPass!23", email: str | None = None) -> tuple[User, str]:
        user = await User.create(
            username=f"user_{uuid.uuid4().hex[:6]}",
            email=email or f"{uuid.uuid4().hex[:6]}@example.com",
            password_hash=hash_password(password),
            role="user",
        )
        return user, password

    return _create_user


@pytest_asyncio.fixture
async def auth_header_factory(client):
    """
    Helper fixture to obtain Authorization headers via the login endpoint.
    """

    async def _get_headers(username: str, password: str) -> dict[str, str]:
        resp = await client.post(
            "/api/v1/auth/login",
            json={"username": username, "password": password},
        )
        assert resp.status_code == 200, resp.text
        token = resp.json()["data"]["accessToken"]
        return {"Authorization": f"Bearer {token}"}

    return _get_headers
