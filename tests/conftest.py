"""Shared test fixtures for GhostGuard."""

import pytest
from httpx import ASGITransport, AsyncClient

from ghostguard.common.config import GhostGuardSettings


LICENSE_SECRET = "test-license-secret-for-unit-tests"
ADMIN_SECRET = "test-admin-secret"


def make_settings(**overrides) -> GhostGuardSettings:
    defaults = {
        "license_secret": LICENSE_SECRET,
        "admin_secret": ADMIN_SECRET,
        "db_url": "sqlite+aiosqlite://",
    }
    defaults.update(overrides)
    return GhostGuardSettings(**defaults)


@pytest.fixture
def license_secret():
    return LICENSE_SECRET


@pytest.fixture
async def db():
    """In-memory SQLite database for service tests."""
    from ghostguard.common.database import DatabaseManager

    manager = DatabaseManager(make_settings())
    await manager.init()
    await manager.create_all()
    yield manager
    await manager.close()


@pytest.fixture
def app(monkeypatch, tmp_path):
    """Create a test app with in-memory DB and a throwaway blob directory."""
    monkeypatch.setenv("GHOSTGUARD_DB_URL", "sqlite+aiosqlite://")
    monkeypatch.setenv("GHOSTGUARD_LICENSE_SECRET", LICENSE_SECRET)
    monkeypatch.setenv("GHOSTGUARD_ADMIN_SECRET", ADMIN_SECRET)
    monkeypatch.setenv("GHOSTGUARD_BLOB_BACKEND", "local")
    monkeypatch.setenv("GHOSTGUARD_BLOB_ROOT", str(tmp_path / "blobs"))
    monkeypatch.setenv("GHOSTGUARD_BLOB_PUBLIC_BASE_URL", "http://test/blobs")

    # Clear caches and singletons so new env vars take effect
    from ghostguard.common.config import get_settings
    get_settings.cache_clear()

    from ghostguard.deps import reset_singletons
    reset_singletons()

    from ghostguard.app import create_app
    yield create_app()

    get_settings.cache_clear()
    reset_singletons()


@pytest.fixture
async def client(app):
    # Manually init DB since ASGITransport doesn't run lifespan
    from ghostguard.deps import get_db
    db = get_db()
    await db.init()
    await db.create_all()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await db.close()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {ADMIN_SECRET}"}


@pytest.fixture
async def owner(client, admin_headers):
    """A license plus its owner account, created through the operator API.

    Returns a dict with ``license_key`` and the owner's dashboard ``token``.
    """
    resp = await client.post("/admin/create-license", json={}, headers=admin_headers)
    license_key = resp.json()["license_key"]
    await client.post("/admin/create-customer", json={
        "username": "owner", "password": "hunter2", "license_key": license_key,
    }, headers=admin_headers)
    login = await client.post("/api/login", json={"username": "owner", "password": "hunter2"})
    return {"license_key": license_key, "token": login.json()["token"]}
