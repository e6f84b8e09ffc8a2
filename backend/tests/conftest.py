"""
PhotoShare Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment variables are set at the top of this module, before any
       photoshare import, so Settings() picks them up.

Test environment:
    - SQLite file database (aiosqlite) in a temp dir, tables created and
      dropped around every test that uses `db_tables`
    - Local blob storage in a temp dir
    - Redis, Celery broker and Gemini unset → cache, queue and vision disabled
    - bcrypt at 4 rounds, one vision retry attempt

Fixture Hierarchy:
    Function-scoped:
    ├── db_tables: fresh schema per test; disposes the engine afterwards
    ├── client: HTTPX AsyncClient over ASGITransport (depends on db_tables)
    ├── db_session: AsyncSession for direct service tests (depends on db_tables)
    ├── sample_image_bytes / sample_png_bytes: tiny but valid image headers
    └── creator / consumer / admin: registered users as AuthedUser tuples
"""

import os
import tempfile
from typing import NamedTuple
from uuid import UUID

_TEST_DIR = tempfile.mkdtemp(prefix="photoshare_test_")

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/test.db"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["STORAGE_ROOT"] = os.path.join(_TEST_DIR, "uploads")
os.environ["PUBLIC_BASE_URL"] = "http://test"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["GEMINI_API_KEY"] = ""
os.environ["RETRY_MAX_ATTEMPTS"] = "1"
os.environ["CREATE_TABLES_ON_STARTUP"] = "false"
os.environ["SEED_CREATOR_ACCOUNTS"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ.pop("REDIS_URL", None)
os.environ.pop("BROKER_URL", None)

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import update  # noqa: E402

import photoshare.models  # noqa: E402,F401
from photoshare.database import Base, async_session_factory, engine  # noqa: E402


class AuthedUser(NamedTuple):
    id: UUID
    token: str
    headers: dict


# ══════════════════════════════════════════════════════════════════════════
# Database & Client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_tables():
    """Creates every table, yields, then drops them and closes pooled connections."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    # Pooled aiosqlite connections are tied to this test's event loop
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_tables):
    async with async_session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_tables):
    """
    HTTPX AsyncClient talking to the FastAPI app in-process.

    ASGITransport does not run the lifespan, so no table creation or seeding
    happens behind the test's back.
    """
    from photoshare.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


# ══════════════════════════════════════════════════════════════════════════
# Sample Data
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def sample_image_bytes():
    """Smallest JPEG that MIME sniffing accepts: SOI + JFIF APP0 + EOI."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def sample_png_bytes():
    """PNG signature plus an IHDR chunk for a 1x1 image."""
    return (
        b'\x89PNG\r\n\x1a\n'
        b'\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00'
        b'\x1f\x15\xc4\x89'
    )


# ══════════════════════════════════════════════════════════════════════════
# Users
# ══════════════════════════════════════════════════════════════════════════

async def register_user(
    client: AsyncClient,
    email: str,
    display_name: str = "Test User",
    password: str = "secret123",
) -> AuthedUser:
    response = await client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "displayName": display_name},
    )
    assert response.status_code == 201, response.text
    body = response.json()
    return AuthedUser(
        id=UUID(body["user"]["id"]),
        token=body["token"],
        headers={"Authorization": f"Bearer {body['token']}"},
    )


async def upload_photo(
    client: AsyncClient,
    user: AuthedUser,
    image: bytes,
    title: str = "Sunset",
    filename: str = "photo.jpg",
    content_type: str = "image/jpeg",
    **fields: str,
) -> UUID:
    response = await client.post(
        "/api/photos",
        headers=user.headers,
        data={"title": title, **fields},
        files={"image": (filename, image, content_type)},
    )
    assert response.status_code == 201, response.text
    return UUID(response.json()["id"])


@pytest_asyncio.fixture
async def creator(client):
    return await register_user(client, "creator@example.com", "Creator")


@pytest_asyncio.fixture
async def consumer(client):
    return await register_user(client, "consumer@example.com", "Consumer")


@pytest_asyncio.fixture
async def admin(client):
    user = await register_user(client, "admin@example.com", "Admin")
    from photoshare.models import User

    async with async_session_factory() as session:
        await session.execute(update(User).where(User.id == user.id).values(is_admin=True))
        await session.commit()
    return user


@pytest_asyncio.fixture
async def photo_id(client, creator, sample_image_bytes):
    return await upload_photo(client, creator, sample_image_bytes)
