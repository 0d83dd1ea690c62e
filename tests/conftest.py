"""
Test infrastructure for the Blog API.

Strategy
--------
- SQLite in-memory via aiosqlite replaces Postgres, so the suite needs no
  running database.
- StaticPool makes every session share the one connection, because an
  in-memory SQLite database only exists inside the connection that made it.
- The test ``Database`` handle is injected into ``app.state.db`` before any
  request; ``get_db`` picks it up from there exactly as it does in
  production.  ASGITransport does not run the lifespan, so the production
  handle is never created.
- All tables are created before each test and dropped after it.
"""
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.pool import StaticPool

from app.database import Database
from app.main import app

# ---------------------------------------------------------------------------
# Test database handle: SQLite in-memory with aiosqlite
# ---------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

test_db = Database(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

app.state.db = test_db

DEFAULT_PASSWORD = "s3cret-password"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after to guarantee isolation."""
    await test_db.create_all()
    yield
    await test_db.drop_all()


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    """
    Yield a live AsyncSession for tests that call service functions
    directly.  Nothing is committed; the table drop cleans up.
    """
    async with test_db.session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def async_client() -> AsyncClient:
    """httpx.AsyncClient wired to the FastAPI app via ASGITransport."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def register(async_client: AsyncClient):
    """
    Factory fixture: ``await register("alice")`` registers
    ``alice@example.com`` and returns the response body
    (``user``, ``accessToken``, ``refreshToken``).
    """

    async def _register(handle: str, password: str = DEFAULT_PASSWORD) -> dict:
        resp = await async_client.post("/api/users/register", json={
            "email": f"{handle}@example.com",
            "password": password,
            "name": handle.title(),
        })
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _register
