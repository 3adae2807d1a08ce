"""
Pytest configuration and fixtures.

WHY: Fixtures provide reusable test setup/teardown logic, reducing
duplication and ensuring consistent test environments.
"""

from typing import AsyncGenerator, Callable, Dict

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from ticketdesk.core.auth import TokenService
from ticketdesk.core.config import Settings
from ticketdesk.db.session import get_db
from ticketdesk.main import create_app
from ticketdesk.models import Base, User


# Test database URL
# WHY: In-memory SQLite eliminates external database dependencies. StaticPool
# keeps one connection so every session sees the same in-memory database.
TEST_ASYNC_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_JWT_SECRET = "test-secret"


@pytest.fixture
def test_settings() -> Settings:
    """
    Settings for tests.

    WHY: The signing key and database are passed explicitly, so tests never
    depend on the developer's environment or .env file.
    """
    return Settings(
        _env_file=None,
        JWT_SECRET=TEST_JWT_SECRET,
        DATABASE_URL=TEST_ASYNC_DATABASE_URL,
        DB_AUTO_CREATE=False,
        LOG_LEVEL="WARNING",
    )


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """
    Create a test database engine.

    WHY: Function scope ensures each test gets a fresh database state,
    preventing test pollution and ensuring test isolation.
    """
    engine = create_async_engine(
        TEST_ASYNC_DATABASE_URL,
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


@pytest_asyncio.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """
    Create a test database session.

    Yields:
        AsyncSession: Database session shared by the test and the app
    """
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest.fixture
def app(test_settings: Settings) -> FastAPI:
    return create_app(test_settings)


@pytest.fixture
def token_service(app: FastAPI) -> TokenService:
    return app.state.token_service


@pytest_asyncio.fixture
async def client(app: FastAPI, db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test HTTP client.

    WHY: AsyncClient with ASGITransport exercises the full middleware and
    exception handler stack without running a server.

    Yields:
        AsyncClient: HTTP client for making test requests
    """

    async def override_get_db():
        """Override database dependency with test session."""
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(token_service: TokenService) -> Callable[[User], Dict[str, str]]:
    """
    Build an Authorization header for a user.

    WHY: Most endpoint tests care about who is calling, not about the login
    flow; the login endpoint has its own tests.
    """

    def _headers(user: User) -> Dict[str, str]:
        token = token_service.create_access_token(user_id=user.id, role=user.role.value)
        return {"Authorization": f"Bearer {token}"}

    return _headers
