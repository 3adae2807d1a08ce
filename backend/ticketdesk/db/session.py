"""
Database session management.

WHY: Async database sessions are required for FastAPI's async/await pattern.
The engine and session factory are built from a Settings object by the app
factory and stored on app.state, so each app instance owns its database.
"""

from typing import Any, AsyncGenerator, Dict, Tuple

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ticketdesk.core.config import Settings
from ticketdesk.models.base import Base


def _engine_options(settings: Settings) -> Dict[str, Any]:
    """
    Pool options for the configured backend.

    WHY: pool_size/max_overflow only apply to server databases; SQLite's
    single-file driver rejects them.
    """
    options: Dict[str, Any] = {"echo": settings.DEBUG}
    if not settings.is_sqlite:
        options.update(pool_pre_ping=True, pool_size=10, max_overflow=20)
    return options


def create_session_factory(
    settings: Settings,
) -> Tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """
    Create the async engine and its session factory.

    WHY: expire_on_commit=False prevents lazy-loading issues after commit.
    autoflush=False gives explicit control over when writes are sent.
    """
    engine = create_async_engine(settings.async_database_url, **_engine_options(settings))
    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    return engine, session_factory


async def create_tables(engine: AsyncEngine) -> None:
    """Create all tables that do not exist yet (development convenience)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency to get database session.

    WHY: Each request gets its own session. The ticket update and its
    history record are written through the same session and committed
    together when the handler returns; any exception rolls both back.

    Yields:
        AsyncSession: Database session for the request
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
