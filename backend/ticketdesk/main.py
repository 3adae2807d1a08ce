"""
Main FastAPI application.

WHY: This is the entry point for the application. It configures logging,
middleware, routes, exception handlers and the per-app resources (token
service, database engine) that handlers reach through app.state.

Run with:
    uvicorn ticketdesk.main:create_app --factory
"""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ticketdesk import __version__
from ticketdesk.api import areas, auth, tickets, users
from ticketdesk.core.auth import TokenService
from ticketdesk.core.config import Settings, get_settings
from ticketdesk.core.exception_handlers import register_exception_handlers
from ticketdesk.core.logging_config import configure_logging
from ticketdesk.db.session import create_session_factory, create_tables
from ticketdesk.middleware import RequestContextMiddleware


logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    WHY: Factory pattern allows testing with different configurations and
    keeps the signing key and database explicit: nothing is read from the
    environment unless no Settings object is passed in.

    Args:
        settings: Application settings (defaults to environment-derived)

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Ticket tracking API",
        version=settings.VERSION,
    )

    # Per-app resources
    # WHY: Handlers read these from request.app.state, so two apps built
    # with different settings never share a key or a database
    app.state.settings = settings
    app.state.token_service = TokenService.from_settings(settings)
    app.state.engine, app.state.session_factory = create_session_factory(settings)

    register_exception_handlers(app)

    # WHY: Assigns request ids and logs one access line per request
    app.add_middleware(RequestContextMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/", tags=["root"])
    async def root() -> dict:
        """Service information."""
        return {
            "ok": True,
            "service": settings.PROJECT_NAME,
            "version": settings.VERSION,
        }

    @app.get("/health", tags=["health"])
    async def health_check() -> dict:
        """
        Health check endpoint.

        WHY: Allows load balancers and monitoring to verify service health
        without checking authentication or database connectivity.
        """
        return {"status": "healthy", "version": settings.VERSION}

    @app.on_event("startup")
    async def startup_event():
        """
        Create missing tables when DB_AUTO_CREATE is set.

        WHY: Zero-setup local runs on SQLite; production uses Alembic and
        turns this off.
        """
        if settings.DB_AUTO_CREATE:
            await create_tables(app.state.engine)
        logger.info("%s %s started", settings.PROJECT_NAME, __version__)

    @app.on_event("shutdown")
    async def shutdown_event():
        await app.state.engine.dispose()

    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(tickets.router)
    app.include_router(areas.router)

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("ticketdesk.main:create_app", factory=True, host="0.0.0.0", port=4000)
