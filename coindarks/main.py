"""
Application entry point.

Creates the FastAPI application and wires together:
- Routers (exchange, admin, health)
- Error handlers (centralized domain-to-HTTP mapping)
- Security middleware (headers, rate limiting)
- Logging configuration
- Schema creation and client shutdown in the lifespan

No business logic belongs here.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded

from coindarks.core.config import settings
from coindarks.infrastructure.exchange.database import create_schema
from coindarks.interfaces.exchange.admin_router import router as admin_router
from coindarks.interfaces.exchange.dependencies import (
    get_db_engine,
    get_price_feed,
)
from coindarks.interfaces.exchange.router import router as exchange_router
from coindarks.interfaces.health import router as health_router
from coindarks.shared.errors.handlers import register_error_handlers
from coindarks.shared.logging import configure_logging
from coindarks.shared.security.headers import SecurityHeadersMiddleware
from coindarks.shared.security.rate_limiting import limiter, rate_limit_exceeded_handler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: create tables on startup, close HTTP clients on shutdown."""
    create_schema(get_db_engine())
    logger.info("%s %s started", settings.project_name, settings.version)

    yield

    get_price_feed().close()
    get_db_engine().dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Registers routers, error handlers, and security middleware.
    This is the composition root of the application.

    Returns:
        A fully configured FastAPI application instance.
    """
    configure_logging(level=settings.log_level)

    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # --- Rate Limiting ---
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    # --- Security Middleware ---
    app.add_middleware(SecurityHeadersMiddleware)

    # --- Error Handlers ---
    register_error_handlers(app)

    # --- Routers ---
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(exchange_router, prefix="/api/v1")
    app.include_router(admin_router, prefix="/api/v1")

    return app


app = create_app()
