"""FastAPI application — main entry point."""

import structlog
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from storefront.config import get_settings
from storefront.core.exceptions import (
    AppError,
    app_error_handler,
    global_exception_handler,
    request_validation_handler,
)
from storefront.core.logging import configure_logging
from storefront.core.middleware import setup_middleware
from storefront.infrastructure.database import get_engine, init_action_log_store
from storefront.infrastructure.mongo import ensure_indexes, get_mongo_client, get_mongo_database
from storefront.interfaces.api.users import router as users_router

settings = get_settings()

# Configure logging immediately
configure_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan — prepare both stores on startup, release them on shutdown."""
    logger.info("Starting storefront accounts service...", env=settings.ENVIRONMENT)

    ensure_indexes(get_mongo_database())
    # The action log is best-effort; the service still starts without it
    try:
        init_action_log_store(get_engine())
    except Exception as e:
        logger.error("Action log store unavailable at startup", error=str(e))

    yield

    get_mongo_client().close()
    get_engine().dispose()
    logger.info("Storefront accounts service stopped")


def create_app(with_lifespan: bool = True) -> FastAPI:
    app = FastAPI(
        title="Storefront — Accounts API",
        description="User signup, activation, sessions, profiles and admin user management",
        version="1.0.0",
        lifespan=lifespan if with_lifespan else None,
    )

    setup_middleware(app)

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    # Credentials (the session cookie) cannot be combined with a wildcard origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(users_router)

    @app.get("/")
    def root():
        return {
            "name": "Storefront Accounts",
            "version": "1.0.0",
            "status": "running",
            "docs": "/docs",
        }

    @app.get("/health")
    def health():
        return {"status": "healthy"}

    return app


app = create_app()
