"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.config import get_settings, validate_security_settings
from shared.logging import setup_logging
from modules.auth.routes import router as auth_router

from .error_handlers import register_exception_handlers
from .routes import health, users
from .scheduler import create_scheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Refuses to start without a usable signing secret, then runs the
    refresh token sweep for as long as the app is up.
    """
    # Startup
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_file_path)
    validate_security_settings(settings)

    scheduler = create_scheduler(settings)
    scheduler.start()
    logger.info(f"Starting {settings.app_name} on {settings.host}:{settings.port}")

    yield

    # Shutdown
    scheduler.shutdown(wait=False)
    logger.info(f"Shutting down {settings.app_name}")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="EcoLearn platform API: accounts, sessions and access control",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    register_exception_handlers(app)

    # Register routes
    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
    app.include_router(users.router, prefix="/api/users", tags=["users"])

    return app


# Application instance for uvicorn
app = create_app()
