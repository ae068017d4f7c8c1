"""
Main application entry point untuk Files-CRUD Auth.
Mengkonfigurasi FastAPI application dengan middleware, routers, dan persistence backend.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from filescrud.core.config import settings
from filescrud.db.factory import create_persistence
from filescrud.api.v1 import auth, health
from filescrud.middleware.logging import LoggingMiddleware
from filescrud.middleware.error_handler import ErrorHandlerMiddleware, request_validation_handler
from filescrud.services.auth import AuthService

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format=settings.LOG_FORMAT
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Membangun persistence backend dan AuthService, lalu menutupnya saat shutdown.
    """
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    persistence = create_persistence(settings)
    try:
        await persistence.startup()
    except Exception as e:
        logger.error(f"Failed to initialize persistence backend: {e}")
        raise

    app.state.auth_service = AuthService.from_settings(settings, persistence)
    logger.info("Application startup complete")

    yield

    logger.info("Shutting down application")
    await persistence.shutdown()
    logger.info("Application shutdown complete")


def create_application() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title=settings.APP_NAME,
        description="Credential and session core for a multi-tenant file storage service",
        version=settings.APP_VERSION,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=lifespan
    )

    # Middleware terakhir yang ditambahkan dieksekusi paling luar
    app.add_middleware(ErrorHandlerMiddleware, debug=settings.DEBUG)
    app.add_middleware(LoggingMiddleware, exclude_paths=["/health"])

    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(health.router)
    app.include_router(auth.router, prefix=settings.API_V1_STR)

    @app.get("/", include_in_schema=False)
    async def root():
        """Root endpoint."""
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "status": "operational"
        }

    return app


# Create application instance
app = create_application()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "filescrud.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
