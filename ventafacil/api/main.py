"""
FastAPI application factory.

Creates the backend of record that point-of-sale terminals sync into.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ventafacil.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from ventafacil.api.middleware.error_handler import setup_exception_handlers
from ventafacil.api.routes import health_router, sales_router
from ventafacil.config import Settings, configure_logging, get_logger, get_settings
from ventafacil.infrastructure.storage.sqlite import ConnectionPool
from ventafacil.infrastructure.storage.sqlite.migrations import run_migrations

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan handler.

    Migrates and opens the server database on startup, closes it on shutdown.
    """
    settings: Settings = app.state.settings

    logger.info(
        "application_starting",
        host=settings.api.host,
        port=settings.api.port,
        debug=settings.api.debug,
    )

    pool = ConnectionPool.from_settings(settings.server_storage)
    try:
        await run_migrations("server", db_path=pool.db_path)
        logger.info("database_initialized")

        await pool.initialize()
        logger.info("connection_pool_ready")
    except Exception as e:
        logger.error("database_init_failed", error=str(e))
        raise

    app.state.pool = pool
    logger.info("application_started")

    yield

    logger.info("application_stopping")
    await pool.close()
    app.state.pool = None
    logger.info("application_stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="Backend of record for point-of-sale sale sync",
        version=settings.app_version,
        docs_url="/docs" if settings.api.debug else None,
        redoc_url="/redoc" if settings.api.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.pool = None

    # Add middleware
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)

    # CORS
    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    setup_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(sales_router)

    return app


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "ventafacil.api.main:create_app",
        factory=True,
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.debug,
    )
