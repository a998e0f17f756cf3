import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.app.api.errors import register_exception_handlers
from src.app.api.v1 import accounts, clients
from src.app.containers import Container
from src.app.logging import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def default_lifespan(app: FastAPI):
    """Create the schema on startup and release the connection pool on shutdown."""
    container: Container = app.state.container
    config = container.config()
    logger.info("Starting %s...", config.app_name)

    db = container.database()
    await db.create_tables()
    logger.info("Database initialized successfully")

    yield

    logger.info("Shutting down %s...", config.app_name)
    await db.dispose()


def create_app(container: Container) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        container: DI container providing settings, database and services.

    Returns:
        Configured FastAPI application.
    """
    config = container.config()
    configure_logging(config.log_level)

    container.wire()

    app = FastAPI(
        title=config.app_name,
        version=config.app_version,
        lifespan=default_lifespan,
    )

    # Attach container to app state for access in lifespan and routes
    app.state.container = container

    register_exception_handlers(app)

    app.include_router(accounts.router)
    app.include_router(clients.router)

    @app.get("/")
    async def root():
        return {"message": f"Welcome to {config.app_name}"}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    return app


container = Container()
app = create_app(container=container)
