"""Shared test fixtures and utilities for all tests."""
import asyncio
import os

import pytest
import pytest_asyncio
from dependency_injector import providers
from httpx import ASGITransport, AsyncClient
from testcontainers.postgres import PostgresContainer

from src.app.containers import Container
from src.client import MinimalApiClient
from src.shared.database.database import Database, DatabaseSettings
from src.shared.database.unit_of_work import UnitOfWork

# Tests run against a throwaway SQLite file unless a real PostgreSQL is requested
USE_TESTCONTAINERS = os.getenv("USE_TESTCONTAINERS") == "1"

TEST_LOCKOUT_ATTEMPTS = 3


@pytest.fixture(scope="module")
def postgres_container():
    """Start a PostgreSQL container for testing. Module-scoped for reuse."""
    with PostgresContainer("postgres:16-alpine") as postgres:
        yield postgres


@pytest.fixture(scope="module")
def async_db_url(request, tmp_path_factory):
    """
    Get the async database URL for the module.

    PostgreSQL via testcontainers when USE_TESTCONTAINERS=1, otherwise a
    SQLite file in a temporary directory.
    """
    if USE_TESTCONTAINERS:
        postgres_container = request.getfixturevalue("postgres_container")
        connection_url = postgres_container.get_connection_url()
        return connection_url.replace("postgresql+psycopg2://", "postgresql+asyncpg://")

    db_file = tmp_path_factory.mktemp("db") / "test.db"
    return f"sqlite+aiosqlite:///{db_file}"


@pytest.fixture(scope="module")
def test_settings_override(async_db_url):
    """
    Centralized settings override for all test configurations.
    Module-scoped to set up environment once per test module.
    """
    overrides = {
        "DATABASE_URL": async_db_url,
        "JWT__SECRET_KEY": "test-secret-key-used-only-by-the-test-suite",
        "LOCKOUT__MAX_FAILED_ACCESS_ATTEMPTS": str(TEST_LOCKOUT_ATTEMPTS),
    }
    previous = {key: os.environ.get(key) for key in overrides}
    os.environ.update(overrides)

    # Clear settings cache to force reload with new env vars
    from src.app.config import get_settings
    get_settings.cache_clear()

    yield

    for key, value in previous.items():
        if value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = value
    get_settings.cache_clear()


async def wait_till_db_ready(db: Database, max_attempts: int = 20):
    """
    Wait for database to be ready.

    Raises:
        Exception: If database is not ready after max_attempts
    """
    for attempt in range(max_attempts):
        try:
            async with db._engine.begin():
                return
        except Exception:
            await asyncio.sleep(0.2)
    raise Exception(f"Database not ready after {max_attempts} attempts")


@pytest_asyncio.fixture(scope="function")
async def db(async_db_url):
    """
    Create database instance with test database.
    Function-scoped for test isolation.
    """
    db = Database(DatabaseSettings(db_url=async_db_url))
    await wait_till_db_ready(db)
    yield db
    await db.dispose()


@pytest_asyncio.fixture(scope="function")
async def clean_database(db):
    """
    Clean the database before each test.
    Drops and recreates all tables.
    """
    await db.drop_tables()
    await db.create_tables()
    yield db


@pytest.fixture(scope="function")
def test_container(test_settings_override, clean_database):
    """
    Create a test container with database override for proper test isolation.
    Function-scoped to ensure each test gets a fresh container.
    """
    container = Container()

    # Override the database singleton with the test database instance
    container.database.override(providers.Object(clean_database))

    container.wire()
    yield container
    container.database.reset_override()
    container.unwire()


@pytest_asyncio.fixture(scope="function")
async def test_app(test_container):
    """
    Create test application with container.
    Function-scoped for test isolation.
    """
    from fastapi import FastAPI
    from contextlib import asynccontextmanager
    from src.app.api.errors import register_exception_handlers
    from src.app.api.v1 import accounts, clients

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Database tables are already created by clean_database fixture
        yield

    config = test_container.config()
    app = FastAPI(
        title=config.app_name,
        version=config.app_version,
        lifespan=lifespan,
    )
    app.state.container = test_container

    register_exception_handlers(app)
    app.include_router(accounts.router)
    app.include_router(clients.router)

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    yield app


@pytest_asyncio.fixture
async def http_client(test_app):
    """Raw httpx client for asserting on status codes, headers and bodies."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def api_client(test_app):
    """
    Create an API client for testing.
    test_app already depends on clean_database for test isolation.
    """
    transport = ASGITransport(app=test_app)
    http_client = AsyncClient(transport=transport, base_url="http://test")
    client = MinimalApiClient(base_url="http://test", client=http_client)

    async with client:
        yield client
    await http_client.aclose()


@pytest_asyncio.fixture(scope="function")
async def unit_of_work(clean_database, test_container):
    """
    Fixture for a UnitOfWork instance with a clean database.
    Uses the container's entity_mapper singleton.
    """
    entity_mapper = test_container.entity_mapper()
    yield UnitOfWork(clean_database, entity_mapper)


# =========================================================================
# Common repository fixtures (available to all test directories)
# =========================================================================

@pytest.fixture
def client_repository(test_container):
    """Get client repository from container."""
    return test_container.client_repository()


@pytest.fixture
def user_repository(test_container):
    """Get user repository from container."""
    return test_container.user_repository()


@pytest.fixture
def user_claim_repository(test_container):
    """Get user claim repository from container."""
    return test_container.user_claim_repository()


@pytest.fixture
def user_role_repository(test_container):
    """Get user role repository from container."""
    return test_container.user_role_repository()


# =========================================================================
# Common service fixtures (available to all test directories)
# =========================================================================

@pytest.fixture
def client_service(test_container):
    """Get client service from container."""
    return test_container.client_service()


@pytest.fixture
def identity_service(test_container):
    """Get identity service from container."""
    return test_container.identity_service()


@pytest.fixture
def token_service(test_container):
    """Get token service from container."""
    return test_container.token_service()
