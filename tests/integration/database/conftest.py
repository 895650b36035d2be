"""Fixtures for tests that run against a real PostgreSQL server.

The server comes from the ``DB_*`` variables. The session works in its own
throwaway database, created next to ``DB_NAME`` and dropped afterwards, so
the configured database is never touched. Without the variables, or with
the server down, every test here is skipped.
"""

from collections.abc import AsyncGenerator

import asyncpg
import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from src.api.main import create_app
from src.api.routes import USERS
from src.api.schemas.users import User
from src.core.config import (
    DatabaseConfig,
    ObservabilityConfig,
    Settings,
    load_database_config,
)
from src.core.exceptions import ConfigurationError
from src.infrastructure.database import (
    SqlRecordStore,
    UserRecord,
    create_database_engine,
    ensure_schema,
)

TEST_DATABASE_NAME = "user_management_test"


def _admin_dsn(db_config: DatabaseConfig) -> str:
    # asyncpg expects postgresql:// not postgresql+asyncpg://
    return db_config.database_url.set(drivername="postgresql").render_as_string(
        hide_password=False
    )


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def test_database_config() -> AsyncGenerator[DatabaseConfig]:
    """Create the test database and yield settings pointing at it."""
    try:
        admin_config = load_database_config()
    except ConfigurationError as exc:
        pytest.skip(f"PostgreSQL not configured: {exc.message}")

    try:
        conn = await asyncpg.connect(_admin_dsn(admin_config))
    except (OSError, asyncpg.PostgresError) as exc:
        pytest.skip(f"PostgreSQL not reachable: {exc}")

    try:
        await conn.execute(f'DROP DATABASE IF EXISTS "{TEST_DATABASE_NAME}"')
        await conn.execute(f'CREATE DATABASE "{TEST_DATABASE_NAME}"')
    finally:
        await conn.close()

    yield admin_config.model_copy(
        update={"name": TEST_DATABASE_NAME, "pool_size": 5, "max_overflow": 0}
    )

    conn = await asyncpg.connect(_admin_dsn(admin_config))
    try:
        await conn.execute(
            "SELECT pg_terminate_backend(pid) FROM pg_stat_activity "
            "WHERE datname = $1 AND pid <> pg_backend_pid()",
            TEST_DATABASE_NAME,
        )
        await conn.execute(f'DROP DATABASE IF EXISTS "{TEST_DATABASE_NAME}"')
    finally:
        await conn.close()


@pytest.fixture
async def db_engine(
    test_database_config: DatabaseConfig,
) -> AsyncGenerator[AsyncEngine]:
    """Provide an engine on a bootstrapped, empty ``users`` table."""
    engine = create_database_engine(test_database_config)
    await ensure_schema(engine)
    async with engine.begin() as conn:
        await conn.execute(
            text(f"TRUNCATE TABLE {UserRecord.__tablename__} RESTART IDENTITY")
        )

    yield engine

    await engine.dispose()


@pytest.fixture
def user_store(db_engine: AsyncEngine) -> SqlRecordStore[User]:
    """Provide the users store bound to the test database."""
    factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    return SqlRecordStore(UserRecord, User, USERS.entity, lambda: factory)


@pytest.fixture
def postgres_app(user_store: SqlRecordStore[User]) -> FastAPI:
    """Provide an application whose users live in the test database."""
    settings = Settings(
        storage_backend="memory",
        observability_config=ObservabilityConfig(enable_tracing=False),
    )
    return create_app(settings, stores={USERS.name: user_store})


@pytest.fixture
async def postgres_client(postgres_app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Provide an HTTP client bound to the PostgreSQL-backed application."""
    async with AsyncClient(
        transport=ASGITransport(app=postgres_app), base_url="http://test"
    ) as client:
        yield client
