"""FastAPI application initialization and configuration module.

This module wires the User Management API together:
- Record stores for users and items, chosen by ``storage_backend``
- Application lifecycle (database check, schema bootstrap, shutdown)
- Middleware registration in the correct order
- Exception handler registration
- Root and health check endpoints
- OpenTelemetry instrumentation

Startup is fail-fast: when the PostgreSQL backend is selected and the
database cannot be reached or the schema cannot be created, the lifespan
raises ``StartupError`` and the server does not start accepting requests.
"""

import uuid
from collections.abc import AsyncGenerator, Mapping
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from src.api.dependencies import AnyStore
from src.api.middleware.error_handler import register_exception_handlers
from src.api.middleware.request_context import RequestContextMiddleware
from src.api.middleware.request_logging import RequestLoggingMiddleware
from src.api.routes import ITEMS, USERS, items_router, users_router
from src.api.schemas.items import Item
from src.api.schemas.users import User
from src.api.utils.responses import ORJSONResponse
from src.core.config import Settings, get_settings
from src.core.exceptions import StartupError
from src.core.logging import setup_logging
from src.core.observability import instrument_app, setup_tracing
from src.infrastructure.database import (
    SqlRecordStore,
    UserRecord,
    check_database_connection,
    close_database,
    ensure_schema,
    get_engine,
)
from src.infrastructure.memory import InMemoryRecordStore, sequence_keys

WELCOME_MESSAGE = "Welcome to the User Management API"


def build_stores(settings: Settings) -> dict[str, AnyStore]:
    """Create the record store of every resource.

    Users go to PostgreSQL or memory depending on ``storage_backend``; items
    always live in memory. The SQL store connects lazily, on first use.

    Args:
        settings: Application settings.

    Returns:
        dict[str, AnyStore]: Stores keyed by resource name.
    """
    users: AnyStore
    if settings.uses_database:
        users = SqlRecordStore(UserRecord, User, USERS.entity)
    else:
        users = InMemoryRecordStore(User, sequence_keys(), USERS.entity)

    return {
        USERS.name: users,
        ITEMS.name: InMemoryRecordStore(Item, uuid.uuid4, ITEMS.entity),
    }


async def _prepare_database() -> None:
    is_healthy, error_msg = await check_database_connection()
    if not is_healthy:
        logger.error("Database connection failed during startup: {}", error_msg)
        raise StartupError(
            f"Database connection failed: {error_msg}",
            context={"stage": "connect"},
        )
    logger.info("Database connection successful")

    try:
        await ensure_schema(get_engine())
    except (SQLAlchemyError, OSError) as exc:
        logger.error("Schema bootstrap failed: {}", exc)
        raise StartupError(
            "Could not create the database schema",
            context={"stage": "schema"},
            cause=exc,
        ) from exc


@asynccontextmanager
async def lifespan(app_instance: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan events.

    Args:
        app_instance: The FastAPI application instance.

    Yields:
        None: Nothing is yielded, this is just a lifespan context.

    Raises:
        StartupError: If the database is unreachable or the schema cannot be
            created.
    """
    settings: Settings = app_instance.state.settings

    if settings.uses_database:
        await _prepare_database()

    logger.info(
        "Application startup complete - {} v{} (storage: {})",
        app_instance.title,
        app_instance.version,
        settings.storage_backend,
    )

    yield

    logger.info("Application shutdown initiated")
    if settings.uses_database:
        await close_database()
    logger.info("Application shutdown complete")


def create_app(
    settings: Settings | None = None,
    stores: Mapping[str, AnyStore] | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings instance. If not provided, will use get_settings().
        stores: Optional stores keyed by resource name, replacing the ones
            built from ``settings``.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    setup_logging(settings)
    setup_tracing(settings)

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="CRUD API for users and items",
        debug=settings.debug,
        docs_url=settings.docs_url,
        redoc_url=settings.redoc_url,
        openapi_url=settings.openapi_url,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )
    application.state.settings = settings
    application.state.stores = {**build_stores(settings), **(stores or {})}

    register_exception_handlers(application)

    # Middleware run in reverse order of registration: the request context is
    # set up before the request is logged
    application.add_middleware(
        RequestLoggingMiddleware,
        log_config=settings.log_config,
        trust_proxy_headers=settings.environment == "production",
    )
    application.add_middleware(RequestContextMiddleware)

    @application.get("/", response_class=PlainTextResponse, tags=["Service"])
    async def root() -> str:
        """Return the welcome message."""
        return WELCOME_MESSAGE

    @application.get("/health", tags=["Service"])
    async def health(request: Request) -> dict[str, Any]:
        """Health check endpoint for monitoring and container orchestration.

        Returns:
            dict[str, Any]: Overall status, the storage backend, and database
                connectivity when PostgreSQL is used.
        """
        app_settings: Settings = request.app.state.settings
        health_status: dict[str, Any] = {
            "status": "healthy",
            "storage": app_settings.storage_backend,
        }

        if app_settings.uses_database:
            is_healthy, error_msg = await check_database_connection()
            health_status["database"] = is_healthy
            if not is_healthy:
                # Report degraded rather than failing the probe outright
                logger.warning("Database health check failed: {}", error_msg)
                health_status["status"] = "degraded"

        return health_status

    application.include_router(users_router)
    application.include_router(items_router)

    instrument_app(application, settings)

    return application


app = create_app()
