"""Shared fixtures for integration tests.

Each test gets a fresh application on the in-memory backend, so records
never leak between tests.
"""

from collections.abc import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from src.api.main import create_app
from src.core.config import ObservabilityConfig, Settings


@pytest.fixture
def memory_settings() -> Settings:
    """Provide settings for the in-memory backend without tracing."""
    return Settings(
        storage_backend="memory",
        observability_config=ObservabilityConfig(enable_tracing=False),
    )


@pytest.fixture
def app(memory_settings: Settings) -> FastAPI:
    """Provide a freshly created application."""
    return create_app(memory_settings)


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Provide an HTTP client bound to the application."""
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        yield client
