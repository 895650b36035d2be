"""Root conftest.py for the User Management API test suite.

This file contains project-wide fixtures and pytest configuration.
"""

from collections.abc import Generator

import pytest
from loguru import logger

from src.core.config import get_settings
from src.core.context import RequestContext
from src.core.error_context import _get_sensitive_fields


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual components in isolation"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that test multiple components"
    )


@pytest.fixture(autouse=True)
def clean_cached_settings() -> Generator[None]:
    """Clear cached settings before and after each test."""
    get_settings.cache_clear()
    _get_sensitive_fields.cache_clear()
    yield
    get_settings.cache_clear()
    _get_sensitive_fields.cache_clear()


@pytest.fixture(autouse=True)
def clean_request_context() -> Generator[None]:
    """Make sure no correlation ID leaks between tests."""
    RequestContext.clear()
    yield
    RequestContext.clear()


@pytest.fixture
def log_messages() -> Generator[list[str]]:
    """Collect formatted Loguru messages emitted during a test.

    Yields:
        list[str]: Messages in the form "LEVEL message".
    """
    messages: list[str] = []
    handler_id = logger.add(
        lambda message: messages.append(message.strip()),
        format="{level} {message}",
        level="DEBUG",
    )
    yield messages
    logger.remove(handler_id)
