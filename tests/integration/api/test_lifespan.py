"""Integration tests for startup and shutdown on the PostgreSQL backend.

Database access is mocked; these tests check that startup fails fast and
that the schema is bootstrapped before requests are served.
"""

import pytest
from httpx import ASGITransport, AsyncClient
from pytest_mock import MockerFixture, MockType
from sqlalchemy.exc import ProgrammingError

from src.api import main as app_module
from src.api.main import create_app
from src.api.schemas.users import User
from src.core.config import ObservabilityConfig, Settings
from src.core.exceptions import StartupError
from src.infrastructure.database import SqlRecordStore, UserRecord


@pytest.fixture
def postgres_settings() -> Settings:
    """Provide settings for the PostgreSQL backend without tracing."""
    return Settings(
        storage_backend="postgres",
        observability_config=ObservabilityConfig(enable_tracing=False),
    )


@pytest.fixture
def database(mocker: MockerFixture) -> dict[str, MockType]:
    """Mock the database calls made by the application module."""
    return {
        "check": mocker.patch.object(
            app_module, "check_database_connection", return_value=(True, None)
        ),
        "ensure_schema": mocker.patch.object(app_module, "ensure_schema"),
        "get_engine": mocker.patch.object(app_module, "get_engine"),
        "close": mocker.patch.object(app_module, "close_database"),
    }


@pytest.mark.integration
class TestLifespan:
    """Test suite for the application lifespan."""

    def test_postgres_backend_uses_sql_store(self, postgres_settings: Settings) -> None:
        """Test that users are stored in PostgreSQL when selected."""
        app = create_app(postgres_settings)
        assert isinstance(app.state.stores["users"], SqlRecordStore)

    async def test_startup_bootstraps_schema(
        self, postgres_settings: Settings, database: dict[str, MockType]
    ) -> None:
        """Test that startup checks the connection and creates the table."""
        app = create_app(postgres_settings)

        async with app.router.lifespan_context(app):
            database["check"].assert_awaited_once()
            database["ensure_schema"].assert_awaited_once_with(
                database["get_engine"].return_value
            )
            database["close"].assert_not_awaited()

        database["close"].assert_awaited_once()

    async def test_unreachable_database_aborts_startup(
        self, postgres_settings: Settings, database: dict[str, MockType]
    ) -> None:
        """Test that an unreachable database raises StartupError."""
        database["check"].return_value = (False, "connection refused")
        app = create_app(postgres_settings)

        with pytest.raises(StartupError, match="connection refused"):
            async with app.router.lifespan_context(app):
                pass

        database["ensure_schema"].assert_not_awaited()

    async def test_schema_failure_aborts_startup(
        self, postgres_settings: Settings, database: dict[str, MockType]
    ) -> None:
        """Test that a failed CREATE TABLE raises StartupError."""
        database["ensure_schema"].side_effect = ProgrammingError(
            "CREATE TABLE", {}, Exception("permission denied")
        )
        app = create_app(postgres_settings)

        with pytest.raises(StartupError) as exc_info:
            async with app.router.lifespan_context(app):
                pass

        assert exc_info.value.context == {"stage": "schema"}

    async def test_memory_backend_skips_database(
        self, database: dict[str, MockType]
    ) -> None:
        """Test that the memory backend never touches the database."""
        app = create_app(
            Settings(
                storage_backend="memory",
                observability_config=ObservabilityConfig(enable_tracing=False),
            )
        )

        async with app.router.lifespan_context(app):
            pass

        database["check"].assert_not_awaited()
        database["close"].assert_not_awaited()

    async def test_health_degraded_when_database_down(
        self, postgres_settings: Settings, database: dict[str, MockType]
    ) -> None:
        """Test that health reports degraded when the database is unreachable."""
        database["check"].return_value = (False, "timeout")
        app = create_app(postgres_settings)

        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as client:
            response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {
            "status": "degraded",
            "storage": "postgres",
            "database": False,
        }

    async def test_storage_failure_returns_500(
        self, postgres_settings: Settings, mocker: MockerFixture
    ) -> None:
        """Test that a failing database answers the generic 500 body."""
        factory = mocker.MagicMock()
        factory.return_value.__aenter__.side_effect = ConnectionRefusedError(
            "refused by 10.1.2.3"
        )
        users = SqlRecordStore(UserRecord, User, "User", lambda: factory)
        app = create_app(postgres_settings, stores={"users": users})

        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as client:
            response = await client.get("/users")

        assert response.status_code == 500
        assert response.json() == {
            "error": "Database Error",
            "message": "A storage error occurred while processing the request",
        }
        assert "10.1.2.3" not in response.text
