"""Application configuration loaded from the environment.

Two settings models are defined here:

- **Settings**: application, API, logging, tracing and storage backend
  options. Every field has a default, nested models use the ``__``
  delimiter (``LOG_CONFIG__LOG_LEVEL=DEBUG``).
- **DatabaseConfig**: PostgreSQL connection settings read from the
  ``DB_`` prefixed variables. ``DB_USER``, ``DB_HOST``, ``DB_NAME`` and
  ``DB_PASSWORD`` are required; ``DB_PORT`` defaults to 5432.

Configuration sources (in order of precedence):
1. Environment variables
2. .env file in project root
3. Default values in model definitions
"""

import os
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL

from src.core.exceptions import ConfigurationError

DATABASE_ENV_PREFIX = "DB_"
MISSING_ERROR_TYPES = {"missing", "string_too_short"}


class LogConfig(BaseModel):
    """Logging configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_formatter_type: Literal["console", "json"] | None = Field(
        default=None,
        description="Log output formatter. Auto-detected if not specified.",
    )
    excluded_paths: list[str] = Field(
        default_factory=lambda: ["/health"],
        description="Paths to exclude from request logging",
    )
    slow_request_threshold_ms: int = Field(
        default=1000,
        gt=0,
        description="Threshold for slow request warnings (milliseconds)",
    )
    enable_sql_logging: bool = Field(
        default=False,
        description="Enable slow SQL query logging",
    )
    slow_query_threshold_ms: int = Field(
        default=100,
        gt=0,
        description="Slow query threshold in milliseconds",
    )
    sensitive_fields: list[str] = Field(
        default_factory=lambda: [
            "password",
            "token",
            "secret",
            "api_key",
            "authorization",
        ],
        description="Field names to redact",
    )


class ObservabilityConfig(BaseModel):
    """OpenTelemetry tracing configuration."""

    enable_tracing: bool = Field(
        default=True,
        description="Enable OpenTelemetry tracing",
    )
    exporter_type: Literal["console", "otlp", "none"] = Field(
        default="console",
        description="Trace exporter type. Defaults to console for development.",
    )
    exporter_endpoint: str | None = Field(
        default=None,
        description="OTLP exporter endpoint",
    )
    trace_sample_rate: float = Field(
        default=1.0,
        ge=0.0,
        le=1.0,
        description="Trace sampling rate (0.0 to 1.0)",
    )

    @field_validator("exporter_endpoint", mode="before")
    @classmethod
    def empty_str_to_none(cls, v: str | None) -> str | None:
        """Convert empty strings to None for nullable fields."""
        if v == "":
            return None
        return v


class DatabaseConfig(BaseSettings):
    """PostgreSQL connection settings.

    The four connection credentials have no defaults: building this model
    without them fails, which is what makes startup fail fast.
    """

    model_config = SettingsConfigDict(
        env_prefix=DATABASE_ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    user: str = Field(min_length=1, description="Database user")
    host: str = Field(min_length=1, description="Database host")
    name: str = Field(min_length=1, description="Database name")
    password: SecretStr = Field(description="Database password")
    port: int = Field(default=5432, gt=0, lt=65536, description="Database port")

    pool_size: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Number of connections to maintain in the pool",
    )
    max_overflow: int = Field(
        default=5,
        ge=0,
        le=50,
        description="Maximum overflow connections above pool_size",
    )
    pool_timeout: float = Field(
        default=30.0,
        gt=0,
        le=300,
        description="Timeout in seconds for acquiring a connection from the pool",
    )
    pool_pre_ping: bool = Field(
        default=True,
        description="Whether to test connections before using them",
    )
    echo: bool = Field(
        default=False,
        description="Whether to log SQL statements (use only for debugging)",
    )

    @field_validator("password")
    @classmethod
    def password_not_empty(cls, v: SecretStr) -> SecretStr:
        """Reject an empty password like the other required settings."""
        if not v.get_secret_value():
            raise PydanticCustomError(
                "string_too_short", "String should have at least 1 character"
            )
        return v

    @property
    def database_url(self) -> URL:
        """Build the asyncpg connection URL.

        Returns:
            URL: SQLAlchemy URL with credentials escaped.
        """
        return URL.create(
            "postgresql+asyncpg",
            username=self.user,
            password=self.password.get_secret_value(),
            host=self.host,
            port=self.port,
            database=self.name,
        )


class Settings(BaseSettings):
    """Main settings class for the application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Application settings
    app_name: str = Field(
        default="User Management API", description="Application name"
    )
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Environment the application is running in",
    )
    debug: bool = Field(default=False, description="Debug mode flag")

    # API settings
    api_host: str = Field(default="127.0.0.1", description="API host")
    api_port: int = Field(default=5000, description="API port")
    docs_url: str | None = Field(default="/api-docs", description="Swagger UI URL")
    redoc_url: str | None = Field(default="/redoc", description="ReDoc URL")
    openapi_url: str | None = Field(
        default="/openapi.json", description="OpenAPI schema URL"
    )

    # Storage backend for the users resource; items are always in memory
    storage_backend: Literal["memory", "postgres"] = Field(
        default="postgres",
        description="Backing store for users",
    )

    log_config: LogConfig = Field(
        default_factory=LogConfig, description="Logging configuration"
    )
    observability_config: ObservabilityConfig = Field(
        default_factory=ObservabilityConfig, description="Observability configuration"
    )

    def model_post_init(self, __context: object) -> None:
        """Post initialization to set environment-based defaults."""
        super().model_post_init(__context)

        if self.log_config.log_formatter_type is None:
            self.log_config.log_formatter_type = self._detect_formatter()

        if (
            self.environment == "production"
            and self.observability_config.trace_sample_rate == 1.0
        ):
            self.observability_config.trace_sample_rate = 0.1

    def _detect_formatter(self) -> Literal["console", "json"]:
        """Auto-detect log formatter based on environment."""
        # Containers and cloud runtimes collect structured stdout
        if os.getenv("K_SERVICE") or os.getenv("AWS_EXECUTION_ENV"):
            return "json"
        if self.environment == "development":
            return "console"
        return "json"

    @property
    def uses_database(self) -> bool:
        """Whether the users resource is backed by PostgreSQL."""
        return self.storage_backend == "postgres"

    @field_validator("docs_url", "redoc_url", "openapi_url", mode="before")
    @classmethod
    def empty_str_to_none(cls, v: str | None) -> str | None:
        """Convert empty strings to None for nullable fields."""
        _ = cls
        if v == "":
            return None
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def load_database_config() -> DatabaseConfig:
    """Load the database settings, failing on missing credentials.

    Returns:
        DatabaseConfig: Validated database settings.

    Raises:
        ConfigurationError: If a required variable is absent or a value is
            invalid. The message names every missing variable.
    """
    try:
        return DatabaseConfig()
    except PydanticValidationError as exc:
        missing = [
            f"{DATABASE_ENV_PREFIX}{str(error['loc'][0]).upper()}"
            for error in exc.errors()
            if error["type"] in MISSING_ERROR_TYPES and error["loc"]
        ]
        if missing:
            msg = f"Missing required environment variable(s): {', '.join(missing)}"
            raise ConfigurationError(
                msg, context={"missing": missing}, cause=exc
            ) from exc

        invalid = [str(error["loc"][0]) for error in exc.errors() if error["loc"]]
        raise ConfigurationError(
            "Invalid database configuration",
            context={"invalid_fields": invalid},
            cause=exc,
        ) from exc
