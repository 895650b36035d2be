"""Exception hierarchy for faults that stop the service.

Request-level failures (invalid input, missing records, storage errors) are
not raised: they travel as ``Failure`` values, see ``src.domain.results``.
Exceptions are reserved for conditions where the process must not keep
serving, such as missing database settings or an unreachable database at
startup.
"""

from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes shared by logs and error responses."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    """Input validation failed due to invalid or malformed data."""

    NOT_FOUND = "NOT_FOUND"
    """The requested resource could not be found."""

    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"
    """The storage backend rejected or failed an operation."""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    """Required configuration is missing or invalid."""

    STARTUP_ERROR = "STARTUP_ERROR"
    """A startup step (connection, schema bootstrap) failed."""


class UserApiError(Exception):
    """Base exception class for all application exceptions.

    Args:
        error_code: Error code identifying the fault
        message: Human-readable error message
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.error_code = error_code.value
        self.message = message
        self.context = context or {}
        self.cause = cause

        super().__init__(message)
        if cause:
            self.__cause__ = cause

    def __str__(self) -> str:
        """Return a string representation of the exception.

        Returns:
            str: A formatted string containing the error code and message
        """
        return f"[{self.error_code}] {self.message}"


class ConfigurationError(UserApiError):
    """Raised when required settings are absent or invalid.

    Args:
        message: Description of the configuration problem
        context: Additional context, e.g. the missing variable names
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(ErrorCode.CONFIGURATION_ERROR, message, context, cause)


class StartupError(UserApiError):
    """Raised when the database cannot be reached or bootstrapped at startup.

    Args:
        message: Description of the failed startup step
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(ErrorCode.STARTUP_ERROR, message, context, cause)
