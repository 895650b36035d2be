"""Tagged results returned by validation and store operations.

Every fallible operation returns ``Success(value)`` or ``Failure(kind, ...)``.
Callers branch on the type instead of catching exceptions, and the API layer
turns a ``Failure`` into an HTTP response in one place.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from src.core.exceptions import ErrorCode


class ErrorKind(Enum):
    """The failure kinds surfaced to clients or operators."""

    VALIDATION_ERROR = ErrorCode.VALIDATION_ERROR.value
    """The request payload or path parameter is invalid."""

    NOT_FOUND = ErrorCode.NOT_FOUND.value
    """No record exists for the requested key."""

    PERSISTENCE_ERROR = ErrorCode.PERSISTENCE_ERROR.value
    """The storage backend failed or rejected the operation."""


@dataclass(frozen=True, slots=True)
class FieldViolation:
    """A single field-level validation problem."""

    field: str
    message: str


@dataclass(frozen=True, slots=True)
class Success[T]:
    """Successful outcome carrying the produced value."""

    value: T


@dataclass(frozen=True, slots=True)
class Failure:
    """Failed outcome.

    Attributes:
        kind: Which failure category this is.
        message: Client-safe description.
        violations: Ordered field violations (validation failures only).
        cause: Underlying exception, kept for server-side logging only.
        context: Extra details for logs (operation name, key, ...).
    """

    kind: ErrorKind
    message: str
    violations: tuple[FieldViolation, ...] = ()
    cause: BaseException | None = field(default=None, compare=False)
    context: dict[str, object] = field(default_factory=dict, compare=False)


type Result[T] = Success[T] | Failure


def validation_failure(
    violations: Iterable[FieldViolation], message: str = "Invalid request data"
) -> Failure:
    """Build a validation failure from its field violations."""
    return Failure(ErrorKind.VALIDATION_ERROR, message, tuple(violations))


def not_found(entity: str, key: object) -> Failure:
    """Build the failure for a missing record.

    Args:
        entity: Entity label, e.g. "User".
        key: The key that was looked up.

    Returns:
        Failure: NOT_FOUND failure with the "<Entity> not found" message.
    """
    return Failure(ErrorKind.NOT_FOUND, f"{entity} not found", context={"key": key})


def persistence_failure(
    operation: str, cause: BaseException, **context: object
) -> Failure:
    """Build the failure for a storage error.

    The message never includes the driver error text; ``cause`` keeps it for
    the server log.
    """
    return Failure(
        ErrorKind.PERSISTENCE_ERROR,
        "A storage error occurred while processing the request",
        cause=cause,
        context={"operation": operation, **context},
    )
