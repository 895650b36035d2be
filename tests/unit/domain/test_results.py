"""Unit tests for src/domain/results.py."""

import pytest

from src.core.exceptions import ErrorCode
from src.domain.results import (
    ErrorKind,
    Failure,
    FieldViolation,
    Success,
    not_found,
    persistence_failure,
    validation_failure,
)


@pytest.mark.unit
class TestResults:
    """Test suite for the Success/Failure result types."""

    def test_error_kind_values_match_error_codes(self) -> None:
        """Test that each failure kind shares its value with an ErrorCode."""
        assert ErrorKind.VALIDATION_ERROR.value == ErrorCode.VALIDATION_ERROR.value
        assert ErrorKind.NOT_FOUND.value == ErrorCode.NOT_FOUND.value
        assert ErrorKind.PERSISTENCE_ERROR.value == ErrorCode.PERSISTENCE_ERROR.value

    def test_success_carries_value(self) -> None:
        """Test that Success exposes the wrapped value."""
        assert Success([1, 2]).value == [1, 2]

    def test_results_are_immutable(self) -> None:
        """Test that results cannot be modified after creation."""
        result = Success(1)
        with pytest.raises(AttributeError):
            result.value = 2  # type: ignore[misc]

    def test_validation_failure_keeps_violation_order(self) -> None:
        """Test that violations are kept in the order they were given."""
        violations = [
            FieldViolation("name", "name is required"),
            FieldViolation("email", "email is required"),
        ]

        failure = validation_failure(violations)

        assert failure.kind is ErrorKind.VALIDATION_ERROR
        assert failure.message == "Invalid request data"
        assert [v.field for v in failure.violations] == ["name", "email"]

    def test_validation_failure_accepts_generator(self) -> None:
        """Test that any iterable of violations is accepted."""
        failure = validation_failure(FieldViolation(f, "bad") for f in ("a", "b"))
        assert len(failure.violations) == 2

    def test_not_found_message_names_entity(self) -> None:
        """Test that a missing record reads '<Entity> not found'."""
        failure = not_found("User", 42)

        assert failure.kind is ErrorKind.NOT_FOUND
        assert failure.message == "User not found"
        assert failure.context == {"key": 42}
        assert failure.violations == ()

    def test_persistence_failure_hides_cause_text(self) -> None:
        """Test that the driver error text is kept out of the message."""
        cause = OSError("connection refused by 10.0.0.5")

        failure = persistence_failure("create", cause, entity="User")

        assert failure.kind is ErrorKind.PERSISTENCE_ERROR
        assert "10.0.0.5" not in failure.message
        assert failure.cause is cause
        assert failure.context == {"operation": "create", "entity": "User"}

    def test_failure_equality_ignores_cause_and_context(self) -> None:
        """Test that two failures compare on kind, message and violations."""
        first = Failure(ErrorKind.NOT_FOUND, "Item not found", context={"key": 1})
        second = Failure(ErrorKind.NOT_FOUND, "Item not found", context={"key": 2})
        assert first == second
