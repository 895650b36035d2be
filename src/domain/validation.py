"""Request payload and identifier validation.

Rulesets are Pydantic models. ``validate`` runs a ruleset against a decoded
JSON payload and reports every violation at once, in field order.
"""

from collections.abc import Sequence
from typing import Any, Final, cast
from uuid import UUID

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import ErrorDetails

from src.domain.results import (
    FieldViolation,
    Result,
    Success,
    validation_failure,
)

BODY_FIELD: Final[str] = "body"
ID_FIELD: Final[str] = "id"

# Largest value a PostgreSQL INTEGER column can hold
MAX_INTEGER_KEY: Final[int] = 2**31 - 1


def _field_name(error: ErrorDetails) -> str:
    name = ".".join(str(part) for part in error.get("loc", ()))
    return name or BODY_FIELD


def _violation_message(field: str, error: ErrorDetails) -> str:
    error_type = error["type"]
    ctx = error.get("ctx") or {}

    if error_type == "missing":
        return f"{field} is required"
    if error_type == "string_too_short":
        return f"{field} must not be empty"
    if error_type in {"int_type", "int_parsing", "int_from_float"}:
        return f"{field} must be an integer"
    if error_type == "string_type":
        return f"{field} must be a string"
    if error_type == "greater_than":
        return f"{field} must be greater than {ctx.get('gt')}"
    if error_type == "greater_than_equal":
        return f"{field} must be greater than or equal to {ctx.get('ge')}"
    if error_type == "less_than_equal":
        return f"{field} must be less than or equal to {ctx.get('le')}"
    if error_type == "value_error" and field == "email":
        return "email must be a valid email address"
    return error["msg"]


def violations_from_errors(errors: Sequence[ErrorDetails]) -> list[FieldViolation]:
    """Convert Pydantic error details into field violations.

    Args:
        errors: Errors as returned by ``ValidationError.errors()``.

    Returns:
        list[FieldViolation]: One violation per error, in the same order.
    """
    violations = []
    for error in errors:
        field = _field_name(error)
        violations.append(FieldViolation(field, _violation_message(field, error)))
    return violations


def validate[M: BaseModel](payload: object, ruleset: type[M]) -> Result[M]:
    """Validate a decoded JSON payload against a ruleset.

    Args:
        payload: Decoded request body.
        ruleset: Pydantic model describing the accepted fields.

    Returns:
        Result[M]: The validated model, or a validation failure listing
            every violated rule.
    """
    if not isinstance(payload, dict):
        return validation_failure(
            [FieldViolation(BODY_FIELD, "Request body must be a JSON object")]
        )

    try:
        model = ruleset.model_validate(payload)
    except PydanticValidationError as exc:
        return validation_failure(violations_from_errors(exc.errors()))

    return Success(model)


def _identifier_message(key_type: type) -> str:
    if key_type is int:
        return "id must be a positive integer"
    if key_type is UUID:
        return "id must be a valid UUID"
    return f"id must be a valid {key_type.__name__}"


def validate_identifier[K](raw: str, key_type: type[K]) -> Result[K]:
    """Parse a path identifier into the store's key type.

    Integer keys are plain ASCII digits, must fit a PostgreSQL INTEGER and
    be positive. Signs, whitespace, underscores, leading zeros and
    non-ASCII digits are rejected so that each record has a single URL.

    Args:
        raw: Identifier as received in the URL path.
        key_type: ``int`` or ``UUID``.

    Returns:
        Result[K]: The parsed key, or a validation failure on field ``id``.
    """
    key: object = None
    if key_type is not int or (raw.isascii() and raw.isdigit() and raw[0] != "0"):
        try:
            key = cast("Any", key_type)(raw)
        except (TypeError, ValueError):
            key = None

    if key is None or (isinstance(key, int) and not 0 < key <= MAX_INTEGER_KEY):
        return validation_failure(
            [FieldViolation(ID_FIELD, _identifier_message(key_type))],
            message="Invalid identifier",
        )

    return Success(cast("K", key))
