"""Error mapping and global exception handlers for the FastAPI application.

``failure_response`` is the single place where a ``Failure`` returned by
validation or a store becomes an HTTP response. The exception handlers cover
what never reaches a route handler as a ``Failure``: unmatched routes,
framework validation errors and unexpected exceptions.
"""

from http import HTTPStatus

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from loguru import logger
from starlette.exceptions import HTTPException

from src.api.schemas.errors import ErrorResponse, FieldError
from src.api.utils.responses import ORJSONResponse
from src.core.config import get_settings
from src.core.context import RequestContext
from src.core.error_context import sanitize_dict, sanitize_error_context
from src.domain.results import ErrorKind, Failure
from src.domain.validation import violations_from_errors

VALIDATION_ERROR_TITLE = "Validation Error"
PERSISTENCE_ERROR_TITLE = "Database Error"
INTERNAL_ERROR_TITLE = "Internal Server Error"

STATUS_BY_KIND = {
    ErrorKind.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.PERSISTENCE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _error_body(failure: Failure) -> ErrorResponse:
    match failure.kind:
        case ErrorKind.VALIDATION_ERROR:
            return ErrorResponse(
                error=VALIDATION_ERROR_TITLE,
                message=failure.message,
                errors=[
                    FieldError(field=violation.field, message=violation.message)
                    for violation in failure.violations
                ],
            )
        case ErrorKind.NOT_FOUND:
            return ErrorResponse(error=failure.message)
        case ErrorKind.PERSISTENCE_ERROR:
            return ErrorResponse(error=PERSISTENCE_ERROR_TITLE, message=failure.message)


def failure_response(failure: Failure) -> ORJSONResponse:
    """Convert a failure into its HTTP response.

    Validation failures answer 400 with every field violation, missing
    records 404, and storage failures 500 with a generic message. The cause
    of a storage failure is logged with its traceback and never returned.

    Args:
        failure: The failure returned by validation or a store.

    Returns:
        ORJSONResponse: Response carrying the error body.
    """
    correlation_id = RequestContext.get_correlation_id()
    context = sanitize_dict(failure.context)

    if failure.kind is ErrorKind.VALIDATION_ERROR:
        logger.warning(
            "Validation failed: {}",
            ", ".join(v.field for v in failure.violations),
            correlation_id=correlation_id,
            violation_count=len(failure.violations),
        )
    elif failure.kind is ErrorKind.NOT_FOUND:
        logger.info("{}", failure.message, correlation_id=correlation_id, **context)
    else:
        logger.opt(exception=failure.cause).error(
            "Storage operation failed: {}",
            type(failure.cause).__name__ if failure.cause else "unknown",
            correlation_id=correlation_id,
            **context,
        )

    return ORJSONResponse(
        status_code=STATUS_BY_KIND[failure.kind],
        content=_error_body(failure).to_content(),
    )


async def validation_error_handler(request: Request, exc: Exception) -> Response:
    """Handle FastAPI RequestValidationError exceptions.

    Route handlers validate their own input, so this only fires for
    parameters FastAPI checks itself. The errors are reported in the same
    400 shape as any other validation failure.

    Raises:
        TypeError: If exc is not a RequestValidationError instance
    """
    if not isinstance(exc, RequestValidationError):
        raise TypeError(f"Expected RequestValidationError, got {type(exc).__name__}")

    # Drop the location prefix ("body", "path", "query") from field names
    errors = [{**error, "loc": tuple(error["loc"][1:])} for error in exc.errors()]
    violations = violations_from_errors(errors)

    logger.warning(
        "Request validation failed",
        correlation_id=RequestContext.get_correlation_id(),
        method=request.method,
        path=request.url.path,
        fields=[v.field for v in violations],
    )

    body = ErrorResponse(
        error=VALIDATION_ERROR_TITLE,
        message="Invalid request data",
        errors=[FieldError(field=v.field, message=v.message) for v in violations],
    )
    return ORJSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST, content=body.to_content()
    )


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle Starlette HTTPException.

    Unmatched routes answer ``{"error": "Not Found", "message": "Route <path>
    not found"}``; other HTTP errors use the status phrase, or ``"Error"``
    for codes without one, as ``error`` and the exception detail as
    ``message``.

    Raises:
        TypeError: If exc is not an HTTPException instance
    """
    if not isinstance(exc, HTTPException):
        raise TypeError(f"Expected HTTPException, got {type(exc).__name__}")

    try:
        phrase = HTTPStatus(exc.status_code).phrase
    except ValueError:
        # Non-standard status codes have no reason phrase
        phrase = "Error"

    if exc.status_code == status.HTTP_404_NOT_FOUND:
        message = f"Route {request.url.path} not found"
    else:
        message = str(exc.detail)

    logger.warning(
        "HTTP exception",
        correlation_id=RequestContext.get_correlation_id(),
        status=exc.status_code,
        method=request.method,
        path=request.url.path,
        detail=exc.detail,
    )

    return ORJSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=phrase, message=message).to_content(),
        headers=exc.headers,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle generic exceptions.

    Catches all unhandled exceptions and converts them to a safe error response.
    In production, hides internal error details from clients.

    Args:
        request: The FastAPI request that caused the exception
        exc: The unhandled exception

    Returns:
        Response: ORJSONResponse with a 500 error body
    """
    settings = get_settings()

    error_context = sanitize_error_context(
        exc,
        {
            "request_method": request.method,
            "request_path": str(request.url.path),
        },
    )

    logger.opt(exception=exc).error(
        "Unhandled exception: {exception_type}",
        exception_type=type(exc).__name__,
        correlation_id=RequestContext.get_correlation_id(),
        **error_context,
    )

    if settings.environment == "production":
        message = "An internal server error occurred"
    else:
        message = f"{type(exc).__name__}: {exc}"

    return ORJSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(error=INTERNAL_ERROR_TITLE, message=message).to_content(),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Exception handlers registered")
