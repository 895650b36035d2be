"""Unit tests for src/api/middleware/error_handler.py."""

import orjson
import pytest
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException
from starlette.requests import Request

from src.api.middleware.error_handler import (
    failure_response,
    generic_exception_handler,
    http_exception_handler,
    validation_error_handler,
)
from src.core.config import get_settings
from src.domain.results import (
    FieldViolation,
    not_found,
    persistence_failure,
    validation_failure,
)


def _request(path: str = "/users", method: str = "GET") -> Request:
    return Request(
        {
            "type": "http",
            "method": method,
            "path": path,
            "headers": [],
            "query_string": b"",
        }
    )


@pytest.mark.unit
class TestFailureResponse:
    """Test suite for failure_response()."""

    def test_validation_failure(self) -> None:
        """Test the 400 body with every violation in order."""
        response = failure_response(
            validation_failure(
                [
                    FieldViolation("name", "name is required"),
                    FieldViolation("email", "email must be a valid email address"),
                ]
            )
        )

        assert response.status_code == 400
        assert orjson.loads(response.body) == {
            "error": "Validation Error",
            "message": "Invalid request data",
            "errors": [
                {"field": "name", "message": "name is required"},
                {"field": "email", "message": "email must be a valid email address"},
            ],
        }

    def test_not_found(self) -> None:
        """Test the 404 body carries only the error title."""
        response = failure_response(not_found("User", 9))

        assert response.status_code == 404
        assert orjson.loads(response.body) == {"error": "User not found"}

    def test_persistence_failure_hides_cause(self, log_messages: list[str]) -> None:
        """Test that the 500 body is generic and the cause is only logged."""
        cause = OSError("could not connect to db.internal:5432")

        response = failure_response(persistence_failure("get", cause, key=1))

        assert response.status_code == 500
        body = orjson.loads(response.body)
        assert body == {
            "error": "Database Error",
            "message": "A storage error occurred while processing the request",
        }
        assert "db.internal" not in response.body.decode()
        assert any("Storage operation failed: OSError" in m for m in log_messages)


@pytest.mark.unit
class TestExceptionHandlers:
    """Test suite for the global exception handlers."""

    async def test_unknown_route(self) -> None:
        """Test that an unmatched route names the path."""
        response = await http_exception_handler(
            _request("/missing"), HTTPException(status_code=404)
        )

        assert response.status_code == 404
        assert orjson.loads(response.body) == {
            "error": "Not Found",
            "message": "Route /missing not found",
        }

    async def test_method_not_allowed_keeps_headers(self) -> None:
        """Test that other HTTP errors use the status phrase and keep headers."""
        exc = HTTPException(
            status_code=405, detail="Method Not Allowed", headers={"Allow": "GET"}
        )

        response = await http_exception_handler(_request(method="PATCH"), exc)

        assert response.status_code == 405
        assert response.headers["allow"] == "GET"
        assert orjson.loads(response.body) == {
            "error": "Method Not Allowed",
            "message": "Method Not Allowed",
        }

    async def test_non_standard_status_code(self) -> None:
        """Test that a status without a reason phrase keeps its own code."""
        exc = HTTPException(status_code=599, detail="Upstream timed out")

        response = await http_exception_handler(_request(), exc)

        assert response.status_code == 599
        assert orjson.loads(response.body) == {
            "error": "Error",
            "message": "Upstream timed out",
        }

    async def test_request_validation_error(self) -> None:
        """Test that framework validation errors use the 400 shape."""
        exc = RequestValidationError(
            [
                {
                    "type": "missing",
                    "loc": ("query", "limit"),
                    "msg": "Field required",
                    "input": None,
                }
            ]
        )

        response = await validation_error_handler(_request(), exc)

        assert response.status_code == 400
        assert orjson.loads(response.body)["errors"] == [
            {"field": "limit", "message": "limit is required"}
        ]

    async def test_generic_exception_in_development(self) -> None:
        """Test that development responses name the exception."""
        response = await generic_exception_handler(_request(), KeyError("boom"))

        assert response.status_code == 500
        body = orjson.loads(response.body)
        assert body["error"] == "Internal Server Error"
        assert body["message"].startswith("KeyError")

    async def test_generic_exception_in_production(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that production responses hide the exception."""
        monkeypatch.setenv("ENVIRONMENT", "production")
        get_settings.cache_clear()

        response = await generic_exception_handler(_request(), KeyError("boom"))

        assert orjson.loads(response.body) == {
            "error": "Internal Server Error",
            "message": "An internal server error occurred",
        }

    async def test_handlers_reject_wrong_exception_type(self) -> None:
        """Test that the typed handlers refuse other exceptions."""
        with pytest.raises(TypeError):
            await http_exception_handler(_request(), ValueError())
        with pytest.raises(TypeError):
            await validation_error_handler(_request(), ValueError())
