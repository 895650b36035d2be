"""Error response bodies.

Every error the API returns has an ``error`` field. Validation failures add
``message`` and the ordered ``errors`` list; storage and unexpected failures
add a generic ``message``. Unset fields are left out of the JSON body, so a
missing record answers with exactly ``{"error": "User not found"}``.
"""

from typing import Any

from pydantic import BaseModel, Field


class FieldError(BaseModel):
    """A single invalid field."""

    field: str = Field(
        ...,
        description="Name of the offending field",
        examples=["email"],
    )
    message: str = Field(
        ...,
        description="What is wrong with the field",
        examples=["email must be a valid email address"],
    )


class ErrorResponse(BaseModel):
    """Error body returned for every non-2xx response."""

    error: str = Field(
        ...,
        description="Short error title",
        examples=["Validation Error", "User not found", "Not Found"],
    )
    message: str | None = Field(
        default=None,
        description="Human-readable explanation",
        examples=["Invalid request data", "Route /missing not found"],
    )
    errors: list[FieldError] | None = Field(
        default=None,
        description="Field-level violations (validation errors only)",
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "error": "Validation Error",
                    "message": "Invalid request data",
                    "errors": [
                        {
                            "field": "email",
                            "message": "email must be a valid email address",
                        }
                    ],
                },
                {"error": "User not found"},
                {
                    "error": "Database Error",
                    "message": "A storage error occurred while processing the request",
                },
                {"error": "Not Found", "message": "Route /missing not found"},
            ]
        }
    }

    def to_content(self) -> dict[str, Any]:
        """Serialize for a JSON response, omitting unset fields."""
        return self.model_dump(mode="json", exclude_none=True)
