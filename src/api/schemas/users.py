"""User payload rulesets and the stored user shape."""

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    ValidationInfo,
    field_validator,
)
from pydantic_core import PydanticCustomError

from src.domain.validation import MAX_INTEGER_KEY

# PostgreSQL text columns cannot store NUL
NUL = "\x00"


class UserFields(BaseModel):
    """Fields shared by the create and update rulesets."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Full name of the user",
        examples=["Jane Doe"],
    )
    email: EmailStr = Field(
        ...,
        description="Email address of the user",
        examples=["jane@example.com"],
    )

    @field_validator("name", "email")
    @classmethod
    def reject_nul(cls, v: str, info: ValidationInfo) -> str:
        """Reject strings carrying NUL characters."""
        if NUL in v:
            raise PydanticCustomError(
                "nul_character",
                "{field} must not contain NUL characters",
                {"field": info.field_name},
            )
        return v


class UserCreate(UserFields):
    """Payload accepted by ``POST /users``."""

    age: int = Field(
        ...,
        strict=True,
        gt=0,
        le=MAX_INTEGER_KEY,
        description="Age in years; must be positive",
        examples=[30],
    )


class UserUpdate(UserFields):
    """Payload accepted by ``PUT /users/{id}``; replaces every field."""

    age: int = Field(
        ...,
        strict=True,
        ge=0,
        le=MAX_INTEGER_KEY,
        description="Age in years; must not be negative",
        examples=[31],
    )


class User(BaseModel):
    """A stored user."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int = Field(..., description="Server-assigned identifier", examples=[1])
    name: str = Field(..., examples=["Jane Doe"])
    email: str = Field(..., examples=["jane@example.com"])
    age: int = Field(..., examples=[30])
