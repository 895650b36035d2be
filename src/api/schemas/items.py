"""Item payload ruleset and the stored item shape."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ItemFields(BaseModel):
    """Payload accepted by ``POST /items`` and ``PUT /items/{id}``."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(
        ...,
        min_length=1,
        description="The name of the item",
        examples=["Notebook"],
    )
    description: str = Field(
        ...,
        min_length=1,
        description="A brief description of the item",
        examples=["A5 dotted notebook"],
    )


class Item(BaseModel):
    """A stored item."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(..., description="Server-assigned identifier")
    name: str
    description: str
