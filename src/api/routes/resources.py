"""Generic CRUD router shared by every resource.

``build_resource_router`` registers the five handlers (list, create, read,
update, delete) for one ``ResourceDefinition``. Each handler runs the same
linear pipeline: validate the path id and body, call the store, and hand any
``Failure`` to the error mapper.

Bodies are decoded and validated by hand rather than through FastAPI's
parameter validation, so every violation is reported with status 400 in the
API's own error shape. The request body schema is still published in the
OpenAPI document through ``openapi_extra``.
"""

from dataclasses import dataclass
from typing import Annotated, Any

import orjson
from fastapi import APIRouter, Depends, Path, Request, Response, status
from pydantic import BaseModel

from src.api.dependencies import store_provider
from src.api.middleware.error_handler import failure_response
from src.api.schemas.errors import ErrorResponse
from src.api.utils.responses import ORJSONResponse
from src.domain.results import (
    Failure,
    FieldViolation,
    Result,
    Success,
    not_found,
    validation_failure,
)
from src.domain.store import RecordStore
from src.domain.validation import BODY_FIELD, validate, validate_identifier

ERROR_DESCRIPTIONS = {
    status.HTTP_400_BAD_REQUEST: "Invalid identifier or request body",
    status.HTTP_404_NOT_FOUND: "No record with this identifier",
    status.HTTP_500_INTERNAL_SERVER_ERROR: "Storage failure",
}


@dataclass(frozen=True)
class ResourceDefinition[K, T: BaseModel]:
    """Configuration for one CRUD resource.

    Attributes:
        name: URL segment and store key, e.g. "users".
        entity: Singular label used in messages, e.g. "User".
        key_type: Type path identifiers are parsed into (``int`` or ``UUID``).
        record_model: Shape of stored records returned to clients.
        create_rules: Ruleset validating ``POST`` bodies.
        update_rules: Ruleset validating ``PUT`` bodies.
    """

    name: str
    entity: str
    key_type: type[K]
    record_model: type[T]
    create_rules: type[BaseModel]
    update_rules: type[BaseModel]

    @property
    def tag(self) -> str:
        """OpenAPI tag grouping this resource's operations."""
        return self.name.capitalize()


def _error_responses(*status_codes: int) -> dict[int | str, dict[str, Any]]:
    return {
        code: {"model": ErrorResponse, "description": ERROR_DESCRIPTIONS[code]}
        for code in status_codes
    }


def _request_body(rules: type[BaseModel]) -> dict[str, Any]:
    return {
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": rules.model_json_schema()}},
        }
    }


def record_response(
    content: BaseModel | list[Any], status_code: int = status.HTTP_200_OK
) -> ORJSONResponse:
    """Serialize one record or a list of records."""
    if isinstance(content, BaseModel):
        body: Any = content.model_dump(mode="json")
    else:
        body = [record.model_dump(mode="json") for record in content]
    return ORJSONResponse(content=body, status_code=status_code)


async def read_json_body(request: Request) -> Result[object]:
    """Decode the request body as JSON.

    Returns:
        Result[object]: The decoded value, or a validation failure on field
            ``body`` when it is empty or not valid JSON.
    """
    raw = await request.body()
    if not raw:
        return validation_failure(
            [FieldViolation(BODY_FIELD, "Request body is required")]
        )
    try:
        return Success(orjson.loads(raw))
    except orjson.JSONDecodeError:
        return validation_failure(
            [FieldViolation(BODY_FIELD, "Request body must be valid JSON")]
        )


async def read_validated_body[M: BaseModel](
    request: Request, rules: type[M]
) -> Result[M]:
    """Decode the request body and validate it against ``rules``."""
    payload = await read_json_body(request)
    if isinstance(payload, Failure):
        return payload
    return validate(payload.value, rules)


def merge_failures(*results: Result[Any]) -> Failure:
    """Combine the violations of every failed result into one failure."""
    return validation_failure(
        violation
        for result in results
        if isinstance(result, Failure)
        for violation in result.violations
    )


def build_resource_router(resource: ResourceDefinition[Any, Any]) -> APIRouter:
    """Create the CRUD router for a resource.

    Args:
        resource: The resource to expose.

    Returns:
        APIRouter: Router mounted under ``/<resource.name>``.
    """
    router = APIRouter(prefix=f"/{resource.name}", tags=[resource.tag])
    entity = resource.entity

    StoreDep = Annotated[  # noqa: N806
        RecordStore[Any, Any], Depends(store_provider(resource.name))
    ]
    RecordId = Annotated[  # noqa: N806
        str, Path(description=f"{entity} identifier")
    ]

    @router.get(
        "",
        response_model=list[resource.record_model],  # type: ignore[name-defined]
        summary=f"List all {resource.name}",
        responses=_error_responses(status.HTTP_500_INTERNAL_SERVER_ERROR),
    )
    async def list_records(store: StoreDep) -> Response:
        result = await store.list_all()
        if isinstance(result, Failure):
            return failure_response(result)
        return record_response(result.value)

    @router.post(
        "",
        response_model=resource.record_model,
        status_code=status.HTTP_201_CREATED,
        summary=f"Create a new {entity.lower()}",
        responses=_error_responses(
            status.HTTP_400_BAD_REQUEST, status.HTTP_500_INTERNAL_SERVER_ERROR
        ),
        openapi_extra=_request_body(resource.create_rules),
    )
    async def create_record(request: Request, store: StoreDep) -> Response:
        fields = await read_validated_body(request, resource.create_rules)
        if isinstance(fields, Failure):
            return failure_response(fields)

        created = await store.create(fields.value.model_dump())
        if isinstance(created, Failure):
            return failure_response(created)
        return record_response(created.value, status.HTTP_201_CREATED)

    @router.get(
        "/{record_id}",
        response_model=resource.record_model,
        summary=f"Retrieve a {entity.lower()} by ID",
        responses=_error_responses(
            status.HTTP_400_BAD_REQUEST,
            status.HTTP_404_NOT_FOUND,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        ),
    )
    async def read_record(record_id: RecordId, store: StoreDep) -> Response:
        key = validate_identifier(record_id, resource.key_type)
        if isinstance(key, Failure):
            return failure_response(key)

        record = await store.get(key.value)
        if isinstance(record, Failure):
            return failure_response(record)
        return record_response(record.value)

    @router.put(
        "/{record_id}",
        response_model=resource.record_model,
        summary=f"Replace a {entity.lower()} by ID",
        responses=_error_responses(
            status.HTTP_400_BAD_REQUEST,
            status.HTTP_404_NOT_FOUND,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        ),
        openapi_extra=_request_body(resource.update_rules),
    )
    async def update_record(
        record_id: RecordId, request: Request, store: StoreDep
    ) -> Response:
        key = validate_identifier(record_id, resource.key_type)
        fields = await read_validated_body(request, resource.update_rules)
        match key, fields:
            case Success(value=record_key), Success(value=payload):
                pass
            case _:
                return failure_response(merge_failures(key, fields))

        updated = await store.update(record_key, payload.model_dump())
        if isinstance(updated, Failure):
            return failure_response(updated)
        return record_response(updated.value)

    @router.delete(
        "/{record_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary=f"Delete a {entity.lower()} by ID",
        response_class=Response,
        responses=_error_responses(
            status.HTTP_400_BAD_REQUEST,
            status.HTTP_404_NOT_FOUND,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        ),
    )
    async def delete_record(record_id: RecordId, store: StoreDep) -> Response:
        key = validate_identifier(record_id, resource.key_type)
        if isinstance(key, Failure):
            return failure_response(key)

        deleted = await store.delete(key.value)
        if isinstance(deleted, Failure):
            return failure_response(deleted)
        if not deleted.value:
            return failure_response(not_found(entity, key.value))
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
