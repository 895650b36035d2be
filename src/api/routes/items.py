"""Item endpoints under ``/items``. Items have UUID ids and live in memory."""

from uuid import UUID

from src.api.routes.resources import ResourceDefinition, build_resource_router
from src.api.schemas.items import Item, ItemFields

ITEMS = ResourceDefinition(
    name="items",
    entity="Item",
    key_type=UUID,
    record_model=Item,
    create_rules=ItemFields,
    update_rules=ItemFields,
)

router = build_resource_router(ITEMS)
