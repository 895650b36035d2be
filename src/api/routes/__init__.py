"""CRUD routers for the API's resources."""

from src.api.routes.items import ITEMS
from src.api.routes.items import router as items_router
from src.api.routes.resources import ResourceDefinition, build_resource_router
from src.api.routes.users import USERS
from src.api.routes.users import router as users_router

__all__ = [
    "ITEMS",
    "USERS",
    "ResourceDefinition",
    "build_resource_router",
    "items_router",
    "users_router",
]
