"""User endpoints under ``/users``.

Users have integer ids. Depending on ``storage_backend`` they live in the
PostgreSQL ``users`` table or in process memory.
"""

from src.api.routes.resources import ResourceDefinition, build_resource_router
from src.api.schemas.users import User, UserCreate, UserUpdate

USERS = ResourceDefinition(
    name="users",
    entity="User",
    key_type=int,
    record_model=User,
    create_rules=UserCreate,
    update_rules=UserUpdate,
)

router = build_resource_router(USERS)
